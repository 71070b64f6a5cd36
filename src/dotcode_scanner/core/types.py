"""Core data types that flow through the scanning pipeline.

Extracted records (`ScannedItem`, `AnalysisResult`) are pydantic models so
the same definition validates untrusted model output and documents the wire
shape. Pipeline plumbing (`ImageInput`, `Success`, `Failure`) uses frozen
dataclasses with explicit invariant checks.
"""

from __future__ import annotations

import base64
import binascii
import dataclasses
from enum import Enum
import mimetypes
from pathlib import Path
import typing

from pydantic import BaseModel, ConfigDict, Field

# --- Minimal guard helpers ---


def _require(
    *,
    condition: bool,
    message: str,
    exc: type[Exception] = ValueError,
    field_name: str | None = None,
) -> None:
    """Centralized validation with optional field context for clearer errors."""
    if not condition:
        if field_name:
            raise exc(f"{field_name}: {message}")
        raise exc(message)


# --- Result type ---
# Handlers return Success | Failure so the fan-out and the reconciler operate
# on data rather than on exceptions.

TSuccess = typing.TypeVar("TSuccess")
TFailure = typing.TypeVar("TFailure", bound=Exception)


@dataclasses.dataclass(frozen=True, slots=True)
class Success[TSuccess]:
    """A successful result in the pipeline."""

    value: TSuccess


@dataclasses.dataclass(frozen=True, slots=True)
class Failure[TFailure]:
    """A failure in the pipeline, containing the error."""

    error: TFailure


Result = Success[TSuccess] | Failure[TFailure]

# --- Extracted records ---


class Confidence(str, Enum):
    """Confidence level reported for a single extracted code."""

    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"

    @classmethod
    def _missing_(cls, value: object) -> Confidence | None:
        # Models occasionally answer in lower or upper case
        if isinstance(value, str):
            for member in cls:
                if member.value.lower() == value.strip().lower():
                    return member
        return None


class ScannedItem(BaseModel):
    """One extracted code record.

    Accepts both the wire names (``dotCode``) and the Python field names.
    Immutable once created; it has no identity beyond its normalized code.
    """

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        coerce_numbers_to_str=True,
        extra="ignore",
    )

    dot_code: str = Field(alias="dotCode")
    manufacturing_date: str | None = Field(default=None, alias="manufacturingDate")
    price: str | None = None
    confidence: Confidence
    raw_text: str | None = Field(default=None, alias="rawText")


class AnalysisResult(BaseModel):
    """Items extracted from one image, or the merged result of a scan."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    items: tuple[ScannedItem, ...]
    summary: str


# --- Pipeline inputs and outcomes ---

_DEFAULT_IMAGE_MIME = "image/jpeg"


@dataclasses.dataclass(frozen=True, slots=True)
class ImageInput:
    """A single photographed package, held in memory."""

    data: bytes
    mime_type: str = _DEFAULT_IMAGE_MIME
    label: str | None = None

    def __post_init__(self) -> None:
        """Validate ImageInput invariants."""
        _require(
            condition=isinstance(self.data, bytes | bytearray),
            message="must be bytes",
            field_name="data",
            exc=TypeError,
        )
        _require(
            condition=len(self.data) > 0,
            message="cannot be empty",
            field_name="data",
        )
        _require(
            condition=isinstance(self.mime_type, str)
            and self.mime_type.startswith("image/"),
            message=f"must be an image/* MIME type, got {self.mime_type!r}",
            field_name="mime_type",
        )

    def __repr__(self) -> str:
        return (
            f"ImageInput(mime_type={self.mime_type!r}, size={len(self.data)}, "
            f"label={self.label!r})"
        )

    # --- Ergonomic constructors for common cases ---
    @classmethod
    def from_bytes(
        cls, data: bytes, mime_type: str = _DEFAULT_IMAGE_MIME
    ) -> ImageInput:
        """Wrap raw image bytes."""
        return cls(data=bytes(data), mime_type=mime_type)

    @classmethod
    def from_file(cls, path: str | Path) -> ImageInput:
        """Load an image from a local filesystem path.

        Args:
            path: Path to a local image file.

        Returns:
            An `ImageInput` with the MIME type guessed from the file suffix.
        """
        file_path = Path(path)
        _require(
            condition=file_path.is_file(),
            message="path must point to an existing file",
            field_name="path",
        )
        mime_type, _ = mimetypes.guess_type(str(file_path))
        return cls(
            data=file_path.read_bytes(),
            mime_type=mime_type or _DEFAULT_IMAGE_MIME,
            label=file_path.name,
        )

    @classmethod
    def from_data_url(cls, value: str) -> ImageInput:
        """Decode a ``data:<mime>;base64,<payload>`` URL or bare base64 string.

        Browsers and camera widgets usually hand images over as data URLs;
        only the payload after the first comma is decoded.
        """
        _require(
            condition=isinstance(value, str) and value.strip() != "",
            message="must be a non-empty str",
            field_name="value",
            exc=TypeError,
        )
        mime_type = _DEFAULT_IMAGE_MIME
        payload = value
        if "," in value:
            header, payload = value.split(",", 1)
            if header.startswith("data:"):
                declared = header[len("data:") :].split(";", 1)[0]
                if declared:
                    mime_type = declared
        try:
            data = base64.b64decode(payload.strip(), validate=True)
        except (binascii.Error, ValueError) as e:
            raise ValueError(f"value: invalid base64 image payload ({e})") from e
        return cls(data=data, mime_type=mime_type)


PipelineOutcome = Success[AnalysisResult] | Failure[Exception]
