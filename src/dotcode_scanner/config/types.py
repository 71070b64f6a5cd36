"""Core configuration data types for the scanner.

This module defines the fundamental data structures used throughout the configuration
system, following the resolve-once, freeze-then-flow pattern.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Literal, NamedTuple

from dotcode_scanner.constants import DEFAULT_MODEL

# --- Source Tracking Types ---

ConfigOrigin = Literal["programmatic", "env", "file", "default"]
SourceMap = Mapping[str, ConfigOrigin]

_FIELD_ORDER = ("api_key", "model", "credentials_path")

# --- Core Configuration Data ---


class ResolvedConfig(NamedTuple):
    """Configuration after resolution from all sources, before freezing.

    This represents the validated, merged result of combining programmatic overrides,
    environment variables, files, and defaults. It includes audit metadata for
    observability.
    """

    api_key: str | None
    model: str
    credentials_path: Path | None

    # Audit metadata - tracks where each field value came from
    origin: SourceMap

    def __str__(self) -> str:
        """String representation with redacted API key for safe logging."""
        api_key_display = "[REDACTED]" if self.api_key else None
        return (
            f"ResolvedConfig(api_key={api_key_display!r}, model={self.model!r}, "
            f"credentials_path={self.credentials_path!r}, "
            f"origin={dict(self.origin)!r})"
        )

    def __repr__(self) -> str:
        """Repr with redacted API key for safe debugging."""
        return self.__str__()

    @property
    def frozen(self) -> "FrozenConfig":
        """The immutable configuration used by the pipeline."""
        return self.to_frozen()

    def to_frozen(self) -> "FrozenConfig":
        """Convert to the immutable configuration used in the pipeline.

        Returns:
            FrozenConfig with the same field values, excluding audit metadata.
        """
        return FrozenConfig(
            api_key=self.api_key,
            model=self.model,
            credentials_path=self.credentials_path,
        )

    def with_overrides(self, **overrides: object) -> "ResolvedConfig":
        """Create a new ResolvedConfig with programmatic overrides applied.

        Args:
            **overrides: Field values to override. Unknown fields are ignored.

        Returns:
            New ResolvedConfig with overrides applied and origin updated.
        """
        new_values = self._asdict()
        new_origin = dict(self.origin)

        for field, value in overrides.items():
            if field in _FIELD_ORDER:
                new_values[field] = value
                new_origin[field] = "programmatic"

        new_values["origin"] = new_origin
        return ResolvedConfig(**new_values)

    def audit(self) -> str:
        """Generate a redacted audit report showing the origin of each field.

        Returns:
            Human-readable audit report with the API key redacted.
        """
        lines = []
        for field in _FIELD_ORDER:
            if field not in self.origin:
                continue
            origin = self.origin[field]
            actual_value = getattr(self, field)
            if field == "api_key":
                if actual_value is None:
                    value_display = f"{origin}:None"
                else:
                    value_display = f"{origin}:[REDACTED]"
            else:
                value_display = f"{origin}:{actual_value}"
            lines.append(f"{field}: {value_display}")
        return "\n".join(lines)


@dataclass(frozen=True)
class FrozenConfig:
    """Immutable configuration handed to the scanner.

    Any attempt to modify this object will raise an exception.
    """

    api_key: str | None = None
    model: str = DEFAULT_MODEL
    credentials_path: Path | None = None

    def __str__(self) -> str:
        """String representation with redacted API key for safe logging."""
        api_key_display = "[REDACTED]" if self.api_key else None
        return (
            f"FrozenConfig(api_key={api_key_display!r}, model={self.model!r}, "
            f"credentials_path={self.credentials_path!r})"
        )

    def __repr__(self) -> str:
        """Representation with redacted API key for safe debugging."""
        return self.__str__()
