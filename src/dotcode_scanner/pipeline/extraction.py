"""Extraction client: one vision request per image.

Builds the request (image, instructions, response schema), parses the reply
and classifies every way it can go wrong into an ``ExtractionError`` kind.

The reply is not assumed to be clean JSON: the model may wrap it in
commentary. Parsing is two-phase. First the substring from the first ``{`` to
the last ``}`` is located, then it is decoded and validated against
``AnalysisResult``. Any failure in either phase is ``MALFORMED_RESPONSE``;
partial data is never returned.
"""

from __future__ import annotations

import json
import logging
from typing import Any

import httpx
from pydantic import ValidationError

from dotcode_scanner.constants import DEFAULT_MODEL
from dotcode_scanner.core.exceptions import ErrorKind, ExtractionError
from dotcode_scanner.core.types import (
    AnalysisResult,
    Failure,
    ImageInput,
    Result,
    Success,
)
from dotcode_scanner.pipeline.base import BaseAsyncHandler
from dotcode_scanner.pipeline.client_factory import ClientFactory
from dotcode_scanner.pipeline.prompts import EXTRACTION_PROMPT, response_schema

logger = logging.getLogger(__name__)

_RAW_PREVIEW_CHARS = 100

# Google answers an unknown key with 400 INVALID_ARGUMENT rather than 401/403
_INVALID_KEY_MARKERS = ("api_key_invalid", "api key not valid")


class ExtractionClient(BaseAsyncHandler[ImageInput, AnalysisResult, ExtractionError]):
    """Wraps a single call to the vision service for one image."""

    def __init__(
        self,
        factory: ClientFactory,
        *,
        model_name: str = DEFAULT_MODEL,
        prompt: str = EXTRACTION_PROMPT,
    ) -> None:
        """Initialize with the adapter factory and request settings.

        Args:
            factory: Supplies the (cached) vision adapter for the current key.
            model_name: Model identifier sent with every request.
            prompt: Natural-language extraction instructions.
        """
        self._factory = factory
        self._model_name = model_name
        self._prompt = prompt

    async def handle(self, command: ImageInput) -> Result[AnalysisResult, ExtractionError]:
        """Extract one image and settle it as Success or Failure. Never raises."""
        try:
            return Success(await self.extract(command.data, command.mime_type))
        except ExtractionError as e:
            return Failure(e)
        except Exception as e:  # Defensive normalization
            return Failure(classify_provider_error(e))

    async def extract(
        self, image: bytes, mime_type: str = "image/jpeg"
    ) -> AnalysisResult:
        """Analyze one image.

        Args:
            image: Raw image bytes.
            mime_type: MIME type of ``image``.

        Returns:
            The validated items and summary for this image.

        Raises:
            ExtractionError: Classified failure of any kind.
        """
        adapter = self._factory.get()
        try:
            text = await adapter.generate(
                model_name=self._model_name,
                image=image,
                mime_type=mime_type,
                prompt=self._prompt,
                response_schema=response_schema(),
            )
        except ExtractionError:
            raise
        except Exception as e:
            raise classify_provider_error(e) from e

        if not text:
            raise ExtractionError(
                ErrorKind.EMPTY_RESPONSE, "No response text received from Gemini API"
            )

        logger.debug("Raw model response: %s", text)
        return parse_analysis_text(text)


def parse_analysis_text(text: str) -> AnalysisResult:
    """Locate, decode and validate the JSON object embedded in ``text``.

    Raises:
        ExtractionError: ``MALFORMED_RESPONSE`` when the delimiters are missing,
            the substring is not valid JSON, or it does not match the schema.
    """
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end == -1 or end < start:
        logger.error("Invalid response format: %s", text)
        raise ExtractionError(
            ErrorKind.MALFORMED_RESPONSE,
            "AI did not return a valid JSON object. "
            f'Raw response: "{text[:_RAW_PREVIEW_CHARS]}..."',
        )

    try:
        payload: Any = json.loads(text[start : end + 1])
    except json.JSONDecodeError as e:
        logger.error("JSON parse error. Raw text: %s", text)
        raise ExtractionError(
            ErrorKind.MALFORMED_RESPONSE,
            f"Failed to parse AI response: {e}. Raw text length: {len(text)}",
            cause=e,
        ) from e

    try:
        return AnalysisResult.model_validate(payload)
    except ValidationError as e:
        logger.error("Response JSON did not match the expected schema: %s", e)
        raise ExtractionError(
            ErrorKind.MALFORMED_RESPONSE,
            f"AI response did not match the expected schema: {e}",
            cause=e,
        ) from e


def _status_code(error: BaseException) -> int | None:
    for attr in ("code", "status_code", "status"):
        value = getattr(error, attr, None)
        if isinstance(value, int):
            return value
    response = getattr(error, "response", None)
    value = getattr(response, "status_code", None)
    return value if isinstance(value, int) else None


def classify_provider_error(error: BaseException) -> ExtractionError:
    """Map a provider or network exception onto an ``ExtractionError`` kind.

    Status codes are read from ``code``, ``status_code`` or ``status`` (the
    google-genai SDK uses ``code``) or from an attached HTTP response.
    """
    if isinstance(error, ExtractionError):
        return error

    status = _status_code(error)
    text = str(error)
    lowered = text.lower()

    if status in (401, 403) or (
        status == 400 and any(marker in lowered for marker in _INVALID_KEY_MARKERS)
    ):
        return ExtractionError(
            ErrorKind.AUTH_REJECTED,
            f"API Key invalid or restricted ({status}). Please check your API key.",
            cause=error,
        )
    if status == 404:
        return ExtractionError(
            ErrorKind.MODEL_UNAVAILABLE,
            "Model not found (404). Check API Key access or model availability.",
            cause=error,
        )
    if status == 429:
        return ExtractionError(
            ErrorKind.RATE_LIMITED,
            "API Quota exceeded (429). You are being rate limited.",
            cause=error,
        )
    if status == 400:
        return ExtractionError(
            ErrorKind.BAD_REQUEST,
            "Bad Request (400). The image might be too large or invalid.",
            cause=error,
        )

    if isinstance(error, httpx.TransportError | ConnectionError | TimeoutError):
        logger.warning("Network failure talking to the vision service: %s", error)
    return ExtractionError(
        ErrorKind.TRANSPORT_FAILURE,
        f"Analysis failed: {text or type(error).__name__}",
        cause=error,
    )
