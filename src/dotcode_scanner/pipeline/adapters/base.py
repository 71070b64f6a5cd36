"""Provider-neutral boundary for the vision-analysis service."""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class VisionAdapter(Protocol):
    """Sends one image plus instructions and returns the raw response text.

    Implementations raise their provider's own exceptions; classification into
    ``ExtractionError`` kinds happens in the extraction client.
    """

    async def generate(
        self,
        *,
        model_name: str,
        image: bytes,
        mime_type: str,
        prompt: str,
        response_schema: dict[str, Any],
    ) -> str | None:
        """Return the response text, or None when the service sent no text."""
        ...
