"""Google Gemini adapter built on the google-genai SDK."""

from __future__ import annotations

import logging
from typing import Any

from google import genai
from google.genai import types

log = logging.getLogger(__name__)

# Product labels trip the default filters often enough to lose whole images
_UNBLOCKED_CATEGORIES = (
    types.HarmCategory.HARM_CATEGORY_HARASSMENT,
    types.HarmCategory.HARM_CATEGORY_HATE_SPEECH,
    types.HarmCategory.HARM_CATEGORY_SEXUALLY_EXPLICIT,
    types.HarmCategory.HARM_CATEGORY_DANGEROUS_CONTENT,
)


class GoogleGenAIAdapter:
    """Calls ``models.generate_content`` through the SDK's async client."""

    def __init__(self, api_key: str) -> None:
        """Create the underlying SDK client for ``api_key``."""
        self._client = genai.Client(api_key=api_key)

    async def generate(
        self,
        *,
        model_name: str,
        image: bytes,
        mime_type: str,
        prompt: str,
        response_schema: dict[str, Any],
    ) -> str | None:
        """Send the image and instructions; return the raw response text."""
        config = types.GenerateContentConfig(
            response_mime_type="application/json",
            response_schema=types.Schema.model_validate(response_schema),
            safety_settings=[
                types.SafetySetting(
                    category=category,
                    threshold=types.HarmBlockThreshold.BLOCK_NONE,
                )
                for category in _UNBLOCKED_CATEGORIES
            ],
        )
        log.debug(
            "Requesting analysis from %s (%s, %d bytes).",
            model_name,
            mime_type,
            len(image),
        )
        response = await self._client.aio.models.generate_content(
            model=model_name,
            contents=[
                types.Part.from_bytes(data=image, mime_type=mime_type),
                types.Part.from_text(text=prompt),
            ],
            config=config,
        )
        return response.text
