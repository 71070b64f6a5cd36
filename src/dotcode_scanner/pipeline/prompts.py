"""Extraction instructions and the response schema sent with every image."""

from __future__ import annotations

import copy
from typing import Any

EXTRACTION_PROMPT = """Analyze this image of product packaging.
Your goal is to extract ANY and ALL visible alphanumeric tracking codes, DotCodes, or batch codes.

Look for:
- Matrices of dots with text (DotCodes).
- Text starting with "VR", "HCN", or similar alphanumeric patterns.
- White text on black backgrounds.
- Any unique product identifiers.

Do NOT be conservative. If you see text that looks like a code, extract it.

For EACH detected code, extract:
1. The main alphanumeric tracking code (dotCode).
2. The manufacturing date (MFD) if visible.
3. The price (MRP) if visible.
4. A confidence assessment (High/Medium/Low).
5. The raw text read from the label.

Return the data in RAW JSON format. Do NOT use markdown formatting (no ```json blocks)."""

# OpenAPI-style schema understood by the Gemini structured output API
_RESPONSE_SCHEMA: dict[str, Any] = {
    "type": "OBJECT",
    "properties": {
        "items": {
            "type": "ARRAY",
            "description": "List of all detected product codes.",
            "items": {
                "type": "OBJECT",
                "properties": {
                    "dotCode": {
                        "type": "STRING",
                        "description": "The extracted alphanumeric tracking code.",
                    },
                    "manufacturingDate": {
                        "type": "STRING",
                        "description": "The manufacturing date (e.g. 06/09/25).",
                    },
                    "price": {
                        "type": "STRING",
                        "description": "The price (e.g. 170.00).",
                    },
                    "confidence": {
                        "type": "STRING",
                        "enum": ["High", "Medium", "Low"],
                        "description": "Confidence level of the extraction.",
                    },
                    "rawText": {
                        "type": "STRING",
                        "description": "All text read from this specific label area.",
                    },
                },
                "required": ["dotCode", "confidence"],
            },
        },
        "summary": {
            "type": "STRING",
            "description": (
                "A short summary sentence about what was detected "
                "(e.g. 'Found 5 product codes')."
            ),
        },
    },
    "required": ["items", "summary"],
}


def response_schema() -> dict[str, Any]:
    """Return a fresh copy of the response schema."""
    return copy.deepcopy(_RESPONSE_SCHEMA)
