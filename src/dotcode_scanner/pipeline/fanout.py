"""Fan-out stage: one extraction per image, all in flight at once.

Every call settles on its own. A failure becomes a ``Failure`` outcome in the
image's slot and never aborts the others. Outcomes come back in input order
regardless of which request finishes first. This stage does no merging.
"""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
import logging

from dotcode_scanner.core.exceptions import ExtractionError
from dotcode_scanner.core.types import (
    AnalysisResult,
    Failure,
    ImageInput,
    PipelineOutcome,
    Success,
)
from dotcode_scanner.pipeline.base import BaseAsyncHandler

logger = logging.getLogger(__name__)


class FanOutOrchestrator:
    """Dispatches a handler over many images and waits for all to settle."""

    def __init__(
        self,
        handler: BaseAsyncHandler[ImageInput, AnalysisResult, ExtractionError],
    ) -> None:
        """Initialize with the per-image handler (usually ``ExtractionClient``)."""
        self._handler = handler

    async def run(
        self, images: Sequence[ImageInput | bytes]
    ) -> tuple[PipelineOutcome, ...]:
        """Run the handler for every image concurrently.

        Args:
            images: Images to analyze; raw bytes are treated as JPEG.

        Returns:
            One outcome per image, same length and order as ``images``.
        """
        if not images:
            return ()
        outcomes = await asyncio.gather(
            *(self._settle(index, image) for index, image in enumerate(images))
        )
        return tuple(outcomes)

    async def _settle(self, index: int, image: ImageInput | bytes) -> PipelineOutcome:
        try:
            if not isinstance(image, ImageInput):
                image = ImageInput.from_bytes(image)
            result = await self._handler.handle(image)
        except Exception as e:
            logger.exception("Image %d raised instead of settling.", index + 1)
            return Failure(e)

        if not isinstance(result, Success | Failure):
            return Failure(
                TypeError(
                    f"Handler returned {type(result).__name__}; expected Success|Failure."
                )
            )
        if isinstance(result, Failure):
            logger.warning("Error analyzing image %d: %s", index + 1, result.error)
        return result
