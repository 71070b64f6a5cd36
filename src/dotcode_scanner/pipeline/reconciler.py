"""Reconciler: merge per-image outcomes into one result or one error.

Identity of a code is its normalized form: upper-cased with all whitespace
removed. The first item seen for a normalized code (image order, then order
within the image) is kept unchanged; later duplicates are dropped without
merging their date, price or confidence. Items whose normalized code is empty
are skipped and are not errors.

When no image succeeded, exactly one error is surfaced, chosen from the last
failure by priority: credential problem, then network problem, then any
other failure. With no failures at all the scan reports that nothing
recognizable was found.
"""

from __future__ import annotations

from collections.abc import Sequence
import logging
import re

from dotcode_scanner.constants import (
    ANALYSIS_FAILED_MESSAGE,
    CREDENTIAL_REQUIRED_MESSAGE,
    NETWORK_ERROR_MESSAGE,
    NO_RESULTS_DETAILS,
    NO_RESULTS_MESSAGE,
)
from dotcode_scanner.core.exceptions import ErrorKind, ExtractionError, ScanError
from dotcode_scanner.core.types import (
    AnalysisResult,
    Failure,
    PipelineOutcome,
    Result,
    ScannedItem,
    Success,
)

logger = logging.getLogger(__name__)

_WHITESPACE = re.compile(r"\s+")

_CREDENTIAL_KINDS = frozenset(
    {ErrorKind.MISSING_CREDENTIAL, ErrorKind.AUTH_REJECTED, ErrorKind.MODEL_UNAVAILABLE}
)
_NETWORK_KINDS = frozenset({ErrorKind.TRANSPORT_FAILURE})

# Fallback for errors that reach the reconciler without a classified kind
_CREDENTIAL_MARKERS = ("api key",)
_NETWORK_MARKERS = ("fetch", "network")


def normalize_code(code: str | None) -> str:
    """Upper-case ``code`` and strip every whitespace character."""
    return _WHITESPACE.sub("", code or "").upper()


def merge_items(
    outcomes: Sequence[PipelineOutcome],
) -> tuple[tuple[ScannedItem, ...], int]:
    """Deduplicate items across successful outcomes.

    Returns:
        The merged items in first-seen order and the number of successes.
    """
    seen: set[str] = set()
    merged: list[ScannedItem] = []
    success_count = 0
    for outcome in outcomes:
        if not isinstance(outcome, Success):
            continue
        success_count += 1
        for item in outcome.value.items:
            key = normalize_code(item.dot_code)
            if key and key not in seen:
                seen.add(key)
                merged.append(item)
    return tuple(merged), success_count


def classify_failure(error: BaseException) -> ErrorKind:
    """Collapse a per-image failure into a surfaced pipeline error kind.

    The classified kind is used when available; message markers only apply
    to errors that carry no kind.
    """
    if isinstance(error, ExtractionError):
        if error.kind in _CREDENTIAL_KINDS:
            return ErrorKind.CREDENTIAL_REQUIRED
        if error.kind in _NETWORK_KINDS:
            return ErrorKind.NETWORK_ERROR
        return ErrorKind.ANALYSIS_FAILED

    message = str(error).lower()
    if any(marker in message for marker in _CREDENTIAL_MARKERS):
        return ErrorKind.CREDENTIAL_REQUIRED
    if any(marker in message for marker in _NETWORK_MARKERS):
        return ErrorKind.NETWORK_ERROR
    return ErrorKind.ANALYSIS_FAILED


def _error_text(error: BaseException) -> str:
    return str(error) or type(error).__name__


class Reconciler:
    """Turns settled outcomes into the scan's single user-facing result."""

    def reconcile(
        self, outcomes: Sequence[PipelineOutcome], image_count: int
    ) -> Result[AnalysisResult, ScanError]:
        """Merge outcomes, or pick the one error to surface.

        Args:
            outcomes: Settled per-image outcomes in image order.
            image_count: Number of images submitted to the scan.

        Returns:
            ``Success`` with the merged result whenever at least one image
            succeeded (even with zero usable codes), otherwise ``Failure``
            with the surfaced ``ScanError``.
        """
        items, success_count = merge_items(outcomes)
        if success_count > 0:
            summary = (
                f"Processed {success_count} of {image_count} images. "
                f"Found {len(items)} unique codes."
            )
            logger.info(summary)
            return Success(AnalysisResult(items=items, summary=summary))

        last_error: BaseException | None = None
        for outcome in outcomes:
            if isinstance(outcome, Failure):
                last_error = outcome.error

        return Failure(self._surface(last_error))

    def _surface(self, error: BaseException | None) -> ScanError:
        if error is None:
            return ScanError(
                ErrorKind.NO_USABLE_RESULTS,
                NO_RESULTS_MESSAGE,
                details=NO_RESULTS_DETAILS,
            )

        kind = classify_failure(error)
        details = _error_text(error)
        if kind is ErrorKind.CREDENTIAL_REQUIRED:
            return ScanError(kind, CREDENTIAL_REQUIRED_MESSAGE, details=details)
        if kind is ErrorKind.NETWORK_ERROR:
            return ScanError(kind, NETWORK_ERROR_MESSAGE, details=details)
        return ScanError(ErrorKind.ANALYSIS_FAILED, ANALYSIS_FAILED_MESSAGE, details=details)
