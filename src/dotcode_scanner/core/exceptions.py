"""Exceptions and error kinds for the DotCode scanning pipeline.

Per-image failures are carried as ``ExtractionError`` values inside
``Failure`` outcomes. Only ``ScanError`` crosses the public boundary, once,
when a whole scan produces nothing to report.
"""

from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    """Fixed set of classified failure kinds."""

    # Per-image extraction failures
    MISSING_CREDENTIAL = "missing_credential"
    AUTH_REJECTED = "auth_rejected"
    MODEL_UNAVAILABLE = "model_unavailable"
    RATE_LIMITED = "rate_limited"
    BAD_REQUEST = "bad_request"
    EMPTY_RESPONSE = "empty_response"
    MALFORMED_RESPONSE = "malformed_response"
    TRANSPORT_FAILURE = "transport_failure"

    # Pipeline-level, synthesized by the reconciler or the scanner preflight
    NO_USABLE_RESULTS = "no_usable_results"
    CREDENTIAL_REQUIRED = "credential_required"
    NETWORK_ERROR = "network_error"
    ANALYSIS_FAILED = "analysis_failed"
    OFFLINE = "offline"


class DotCodeScannerError(Exception):
    """Base exception for the scanner package."""


class ConfigurationError(DotCodeScannerError):
    """Raised when configuration cannot be resolved or validated."""


class CredentialStoreError(DotCodeScannerError):
    """Raised when the local credential store cannot be read or written."""


class ExportError(DotCodeScannerError):
    """Raised when a report cannot be produced."""


class ExtractionError(DotCodeScannerError):
    """A classified failure from a single image extraction."""

    def __init__(
        self,
        kind: ErrorKind,
        message: str,
        *,
        cause: BaseException | None = None,
    ) -> None:
        """Initialize with a kind, a human-readable message and the cause."""
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.cause = cause

    def __repr__(self) -> str:
        return f"ExtractionError(kind={self.kind.value!r}, message={self.message!r})"


_CREDENTIAL_KINDS = frozenset(
    {
        ErrorKind.MISSING_CREDENTIAL,
        ErrorKind.AUTH_REJECTED,
        ErrorKind.MODEL_UNAVAILABLE,
        ErrorKind.CREDENTIAL_REQUIRED,
    }
)


class ScanError(DotCodeScannerError):
    """The single error surfaced for a scan.

    ``message`` is the short text meant for the operator. ``details`` holds
    the underlying technical cause verbatim and is only shown on demand.
    """

    def __init__(
        self,
        kind: ErrorKind,
        message: str,
        *,
        details: str | None = None,
    ) -> None:
        """Initialize with a kind, a short message and optional details."""
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.details = details

    @property
    def requires_credential(self) -> bool:
        """True when the caller must switch to credential entry."""
        return self.kind in _CREDENTIAL_KINDS

    def __repr__(self) -> str:
        return (
            f"ScanError(kind={self.kind.value!r}, message={self.message!r}, "
            f"details={self.details!r})"
        )
