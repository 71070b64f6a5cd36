"""Core types and exceptions shared by every pipeline stage."""

from .exceptions import (
    ConfigurationError,
    CredentialStoreError,
    DotCodeScannerError,
    ErrorKind,
    ExportError,
    ExtractionError,
    ScanError,
)
from .types import (
    AnalysisResult,
    Confidence,
    Failure,
    ImageInput,
    PipelineOutcome,
    Result,
    ScannedItem,
    Success,
)

__all__ = [
    "AnalysisResult",
    "Confidence",
    "ConfigurationError",
    "CredentialStoreError",
    "DotCodeScannerError",
    "ErrorKind",
    "ExportError",
    "ExtractionError",
    "Failure",
    "ImageInput",
    "PipelineOutcome",
    "Result",
    "ScanError",
    "ScannedItem",
    "Success",
]
