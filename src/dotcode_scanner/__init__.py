"""Multi-image DotCode extraction and reconciliation."""

import importlib.metadata
import logging

from dotcode_scanner.config import FrozenConfig, resolve_config
from dotcode_scanner.core.exceptions import (
    ConfigurationError,
    CredentialStoreError,
    DotCodeScannerError,
    ErrorKind,
    ExportError,
    ExtractionError,
    ScanError,
)
from dotcode_scanner.core.types import (
    AnalysisResult,
    Confidence,
    Failure,
    ImageInput,
    Result,
    ScannedItem,
    Success,
)
from dotcode_scanner.credentials import (
    CredentialResolver,
    InMemoryCredentialStore,
    JSONCredentialStore,
)
from dotcode_scanner.export import SessionInfo, export_report, render_csv
from dotcode_scanner.scanner import DotCodeScanner, create_scanner
from dotcode_scanner.telemetry import TelemetryContext, TelemetryReporter

# Version handling
try:
    __version__ = importlib.metadata.version("dotcode-scanner")
except importlib.metadata.PackageNotFoundError:
    __version__ = "development"

# Set up a null handler for the library's root logger.
logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [  # noqa: RUF022
    # Entry point
    "DotCodeScanner",
    "create_scanner",
    # Configuration
    "FrozenConfig",
    "resolve_config",
    # Credentials
    "CredentialResolver",
    "InMemoryCredentialStore",
    "JSONCredentialStore",
    # Data
    "AnalysisResult",
    "Confidence",
    "ImageInput",
    "ScannedItem",
    "Failure",
    "Result",
    "Success",
    # Export
    "SessionInfo",
    "export_report",
    "render_csv",
    # Telemetry
    "TelemetryContext",
    "TelemetryReporter",
    # Exceptions
    "ConfigurationError",
    "CredentialStoreError",
    "DotCodeScannerError",
    "ErrorKind",
    "ExportError",
    "ExtractionError",
    "ScanError",
]
