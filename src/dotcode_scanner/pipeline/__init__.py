"""Scanning pipeline stages: extraction, fan-out and reconciliation."""

from .client_factory import ClientFactory
from .extraction import ExtractionClient, classify_provider_error, parse_analysis_text
from .fanout import FanOutOrchestrator
from .reconciler import Reconciler, classify_failure, merge_items, normalize_code

__all__ = [
    "ClientFactory",
    "ExtractionClient",
    "FanOutOrchestrator",
    "Reconciler",
    "classify_failure",
    "classify_provider_error",
    "merge_items",
    "normalize_code",
    "parse_analysis_text",
]
