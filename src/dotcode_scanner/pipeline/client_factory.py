"""Lazily built, credential-aware cache for the vision adapter.

One adapter is built per credential generation and shared read-only by every
extraction in a scan. ``CredentialResolver`` bumps its generation whenever the
stored key changes, which makes the next ``get`` rebuild the adapter.
"""

from __future__ import annotations

from collections.abc import Callable
import logging

from dotcode_scanner.core.exceptions import ErrorKind, ExtractionError
from dotcode_scanner.credentials import CredentialResolver
from dotcode_scanner.pipeline.adapters.base import VisionAdapter

log = logging.getLogger(__name__)

type AdapterBuilder = Callable[[str], VisionAdapter]

MISSING_CREDENTIAL_MESSAGE = "API Key is missing. Please enter it in Settings."


class ClientFactory:
    """Builds and caches a ``VisionAdapter`` for the current credential."""

    def __init__(self, resolver: CredentialResolver, builder: AdapterBuilder) -> None:
        """Initialize with the credential resolver and an adapter builder.

        Args:
            resolver: Source of the API key and its generation counter.
            builder: Callable turning an API key into a ready adapter.
        """
        self._resolver = resolver
        self._builder = builder
        self._cached: VisionAdapter | None = None
        self._cached_generation: int | None = None

    def get(self) -> VisionAdapter:
        """Return the cached adapter, building it if missing or stale.

        Raises:
            ExtractionError: ``MISSING_CREDENTIAL`` when no key is available, or
                ``TRANSPORT_FAILURE`` when the adapter cannot be constructed.
        """
        generation = self._resolver.generation
        if self._cached is not None and self._cached_generation == generation:
            return self._cached

        credential = self._resolver.resolve()
        if credential is None:
            raise ExtractionError(
                ErrorKind.MISSING_CREDENTIAL, MISSING_CREDENTIAL_MESSAGE
            )

        try:
            adapter = self._builder(credential.value)
        except Exception as e:
            raise ExtractionError(
                ErrorKind.TRANSPORT_FAILURE,
                f"Failed to initialize provider: {e}",
                cause=e,
            ) from e

        log.debug(
            "Built vision adapter for generation %d (credential from %s).",
            generation,
            credential.origin,
        )
        self._cached = adapter
        self._cached_generation = generation
        return adapter

    def invalidate(self) -> None:
        """Drop the cached adapter so the next ``get`` rebuilds it."""
        self._cached = None
        self._cached_generation = None
