"""The primary user-facing entry point for scanning.

``DotCodeScanner`` wires the credential resolver, the cached adapter factory,
the per-image extraction client, the fan-out stage and the reconciler. Stages
exchange ``Success``/``Failure`` values; the scanner is the only place that
raises, once, with the single ``ScanError`` chosen for the scan.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
import logging
from typing import TYPE_CHECKING, Any, NoReturn

from dotcode_scanner.config import FrozenConfig, resolve_config
from dotcode_scanner.constants import CREDENTIAL_REQUIRED_MESSAGE, OFFLINE_MESSAGE
from dotcode_scanner.core.exceptions import ErrorKind, ScanError
from dotcode_scanner.core.types import AnalysisResult, Failure, ImageInput, Success
from dotcode_scanner.credentials import (
    CredentialResolver,
    CredentialStore,
    JSONCredentialStore,
)
from dotcode_scanner.pipeline.client_factory import (
    MISSING_CREDENTIAL_MESSAGE,
    AdapterBuilder,
    ClientFactory,
)
from dotcode_scanner.pipeline.extraction import ExtractionClient
from dotcode_scanner.pipeline.fanout import FanOutOrchestrator
from dotcode_scanner.pipeline.reconciler import Reconciler
from dotcode_scanner.telemetry import TelemetryContext, TelemetryContextProtocol

if TYPE_CHECKING:
    from dotcode_scanner.pipeline.adapters.base import VisionAdapter

logger = logging.getLogger(__name__)

type ConnectivityCheck = Callable[[], bool]
type CredentialRequiredCallback = Callable[[ScanError], None]


def _default_adapter_builder(api_key: str) -> VisionAdapter:
    # Defer the SDK import until a real adapter is needed
    from dotcode_scanner.pipeline.adapters.gemini import GoogleGenAIAdapter

    return GoogleGenAIAdapter(api_key)


class DotCodeScanner:
    """Runs multi-image scans and exposes credential management.

    ``credential_required`` mirrors the application's credential-entry mode.
    It starts true when no key can be resolved, is set whenever a scan
    surfaces a credential problem, and is cleared by ``set_credential``.
    """

    def __init__(
        self,
        config: FrozenConfig,
        resolver: CredentialResolver,
        *,
        adapter_builder: AdapterBuilder | None = None,
        connectivity: ConnectivityCheck | None = None,
        on_credential_required: CredentialRequiredCallback | None = None,
        telemetry: TelemetryContextProtocol | None = None,
    ) -> None:
        """Initialize the scanner.

        Args:
            config: Frozen configuration (model name is taken from here).
            resolver: Credential resolver shared with the adapter factory.
            adapter_builder: Builds a vision adapter from an API key. Defaults
                to the google-genai adapter.
            connectivity: Returns False when the device is offline. Defaults
                to always online.
            on_credential_required: Called with the surfaced error whenever the
                scanner switches into credential-entry mode.
            telemetry: Telemetry context; no-op when omitted.
        """
        self.config = config
        self._resolver = resolver
        self._connectivity = connectivity
        self._on_credential_required = on_credential_required
        self._telemetry = telemetry if telemetry is not None else TelemetryContext()

        self._factory = ClientFactory(resolver, adapter_builder or _default_adapter_builder)
        self._extractor = ExtractionClient(self._factory, model_name=config.model)
        self._fanout = FanOutOrchestrator(self._extractor)
        self._reconciler = Reconciler()

        self.credential_required: bool = not resolver.has_credential()

    # --- Credential management ---

    def has_credential(self) -> bool:
        """Return True when a usable key is configured or stored."""
        return self._resolver.has_credential()

    def set_credential(self, value: str) -> None:
        """Persist an operator-entered key and leave credential-entry mode."""
        self._resolver.set_credential(value)
        if self._resolver.has_credential():
            self.credential_required = False

    def clear_credential(self) -> None:
        """Forget the stored key; a configured key still applies."""
        self._resolver.clear_credential()
        self.credential_required = not self._resolver.has_credential()

    # --- Scanning ---

    async def scan(self, images: Sequence[ImageInput | bytes]) -> AnalysisResult:
        """Analyze all images and return the consolidated result.

        Args:
            images: Images of product packaging. Raw bytes are treated as JPEG.

        Returns:
            Deduplicated items across every image that succeeded.

        Raises:
            ScanError: When the device is offline, no credential is available,
                or no image produced a usable result.
        """
        if self._connectivity is not None and not self._connectivity():
            logger.error("Scan refused: device is offline.")
            raise ScanError(ErrorKind.OFFLINE, OFFLINE_MESSAGE)

        if not self._resolver.has_credential():
            self._fail(
                ScanError(
                    ErrorKind.CREDENTIAL_REQUIRED,
                    CREDENTIAL_REQUIRED_MESSAGE,
                    details=MISSING_CREDENTIAL_MESSAGE,
                )
            )

        ctx = self._telemetry
        with ctx("scan.fanout", images=len(images)):
            outcomes = await self._fanout.run(images)

        failures = sum(1 for outcome in outcomes if isinstance(outcome, Failure))
        if failures:
            ctx.count("scan.image_failure", failures)

        with ctx("scan.reconcile"):
            result = self._reconciler.reconcile(outcomes, len(images))

        if isinstance(result, Success):
            return result.value

        ctx.count("scan.surfaced_error", kind=result.error.kind.value)
        self._fail(result.error)

    def _fail(self, error: ScanError) -> NoReturn:
        logger.error("Scan failed (%s): %s", error.kind.value, error.details or error)
        if error.requires_credential:
            self.credential_required = True
            if self._on_credential_required is not None:
                self._on_credential_required(error)
        raise error


def create_scanner(
    config: FrozenConfig | None = None,
    *,
    store: CredentialStore | None = None,
    **kwargs: Any,
) -> DotCodeScanner:
    """Create a scanner with optional configuration.

    If no configuration is provided, it is resolved from the environment and
    configuration files. This is the only place ambient configuration is read.

    Args:
        config: Optional frozen configuration.
        store: Credential store; defaults to a JSON file at
            ``config.credentials_path`` (or the per-user default).
        **kwargs: Forwarded to ``DotCodeScanner``.

    Returns:
        A ready ``DotCodeScanner``.
    """
    final_config = config if config is not None else resolve_config()
    final_store = (
        store if store is not None else JSONCredentialStore(final_config.credentials_path)
    )
    resolver = CredentialResolver(final_config.api_key, final_store)
    return DotCodeScanner(final_config, resolver, **kwargs)
