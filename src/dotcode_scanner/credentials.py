"""Credential resolution for the vision service.

Two sources are consulted in a fixed order: the process-level key resolved
from configuration (set at build/deploy time) and a key the operator typed in,
persisted on the device. The configured key wins unless it is missing or one
of the placeholder literals deploy tooling leaves behind.
"""

from __future__ import annotations

import dataclasses
import json
import logging
import os
from pathlib import Path
from typing import Literal, Protocol

from dotcode_scanner.constants import CREDENTIAL_STORE_KEY, PLACEHOLDER_CREDENTIALS
from dotcode_scanner.core.exceptions import CredentialStoreError

log = logging.getLogger(__name__)

type CredentialOrigin = Literal["config", "store"]


def is_placeholder(value: str | None) -> bool:
    """Return True when ``value`` carries no usable credential."""
    return value is None or value.strip() in PLACEHOLDER_CREDENTIALS


@dataclasses.dataclass(frozen=True, slots=True)
class Credential:
    """A resolved API key and where it came from."""

    value: str
    origin: CredentialOrigin

    def __repr__(self) -> str:
        return f"Credential(value='[REDACTED]', origin={self.origin!r})"

    __str__ = __repr__


class CredentialStore(Protocol):
    """Device-scoped key/value persistence addressed by string keys."""

    def get(self, key: str) -> str | None:
        """Return the value stored under ``key``, if any."""
        ...

    def set(self, key: str, value: str) -> None:
        """Persist ``value`` under ``key``."""
        ...

    def delete(self, key: str) -> None:
        """Remove ``key``; missing keys are ignored."""
        ...


class InMemoryCredentialStore:
    """Process-local store, mostly useful for tests and embedding."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._values: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._values.get(key)

    def set(self, key: str, value: str) -> None:
        self._values[key] = value

    def delete(self, key: str) -> None:
        self._values.pop(key, None)


class JSONCredentialStore:
    """Stores keys in a small JSON file readable only by the current user.

    A missing file reads as empty. A file that exists but is not a JSON object
    raises ``CredentialStoreError`` rather than being silently overwritten.
    """

    def __init__(self, path: str | Path | None = None) -> None:
        self.path = Path(path) if path is not None else default_credentials_path()

    def get(self, key: str) -> str | None:
        value = self._load().get(key)
        return value if isinstance(value, str) else None

    def set(self, key: str, value: str) -> None:
        data = self._load()
        data[key] = value
        self._write(data)

    def delete(self, key: str) -> None:
        if not self.path.exists():
            return
        data = self._load()
        if data.pop(key, None) is not None:
            self._write(data)

    def _load(self) -> dict[str, object]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8") or "{}")
        except (OSError, json.JSONDecodeError) as e:
            raise CredentialStoreError(
                f"Failed to read credential store {self.path}: {e}"
            ) from e
        if not isinstance(data, dict):
            raise CredentialStoreError(
                f"Credential store {self.path} must contain a JSON object"
            )
        return data

    def _write(self, data: dict[str, object]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(data, indent=2), encoding="utf-8")
            os.chmod(self.path, 0o600)
        except OSError as e:
            raise CredentialStoreError(
                f"Failed to write credential store {self.path}: {e}"
            ) from e


def default_credentials_path() -> Path:
    """Return ~/.config/dotcode_scanner/credentials.json."""
    return Path.home() / ".config" / "dotcode_scanner" / "credentials.json"


class CredentialResolver:
    """Resolves which API key to use, in a fixed fallback order.

    ``generation`` increments on every mutation so cached clients built from
    an earlier key can tell they are stale.
    """

    def __init__(
        self,
        configured_key: str | None,
        store: CredentialStore,
        *,
        store_key: str = CREDENTIAL_STORE_KEY,
    ) -> None:
        """Initialize with the process-level key and the device store.

        Args:
            configured_key: Key resolved from configuration; may be a placeholder.
            store: Device-scoped store holding the operator-entered key.
            store_key: Key name used inside the store.
        """
        self._configured_key = configured_key
        self._store = store
        self._store_key = store_key
        self._generation = 0

    @property
    def generation(self) -> int:
        """Counter bumped by ``set_credential`` and ``clear_credential``."""
        return self._generation

    def resolve(self) -> Credential | None:
        """Return the credential to use, or None when none is available."""
        if not is_placeholder(self._configured_key):
            return Credential(value=str(self._configured_key).strip(), origin="config")

        stored = self._store.get(self._store_key)
        if stored and stored.strip():
            return Credential(value=stored.strip(), origin="store")

        return None

    def has_credential(self) -> bool:
        """Pure query with the same resolution order as ``resolve``."""
        return self.resolve() is not None

    def set_credential(self, value: str) -> None:
        """Persist an operator-entered key. Blank input is ignored."""
        trimmed = (value or "").strip()
        if not trimmed:
            log.debug("Ignoring blank credential input.")
            return
        self._store.set(self._store_key, trimmed)
        self._generation += 1
        log.info("Stored user-supplied API key; cached client invalidated.")

    def clear_credential(self) -> None:
        """Remove only the stored key; the configured key is untouched."""
        self._store.delete(self._store_key)
        self._generation += 1
        log.info("Cleared user-supplied API key; cached client invalidated.")
