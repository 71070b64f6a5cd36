"""
Global test configuration and shared fixtures.
"""

import asyncio
from collections.abc import Callable
from contextlib import suppress
import json
import logging
import os
from typing import Any

import pytest

from dotcode_scanner.config import FrozenConfig
from dotcode_scanner.credentials import CredentialResolver, InMemoryCredentialStore
from dotcode_scanner.scanner import DotCodeScanner


# --- Environment Isolation (Autouse) ---
@pytest.fixture(autouse=True)
def block_dotenv(request, monkeypatch):
    """Prevent python-dotenv from loading project .env files during tests.

    Opt-in escape hatch: mark a test with @pytest.mark.allow_dotenv
    to permit .env loading for that specific test.
    """
    if request.node.get_closest_marker("allow_dotenv"):
        return
    with suppress(Exception):
        monkeypatch.setattr(
            "dotenv.load_dotenv", lambda *_args, **_kwargs: False, raising=False
        )


@pytest.fixture(autouse=True)
def isolate_scanner_env(monkeypatch):
    """Ensure no real API key or DOTCODE_* setting leaks into a test."""
    for key in list(os.environ.keys()):
        if key.startswith("DOTCODE_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.delenv("API_KEY", raising=False)
    monkeypatch.delenv("VITE_API_KEY", raising=False)
    # Avoid DEBUG toggles switching telemetry on
    monkeypatch.delenv("DEBUG", raising=False)


@pytest.fixture(autouse=True)
def neutral_config_files(request, monkeypatch, tmp_path):
    """Point home config, pyproject lookup and HOME at isolated temp paths.

    Prevents reading a developer's real ~/.config files or the repository's
    own pyproject.toml. Credential stores default beneath the fake HOME.

    Escape hatch: mark test with @pytest.mark.allow_real_home_config.
    """
    if request.node.get_closest_marker("allow_real_home_config"):
        return

    fake_home = tmp_path / "home"
    fake_home.mkdir(parents=True, exist_ok=True)
    monkeypatch.setenv("HOME", str(fake_home))
    monkeypatch.setenv(
        "DOTCODE_SCANNER_CONFIG_HOME", str(fake_home / "dotcode_scanner.toml")
    )
    # A path that does not exist means "no project file"
    monkeypatch.setenv(
        "DOTCODE_SCANNER_PYPROJECT_PATH", str(tmp_path / "absent" / "pyproject.toml")
    )


# --- Logging Fixtures ---
@pytest.fixture(scope="session", autouse=True)
def quiet_noisy_libraries():
    """Sets the log level for noisy external libraries to WARNING."""
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("google_genai").setLevel(logging.WARNING)


# --- Test Environment Markers ---
def pytest_configure(config):
    """Configure custom markers for test organization."""
    markers = [
        "unit: Fast, isolated unit tests",
        "contract: Behavioural contracts that must hold across refactors",
        "security: Secret handling and redaction guarantees",
        "allow_dotenv: Permit python-dotenv to load .env files",
        "allow_real_home_config: Read the real home configuration file",
    ]
    for marker in markers:
        config.addinivalue_line("markers", marker)


# --- Fake vision service ---


class FakeVisionAdapter:
    """Scriptable stand-in for the vision service.

    Replies are keyed by image bytes. A reply may be response text, ``None``
    (empty response) or an exception instance to raise. ``delays`` lets a
    test make some images finish later than others.
    """

    def __init__(
        self,
        responses: dict[bytes, Any] | None = None,
        *,
        default: Any = None,
        delays: dict[bytes, float] | None = None,
    ) -> None:
        self.responses: dict[bytes, Any] = dict(responses or {})
        self.default = default
        self.delays: dict[bytes, float] = dict(delays or {})
        self.calls: list[dict[str, Any]] = []
        self.completed: list[bytes] = []

    async def generate(
        self,
        *,
        model_name: str,
        image: bytes,
        mime_type: str,
        prompt: str,
        response_schema: dict[str, Any],
    ) -> str | None:
        self.calls.append(
            {
                "model_name": model_name,
                "image": image,
                "mime_type": mime_type,
                "prompt": prompt,
                "response_schema": response_schema,
            }
        )
        delay = self.delays.get(image)
        if delay:
            await asyncio.sleep(delay)
        self.completed.append(image)
        reply = self.responses.get(image, self.default)
        if isinstance(reply, BaseException):
            raise reply
        return reply


def build_reply(*items: dict[str, Any] | str, summary: str = "Found codes") -> str:
    """Render a model reply; bare strings become High-confidence items."""
    rendered = [
        {"dotCode": item, "confidence": "High"} if isinstance(item, str) else item
        for item in items
    ]
    return json.dumps({"items": rendered, "summary": summary})


class StatusError(Exception):
    """Provider-style exception carrying an HTTP status in ``code``."""

    def __init__(self, code: int, message: str = "") -> None:
        super().__init__(message or f"HTTP {code}")
        self.code = code


@pytest.fixture
def fake_adapter() -> FakeVisionAdapter:
    """A fresh fake adapter with no scripted replies."""
    return FakeVisionAdapter()


@pytest.fixture
def reply() -> Callable[..., str]:
    """Builder for model reply text."""
    return build_reply


@pytest.fixture
def status_error() -> type[StatusError]:
    """Exception type carrying a provider status code."""
    return StatusError


@pytest.fixture
def mock_api_key() -> str:
    """Provide a consistent, fake API key for tests."""
    return "test_api_key_12345_67890_abcdef_ghijkl"


@pytest.fixture
def make_scanner(fake_adapter) -> Callable[..., DotCodeScanner]:
    """Build a scanner wired to ``fake_adapter`` with an in-memory store.

    Keyword arguments ``api_key`` and ``stored_key`` seed the two credential
    sources; anything else is forwarded to ``DotCodeScanner``.
    """

    def _make(
        *,
        api_key: str | None = None,
        stored_key: str | None = None,
        **kwargs: Any,
    ) -> DotCodeScanner:
        store = InMemoryCredentialStore(
            {"user_gemini_api_key": stored_key} if stored_key else None
        )
        resolver = CredentialResolver(api_key, store)
        kwargs.setdefault("adapter_builder", lambda _key: fake_adapter)
        return DotCodeScanner(FrozenConfig(api_key=api_key), resolver, **kwargs)

    return _make
