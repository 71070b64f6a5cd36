"""Public API for the configuration system."""

from pathlib import Path
from typing import Any, Literal, overload

from .resolver import ConfigResolver
from .types import FrozenConfig, ResolvedConfig

# Global resolver instance for efficient reuse
_resolver = ConfigResolver()


@overload
def resolve_config(
    overrides: dict[str, Any] | None = None,
    *,
    env_file: str | Path | None = None,
    project_root: Path | None = None,
    explain: Literal[False] = False,
) -> FrozenConfig: ...


@overload
def resolve_config(
    overrides: dict[str, Any] | None = None,
    *,
    env_file: str | Path | None = None,
    project_root: Path | None = None,
    explain: Literal[True],
) -> ResolvedConfig: ...


def resolve_config(
    overrides: dict[str, Any] | None = None,
    *,
    env_file: str | Path | None = None,
    project_root: Path | None = None,
    explain: bool = False,
) -> FrozenConfig | ResolvedConfig:
    """Resolve configuration from all sources with proper precedence.

    Precedence: Programmatic > Environment > .env file > Project file >
    Home file > Defaults.

    Args:
        overrides: Programmatic overrides (highest precedence). Only known
                   configuration fields are used.
        env_file: Optional path to a .env file read beneath the environment.
        project_root: Directory to search for pyproject.toml. If None,
                      searches current directory and parents.
        explain: When True, return the ``ResolvedConfig`` with its origin
                 map instead of the frozen configuration.

    Returns:
        FrozenConfig, or ResolvedConfig when ``explain`` is True.

    Raises:
        ConfigurationError: If validation fails or a source is malformed.

    Example:
        config = resolve_config()
        config = resolve_config({"model": "gemini-2.5-flash"})
        print(resolve_config(explain=True).audit())
    """
    resolved = _resolver.resolve(
        programmatic=overrides,
        env_file=env_file,
        project_root=project_root,
    )
    if explain:
        return resolved
    return resolved.to_frozen()


def print_config_audit() -> None:
    """Print a redacted audit of where each configuration value came from."""
    print(resolve_config(explain=True).audit())  # noqa: T201
