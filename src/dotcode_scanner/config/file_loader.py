"""File-based configuration loading.

This module handles loading configuration from TOML files: the project-level
``pyproject.toml`` (``[tool.dotcode_scanner]``) and the home-level
``~/.config/dotcode_scanner.toml``.
"""

import os
from pathlib import Path
import tomllib
from typing import Any

from dotcode_scanner.constants import (
    CONFIG_HOME_ENV_VAR,
    CONFIG_TOOL_SECTION,
    PYPROJECT_PATH_ENV_VAR,
)
from dotcode_scanner.core.exceptions import ConfigurationError


class ConfigFileError(ConfigurationError):
    """Raised when configuration file loading fails."""

    def __init__(
        self, file_path: Path, message: str, cause: Exception | None = None
    ) -> None:
        """Initialize with file path, message, and optional cause.

        Args:
            file_path: The file that failed to load
            message: Human-readable error message
            cause: The underlying exception that caused the failure
        """
        self.file_path = file_path
        self.message = message
        self.cause = cause
        super().__init__(f"Config file error in {file_path}: {message}")


class FileConfigLoader:
    """Loads configuration from TOML files."""

    def load_project_config(self, project_root: Path | None = None) -> dict[str, Any]:
        """Load configuration from pyproject.toml in the project root.

        Args:
            project_root: Directory to search for pyproject.toml. If None,
                         searches current directory and parents.

        Returns:
            Dictionary of configuration values from the file.
            Empty dict if the file doesn't exist or has no scanner section.

        Raises:
            ConfigFileError: If the file exists but cannot be parsed.
        """
        pyproject_path = self._find_pyproject_toml(project_root)
        if not pyproject_path:
            return {}

        data = self._load_toml(pyproject_path)
        section = data.get("tool", {}).get(CONFIG_TOOL_SECTION, {})
        if not isinstance(section, dict):
            raise ConfigFileError(
                pyproject_path, f"[tool.{CONFIG_TOOL_SECTION}] must be a table"
            )
        return dict(section)

    def load_home_config(self) -> dict[str, Any]:
        """Load configuration from ~/.config/dotcode_scanner.toml.

        Returns:
            Dictionary of configuration values from the home file.
            Empty dict if the file doesn't exist.

        Raises:
            ConfigFileError: If the file exists but cannot be parsed.
        """
        home_config_path = self._get_home_config_path()
        if not home_config_path.exists():
            return {}
        return dict(self._load_toml(home_config_path))

    def _load_toml(self, path: Path) -> dict[str, Any]:
        try:
            with path.open(mode="rb") as f:
                return tomllib.load(f)
        except (OSError, tomllib.TOMLDecodeError) as e:
            raise ConfigFileError(path, f"Failed to parse TOML: {e}", cause=e) from e

    def _find_pyproject_toml(self, start_dir: Path | None = None) -> Path | None:
        """Find pyproject.toml by searching up the directory tree.

        Args:
            start_dir: Directory to start searching from. If None, uses current directory.

        Returns:
            Path to pyproject.toml if found, None otherwise.
        """
        override = os.getenv(PYPROJECT_PATH_ENV_VAR)
        if override:
            candidate = Path(override)
            return candidate if candidate.exists() else None

        if start_dir is None:
            start_dir = Path.cwd()

        current = Path(start_dir).resolve()
        while current != current.parent:  # Stop at filesystem root
            pyproject_path = current / "pyproject.toml"
            if pyproject_path.exists():
                return pyproject_path
            current = current.parent

        return None

    def _get_home_config_path(self) -> Path:
        """Get the path to the home configuration file.

        Returns:
            Path to ~/.config/dotcode_scanner.toml unless overridden by
            ``DOTCODE_SCANNER_CONFIG_HOME``.
        """
        override = os.getenv(CONFIG_HOME_ENV_VAR)
        if override:
            return Path(override)
        return Path.home() / ".config" / "dotcode_scanner.toml"
