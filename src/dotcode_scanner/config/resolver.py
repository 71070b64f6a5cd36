"""Configuration resolution with precedence handling.

This module implements the core resolution algorithm that merges configuration
from multiple sources according to the documented precedence order:
Programmatic > Environment (.env file underneath) > Project file > Home file > Defaults
"""

from pathlib import Path
from typing import Any

from dotcode_scanner.core.exceptions import ConfigurationError

from .env_loader import EnvironmentConfigLoader
from .file_loader import FileConfigLoader
from .schema import ScannerSettings
from .types import ConfigOrigin, ResolvedConfig


class ConfigResolver:
    """Resolves configuration from multiple sources with proper precedence."""

    def __init__(self) -> None:
        """Initialize the configuration resolver."""
        self.file_loader = FileConfigLoader()
        self.env_loader = EnvironmentConfigLoader()

    def resolve(
        self,
        programmatic: dict[str, Any] | None = None,
        *,
        env_file: str | Path | None = None,
        project_root: Path | None = None,
    ) -> ResolvedConfig:
        """Resolve configuration from all sources with proper precedence.

        Args:
            programmatic: Programmatic overrides (highest precedence)
            env_file: Optional .env file consulted beneath the process environment
            project_root: Directory to search for pyproject.toml

        Returns:
            ResolvedConfig with merged values and source tracking.

        Raises:
            ConfigurationError: If validation fails or a source is malformed.
        """
        origins: dict[str, ConfigOrigin] = {}
        merged_config: dict[str, Any] = {}

        # Step 1: Start with schema defaults
        for field, value in ScannerSettings.defaults().items():
            merged_config[field] = value
            origins[field] = "default"

        # Step 2: Home file, then project file (ConfigFileError propagates)
        for file_config in (
            self.file_loader.load_home_config(),
            self.file_loader.load_project_config(project_root=project_root),
        ):
            self._apply(merged_config, origins, file_config, "file")

        # Step 3: Environment variables
        try:
            env_config = self.env_loader.load_env_config(env_file=env_file)
        except (ValueError, FileNotFoundError) as e:
            raise ConfigurationError(f"Environment configuration error: {e}") from e
        self._apply(merged_config, origins, env_config, "env")

        # Step 4: Programmatic overrides (highest precedence)
        if programmatic:
            self._apply(merged_config, origins, programmatic, "programmatic")

        # Step 5: Validate the final configuration using Pydantic
        try:
            final_config = ScannerSettings(**merged_config).to_dict()
        except Exception as e:
            raise ConfigurationError(f"Configuration validation failed: {e}") from e

        return ResolvedConfig(
            api_key=final_config["api_key"],
            model=final_config["model"],
            credentials_path=final_config["credentials_path"],
            origin=origins,
        )

    @staticmethod
    def _apply(
        merged: dict[str, Any],
        origins: dict[str, ConfigOrigin],
        values: dict[str, Any],
        origin: ConfigOrigin,
    ) -> None:
        for field, value in values.items():
            if field in merged:  # Only override known fields
                merged[field] = value
                origins[field] = origin
