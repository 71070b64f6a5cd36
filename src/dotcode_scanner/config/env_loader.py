"""Environment variable configuration loading.

This module handles loading configuration from the process environment, with
optional ``.env`` file support via python-dotenv and type coercion via the
settings schema. Process environment always wins over the ``.env`` file.
"""

import os
from pathlib import Path
from typing import Any

from dotenv import dotenv_values

from dotcode_scanner.constants import API_KEY_ENV_VARS
from dotcode_scanner.credentials import is_placeholder

from .schema import ScannerSettings

# Non-secret fields follow the DOTCODE_ prefix convention
_FIELD_ENV_VARS = {
    "DOTCODE_MODEL": "model",
    "DOTCODE_CREDENTIALS_PATH": "credentials_path",
}


class EnvironmentConfigLoader:
    """Loads configuration from environment variables.

    The process-level API key is read from ``API_KEY`` first and then
    ``VITE_API_KEY``, the names used by the deployment tooling that injects it.
    """

    def load_env_config(self, env_file: str | Path | None = None) -> dict[str, Any]:
        """Load configuration from environment variables.

        Args:
            env_file: Optional path to a ``.env`` file. Its values are used only
                     where the process environment does not define the variable.

        Returns:
            Dictionary of configuration values found in the environment.
            Only includes fields that are actually set (not defaults).

        Raises:
            FileNotFoundError: If ``env_file`` is given but does not exist.
            ValueError: If environment variables contain invalid values.
        """
        environ: dict[str, str] = {}
        if env_file:
            environ.update(self._read_env_file(env_file))
        environ.update(os.environ)

        env_values: dict[str, Any] = {}
        for env_var in API_KEY_ENV_VARS:
            value = environ.get(env_var)
            if not is_placeholder(value):
                env_values["api_key"] = value
                break

        for env_var, field_name in _FIELD_ENV_VARS.items():
            if env_var in environ:
                env_values[field_name] = environ[env_var]

        if not env_values:
            return {}

        try:
            settings = ScannerSettings(**env_values)
        except Exception as e:
            names = sorted(
                name
                for name in (*API_KEY_ENV_VARS, *_FIELD_ENV_VARS)
                if name in environ
            )
            raise ValueError(
                f"Invalid environment variable values for {', '.join(names)}. "
                f"Error: {e}"
            ) from e

        return {field_name: getattr(settings, field_name) for field_name in env_values}

    def _read_env_file(self, env_file: str | Path) -> dict[str, str]:
        """Read KEY=VALUE pairs from a ``.env`` file without touching os.environ."""
        env_path = Path(env_file)
        if not env_path.exists():
            raise FileNotFoundError(f"Environment file not found: {env_path}")
        values = dotenv_values(env_path, encoding="utf-8")
        return {key: value for key, value in values.items() if value is not None}
