"""Configuration schema and validation using Pydantic.

This module defines the settings schema that validates and coerces configuration
values from various sources (environment, files, programmatic) into the correct
types with proper defaults.
"""

from pathlib import Path
from typing import Any

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from dotcode_scanner.constants import DEFAULT_MODEL


class ScannerSettings(BaseSettings):
    """Pydantic settings schema for scanner configuration.

    Environment lookup is performed by ``EnvironmentConfigLoader`` so that the
    process-level key keeps its historical variable names (``API_KEY``,
    ``VITE_API_KEY``); this class only validates and coerces values.
    """

    model_config = SettingsConfigDict(
        env_prefix="DOTCODE_",
        env_file=None,  # Only used when explicitly requested
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # Ignore unknown keys for forward compatibility
    )

    # --- Core Configuration Fields ---

    api_key: str | None = Field(
        default=None,
        description="Process-level Google Gemini API key",
    )

    model: str = Field(
        default=DEFAULT_MODEL,
        description="Gemini model identifier used for image analysis",
        min_length=1,
    )

    credentials_path: Path | None = Field(
        default=None,
        description="Location of the on-device credential store file",
    )

    # --- Validation Rules ---

    @field_validator("model", mode="before")
    @classmethod
    def strip_model(cls, v: Any) -> Any:
        """Strip surrounding whitespace from the model name."""
        if isinstance(v, str):
            return v.strip()
        return v

    @field_validator("credentials_path", mode="before")
    @classmethod
    def expand_credentials_path(cls, v: Any) -> Any:
        """Expand ``~`` and treat blank values as unset."""
        if isinstance(v, str):
            if not v.strip():
                return None
            return Path(v.strip()).expanduser()
        if isinstance(v, Path):
            return v.expanduser()
        return v

    @classmethod
    def defaults(cls) -> dict[str, Any]:
        """Return schema defaults without consulting the environment."""
        return {name: field.default for name, field in cls.model_fields.items()}

    def to_dict(self) -> dict[str, Any]:
        """Convert to a plain dictionary suitable for SourceMap annotation.

        Returns:
            Dictionary with field names as keys and resolved values.
        """
        return {
            "api_key": self.api_key,
            "model": self.model,
            "credentials_path": self.credentials_path,
        }
