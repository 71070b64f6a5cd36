"""Configuration management for the DotCode scanner.

Resolve-once, freeze-then-flow: configuration is resolved from all sources a
single time and the immutable ``FrozenConfig`` is handed to the scanner.

Key components:
- ResolvedConfig: Post-resolution configuration with audit metadata
- FrozenConfig: Immutable configuration for pipeline execution
- SourceMap: Audit tracking of configuration value origins
"""

from .api import print_config_audit, resolve_config
from .env_loader import EnvironmentConfigLoader
from .file_loader import ConfigFileError, FileConfigLoader
from .resolver import ConfigResolver
from .schema import ScannerSettings
from .types import ConfigOrigin, FrozenConfig, ResolvedConfig, SourceMap

__all__ = [
    "ConfigFileError",
    "ConfigOrigin",
    "ConfigResolver",
    "EnvironmentConfigLoader",
    "FileConfigLoader",
    "FrozenConfig",
    "ResolvedConfig",
    "ScannerSettings",
    "SourceMap",
    "print_config_audit",
    "resolve_config",
]
