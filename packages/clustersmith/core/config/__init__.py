"""Configuration management for clustersmith."""

from clustersmith.core.config.loader import (
    detect_format,
    load_config,
    load_installer_config,
    parse_document,
)
from clustersmith.core.config.models import (
    ConfigBase,
    EngineConfig,
    InstallerConfig,
    LoggingConfig,
    StateConfig,
)

__all__ = [
    "ConfigBase",
    "EngineConfig",
    "InstallerConfig",
    "LoggingConfig",
    "StateConfig",
    "detect_format",
    "load_config",
    "load_installer_config",
    "parse_document",
]
