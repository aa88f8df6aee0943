"""Configuration loading utilities with JSON and YAML support."""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any

import yaml

from clustersmith.core.config.models import InstallerConfig, LoggingConfig

logger = logging.getLogger(__name__)

LOG_LEVEL_ENV = "CLUSTERSMITH_LOG_LEVEL"


def detect_format(file_path: Path | str) -> str:
    """Detect config file format from extension.

    Raises:
        ValueError: If format cannot be determined

    Example:
        >>> detect_format("clustersmith.json")
        'json'
        >>> detect_format("install-config.yml")
        'yaml'
    """
    suffix = Path(file_path).suffix.lower()

    if suffix == ".json":
        return "json"
    elif suffix in [".yaml", ".yml"]:
        return "yaml"
    else:
        raise ValueError(f"Unsupported config format: {suffix}")


def parse_document(text: str, fmt: str, source: str = "<string>") -> dict[str, Any]:
    """Parse a JSON or YAML document into a mapping.

    Raises:
        ValueError: If the content is invalid or not a mapping
    """
    if fmt == "json":
        try:
            content = json.loads(text)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in {source}: {e}") from e
    elif fmt == "yaml":
        try:
            content = yaml.safe_load(text)
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in {source}: {e}") from e
        # safe_load returns None for empty files
        if content is None:
            content = {}
    else:
        raise ValueError(f"Unsupported format: {fmt}")

    if not isinstance(content, dict):
        raise ValueError(f"Expected a mapping in {source}, got {type(content).__name__}")
    return content


def load_config(path: str | Path) -> dict[str, Any]:
    """Load and return raw configuration dictionary.

    Supports both JSON and YAML formats. Format is auto-detected
    from file extension.

    Raises:
        FileNotFoundError: If config file does not exist
        ValueError: If format is not supported or file content is invalid
    """
    path = Path(path)

    if not path.exists():
        raise FileNotFoundError(f"Config file does not exist: {path}")

    fmt = detect_format(path)
    return parse_document(path.read_text(encoding="utf-8"), fmt, str(path))


def load_installer_config(path: str | Path | None = None) -> InstallerConfig:
    """Load and validate application configuration.

    Falls back to defaults when the file is absent. ``CLUSTERSMITH_LOG_LEVEL``
    overrides the configured log level.

    Args:
        path: Path to config file (.json, .yaml, or .yml); defaults to
            ``clustersmith.yaml`` in the working directory

    Returns:
        Validated InstallerConfig

    Raises:
        ValidationError: If config is invalid
    """
    config = InstallerConfig.load_or_default(path)
    _load_env_vars_into_config(config)
    return config


def _load_env_vars_into_config(config: InstallerConfig) -> None:
    """Apply environment overrides in place.

    Raises:
        ValidationError: If an override is not a valid value
    """
    level = os.getenv(LOG_LEVEL_ENV)
    if level:
        logger.debug(f"Loaded {LOG_LEVEL_ENV} from environment")
        config.logging = LoggingConfig.model_validate(
            {**config.logging.model_dump(), "level": level.upper()}
        )
