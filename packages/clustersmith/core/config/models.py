"""Configuration models for clustersmith."""

from __future__ import annotations

from pathlib import Path
from typing import Self

from pydantic import BaseModel, ConfigDict, Field


class ConfigBase(BaseModel):
    """Base class for all clustersmith configurations.

    Provides common functionality for loading from files with defaults.
    Subclasses must implement default_path() to specify their default location.
    """

    model_config = ConfigDict(extra="ignore")  # Forward compatibility

    @classmethod
    def default_path(cls) -> Path:
        """Return the default config file path for this config type."""
        raise NotImplementedError(f"{cls.__name__} must implement default_path()")

    @classmethod
    def load_or_default(cls, path: Path | str | None = None) -> Self:
        """Load config from path, or defaults when the file does not exist.

        Raises:
            ValidationError: If config is invalid
        """
        from clustersmith.core.config.loader import load_config

        if path is None:
            path = cls.default_path()
        if not Path(path).exists():
            return cls()
        return cls.model_validate(load_config(path))


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = Field(default="INFO", pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$")
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    structured: bool = Field(default=False, description="Emit JSON log lines")
    filename: str | None = Field(default=None, description="Log file (default: stderr)")


class StateConfig(BaseModel):
    """Persisted asset state configuration."""

    enabled: bool = Field(
        default=True,
        description="Persist generated assets (False: every invocation regenerates)",
    )
    dir_name: str = Field(
        default=".clustersmith_state",
        min_length=1,
        description="State directory name, created inside the install directory",
    )


class EngineConfig(BaseModel):
    """Resolver behavior."""

    max_parallel_generate: int | None = Field(
        default=None,
        ge=1,
        description="Upper bound on concurrently running generate steps (None=unbounded)",
    )
    purge_transient: bool = Field(
        default=True,
        description="Purge transient assets once all their dependents are generated",
    )


class InstallerConfig(ConfigBase):
    """Application-level configuration shared by every invocation."""

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    state: StateConfig = Field(default_factory=StateConfig)
    engine: EngineConfig = Field(default_factory=EngineConfig)

    @classmethod
    def default_path(cls) -> Path:
        """Default path for application config."""
        return Path("clustersmith.yaml")
