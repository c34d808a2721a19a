"""Compiler configuration.

Configuration file location priority:
1. Explicit path passed to CompilerConfigLoader
2. ZOD_SCHEMA_CONFIG environment variable
3. Standard location: ~/.zod-schema/config.yml
4. Built-in defaults (if no config file found)

Example config file:
```yaml
locale: nl
fallback_locale: en
message_paths:
  - lang/validation

use_app_types: true
app_prefix: App
app_types_import_path: "@/types/generated"

output:
  format: module
  path: resources/js/types/schemas.ts

custom_handlers:
  - my_project.handlers:MoneyHandler
```
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, Field, field_validator

from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "ZOD_SCHEMA_CONFIG"


class OutputConfig(BaseModel):
    """Where and how TypeScript output is written."""

    format: Literal["module", "namespace"] = Field(
        default="module",
        description="module: top-level exports; namespace: exports wrapped in a TS namespace",
    )
    namespace: str = Field(default="Schemas", description="Namespace name for namespace format")
    path: str | None = Field(
        default=None,
        description="Output file (single-file mode); stdout when unset",
    )
    separate_files: bool = Field(
        default=False, description="Write one file per schema into `directory`"
    )
    directory: str | None = Field(
        default=None, description="Output directory for separate-file mode"
    )

    @field_validator("namespace")
    @classmethod
    def validate_namespace(cls, v: str) -> str:
        """Namespace must be a valid TypeScript identifier."""
        if not v.isidentifier():
            raise ValueError(f"Namespace must be a valid identifier, got {v!r}")
        return v


class CompilerConfig(BaseModel):
    """Top-level compiler configuration."""

    locale: str = Field(default="en", description="Locale of the validation messages")
    fallback_locale: str | None = Field(
        default="en", description="Locale consulted for keys the primary locale lacks"
    )
    message_paths: list[str] = Field(
        default_factory=list,
        description="Extra message files or directories of <locale>.yml files",
    )
    app_prefix: str = Field(default="App", description="Name of the imported App types object")
    use_app_types: bool = Field(
        default=False, description="Annotate schemas with z.ZodType<App.Class>"
    )
    app_types_import_path: str = Field(
        default=".", description="Module the App types are imported from"
    )
    output: OutputConfig = Field(default_factory=OutputConfig)
    custom_handlers: list[str] = Field(
        default_factory=list,
        description="Type handler classes to register, as module:Class import paths",
    )


class CompilerConfigLoader:
    """Loader for compiler configuration from a YAML file.

    Usage:
        ```python
        loader = CompilerConfigLoader()
        config = loader.load_config()
        ```

    The loaded config is cached; call load_config() once per process and
    pass the result around.
    """

    def __init__(self, config_path: str | Path | None = None):
        """Initialize config loader with optional explicit path.

        Args:
            config_path: Explicit path to config file (optional).
                If not provided, uses environment variable or standard location.
        """
        self._config: CompilerConfig | None = None
        self._explicit_path = Path(config_path) if config_path else None

    def get_config_path(self) -> Path | None:
        """Determine config file path using priority order.

        Returns:
            Path to config file, or None if file doesn't exist
        """
        if self._explicit_path:
            if self._explicit_path.exists():
                return self._explicit_path
            logger.warning(f"Explicit compiler config path does not exist: {self._explicit_path}")
            return None

        env_path_str = os.getenv(CONFIG_ENV_VAR)
        if env_path_str:
            env_path = Path(env_path_str).expanduser()
            if env_path.exists():
                return env_path
            logger.warning(f"{CONFIG_ENV_VAR} path does not exist: {env_path}")
            return None

        standard_path = Path.home() / ".zod-schema" / "config.yml"
        if standard_path.exists():
            return standard_path

        return None

    def load_config(self) -> CompilerConfig:
        """Load and validate compiler configuration.

        Returns:
            Validated CompilerConfig (defaults if no config file found)

        Raises:
            ConfigurationError: If the file is not valid YAML or fails validation
        """
        if self._config is not None:
            return self._config

        config_path = self.get_config_path()
        if config_path is None:
            logger.info("No compiler config file found, using defaults")
            self._config = CompilerConfig()
            return self._config

        logger.info(f"Loading compiler config from: {config_path}")

        try:
            with open(config_path, encoding="utf-8") as f:
                raw_config = yaml.safe_load(f) or {}

            if not isinstance(raw_config, dict):
                raise ValueError("Config file must contain a YAML dictionary")

            config = CompilerConfig(**raw_config)
        except (yaml.YAMLError, ValueError) as e:
            raise ConfigurationError(str(config_path), str(e)) from e

        logger.info(
            f"Loaded compiler config: locale={config.locale}, "
            f"format={config.output.format}, {len(config.custom_handlers)} custom handlers"
        )
        self._config = config
        return config


__all__ = ["CompilerConfig", "OutputConfig", "CompilerConfigLoader", "CONFIG_ENV_VAR"]
