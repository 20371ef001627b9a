# src/allocprep/dataloader/config_loader.py
from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from allocprep.errors import ConfigError
from allocprep.rules.priorities import PRESETS
from allocprep.schemas.models import AppConfig


class ConfigLoader:
    """
    @brief
    Reads and validates the runtime configuration file.

    @details
    YAML on disk → mapping → pydantic `AppConfig`. Relative input paths are
    resolved against the directory holding the config file, so a config
    can travel together with its sheets. Every failure surfaces as a
    structured `ConfigError`.
    """

    SUFFIXES = {".yaml", ".yml"}

    def load(self, path: Path) -> AppConfig:
        """
        @brief
        Load configuration from a YAML file.

        @params
            path : Path
                Location of config.yaml / config.yml.

        @returns
            Validated AppConfig with defaults applied and input paths resolved.

        @raises
            ConfigError
                Missing or unreadable file, bad YAML, wrong shape, schema
                violation, or unknown priority preset.
        """
        # (1) Parse YAML into a plain mapping
        data = self._read_yaml(path)

        # (2) Schema validation and cross-field checks
        cfg = self._validate(data)

        # (3) Anchor relative input paths at the config location
        return self._resolve_inputs(cfg, path.parent)

    def _read_yaml(self, path: Path) -> dict[str, Any]:
        if not isinstance(path, Path):
            raise ConfigError(
                message=f"Invalid path type: expected pathlib.Path, got {type(path).__name__}",
                source="ConfigLoader._read_yaml",
                suggested_action="Pass a pathlib.Path pointing to config.yaml.",
            )
        if not path.exists():
            raise ConfigError(
                message=f"Configuration file not found: {path}",
                source="ConfigLoader._read_yaml",
                suggested_action="Check the --config path.",
            )
        if path.suffix.lower() not in self.SUFFIXES:
            raise ConfigError(
                message=f"Invalid configuration file extension: {path.suffix}",
                source="ConfigLoader._read_yaml",
                suggested_action="Use a .yaml or .yml file.",
            )

        try:
            with path.open("r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(
                message=f"YAML parsing failed: {e}",
                source="ConfigLoader._read_yaml",
                suggested_action="Fix YAML syntax or indentation.",
            ) from e
        except OSError as e:
            raise ConfigError(
                message=f"Unable to read configuration file: {e}",
                source="ConfigLoader._read_yaml",
                suggested_action="Check file permissions.",
            ) from e

        if data is None:
            raise ConfigError(
                message="Configuration file is empty.",
                source="ConfigLoader._read_yaml",
                suggested_action="Add at least an 'inputs' or 'output_dir' section.",
            )
        if not isinstance(data, Mapping):
            raise ConfigError(
                message="Configuration root must be a mapping (key: value pairs).",
                source="ConfigLoader._read_yaml",
            )
        return dict(data)

    def _validate(self, data: dict[str, Any]) -> AppConfig:
        try:
            cfg = AppConfig(**data)
        except ValidationError as e:
            raise ConfigError(
                message=f"Invalid configuration structure: {e}",
                source="ConfigLoader._validate",
                suggested_action=(
                    "Check field names, types and bounds. Unknown keys are rejected."
                ),
            ) from e

        if cfg.priorities_preset is not None and cfg.priorities_preset not in PRESETS:
            raise ConfigError(
                message=f"Unknown priorities_preset: {cfg.priorities_preset!r}",
                source="ConfigLoader._validate",
                suggested_action=f"Use one of: {', '.join(PRESETS)}",
            )
        return cfg

    def _resolve_inputs(self, cfg: AppConfig, base: Path) -> AppConfig:
        resolved: dict[str, str | None] = {}
        for name, value in cfg.inputs.model_dump().items():
            if value is not None and not Path(value).is_absolute():
                value = str(base / value)
            resolved[name] = value
        return cfg.model_copy(update={"inputs": cfg.inputs.model_copy(update=resolved)})


__all__ = ["ConfigLoader"]
