from __future__ import annotations

from pathlib import Path

import yaml

from bridgedl.config.validator import ConfigError, ToolSettings, validate_settings


def load_yaml_config(path: Path) -> dict[str, object]:
    # Settings-level YAML loader; returns a raw mapping for validation.
    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise ConfigError(f"Cannot read settings file {path}: {exc.strerror or exc}") from exc
    except yaml.YAMLError as exc:
        raise ConfigError(f"Settings file {path} is not valid YAML: {exc}") from exc
    if not isinstance(raw, dict):
        raise ConfigError("Config root must be a mapping")
    return raw


def load_settings(path: Path | None) -> ToolSettings:
    if path is None:
        return ToolSettings()
    return validate_settings(load_yaml_config(path))
