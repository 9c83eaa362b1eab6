from __future__ import annotations

from pathlib import Path

import pytest

from bridgedl.config import ConfigError, load_settings, load_yaml_config, validate_settings


def _write(tmp_path: Path, text: str) -> Path:
    path = tmp_path / "bdl.yml"
    path.write_text(text, encoding="utf-8")
    return path


def test_load_settings_defaults_without_file() -> None:
    settings = load_settings(None)

    assert settings.default_bridge_id == "til_generated"
    assert settings.discovery_modules == []
    assert settings.log_level == "WARNING"
    assert settings.output.format == "json"
    assert settings.output.bridge is False


def test_load_settings_reads_yaml(tmp_path: Path) -> None:
    path = _write(
        tmp_path,
        "default_bridge_id: my-bridge\n"
        "discovery_modules:\n"
        "  - extra_components\n"
        "log_level: DEBUG\n"
        "output:\n"
        "  format: yaml\n"
        "  bridge: true\n",
    )

    settings = load_settings(path)

    assert settings.default_bridge_id == "my-bridge"
    assert settings.discovery_modules == ["extra_components"]
    assert settings.log_level == "DEBUG"
    assert settings.output.format == "yaml"
    assert settings.output.bridge is True


def test_load_yaml_config_rejects_non_mapping(tmp_path: Path) -> None:
    path = _write(tmp_path, "[]\n")

    with pytest.raises(ConfigError, match="Config root must be a mapping"):
        load_yaml_config(path)


def test_load_yaml_config_reports_invalid_yaml(tmp_path: Path) -> None:
    path = _write(tmp_path, "output: [json\n")

    with pytest.raises(ConfigError, match="not valid YAML"):
        load_yaml_config(path)


def test_load_yaml_config_reports_missing_file(tmp_path: Path) -> None:
    with pytest.raises(ConfigError, match="Cannot read settings file"):
        load_yaml_config(tmp_path / "missing.yml")


def test_validate_settings_rejects_unknown_keys() -> None:
    with pytest.raises(ConfigError, match="unexpected"):
        validate_settings({"unexpected": 1})


def test_validate_settings_rejects_invalid_values() -> None:
    with pytest.raises(ConfigError, match="output.format"):
        validate_settings({"output": {"format": "xml"}})
    with pytest.raises(ConfigError):
        validate_settings({"default_bridge_id": ""})
