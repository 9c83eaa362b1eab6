from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from bridgedl.config.bridge import DEFAULT_BRIDGE_IDENTIFIER

# Tool settings map the optional YAML settings file to typed structures.


class ConfigError(ValueError):
    # Raised for an invalid settings file (fail fast).
    pass


class OutputSettings(BaseModel):
    # Default output shape of the generate command; CLI flags override it.
    model_config = ConfigDict(extra="forbid")
    format: Literal["json", "yaml"] = "json"
    bridge: bool = False


class ToolSettings(BaseModel):
    model_config = ConfigDict(extra="forbid")
    default_bridge_id: str = Field(default=DEFAULT_BRIDGE_IDENTIFIER, min_length=1)
    # Extra packages scanned for @component implementations.
    discovery_modules: list[str] = Field(default_factory=list)
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "WARNING"
    output: OutputSettings = Field(default_factory=OutputSettings)


def validate_settings(raw: object) -> ToolSettings:
    if not isinstance(raw, dict):
        raise ConfigError("Config root must be a mapping")
    try:
        return ToolSettings.model_validate(raw)
    except ValidationError as exc:
        problems = "; ".join(
            f"{'.'.join(str(loc) for loc in err['loc'])}: {err['msg']}" for err in exc.errors()
        )
        raise ConfigError(f"Invalid settings: {problems}") from exc
