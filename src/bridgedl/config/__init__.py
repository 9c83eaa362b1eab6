from .addr import Category, MessagingComponent
from .bridge import DEFAULT_BRIDGE_IDENTIFIER, Bridge, Component
from .file import load_bridge, parse_bridge
from .loader import load_settings, load_yaml_config
from .validator import ConfigError, ToolSettings, validate_settings

__all__ = [
    "Bridge",
    "Category",
    "Component",
    "ConfigError",
    "DEFAULT_BRIDGE_IDENTIFIER",
    "MessagingComponent",
    "ToolSettings",
    "load_bridge",
    "load_settings",
    "load_yaml_config",
    "parse_bridge",
    "validate_settings",
]
