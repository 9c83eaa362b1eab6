from .contracts import (
    Addressable,
    ComponentMeta,
    Decodable,
    Translatable,
    component,
    get_component_meta,
    translate,
)
from .registry import (
    REFERENCEABLE_CATEGORIES,
    ComponentRegistry,
    ComponentRegistryError,
    build_registry,
    discover_components,
    load_discovery_modules,
)

__all__ = [
    "Addressable",
    "ComponentMeta",
    "ComponentRegistry",
    "ComponentRegistryError",
    "Decodable",
    "REFERENCEABLE_CATEGORIES",
    "Translatable",
    "build_registry",
    "component",
    "discover_components",
    "get_component_meta",
    "load_discovery_modules",
    "translate",
]
