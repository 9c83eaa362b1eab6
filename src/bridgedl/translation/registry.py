from __future__ import annotations

import importlib
import logging
import pkgutil
from collections.abc import Iterable
from types import ModuleType

from bridgedl.config.addr import Category
from bridgedl.translation.contracts import ComponentMeta, get_component_meta

logger = logging.getLogger(__name__)

# Built-in package scanned for component implementations.
BUILTIN_COMPONENTS_PACKAGE = "bridgedl.components"

# Categories whose components can appear as `category.identifier` references.
REFERENCEABLE_CATEGORIES: frozenset[str] = frozenset(
    category.value
    for category in (Category.CHANNEL, Category.ROUTER, Category.TRANSFORMER, Category.SOURCE, Category.TARGET)
)


class ComponentRegistryError(ValueError):
    # Raised for duplicate registrations or invalid component declarations.
    pass


class ComponentRegistry:
    # Registry of stateless component implementations keyed by (category, type).
    def __init__(self) -> None:
        self._impls: dict[tuple[Category, str], object] = {}
        self._meta: dict[tuple[Category, str], ComponentMeta] = {}

    def register(self, meta: ComponentMeta, impl: object) -> None:
        key = (meta.category, meta.type)
        if key in self._impls:
            raise ComponentRegistryError(f"Duplicate component registration: {meta.category.value}/{meta.type}")
        self._impls[key] = impl
        self._meta[key] = meta

    def get(self, category: Category, cmp_type: str) -> object | None:
        return self._impls.get((category, cmp_type))

    def get_meta(self, category: Category, cmp_type: str) -> ComponentMeta | None:
        return self._meta.get((category, cmp_type))

    def keys(self) -> list[tuple[Category, str]]:
        return sorted(self._impls, key=lambda key: (key[0].value, key[1]))

    def referenceable_categories(self) -> frozenset[str]:
        return REFERENCEABLE_CATEGORIES


def discover_components(modules: Iterable[ModuleType]) -> list[tuple[ComponentMeta, type]]:
    # Discover classes declared via @component(category=..., type=...).
    discovered: list[tuple[ComponentMeta, type]] = []
    seen: dict[tuple[Category, str], type] = {}
    for module in modules:
        for value in module.__dict__.values():
            meta = get_component_meta(value)
            if meta is None:
                continue
            if not isinstance(value, type):
                raise ComponentRegistryError(f"Component {meta.category.value}/{meta.type} must be a class")
            key = (meta.category, meta.type)
            if key in seen:
                if seen[key] is value:
                    # Same class re-exported through another module is not a conflict.
                    continue
                raise ComponentRegistryError(f"Duplicate component discovered: {meta.category.value}/{meta.type}")
            seen[key] = value
            discovered.append((meta, value))
    return discovered


def load_discovery_modules(module_names: Iterable[str]) -> list[ModuleType]:
    # Import the named modules, expanding packages to all their submodules.
    modules: list[ModuleType] = []
    seen: set[str] = set()

    def _append(module: ModuleType) -> None:
        if module.__name__ in seen:
            return
        seen.add(module.__name__)
        modules.append(module)

    for module_name in module_names:
        try:
            root = importlib.import_module(module_name)
        except ModuleNotFoundError as exc:
            raise ComponentRegistryError(f"Cannot import discovery module {module_name}: {exc}") from exc
        _append(root)
        module_path = getattr(root, "__path__", None)
        if module_path is None:
            continue
        for info in pkgutil.walk_packages(module_path, prefix=f"{root.__name__}."):
            _append(importlib.import_module(info.name))
    return modules


def build_registry(extra_modules: Iterable[str] = ()) -> ComponentRegistry:
    registry = ComponentRegistry()
    modules = load_discovery_modules([BUILTIN_COMPONENTS_PACKAGE, *extra_modules])
    for meta, cls in discover_components(modules):
        registry.register(meta, cls())
    logger.debug("Registered %d component implementation(s)", len(registry.keys()))
    return registry
