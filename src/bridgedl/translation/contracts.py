from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Protocol, TypeVar, runtime_checkable

from bridgedl.config.addr import Category
from bridgedl.config.globals import Globals
from bridgedl.lang.spec import Spec

T = TypeVar("T")


@runtime_checkable
class Decodable(Protocol):
    # Exposes the schema a component's configuration body is decoded with.
    def spec(self) -> Spec: ...


@runtime_checkable
class Translatable(Protocol):
    # Produces the manifests of a component from its decoded configuration.
    # Implementations flagged with accepts_globals also receive `glb`.
    def manifests(self, identifier: str, config: Any, event_dst: Any, *args: Any) -> list[dict[str, Any]]: ...


@runtime_checkable
class Addressable(Protocol):
    # Returns the event destination other components use to send events here.
    def address(self, identifier: str, config: Any, event_dst: Any) -> dict[str, Any]: ...


@dataclass(frozen=True, slots=True)
class ComponentMeta:
    category: Category
    type: str
    accepts_globals: bool = False


def component(*, category: Category | str, type: str, accepts_globals: bool = False) -> Callable[[T], T]:
    # Decorator registers a component implementation class under (category, type).

    def _decorate(target: T) -> T:
        meta = ComponentMeta(category=Category(category), type=type, accepts_globals=accepts_globals)
        setattr(target, "__component_meta__", meta)
        return target

    return _decorate


def get_component_meta(target: object) -> ComponentMeta | None:
    meta = getattr(target, "__component_meta__", None)
    if isinstance(meta, ComponentMeta):
        return meta
    return None


def translate(
    impl: object,
    meta: ComponentMeta,
    identifier: str,
    config: Any,
    event_dst: Any,
    glb: Globals | None,
) -> list[dict[str, Any]]:
    # Single call site for manifests(), passing the globals only where declared.
    if not isinstance(impl, Translatable):
        return []
    if meta.accepts_globals:
        return impl.manifests(identifier, config, event_dst, glb or Globals())
    return impl.manifests(identifier, config, event_dst)
