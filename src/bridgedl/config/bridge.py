from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType

from bridgedl.config.addr import BLOCK_CATEGORIES, Category, MessagingComponent
from bridgedl.diagnostics import SourceRange
from bridgedl.lang.syntax.nodes import Body, Traversal

# Value used as Bridge identifier when the description does not declare one.
DEFAULT_BRIDGE_IDENTIFIER = "til_generated"


def _no_components() -> Mapping[str, Component]:
    return MappingProxyType({})


@dataclass(frozen=True, slots=True)
class Component:
    # One top-level component block. `config` excludes the routing attribute.
    category: Category
    type: str
    identifier: str
    config: Body
    range: SourceRange
    to: Traversal | None = None

    def addr(self) -> MessagingComponent:
        return MessagingComponent(self.category, self.identifier, self.type)


@dataclass(frozen=True, slots=True)
class Bridge:
    # Parsed description; read-only once built by the file loader.
    identifier: str | None = None
    channels: Mapping[str, Component] = field(default_factory=_no_components)
    routers: Mapping[str, Component] = field(default_factory=_no_components)
    transformers: Mapping[str, Component] = field(default_factory=_no_components)
    sources: Mapping[str, Component] = field(default_factory=_no_components)
    targets: Mapping[str, Component] = field(default_factory=_no_components)
    # Body of the `bridge` block, holding the Bridge-wide settings.
    globals: Body | None = None
    path: Path | None = None
    filename: str = ""
    # Text the Bridge was parsed from, for rendering diagnostics.
    source: str = field(default="", repr=False)

    def collection(self, category: Category) -> Mapping[str, Component]:
        collections = {
            Category.CHANNEL: self.channels,
            Category.ROUTER: self.routers,
            Category.TRANSFORMER: self.transformers,
            Category.SOURCE: self.sources,
            Category.TARGET: self.targets,
        }
        if category not in collections:
            raise KeyError(f"No component collection for category {category.value}")
        return collections[category]

    def components(self) -> Iterator[Component]:
        for category in BLOCK_CATEGORIES:
            yield from self.collection(category).values()

    def base_dir(self) -> Path:
        return self.path.parent if self.path is not None else Path.cwd()
