from __future__ import annotations

from dataclasses import dataclass

from bridgedl.config.addr import MessagingComponent
from bridgedl.config.bridge import Component
from bridgedl.lang.spec import Spec
from bridgedl.lang.syntax.nodes import Traversal
from bridgedl.translation import Addressable, ComponentMeta, Decodable


@dataclass(frozen=True, slots=True, eq=False)
class ComponentVertex:
    # Graph vertex owning one component; compared by identity.
    component: Component
    impl: object | None = None
    meta: ComponentMeta | None = None

    @property
    def addr(self) -> MessagingComponent:
        return self.component.addr()

    def spec(self) -> Spec | None:
        if isinstance(self.impl, Decodable):
            return self.impl.spec()
        return None

    def references(self) -> list[Traversal]:
        # Free variables of the configuration body, as seen through its schema.
        spec = self.spec()
        if spec is None:
            return []
        return spec.variables(self.component.config)

    def is_addressable(self) -> bool:
        return isinstance(self.impl, Addressable)

    def accepts_globals(self) -> bool:
        return self.meta is not None and self.meta.accepts_globals

    def sort_key(self) -> tuple[int, str]:
        return self.addr.sort_key()

    def label(self) -> str:
        return str(self.addr)

    def __repr__(self) -> str:
        return f"ComponentVertex({self.addr})"
