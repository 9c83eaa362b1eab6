from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class Category(str, Enum):
    CHANNEL = "channel"
    ROUTER = "router"
    TRANSFORMER = "transformer"
    SOURCE = "source"
    TARGET = "target"
    # Reserved; functions are not referenceable from other components.
    FUNCTION = "function"

    def __str__(self) -> str:
        return self.value


# Tie-breaking rank used when ordering components deterministically.
CATEGORY_RANK: dict[Category, int] = {
    Category.CHANNEL: 0,
    Category.SOURCE: 1,
    Category.TRANSFORMER: 2,
    Category.ROUTER: 3,
    Category.TARGET: 4,
    Category.FUNCTION: 5,
}

# Categories whose components are declared as top-level blocks.
BLOCK_CATEGORIES = (
    Category.CHANNEL,
    Category.ROUTER,
    Category.TRANSFORMER,
    Category.SOURCE,
    Category.TARGET,
)


def as_category(name: str) -> Category | None:
    try:
        return Category(name)
    except ValueError:
        return None


@dataclass(frozen=True, slots=True)
class MessagingComponent:
    # Address of a component inside a Bridge.
    category: Category
    identifier: str
    type: str

    def __str__(self) -> str:
        return f"{self.category.value}.{self.type}.{self.identifier}"

    def sort_key(self) -> tuple[int, str]:
        return CATEGORY_RANK[self.category], self.identifier
