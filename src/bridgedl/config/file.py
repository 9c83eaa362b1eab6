from __future__ import annotations

import logging
from pathlib import Path
from types import MappingProxyType

from bridgedl.config.addr import BLOCK_CATEGORIES, Category, as_category
from bridgedl.config.bridge import Bridge, Component
from bridgedl.diagnostics import Diagnostic, Diagnostics, Severity, SourceRange
from bridgedl.lang.syntax.nodes import Block, Body, Traversal, as_traversal
from bridgedl.lang.syntax.parser import parse_config

logger = logging.getLogger(__name__)

_BRIDGE_BLOCK = "bridge"

# Attribute which carries the event destination of a component, per category.
_ROUTING_ATTRIBUTES: dict[Category, str] = {
    Category.SOURCE: "to",
    Category.TRANSFORMER: "to",
    Category.TARGET: "reply_to",
}
_REQUIRED_ROUTING = {Category.SOURCE, Category.TRANSFORMER}


def load_bridge(path: Path) -> tuple[Bridge | None, Diagnostics]:
    # Read and parse a Bridge description file; I/O errors yield one diagnostic.
    try:
        src = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        diags = Diagnostics()
        diags.add_error("Failed to read file", f"The file {str(path)!r} could not be read: {exc}.")
        return None, diags
    return parse_bridge(src, str(path), path=path)


def parse_bridge(src: str, filename: str, *, path: Path | None = None) -> tuple[Bridge | None, Diagnostics]:
    body, diags = parse_config(src, filename)
    if diags.has_errors():
        return None, diags

    for name, attr in body.attributes.items():
        diags.append(
            Diagnostic(
                Severity.ERROR,
                "Unsupported argument",
                f'An argument named "{name}" is not expected here.',
                attr.name_range,
            )
        )

    identifier: str | None = None
    glb: Body | None = None
    collections: dict[Category, dict[str, Component]] = {category: {} for category in BLOCK_CATEGORIES}
    bridge_block: Block | None = None
    for block in body.blocks:
        if block.type == _BRIDGE_BLOCK:
            if bridge_block is not None:
                diags.append(
                    Diagnostic(
                        Severity.ERROR,
                        "Duplicate bridge block",
                        f"Only one bridge block is allowed. Previous definition was at {bridge_block.range}.",
                        block.type_range,
                    )
                )
                continue
            bridge_block = block
            if _check_bridge_block(block, diags):
                identifier = block.labels[0] if block.labels else None
                glb = block.body
            continue

        category = as_category(block.type)
        if category is None or category not in BLOCK_CATEGORIES:
            diags.append(
                Diagnostic(
                    Severity.ERROR,
                    "Unsupported block type",
                    f'Blocks of type "{block.type}" are not expected here.',
                    block.type_range,
                )
            )
            continue
        component = _load_component(category, block, diags)
        if component is None:
            continue

        collection = collections[category]
        previous = collection.get(component.identifier)
        if previous is not None:
            diags.append(
                Diagnostic(
                    Severity.ERROR,
                    f"Duplicate {category.value} block",
                    f'A {category.value} named "{component.identifier}" was already declared at {previous.range}.',
                    block.label_ranges[1] if len(block.label_ranges) > 1 else block.type_range,
                )
            )
            continue
        collection[component.identifier] = component

    bridge = Bridge(
        identifier=identifier,
        channels=MappingProxyType(collections[Category.CHANNEL]),
        routers=MappingProxyType(collections[Category.ROUTER]),
        transformers=MappingProxyType(collections[Category.TRANSFORMER]),
        sources=MappingProxyType(collections[Category.SOURCE]),
        targets=MappingProxyType(collections[Category.TARGET]),
        globals=glb,
        path=path,
        filename=filename,
        source=src,
    )
    logger.debug(
        "Loaded bridge %s: %d component(s), %d diagnostic(s)",
        bridge.identifier or "<unnamed>",
        sum(1 for _ in bridge.components()),
        len(diags),
    )
    return bridge, diags


def _check_bridge_block(block: Block, diags: Diagnostics) -> bool:
    if len(block.labels) > 1:
        diags.append(
            Diagnostic(
                Severity.ERROR,
                "Extraneous label",
                'A "bridge" block accepts at most one label, its identifier.',
                block.label_ranges[1] if len(block.label_ranges) > 1 else block.type_range,
            )
        )
        return False
    return True


def _load_component(category: Category, block: Block, diags: Diagnostics) -> Component | None:
    if len(block.labels) != 2:
        summary = "Missing label" if len(block.labels) < 2 else "Extraneous label"
        diags.append(
            Diagnostic(
                Severity.ERROR,
                summary,
                f'All "{category.value}" blocks must have 2 labels (type, identifier).',
                block.type_range,
            )
        )
        return None

    cmp_type, identifier = block.labels
    config = block.body
    to: Traversal | None = None

    routing_attr = _ROUTING_ATTRIBUTES.get(category)
    if routing_attr is not None:
        to = _routing_traversal(category, routing_attr, block.body, block.range, diags)
        config = block.body.without_attributes(routing_attr)

    return Component(
        category=category,
        type=cmp_type,
        identifier=identifier,
        config=config,
        range=block.range,
        to=to,
    )


def _routing_traversal(
    category: Category,
    attr_name: str,
    body: Body,
    block_range: SourceRange,
    diags: Diagnostics,
) -> Traversal | None:
    attr = body.attributes.get(attr_name)
    if attr is None:
        if category in _REQUIRED_ROUTING:
            diags.append(
                Diagnostic(
                    Severity.ERROR,
                    "Missing required argument",
                    f'The argument "{attr_name}" is required, but no definition was found.',
                    block_range,
                )
            )
        return None

    traversal = as_traversal(attr.expr)
    if traversal is None:
        diags.append(
            Diagnostic(
                Severity.ERROR,
                "Invalid reference",
                f'The "{attr_name}" attribute must be a reference to a component, such as target.my_target.',
                attr.expr.range,
            )
        )
    return traversal
