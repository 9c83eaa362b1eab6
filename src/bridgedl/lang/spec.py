from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field

from bridgedl.diagnostics import Diagnostic, Diagnostics, Severity, SourceRange
from bridgedl.lang.eval import EvalContext
from bridgedl.lang.syntax.nodes import Block, Body, Traversal
from bridgedl.lang.types import ConversionError, Type, convert, is_known

# Configuration schemas. A spec describes how a body is decoded into a plain
# value: attributes, nested blocks and block labels, optionally validated.

Validator = Callable[[object], Diagnostics]


class Spec:
    def decode(self, body: Body, ctx: EvalContext, labels: tuple[str, ...] = ()) -> tuple[object, Diagnostics]:
        raise NotImplementedError

    def variables(self, body: Body) -> list[Traversal]:
        return []

    def attribute_names(self) -> set[str]:
        return set()

    def block_types(self) -> set[str]:
        return set()

    def label_names(self) -> list[str]:
        return []


@dataclass(frozen=True, slots=True)
class AttrSpec(Spec):
    name: str
    type: Type
    required: bool = False

    def decode(self, body: Body, ctx: EvalContext, labels: tuple[str, ...] = ()) -> tuple[object, Diagnostics]:
        diags = Diagnostics()
        attr = body.attributes.get(self.name)
        if attr is None:
            if self.required:
                diags.append(
                    Diagnostic(
                        Severity.ERROR,
                        "Missing required argument",
                        f'The argument "{self.name}" is required, but no definition was found.',
                        body.range,
                    )
                )
            return None, diags

        val, val_diags = attr.expr.value(ctx)
        diags.extend(val_diags)
        if val_diags.has_errors():
            return None, diags
        try:
            return convert(val, self.type), diags
        except ConversionError as exc:
            diags.append(
                Diagnostic(
                    Severity.ERROR,
                    "Incorrect attribute value type",
                    f'Inappropriate value for attribute "{self.name}": {exc}.',
                    attr.expr.range,
                    expression=attr.expr,
                )
            )
            return None, diags

    def variables(self, body: Body) -> list[Traversal]:
        attr = body.attributes.get(self.name)
        return attr.expr.variables() if attr is not None else []

    def attribute_names(self) -> set[str]:
        return {self.name}


@dataclass(frozen=True, slots=True)
class BlockLabelSpec(Spec):
    index: int
    name: str

    def decode(self, body: Body, ctx: EvalContext, labels: tuple[str, ...] = ()) -> tuple[object, Diagnostics]:
        if self.index < len(labels):
            return labels[self.index], Diagnostics()
        return None, Diagnostics()

    def label_names(self) -> list[str]:
        return [self.name]


@dataclass(frozen=True, slots=True)
class ObjectSpec(Spec):
    # Decodes to a dict with one entry per child spec; rejects unexpected content.
    children: Mapping[str, Spec]

    def decode(self, body: Body, ctx: EvalContext, labels: tuple[str, ...] = ()) -> tuple[object, Diagnostics]:
        diags = _check_content(body, self.attribute_names(), self.block_types())
        values: dict[str, object] = {}
        for key, child in self.children.items():
            val, child_diags = child.decode(body, ctx, labels)
            diags.extend(child_diags)
            values[key] = val
        return values, diags

    def variables(self, body: Body) -> list[Traversal]:
        return [var for child in self.children.values() for var in child.variables(body)]

    def attribute_names(self) -> set[str]:
        return {name for child in self.children.values() for name in child.attribute_names()}

    def block_types(self) -> set[str]:
        return {name for child in self.children.values() for name in child.block_types()}

    def label_names(self) -> list[str]:
        label_specs = sorted(
            (child for child in self.children.values() if isinstance(child, BlockLabelSpec)),
            key=lambda spec: spec.index,
        )
        return [spec.name for spec in label_specs]


@dataclass(frozen=True, slots=True)
class BlockSpec(Spec):
    # A single nested block; decodes to the nested value or None when absent.
    type_name: str
    nested: Spec
    required: bool = False

    def decode(self, body: Body, ctx: EvalContext, labels: tuple[str, ...] = ()) -> tuple[object, Diagnostics]:
        diags = Diagnostics()
        blocks = body.blocks_of_type(self.type_name)
        if len(blocks) > 1:
            diags.append(
                Diagnostic(
                    Severity.ERROR,
                    f'Duplicate {self.type_name} block',
                    f'Only one block of type "{self.type_name}" is allowed. Previous definition was at {blocks[0].range}.',
                    blocks[1].type_range,
                )
            )
            return None, diags
        if not blocks:
            if self.required:
                diags.append(
                    Diagnostic(
                        Severity.ERROR,
                        f"Missing {self.type_name} block",
                        f'A block of type "{self.type_name}" is required here.',
                        body.range,
                    )
                )
            return None, diags
        return _decode_block(blocks[0], self.nested, ctx)

    def variables(self, body: Body) -> list[Traversal]:
        return [var for block in body.blocks_of_type(self.type_name) for var in self.nested.variables(block.body)]

    def block_types(self) -> set[str]:
        return {self.type_name}


@dataclass(frozen=True, slots=True)
class BlockListSpec(Spec):
    # Repeated nested blocks; decodes to a list in declaration order.
    type_name: str
    nested: Spec
    min_items: int = 0
    max_items: int | None = None

    def decode(self, body: Body, ctx: EvalContext, labels: tuple[str, ...] = ()) -> tuple[object, Diagnostics]:
        diags = Diagnostics()
        blocks = body.blocks_of_type(self.type_name)
        values: list[object] = []
        for block in blocks:
            val, block_diags = _decode_block(block, self.nested, ctx)
            diags.extend(block_diags)
            values.append(val)

        if len(blocks) < self.min_items:
            diags.append(
                Diagnostic(
                    Severity.ERROR,
                    f"Insufficient {self.type_name} blocks",
                    f'At least {self.min_items} "{self.type_name}" blocks are required.',
                    body.range,
                )
            )
        if self.max_items is not None and len(blocks) > self.max_items:
            diags.append(
                Diagnostic(
                    Severity.ERROR,
                    f"Too many {self.type_name} blocks",
                    f'No more than {self.max_items} "{self.type_name}" blocks are allowed.',
                    blocks[self.max_items].type_range,
                )
            )
        return values, diags

    def variables(self, body: Body) -> list[Traversal]:
        return [var for block in body.blocks_of_type(self.type_name) for var in self.nested.variables(block.body)]

    def block_types(self) -> set[str]:
        return {self.type_name}


@dataclass(frozen=True, slots=True)
class ValidateSpec(Spec):
    # Runs a semantic validator on the wrapped value once it is fully known.
    wrapped: Spec
    func: Validator = field(compare=False)

    def decode(self, body: Body, ctx: EvalContext, labels: tuple[str, ...] = ()) -> tuple[object, Diagnostics]:
        val, diags = self.wrapped.decode(body, ctx, labels)
        if diags.has_errors() or val is None or not is_known(val):
            return val, diags
        subject = self._subject(body)
        diags.extend(diag.with_subject(subject) for diag in self.func(val))
        return val, diags

    def _subject(self, body: Body) -> SourceRange | None:
        if isinstance(self.wrapped, AttrSpec):
            attr = body.attributes.get(self.wrapped.name)
            if attr is not None:
                return attr.expr.range
        return body.range

    def variables(self, body: Body) -> list[Traversal]:
        return self.wrapped.variables(body)

    def attribute_names(self) -> set[str]:
        return self.wrapped.attribute_names()

    def block_types(self) -> set[str]:
        return self.wrapped.block_types()


def _decode_block(block: Block, nested: Spec, ctx: EvalContext) -> tuple[object, Diagnostics]:
    diags = Diagnostics()
    expected = nested.label_names()
    if len(block.labels) < len(expected):
        missing = expected[len(block.labels)]
        diags.append(
            Diagnostic(
                Severity.ERROR,
                f"Missing {missing} label",
                f'All "{block.type}" blocks must have {len(expected)} label(s) ({", ".join(expected)}).',
                block.type_range,
            )
        )
        return None, diags
    if len(block.labels) > len(expected):
        extra = block.label_ranges[len(expected)] if len(block.label_ranges) > len(expected) else block.type_range
        diags.append(
            Diagnostic(
                Severity.ERROR,
                "Extraneous label",
                f'Blocks of type "{block.type}" expect {len(expected)} label(s).',
                extra,
            )
        )
        return None, diags
    val, nested_diags = nested.decode(block.body, ctx, block.labels)
    diags.extend(nested_diags)
    return val, diags


def _check_content(body: Body, attributes: set[str], blocks: set[str]) -> Diagnostics:
    diags = Diagnostics()
    for name, attr in body.attributes.items():
        if name not in attributes:
            hint = " Did you mean to define a block?" if name in blocks else ""
            diags.append(
                Diagnostic(
                    Severity.ERROR,
                    "Unsupported argument",
                    f'An argument named "{name}" is not expected here.{hint}',
                    attr.name_range,
                )
            )
    for block in body.blocks:
        if block.type not in blocks:
            hint = " Did you mean to define an argument?" if block.type in attributes else ""
            diags.append(
                Diagnostic(
                    Severity.ERROR,
                    "Unsupported block type",
                    f'Blocks of type "{block.type}" are not expected here.{hint}',
                    block.type_range,
                )
            )
    return diags
