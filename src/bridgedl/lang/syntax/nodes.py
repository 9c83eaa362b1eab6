from __future__ import annotations

from dataclasses import dataclass, field

from bridgedl.diagnostics import Diagnostic, Diagnostics, Severity, SourceRange
from bridgedl.lang.eval import EvalContext, FunctionError
from bridgedl.lang.types import STRING, ConversionError, Unknown, attribute_of, convert, index_of, is_known

# Syntax tree of the block language. Expressions evaluate against an
# EvalContext and always return (value, diagnostics).


@dataclass(frozen=True, slots=True)
class AttrStep:
    name: str
    range: SourceRange


@dataclass(frozen=True, slots=True)
class IndexStep:
    key: object
    range: SourceRange


TraversalStep = AttrStep | IndexStep


@dataclass(frozen=True, slots=True)
class Traversal:
    # Absolute traversal such as `target.my_sns` or `secret.creds`.
    root_name: str
    steps: tuple[TraversalStep, ...]
    range: SourceRange

    def __str__(self) -> str:
        out = self.root_name
        for step in self.steps:
            if isinstance(step, AttrStep):
                out += f".{step.name}"
            else:
                out += f"[{step.key!r}]"
        return out

    def traverse_abs(self, ctx: EvalContext) -> tuple[object, Diagnostics]:
        diags = Diagnostics()
        if self.root_name not in ctx.variables:
            diags.append(
                Diagnostic(
                    Severity.ERROR,
                    "Unknown variable",
                    f'There is no variable named "{self.root_name}".',
                    self.range,
                    expression=self,
                )
            )
            return Unknown(), diags
        return traverse_rel(ctx.variables[self.root_name], self.steps, self)


def traverse_rel(value: object, steps: tuple[TraversalStep, ...], expression: object) -> tuple[object, Diagnostics]:
    diags = Diagnostics()
    current = value
    for step in steps:
        try:
            if isinstance(step, AttrStep):
                current = attribute_of(current, step.name)
            else:
                current = index_of(current, step.key)
        except ConversionError as exc:
            summary = "Unsupported attribute" if isinstance(step, AttrStep) else "Invalid index"
            diags.append(Diagnostic(Severity.ERROR, summary, str(exc), step.range, expression=expression))
            return Unknown(), diags
    return current, diags


class Expression:
    range: SourceRange

    def value(self, ctx: EvalContext) -> tuple[object, Diagnostics]:
        raise NotImplementedError

    def variables(self) -> list[Traversal]:
        return []


@dataclass(frozen=True, slots=True)
class LiteralExpr(Expression):
    val: object
    range: SourceRange

    def value(self, ctx: EvalContext) -> tuple[object, Diagnostics]:
        return self.val, Diagnostics()


@dataclass(frozen=True, slots=True)
class TemplateExpr(Expression):
    parts: tuple[Expression, ...]
    range: SourceRange

    def value(self, ctx: EvalContext) -> tuple[object, Diagnostics]:
        diags = Diagnostics()
        # "${expr}" alone yields the wrapped value unchanged.
        if len(self.parts) == 1 and not isinstance(self.parts[0], LiteralExpr):
            return self.parts[0].value(ctx)

        pieces: list[str] = []
        unknown = False
        for part in self.parts:
            val, part_diags = part.value(ctx)
            diags.extend(part_diags)
            if isinstance(val, Unknown):
                unknown = True
                continue
            if val is None:
                diags.append(
                    Diagnostic(
                        Severity.ERROR,
                        "Invalid template interpolation value",
                        "The expression result is null. Cannot include a null value in a string template.",
                        part.range,
                        expression=part,
                    )
                )
                unknown = True
                continue
            try:
                pieces.append(convert(val, STRING))  # type: ignore[arg-type]
            except ConversionError:
                diags.append(
                    Diagnostic(
                        Severity.ERROR,
                        "Invalid template interpolation value",
                        "Cannot include the given value in a string template: string required.",
                        part.range,
                        expression=part,
                    )
                )
                unknown = True
        if unknown:
            return Unknown(STRING), diags
        return "".join(pieces), diags

    def variables(self) -> list[Traversal]:
        return [var for part in self.parts for var in part.variables()]


@dataclass(frozen=True, slots=True)
class TupleExpr(Expression):
    items: tuple[Expression, ...]
    range: SourceRange

    def value(self, ctx: EvalContext) -> tuple[object, Diagnostics]:
        diags = Diagnostics()
        values: list[object] = []
        for item in self.items:
            val, item_diags = item.value(ctx)
            diags.extend(item_diags)
            values.append(val)
        return values, diags

    def variables(self) -> list[Traversal]:
        return [var for item in self.items for var in item.variables()]


@dataclass(frozen=True, slots=True)
class ObjectItem:
    key: Expression
    val: Expression


@dataclass(frozen=True, slots=True)
class ObjectExpr(Expression):
    items: tuple[ObjectItem, ...]
    range: SourceRange

    def value(self, ctx: EvalContext) -> tuple[object, Diagnostics]:
        diags = Diagnostics()
        values: dict[str, object] = {}
        for item in self.items:
            key, key_diags = item.key.value(ctx)
            diags.extend(key_diags)
            val, val_diags = item.val.value(ctx)
            diags.extend(val_diags)
            if isinstance(key, Unknown):
                return Unknown(), diags
            try:
                str_key = convert(key, STRING)
            except ConversionError:
                str_key = None
            if not isinstance(str_key, str):
                diags.append(
                    Diagnostic(
                        Severity.ERROR,
                        "Incorrect key type",
                        "Can't use this value as a key: string required.",
                        item.key.range,
                        expression=item.key,
                    )
                )
                continue
            values[str_key] = val
        return values, diags

    def variables(self) -> list[Traversal]:
        out: list[Traversal] = []
        for item in self.items:
            out.extend(item.key.variables())
            out.extend(item.val.variables())
        return out


@dataclass(frozen=True, slots=True)
class ScopeTraversalExpr(Expression):
    traversal: Traversal
    range: SourceRange

    def value(self, ctx: EvalContext) -> tuple[object, Diagnostics]:
        return self.traversal.traverse_abs(ctx)

    def variables(self) -> list[Traversal]:
        return [self.traversal]


@dataclass(frozen=True, slots=True)
class RelativeTraversalExpr(Expression):
    source: Expression
    steps: tuple[TraversalStep, ...]
    range: SourceRange

    def value(self, ctx: EvalContext) -> tuple[object, Diagnostics]:
        src, diags = self.source.value(ctx)
        val, step_diags = traverse_rel(src, self.steps, self)
        diags.extend(step_diags)
        return val, diags

    def variables(self) -> list[Traversal]:
        return self.source.variables()


@dataclass(frozen=True, slots=True)
class FunctionCallExpr(Expression):
    name: str
    args: tuple[Expression, ...]
    range: SourceRange
    name_range: SourceRange

    def value(self, ctx: EvalContext) -> tuple[object, Diagnostics]:
        diags = Diagnostics()
        func = ctx.functions.get(self.name)
        if func is None:
            diags.append(
                Diagnostic(
                    Severity.ERROR,
                    "Call to unknown function",
                    f'There is no function named "{self.name}".',
                    self.name_range,
                    expression=self,
                )
            )
            return Unknown(), diags

        args: list[object] = []
        for arg in self.args:
            val, arg_diags = arg.value(ctx)
            diags.extend(arg_diags)
            args.append(val)
        if diags.has_errors() or not all(is_known(arg) for arg in args):
            return Unknown(), diags

        try:
            return func.call(args), diags
        except (FunctionError, ConversionError) as exc:
            diags.append(
                Diagnostic(
                    Severity.ERROR,
                    "Error in function call",
                    f'Call to function "{self.name}" failed: {exc}',
                    self.range,
                    expression=self,
                )
            )
            return Unknown(), diags

    def variables(self) -> list[Traversal]:
        return [var for arg in self.args for var in arg.variables()]


def as_traversal(expr: Expression) -> Traversal | None:
    # Static interpretation of an expression as an absolute traversal, if it is one.
    if isinstance(expr, ScopeTraversalExpr):
        return expr.traversal
    return None


@dataclass(frozen=True, slots=True)
class Attribute:
    name: str
    expr: Expression
    range: SourceRange
    name_range: SourceRange


@dataclass(frozen=True, slots=True)
class Block:
    type: str
    labels: tuple[str, ...]
    body: Body
    range: SourceRange
    type_range: SourceRange
    label_ranges: tuple[SourceRange, ...] = ()


@dataclass(frozen=True, slots=True)
class Body:
    # Attributes keep declaration order; block order is significant.
    attributes: dict[str, Attribute] = field(default_factory=dict)
    blocks: tuple[Block, ...] = ()
    range: SourceRange | None = None

    def without_attributes(self, *names: str) -> Body:
        kept = {name: attr for name, attr in self.attributes.items() if name not in names}
        return Body(attributes=kept, blocks=self.blocks, range=self.range)

    def blocks_of_type(self, type_name: str) -> list[Block]:
        return [block for block in self.blocks if block.type == type_name]
