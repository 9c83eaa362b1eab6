from __future__ import annotations

import re
from bisect import bisect_right
from typing import NoReturn

import tree_sitter_hcl as tshcl
from tree_sitter import Language, Node, Parser

from bridgedl.diagnostics import Diagnostic, Diagnostics, Pos, Severity, SourceRange
from bridgedl.lang.syntax.nodes import (
    AttrStep,
    Attribute,
    Block,
    Body,
    Expression,
    FunctionCallExpr,
    IndexStep,
    LiteralExpr,
    ObjectExpr,
    ObjectItem,
    RelativeTraversalExpr,
    ScopeTraversalExpr,
    TemplateExpr,
    Traversal,
    TraversalStep,
    TupleExpr,
)

HCL_LANGUAGE = Language(tshcl.language())

# Grammar nodes which only wrap the node that carries the meaning.
_WRAPPERS = frozenset({"literal_value", "collection_value", "template_expr", "operation", "index"})

# How missing delimiters read in a message.
_EXPECTED = {
    "block_end": 'a closing brace ("}")',
    "object_end": 'a closing brace ("}")',
    "tuple_end": 'a closing bracket ("]")',
    "quoted_template_end": "a closing quote",
    "template_interpolation_end": 'a closing brace ("}") for the interpolation sequence',
    "heredoc_identifier": "the heredoc closing marker",
    "expression": "an expression",
}

_QUOTED_ESCAPE = re.compile(r"\\(?:u[0-9A-Fa-f]{4}|U[0-9A-Fa-f]{8}|.)|\$\$\{|%%\{", re.DOTALL)
_HEREDOC_ESCAPE = re.compile(r"\$\$\{|%%\{")
_SIMPLE_ESCAPES = {"n": "\n", "r": "\r", "t": "\t", '"': '"', "\\": "\\"}


class _SyntaxError(Exception):
    # Unwinds the lowering on the first error.
    def __init__(self, diagnostic: Diagnostic) -> None:
        super().__init__(diagnostic.summary)
        self.diagnostic = diagnostic


def parse_config(src: str, filename: str) -> tuple[Body, Diagnostics]:
    # Parse a whole document into its root body. Stops at the first syntax error.
    data = src.encode("utf-8")
    tree = Parser(HCL_LANGUAGE).parse(data)
    diags = Diagnostics()
    try:
        body = _Lowering(data, filename).config_file(tree.root_node)
    except _SyntaxError as exc:
        diags.append(exc.diagnostic)
        return Body(), diags
    return body, diags


class _Lowering:
    # Turns the concrete syntax tree into the expression and body nodes
    # evaluated by the rest of the pipeline.

    def __init__(self, data: bytes, filename: str) -> None:
        self._data = data
        self._filename = filename
        self._line_starts = [0] + [match.end() for match in re.finditer(b"\n", data)]

    # positions

    def _pos(self, byte: int) -> Pos:
        line = bisect_right(self._line_starts, byte)
        start = self._line_starts[line - 1]
        column = len(self._data[start:byte].decode("utf-8", errors="replace")) + 1
        return Pos(line=line, column=column, byte=byte)

    def _span(self, start: int, end: int) -> SourceRange:
        return SourceRange(self._filename, self._pos(start), self._pos(end))

    def _range(self, node: Node) -> SourceRange:
        return self._span(node.start_byte, node.end_byte)

    def _text(self, node: Node) -> str:
        return self._data[node.start_byte : node.end_byte].decode("utf-8")

    def fail(self, summary: str, detail: str, subject: SourceRange) -> NoReturn:
        raise _SyntaxError(Diagnostic(Severity.ERROR, summary, detail, subject))

    # structure

    def config_file(self, root: Node) -> Body:
        if root.type == "ERROR" or root.has_error:
            self._report_syntax_error(root)
        items = _named(root)
        if not items:
            return Body(range=self._range(root))
        if items[0].type != "body":
            self.fail(
                "Argument or block definition required",
                "An argument or block definition is required here.",
                self._range(items[0]),
            )
        return self.body(items[0], self._range(root))

    def body(self, node: Node | None, body_range: SourceRange) -> Body:
        if node is None:
            return Body(range=body_range)
        attributes: dict[str, Attribute] = {}
        blocks: list[Block] = []
        previous: Node | None = None
        for item in _named(node):
            if previous is not None and self._pos(item.start_byte).line == self._pos(previous.end_byte).line:
                self.fail(
                    "Missing newline after argument",
                    "An argument or block definition must end with a newline.",
                    self._range(item),
                )
            previous = item
            if item.type == "attribute":
                attr = self.attribute(item)
                if attr.name in attributes:
                    self.fail(
                        "Attribute redefined",
                        f'The argument "{attr.name}" was already set at {attributes[attr.name].range}. '
                        "Each argument may be set only once.",
                        attr.name_range,
                    )
                attributes[attr.name] = attr
            elif item.type == "block":
                blocks.append(self.block(item))
        return Body(attributes=attributes, blocks=tuple(blocks), range=body_range)

    def attribute(self, node: Node) -> Attribute:
        name = _named(node)[0]
        value = _child(node, "expression")
        if value is None:
            self.fail("Invalid expression", "An expression is required after the equals sign.", self._range(node))
        return Attribute(
            name=self._text(name),
            expr=self.expression(value),
            range=self._range(node),
            name_range=self._range(name),
        )

    def block(self, node: Node) -> Block:
        children = _named(node)
        type_node = children[0]
        labels: list[str] = []
        label_ranges: list[SourceRange] = []
        start: Node | None = None
        end: Node | None = None
        body_node: Node | None = None
        for child in children[1:]:
            if child.type == "block_start":
                start = child
            elif child.type == "block_end":
                end = child
            elif child.type == "body":
                body_node = child
            elif start is None and child.type == "identifier":
                labels.append(self._text(child))
                label_ranges.append(self._range(child))
            elif start is None and child.type == "string_lit":
                labels.append(self.string_lit(child))
                label_ranges.append(self._range(child))

        braces_start = start.start_byte if start is not None else node.start_byte
        braces_end = end.end_byte if end is not None else node.end_byte
        return Block(
            type=self._text(type_node),
            labels=tuple(labels),
            body=self.body(body_node, self._span(braces_start, braces_end)),
            range=self._range(node),
            type_range=self._range(type_node),
            label_ranges=tuple(label_ranges),
        )

    def string_lit(self, node: Node) -> str:
        for child in node.named_children:
            if child.type in ("template_interpolation", "template_directive"):
                self.fail(
                    "Invalid block label",
                    "Template sequences are not allowed in block labels.",
                    self._range(child),
                )
        begin = node.children[0].end_byte
        finish = node.children[-1].start_byte
        return self._unescape(begin, finish, _QUOTED_ESCAPE)

    # expressions

    def expression(self, node: Node) -> Expression:
        # A term followed by its traversal steps: `target.sns`, `f(x)[0]`, `(a).b`.
        parts = _named(node)
        if not parts:
            self.fail("Invalid expression", "Expected the start of an expression.", self._range(node))
        return self.steps(self.term(parts[0]), parts[1:])

    def term(self, node: Node) -> Expression:
        kind = node.type
        if kind == "expression":
            return self.expression(node)
        if kind in _WRAPPERS:
            parts = _named(node)
            if len(parts) == 1:
                return self.term(parts[0])
        if kind == "numeric_lit":
            return LiteralExpr(_number(self._text(node)), self._range(node))
        if kind == "bool_lit":
            return LiteralExpr(self._text(node) == "true", self._range(node))
        if kind == "null_lit":
            return LiteralExpr(None, self._range(node))
        if kind == "variable_expr":
            node_range = self._range(node)
            return ScopeTraversalExpr(Traversal(self._text(node), (), node_range), node_range)
        if kind == "tuple":
            items = [self.expression(child) for child in _named(node) if child.type == "expression"]
            return TupleExpr(tuple(items), self._range(node))
        if kind == "object":
            return ObjectExpr(
                tuple(self.object_item(child) for child in _named(node) if child.type == "object_elem"),
                self._range(node),
            )
        if kind == "function_call":
            return self.function_call(node)
        if kind == "quoted_template":
            return self.quoted_template(node)
        if kind == "heredoc_template":
            return self.heredoc_template(node)
        if kind == "unary_operation":
            return self.unary_operation(node)
        self.fail(
            "Unsupported expression",
            f'Expressions of kind "{kind}" are not supported in Bridge descriptions.',
            self._range(node),
        )

    def steps(self, head: Expression, nodes: list[Node]) -> Expression:
        steps = [self.step(node) for node in nodes]
        if not steps:
            return head
        step_range = SourceRange(self._filename, head.range.start, steps[-1].range.end)
        if isinstance(head, ScopeTraversalExpr):
            traversal = Traversal(head.traversal.root_name, head.traversal.steps + tuple(steps), step_range)
            return ScopeTraversalExpr(traversal, step_range)
        return RelativeTraversalExpr(head, tuple(steps), step_range)

    def step(self, node: Node) -> TraversalStep:
        kind = node.type
        if kind == "index":
            return self.step(_named(node)[0])
        if kind == "get_attr":
            return AttrStep(self._text(_named(node)[0]), self._range(node))
        if kind == "legacy_index":
            return IndexStep(int(self._text(node).lstrip(".").strip()), self._range(node))
        if kind == "new_index":
            key_node = _child(node, "expression")
            if key_node is None:
                self.fail("Invalid index", "An index key is required between the brackets.", self._range(node))
            key_expr = self.expression(key_node)
            if not isinstance(key_expr, (LiteralExpr, TemplateExpr)) or key_expr.variables():
                self.fail("Invalid index", "Only constant values are supported as index keys.", key_expr.range)
            key = key_expr.val if isinstance(key_expr, LiteralExpr) else _constant_template(key_expr)
            return IndexStep(key, self._range(node))
        self.fail(
            "Unsupported expression",
            f'Traversal steps of kind "{kind}" are not supported in Bridge descriptions.',
            self._range(node),
        )

    def object_item(self, node: Node) -> ObjectItem:
        key_node, val_node = [child for child in _named(node) if child.type == "expression"]
        key_parts = _named(key_node)
        if len(key_parts) == 1 and key_parts[0].type == "variable_expr":
            # Bare identifiers are literal keys: `{ a = 1 }`.
            key: Expression = LiteralExpr(self._text(key_parts[0]), self._range(key_parts[0]))
        else:
            key = self.expression(key_node)
        return ObjectItem(key, self.expression(val_node))

    def function_call(self, node: Node) -> Expression:
        name = _named(node)[0]
        args: list[Expression] = []
        arguments = _child(node, "function_arguments")
        if arguments is not None:
            if _child(arguments, "ellipsis") is not None:
                self.fail(
                    "Unsupported expression",
                    "Expanding function arguments is not supported in Bridge descriptions.",
                    self._range(arguments),
                )
            args = [self.expression(child) for child in _named(arguments) if child.type == "expression"]
        return FunctionCallExpr(self._text(name), tuple(args), self._range(node), self._range(name))

    def unary_operation(self, node: Node) -> Expression:
        operator = self._text(node.children[0])
        parts = _named(node)
        operand = self.steps(self.term(parts[0]), parts[1:])
        if isinstance(operand, LiteralExpr):
            val = operand.val
            if operator == "-" and isinstance(val, (int, float)) and not isinstance(val, bool):
                return LiteralExpr(-val, self._range(node))
            if operator == "!" and isinstance(val, bool):
                return LiteralExpr(not val, self._range(node))
        self.fail(
            "Unsupported expression",
            f'The "{operator}" operator only applies to literal values in Bridge descriptions.',
            self._range(node),
        )

    # templates

    def quoted_template(self, node: Node) -> Expression:
        begin = node.children[0].end_byte
        finish = node.children[-1].start_byte
        parts = self.template_parts(node, begin, finish, _QUOTED_ESCAPE)
        if not parts:
            parts.append(LiteralExpr("", self._range(node)))
        return TemplateExpr(tuple(parts), self._range(node))

    def heredoc_template(self, node: Node) -> Expression:
        markers = [child for child in node.children if child.type == "heredoc_identifier"]
        if len(markers) < 2:
            self.fail("Invalid heredoc", "The heredoc is missing its closing marker.", self._range(node))
        # Content runs from the line after the opening marker to the line of the closing one.
        begin = self._data.find(b"\n", markers[0].start_byte) + 1
        finish = self._line_starts[self._pos(markers[-1].start_byte).line - 1]
        parts = self.template_parts(node, begin, max(begin, finish), _HEREDOC_ESCAPE)
        if self._text(node.children[0]) == "<<-":
            parts = _dedent(parts)
        if not parts:
            parts.append(LiteralExpr("", self._range(node)))
        return TemplateExpr(tuple(parts), self._range(node))

    def template_parts(self, node: Node, begin: int, finish: int, escapes: re.Pattern[str]) -> list[Expression]:
        parts: list[Expression] = []
        cursor = begin
        for child in node.children:
            if child.type == "template_directive":
                self.fail(
                    "Unsupported expression",
                    "Template directives are not supported in Bridge descriptions.",
                    self._range(child),
                )
            if child.type != "template_interpolation":
                continue
            if child.start_byte > cursor:
                literal = self._unescape(cursor, child.start_byte, escapes)
                parts.append(LiteralExpr(literal, self._span(cursor, child.start_byte)))
            inner = _child(child, "expression")
            if inner is None:
                self.fail(
                    "Invalid template interpolation",
                    "An expression is required inside the interpolation sequence.",
                    self._range(child),
                )
            parts.append(self.expression(inner))
            cursor = child.end_byte
        if finish > cursor:
            parts.append(LiteralExpr(self._unescape(cursor, finish, escapes), self._span(cursor, finish)))
        return parts

    def _unescape(self, begin: int, end: int, escapes: re.Pattern[str]) -> str:
        text = self._data[begin:end].decode("utf-8")
        try:
            return escapes.sub(_replace_escape, text)
        except ValueError as exc:
            self.fail("Invalid escape sequence", str(exc), self._span(begin, end))

    # errors

    def _report_syntax_error(self, root: Node) -> NoReturn:
        node = root if root.type == "ERROR" else _first_error(root)
        if node is None:
            self.fail("Invalid syntax", "The document could not be parsed.", self._range(root))
        if node.is_missing:
            expected = _EXPECTED.get(node.type, f'"{node.type}"')
            self.fail("Invalid syntax", f"Expected {expected} here.", self._range(node))
        text = self._text(node).strip()
        if not text:
            self.fail("Invalid syntax", "Unexpected end of input.", self._range(node))
        snippet = text.splitlines()[0][:40]
        self.fail("Invalid syntax", f'Unexpected "{snippet}".', self._range(node))


def _named(node: Node) -> list[Node]:
    return [child for child in node.named_children if child.type != "comment"]


def _child(node: Node, kind: str) -> Node | None:
    return next((child for child in node.named_children if child.type == kind), None)


def _first_error(node: Node) -> Node | None:
    # Leftmost ERROR or MISSING node of the tree, in document order.
    for child in node.children:
        if child.type == "ERROR" or child.is_missing:
            return child
        if child.has_error:
            found = _first_error(child)
            if found is not None:
                return found
    return None


def _replace_escape(match: re.Match[str]) -> str:
    seq = match.group(0)
    if seq in ("$${", "%%{"):
        return seq[1:]
    code = seq[1:]
    if code in _SIMPLE_ESCAPES:
        return _SIMPLE_ESCAPES[code]
    if code[0] in "uU" and len(code) in (5, 9):
        return chr(int(code[1:], 16))
    raise ValueError(f"The escape sequence {seq!r} is not supported in quoted strings.")


def _dedent(parts: list[Expression]) -> list[Expression]:
    # `<<-` heredocs: drop the indentation shared by every non-blank line.
    text = "".join(str(part.val) if isinstance(part, LiteralExpr) else "\0" for part in parts)
    widths = [len(line) - len(line.lstrip(" \t")) for line in text.split("\n") if line.strip(" \t")]
    width = min(widths, default=0)
    if not width:
        return parts
    leading = re.compile(r"(^|\n)[ \t]{0,%d}" % width)
    inner = re.compile(r"\n[ \t]{0,%d}" % width)
    out: list[Expression] = []
    for index, part in enumerate(parts):
        if isinstance(part, LiteralExpr) and isinstance(part.val, str):
            pattern, repl = (leading, r"\1") if index == 0 else (inner, "\n")
            part = LiteralExpr(pattern.sub(repl, part.val), part.range)
        out.append(part)
    return out


def _constant_template(expr: TemplateExpr) -> str:
    return "".join(str(part.val) for part in expr.parts if isinstance(part, LiteralExpr))


def _number(text: str) -> int | float:
    if text.lower().startswith("0x"):
        return int(text, 16)
    if any(char in text for char in ".eE"):
        return float(text)
    return int(text)
