from __future__ import annotations

from collections.abc import Collection, Iterable

from bridgedl.diagnostics import Diagnostics
from bridgedl.lang.eval import EvalContext
from bridgedl.lang.spec import Spec
from bridgedl.lang.syntax.nodes import AttrStep, Body, Traversal
from bridgedl.lang.types import Type, Unknown, is_known


def decode(body: Body, spec: Spec, ctx: EvalContext) -> tuple[object, Diagnostics]:
    return spec.decode(body, ctx)


def variables(body: Body, spec: Spec) -> list[Traversal]:
    # Free variables of a body, as seen through its schema.
    return spec.variables(body)


def decode_safe(
    body: Body,
    spec: Spec,
    ctx: EvalContext,
    referenceable: Collection[str],
    placeholder: Type,
) -> tuple[object, bool, Diagnostics]:
    # Blind decode first; on failure retry with an unknown placeholder bound to
    # every unbound component reference. The bool reports completeness.
    val, diags = spec.decode(body, ctx)
    if not diags.has_errors():
        return val, is_known(val), diags

    refs = filter_block_refs(spec.variables(body), referenceable)
    retry_ctx = ensure_vars(ctx, refs, placeholder)
    val, diags = spec.decode(body, retry_ctx)
    return val, False, diags


def traverse_abs_safe(
    traversal: Traversal,
    ctx: EvalContext,
    referenceable: Collection[str],
    placeholder: Type,
) -> tuple[object, bool, Diagnostics]:
    # Same contract as decode_safe for a single absolute traversal.
    val, diags = traversal.traverse_abs(ctx)
    if not diags.has_errors():
        return val, is_known(val), diags

    retry_ctx = ensure_vars(ctx, filter_block_refs([traversal], referenceable), placeholder)
    val, diags = traversal.traverse_abs(retry_ctx)
    return val, False, diags


def filter_block_refs(traversals: Iterable[Traversal], referenceable: Collection[str]) -> list[Traversal]:
    # Keep only traversals rooted at a referenceable component category.
    return [traversal for traversal in traversals if traversal.root_name in referenceable]


def ensure_vars(ctx: EvalContext, refs: Iterable[Traversal], placeholder: Type) -> EvalContext:
    # Copy of the context where every `category.identifier` in refs is bound,
    # unbound ones to Unknown(placeholder). The given context is left untouched.
    namespaces: dict[str, dict[str, object]] = {}
    for ref in refs:
        if not ref.steps or not isinstance(ref.steps[0], AttrStep):
            continue
        if ref.root_name not in namespaces:
            existing = ctx.variables.get(ref.root_name)
            namespaces[ref.root_name] = dict(existing) if isinstance(existing, dict) else {}
        namespaces[ref.root_name].setdefault(ref.steps[0].name, Unknown(placeholder))
    return ctx.with_variables({**ctx.variables, **namespaces})
