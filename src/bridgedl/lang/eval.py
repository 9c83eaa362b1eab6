from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field


class FunctionError(Exception):
    # Raised by function implementations; surfaced as a diagnostic by the evaluator.
    pass


@dataclass(frozen=True, slots=True)
class Function:
    # Callable exposed to expressions, with its fixed arity.
    name: str
    params: tuple[str, ...]
    impl: Callable[..., object]

    def call(self, args: list[object]) -> object:
        if len(args) != len(self.params):
            raise FunctionError(
                f'Function "{self.name}" expects {len(self.params)} argument(s), got {len(args)}.'
            )
        return self.impl(*args)


@dataclass(frozen=True, slots=True)
class EvalContext:
    # Variables are keyed by root name (e.g. "target" -> {"sns": <destination>}).
    variables: Mapping[str, object] = field(default_factory=dict)
    functions: Mapping[str, Function] = field(default_factory=dict)

    def with_variables(self, variables: Mapping[str, object]) -> EvalContext:
        return EvalContext(variables=variables, functions=self.functions)
