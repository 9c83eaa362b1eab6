from __future__ import annotations

from collections.abc import Collection
from dataclasses import dataclass
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from bridgedl.diagnostics import Diagnostic, Diagnostics, Severity
from bridgedl.k8s.values import DESTINATION_TYPE, is_destination
from bridgedl.lang.decode import decode_safe
from bridgedl.lang.eval import EvalContext
from bridgedl.lang.spec import AttrSpec, BlockSpec, ObjectSpec, Spec
from bridgedl.lang.syntax.nodes import Body
from bridgedl.lang.types import DYNAMIC, NUMBER, STRING, is_known

# Bridge-wide settings declared inside the `bridge` block and shared with
# the components that consume them (delivery options of subscriptions).

# ISO 8601 duration, e.g. "PT0.5S", "PT10S", "P1D".
_ISO8601_DURATION = r"^P(?!$)(\d+Y)?(\d+M)?(\d+W)?(\d+D)?(T(?=\d)(\d+H)?(\d+M)?(\d+(\.\d+)?S)?)?$"


class DeliverySettings(BaseModel):
    # Event delivery options applied to every subscription a component creates.
    model_config = ConfigDict(extra="forbid", frozen=True, regex_engine="python-re")
    retries: int | None = Field(default=None, ge=0)
    dead_letter_sink: dict[str, Any] | None = None
    backoff_delay: str | None = Field(default=None, pattern=_ISO8601_DURATION)
    backoff_policy: Literal["linear", "exponential"] | None = None

    @field_validator("dead_letter_sink")
    @classmethod
    def _sink_is_destination(cls, value: dict[str, Any] | None) -> dict[str, Any] | None:
        if value is not None and not is_destination(value):
            raise ValueError("must be a reference to a component which can receive events")
        return value


@dataclass(frozen=True, slots=True)
class Globals:
    delivery: DeliverySettings | None = None


def globals_spec() -> Spec:
    return ObjectSpec(
        {
            "delivery": BlockSpec(
                "delivery",
                ObjectSpec(
                    {
                        "retries": AttrSpec("retries", NUMBER),
                        "dead_letter_sink": AttrSpec("dead_letter_sink", DYNAMIC),
                        "backoff_delay": AttrSpec("backoff_delay", STRING),
                        "backoff_policy": AttrSpec("backoff_policy", STRING),
                    }
                ),
            ),
        }
    )


def build_globals(decoded: object, body: Body) -> tuple[Globals | None, Diagnostics]:
    # Validate a decoded globals value; incomplete values are not validated.
    diags = Diagnostics()
    if not isinstance(decoded, dict) or not is_known(decoded):
        return None, diags
    delivery = decoded.get("delivery")
    if delivery is None:
        return Globals(), diags
    try:
        settings = DeliverySettings.model_validate({key: val for key, val in delivery.items() if val is not None})
    except ValidationError as exc:
        for err in exc.errors():
            field_name = ".".join(str(loc) for loc in err["loc"])
            diags.append(
                Diagnostic(
                    Severity.ERROR,
                    "Invalid delivery settings",
                    f'Invalid value for "{field_name}": {err["msg"]}.',
                    body.range,
                )
            )
        return None, diags
    return Globals(delivery=settings), diags


def decode_globals(
    body: Body | None,
    ctx: EvalContext,
    referenceable: Collection[str],
) -> tuple[Globals | None, bool, Diagnostics]:
    # Decode the `bridge` block body against the evaluation context; a dead
    # letter sink that cannot be resolved leaves the globals incomplete.
    if body is None:
        return Globals(), True, Diagnostics()
    decoded, complete, diags = decode_safe(body, globals_spec(), ctx, referenceable, DESTINATION_TYPE)
    if diags.has_errors() or not complete:
        return None, complete, diags
    glb, build_diags = build_globals(decoded, body)
    diags.extend(build_diags)
    return glb, True, diags
