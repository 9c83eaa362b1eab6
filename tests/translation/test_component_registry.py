from __future__ import annotations

from types import ModuleType
from typing import Any

import pytest

from bridgedl.components.sources.kafka import KafkaSource
from bridgedl.components.targets.aws_sns import AWSSNSTarget
from bridgedl.config.addr import Category
from bridgedl.config.globals import DeliverySettings, Globals
from bridgedl.translation import (
    REFERENCEABLE_CATEGORIES,
    Addressable,
    ComponentMeta,
    ComponentRegistry,
    ComponentRegistryError,
    Decodable,
    Translatable,
    build_registry,
    component,
    discover_components,
    get_component_meta,
    load_discovery_modules,
    translate,
)


@component(category="target", type="echo")
class _EchoTarget:
    def manifests(self, identifier: str, config: Any, event_dst: Any) -> list[dict[str, Any]]:
        return [{"kind": "Echo", "metadata": {"name": identifier}}]


@component(category=Category.TARGET, type="echo_globals", accepts_globals=True)
class _GlobalsTarget:
    def manifests(self, identifier: str, config: Any, event_dst: Any, glb: Globals) -> list[dict[str, Any]]:
        return [{"kind": "Echo", "retries": glb.delivery.retries if glb.delivery else None}]


def _module(name: str, **members: object) -> ModuleType:
    module = ModuleType(name)
    for key, value in members.items():
        setattr(module, key, value)
    return module


def test_build_registry_discovers_builtin_components() -> None:
    registry = build_registry()

    assert registry.keys() == [
        (Category.CHANNEL, "pubsub"),
        (Category.ROUTER, "content_based"),
        (Category.SOURCE, "azure_activity_logs"),
        (Category.SOURCE, "kafka"),
        (Category.TARGET, "aws_sns"),
        (Category.TARGET, "datadog"),
        (Category.TARGET, "kafka"),
        (Category.TRANSFORMER, "bumblebee"),
        (Category.TRANSFORMER, "function"),
    ]
    assert isinstance(registry.get(Category.SOURCE, "kafka"), KafkaSource)
    assert registry.get(Category.TARGET, "unknown") is None
    assert registry.referenceable_categories() == REFERENCEABLE_CATEGORIES
    assert "function" not in REFERENCEABLE_CATEGORIES


def test_builtin_capabilities() -> None:
    source = KafkaSource()
    target = AWSSNSTarget()

    assert isinstance(source, Decodable) and isinstance(source, Translatable)
    assert not isinstance(source, Addressable)
    assert isinstance(target, Addressable)
    assert get_component_meta(target) == ComponentMeta(Category.TARGET, "aws_sns", accepts_globals=True)


def test_component_decorator_attaches_meta() -> None:
    meta = get_component_meta(_EchoTarget)

    assert meta == ComponentMeta(category=Category.TARGET, type="echo")
    assert get_component_meta(object()) is None


def test_registry_rejects_duplicate_registration() -> None:
    registry = ComponentRegistry()
    registry.register(ComponentMeta(Category.TARGET, "echo"), _EchoTarget())

    with pytest.raises(ComponentRegistryError):
        registry.register(ComponentMeta(Category.TARGET, "echo"), _EchoTarget())


def test_discover_components_scans_module_members() -> None:
    first = _module("plugins.first", EchoTarget=_EchoTarget, helper=len)
    second = _module("plugins.second", EchoTarget=_EchoTarget, GlobalsTarget=_GlobalsTarget)

    discovered = discover_components([first, second])

    assert [(meta.type, cls) for meta, cls in discovered] == [("echo", _EchoTarget), ("echo_globals", _GlobalsTarget)]


def test_discover_components_rejects_conflicting_types() -> None:
    @component(category="target", type="echo")
    class _OtherEcho:
        pass

    module = _module("plugins.conflict", EchoTarget=_EchoTarget, OtherEcho=_OtherEcho)

    with pytest.raises(ComponentRegistryError):
        discover_components([module])


def test_discover_components_requires_classes() -> None:
    def factory() -> None:
        return None

    module = _module("plugins.func", factory=component(category="source", type="fn")(factory))

    with pytest.raises(ComponentRegistryError):
        discover_components([module])


def test_load_discovery_modules_expands_packages() -> None:
    modules = load_discovery_modules(["bridgedl.components"])
    names = [module.__name__ for module in modules]

    assert names[0] == "bridgedl.components"
    assert "bridgedl.components.sources.kafka" in names
    assert "bridgedl.components.routers.content_based" in names


def test_load_discovery_modules_reports_missing_module() -> None:
    with pytest.raises(ComponentRegistryError):
        load_discovery_modules(["bridgedl_missing_plugins"])


def test_translate_passes_globals_only_when_declared() -> None:
    glb = Globals(delivery=DeliverySettings(retries=4))

    plain = translate(_EchoTarget(), ComponentMeta(Category.TARGET, "echo"), "e", {}, None, glb)
    with_globals = translate(
        _GlobalsTarget(), ComponentMeta(Category.TARGET, "echo_globals", accepts_globals=True), "e", {}, None, glb
    )
    defaulted = translate(
        _GlobalsTarget(), ComponentMeta(Category.TARGET, "echo_globals", accepts_globals=True), "e", {}, None, None
    )

    assert plain == [{"kind": "Echo", "metadata": {"name": "e"}}]
    assert with_globals == [{"kind": "Echo", "retries": 4}]
    assert defaulted == [{"kind": "Echo", "retries": None}]
