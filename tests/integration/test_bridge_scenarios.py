from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest

from bridgedl.app import run
from bridgedl.config import load_bridge
from bridgedl.core import Context
from bridgedl.k8s.naming import rfc1123_name
from bridgedl.translation import build_registry

_KAFKA_SOURCE = """
source kafka "{name}" {{
  bootstrap_servers = ["k:9092"]
  topics = ["t"]
  sasl_auth = secret.cred
  to = {to}
}}
"""

_SNS_TARGET = """
target aws_sns "{name}" {{
  arn = "arn:aws:sns:us-east-1:123456789012:topic"
  credentials = secret.aws{extra}
}}
"""


def _source(name: str, to: str) -> str:
    return _KAFKA_SOURCE.format(name=name, to=to)


def _target(name: str, extra: str = "") -> str:
    return _SNS_TARGET.format(name=name, extra=extra)


def _run(tmp_path: Path, capsys: pytest.CaptureFixture[str], src: str, *argv: str) -> tuple[int, str, str]:
    path = tmp_path / "bridge.bdl"
    path.write_text(src, encoding="utf-8")
    code = run([*argv[:1], str(path), *argv[1:]])
    captured = capsys.readouterr()
    return code, captured.out, captured.err


def _items(out: str) -> list[dict[str, Any]]:
    return json.loads(out)["items"]


def test_single_source_to_target(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    src = _source("my-source", "target.SNS_Topic") + _target("SNS_Topic")

    code, out, err = _run(tmp_path, capsys, src, "generate")

    assert code == 0, err
    items = _items(out)
    assert [item["kind"] for item in items] == ["KafkaSource", "AWSSNSTarget"]
    assert items[0]["spec"]["sink"]["ref"]["name"] == rfc1123_name("SNS_Topic") == "sns-topic"
    assert items[0]["spec"]["net"]["sasl"]["user"]["secretKeyRef"] == {"name": "cred", "key": "user"}


def test_fan_in_via_channel(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    src = (
        _source("s1", "channel.c")
        + _source("s2", "channel.c")
        + "\nchannel pubsub c {\n  subscribers = [target.t]\n}\n"
        + _target("t")
    )

    code, out, err = _run(tmp_path, capsys, src, "generate")

    assert code == 0, err
    items = _items(out)
    assert [item["kind"] for item in items] == [
        "KafkaSource",
        "KafkaSource",
        "Channel",
        "Subscription",
        "AWSSNSTarget",
    ]
    sinks = [item["spec"]["sink"]["ref"] for item in items if item["kind"] == "KafkaSource"]
    assert sinks == [{"apiVersion": "messaging.knative.dev/v1", "kind": "Channel", "name": "c"}] * 2
    assert items[3]["spec"]["subscriber"]["ref"]["name"] == "t"


def test_cycle_through_reply_and_dead_letter_sink(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    src = (
        "bridge cycle {\n  delivery {\n    retries = 2\n    dead_letter_sink = transformer.b\n  }\n}\n"
        + _source("a", "transformer.b")
        + '\ntransformer function b {\n  runtime = "python"\n  code = file("handler.py")\n  to = target.c\n}\n'
        + _target("c", "\n  reply_to = transformer.b")
    )
    (tmp_path / "handler.py").write_text("def main(event, context):\n    return event\n", encoding="utf-8")

    code, out, err = _run(tmp_path, capsys, src, "generate")
    again, second_out, _ = _run(tmp_path, capsys, src, "generate")

    assert code == 0, err
    assert again == 0
    assert out == second_out
    items = _items(out)
    assert [(item["kind"], item["metadata"]["name"]) for item in items] == [
        ("KafkaSource", "a"),
        ("Function", "b"),
        ("AWSSNSTarget", "c"),
        ("Channel", "c"),
        ("Subscription", "c"),
    ]
    assert items[1]["spec"]["code"] == "def main(event, context):\n    return event\n"
    assert items[1]["spec"]["sink"]["ref"]["kind"] == "Channel"
    subscription = items[4]["spec"]
    assert subscription["reply"]["ref"]["name"] == "b"
    assert subscription["delivery"] == {
        "retry": 2,
        "deadLetterSink": {"ref": {"apiVersion": "flow.triggermesh.io/v1alpha1", "kind": "Function", "name": "b"}},
    }


def test_plain_target_as_dead_letter_sink(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    src = (
        "bridge {\n  delivery {\n    retries = 2\n    dead_letter_sink = target.dls\n  }\n}\n"
        + _source("a", "target.t")
        + _target("t")
        + _target("dls")
    )

    code, out, err = _run(tmp_path, capsys, src, "generate")

    assert code == 0, err
    assert [(item["kind"], item["metadata"]["name"]) for item in _items(out)] == [
        ("KafkaSource", "a"),
        ("AWSSNSTarget", "t"),
        ("AWSSNSTarget", "dls"),
    ]


def test_missing_reference(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    code, out, err = _run(tmp_path, capsys, _source("a", "target.nonexistent"), "generate")

    assert code == 1
    assert out == ""
    assert err.count("Error: ") == 1
    assert "reference to undeclared component target.nonexistent" in err


def test_missing_reference_single_diagnostic(tmp_path: Path) -> None:
    path = tmp_path / "bridge.bdl"
    path.write_text(_source("a", "target.nonexistent"), encoding="utf-8")
    bridge, diags = load_bridge(path)
    assert bridge is not None and not diags

    manifests, diags = Context(bridge, build_registry()).generate()

    assert manifests == []
    assert [diag.detail for diag in diags.errors()] == ["reference to undeclared component target.nonexistent"]


def test_tls_validator(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    src = _source("a", "target.t").replace("  sasl_auth = secret.cred\n", "  tls = 42\n") + _target("t")

    code, out, err = _run(tmp_path, capsys, src, "generate")

    assert code == 1
    assert out == ""
    assert "Error: Invalid attributes type" in err


def test_default_bridge_identifier(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    src = _source("a", "target.t") + _target("t")

    code, out, err = _run(tmp_path, capsys, src, "generate", "--bridge")

    assert code == 0, err
    document = json.loads(out)
    assert document["kind"] == "Bridge"
    assert document["metadata"]["name"] == "til_generated"
    assert [item["kind"] for item in document["spec"]["components"]] == ["KafkaSource", "AWSSNSTarget"]
