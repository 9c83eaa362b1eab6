from __future__ import annotations

from pathlib import Path

import pytest

from bridgedl.lang.eval import EvalContext, Function, FunctionError
from bridgedl.lang.funcs import SecretRefs, functions, secret_name
from bridgedl.lang.syntax import parse_config


def _eval(src: str, base_dir: Path) -> tuple[object, list[str]]:
    body, diags = parse_config(f"v = {src}\n", "expr.bdl")
    assert not diags, str(diags)
    expr = body.attributes["v"].expr
    ctx = EvalContext(variables={"secret": SecretRefs()}, functions=functions(base_dir))
    val, eval_diags = expr.value(ctx)
    return val, [diag.summary for diag in eval_diags]


def test_file_reads_path_relative_to_base_dir(tmp_path: Path) -> None:
    (tmp_path / "code.js").write_text("function handle(e) { return e }\n", encoding="utf-8")

    val, diags = _eval('file("code.js")', tmp_path)

    assert diags == []
    assert val == "function handle(e) { return e }\n"


def test_file_accepts_absolute_path(tmp_path: Path) -> None:
    path = tmp_path / "abs.txt"
    path.write_text("abs", encoding="utf-8")

    val, diags = _eval(f'file("{path.as_posix()}")', tmp_path / "elsewhere")

    assert diags == []
    assert val == "abs"


def test_file_missing_is_reported(tmp_path: Path) -> None:
    _, diags = _eval('file("nope.txt")', tmp_path)

    assert diags == ["Error in function call"]


def test_secret_namespace_and_function_agree(tmp_path: Path) -> None:
    expected = {"apiVersion": "v1", "kind": "Secret", "name": "creds"}

    assert _eval("secret.creds", tmp_path) == (expected, [])
    assert _eval('secret_name("creds")', tmp_path) == (expected, [])
    assert secret_name("creds") == expected


def test_function_arity_is_checked(tmp_path: Path) -> None:
    _, diags = _eval("secret_name()", tmp_path)
    assert diags == ["Error in function call"]

    func = Function("one", ("a",), lambda a: a)
    with pytest.raises(FunctionError):
        func.call([1, 2])


def test_unknown_function_is_reported(tmp_path: Path) -> None:
    _, diags = _eval('upper("x")', tmp_path)

    assert diags == ["Call to unknown function"]
