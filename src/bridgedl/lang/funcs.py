from __future__ import annotations

from collections.abc import Iterator, Mapping
from pathlib import Path

from bridgedl.k8s.values import object_reference
from bridgedl.lang.eval import Function, FunctionError
from bridgedl.lang.types import STRING, convert

# Functions and namespaces available to expressions in a Bridge description.


def file_function(base_dir: Path) -> Function:
    # file(path): contents of a file, path absolute or relative to base_dir.
    def impl(path: object) -> str:
        file_path = Path(str(convert(path, STRING)))
        if not file_path.is_absolute():
            file_path = base_dir / file_path
        try:
            return file_path.read_text(encoding="utf-8")
        except OSError as exc:
            raise FunctionError(f"reading file {file_path}: {exc.strerror or exc}") from exc

    return Function("file", ("path",), impl)


def secret_name(name: object) -> dict[str, object]:
    # secret_name(name): reference to the Secret object with the given name.
    return object_reference("Secret", str(convert(name, STRING)), api_version="v1")


class SecretRefs(Mapping[str, object]):
    # Backs the `secret` root: any attribute name resolves to a Secret reference.

    def __getitem__(self, name: str) -> object:
        return secret_name(name)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str)

    def __iter__(self) -> Iterator[str]:
        return iter(())

    def __len__(self) -> int:
        return 0


def functions(base_dir: Path) -> dict[str, Function]:
    return {
        "file": file_function(base_dir),
        "secret_name": Function("secret_name", ("name",), secret_name),
    }
