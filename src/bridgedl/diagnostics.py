from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, replace
from enum import Enum


class Severity(str, Enum):
    ERROR = "error"
    WARNING = "warning"


@dataclass(frozen=True, slots=True)
class Pos:
    # 1-based line/column, 0-based byte offset into the source text.
    line: int = 1
    column: int = 1
    byte: int = 0


@dataclass(frozen=True, slots=True)
class SourceRange:
    filename: str
    start: Pos = Pos()
    end: Pos = Pos()

    def __str__(self) -> str:
        return f"{self.filename}:{self.start.line},{self.start.column}-{self.end.line},{self.end.column}"


@dataclass(frozen=True, slots=True)
class Diagnostic:
    # A single report produced by any phase of the pipeline.
    severity: Severity
    summary: str
    detail: str = ""
    subject: SourceRange | None = None
    expression: object | None = None
    context: SourceRange | None = None

    def with_subject(self, subject: SourceRange | None) -> Diagnostic:
        # Validators report without a range; the decoder attaches the attribute's one.
        if self.subject is not None or subject is None:
            return self
        return replace(self, subject=subject)

    def __str__(self) -> str:
        prefix = f"{self.subject}: " if self.subject is not None else ""
        if self.detail:
            return f"{prefix}{self.summary}; {self.detail}"
        return f"{prefix}{self.summary}"


class Diagnostics(list[Diagnostic]):
    # Append-only ordered collection threaded through every phase.

    def has_errors(self) -> bool:
        return any(diag.severity is Severity.ERROR for diag in self)

    def errors(self) -> Diagnostics:
        return Diagnostics(diag for diag in self if diag.severity is Severity.ERROR)

    def add_error(self, summary: str, detail: str = "", subject: SourceRange | None = None) -> Diagnostics:
        self.append(Diagnostic(Severity.ERROR, summary, detail, subject))
        return self

    def __str__(self) -> str:
        return "\n".join(str(diag) for diag in self)


def format_diagnostics(diagnostics: Iterable[Diagnostic], sources: Mapping[str, str] | None = None) -> str:
    # Compiler-like rendering: severity, summary, location with source line, detail.
    blocks: list[str] = []
    for diag in diagnostics:
        lines = [f"{diag.severity.value.capitalize()}: {diag.summary}"]
        subject = diag.subject
        if subject is not None:
            lines.append("")
            lines.append(f"  on {subject.filename} line {subject.start.line}:")
            source = (sources or {}).get(subject.filename)
            if source is not None:
                source_lines = source.splitlines()
                if 0 < subject.start.line <= len(source_lines):
                    lines.append(f"  {subject.start.line}: {source_lines[subject.start.line - 1]}")
        if diag.detail:
            lines.append("")
            lines.append(diag.detail)
        blocks.append("\n".join(lines))
    return "\n\n".join(blocks) + ("\n" if blocks else "")
