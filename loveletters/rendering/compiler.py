"""Boundary between the render pipeline and a document compiler.

The pipeline treats compilation as an opaque service: it hands over the page
directory, the entry file, a resolver for further files, the render context,
and today's date, and receives either a :class:`Document` or a list of
:class:`Diagnostic` messages.
"""

from __future__ import annotations

import dataclasses as dc
import enum
import typing as typ

if typ.TYPE_CHECKING:
    import datetime as dt
    from pathlib import Path

    from ..packages import PageResolver
    from .context import RenderContext


class Severity(enum.StrEnum):
    ERROR = "error"
    WARNING = "warning"


@dc.dataclass(frozen=True, slots=True)
class Diagnostic:
    """A message reported by the compiler about one page.

    Attributes
    ----------
    severity : Severity
        Whether the message blocks compilation.
    message : str
        Human-readable description.
    file : str | None
        Template the message refers to, when known.
    line : int | None
        1-based line within ``file``, when known.
    hints : tuple[str, ...]
        Suggestions for fixing the problem.
    """

    severity: Severity
    message: str
    file: str | None = None
    line: int | None = None
    hints: tuple[str, ...] = ()

    def __str__(self) -> str:
        location = ""
        if self.file is not None:
            location = f" ({self.file}" + (f":{self.line}" if self.line else "") + ")"
        text = f"{self.severity}: {self.message}{location}"
        return "".join([text, *(f"\n    hint: {hint}" for hint in self.hints)])


@dc.dataclass(frozen=True, slots=True)
class Document:
    """A rendered page."""

    html: str

    def to_bytes(self) -> bytes:
        return self.html.encode("utf-8")


@dc.dataclass(frozen=True, slots=True)
class CompileRequest:
    """Inputs for compiling one page."""

    root: Path
    entry: str
    resolver: PageResolver
    context: RenderContext
    today: dt.date


@dc.dataclass(frozen=True, slots=True)
class CompileResult:
    """Outcome of a compilation; ``document`` is ``None`` on failure."""

    document: Document | None
    diagnostics: tuple[Diagnostic, ...] = ()

    @property
    def ok(self) -> bool:
        return self.document is not None


class Compiler(typ.Protocol):
    """Turns a page directory into a document."""

    def compile(self, request: CompileRequest) -> CompileResult: ...


__all__ = [
    "CompileRequest",
    "CompileResult",
    "Compiler",
    "Diagnostic",
    "Document",
    "Severity",
]
