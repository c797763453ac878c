"""Jinja2-backed implementation of the :class:`Compiler` protocol.

Each page gets its own :class:`jinja2.Environment` whose loader asks the
page's :class:`~loveletters.packages.PageResolver` for template sources. Plain
template names are resolved against the page directory; names of the form
``@namespace/name:version/path`` are read from that package, downloading it on
first use. Plain names used inside a package template resolve within
that package. Template failures are reported as diagnostics instead of
exceptions, while package lookup and fetch errors propagate unchanged.

Example
-------
A leaf page template extending a theme package::

    {% extends "@preview/quill:0.1.0/post.html.jinja" %}
    {% block body %}
      <h1>{{ loveletters.page.frontmatter.title }}</h1>
      {{ read_file("body.md") | markdown }}
    {% endblock %}
"""

from __future__ import annotations

import posixpath
import traceback
import typing as typ

from jinja2 import (
    BaseLoader,
    Environment,
    StrictUndefined,
    TemplateError,
    TemplateNotFound,
    TemplateSyntaxError,
    UndefinedError,
    select_autoescape,
)
from markupsafe import Markup

from ..errors import LovelettersError
from ..packages import FileId
from .compiler import CompileRequest, CompileResult, Diagnostic, Document, Severity
from .markdown import MarkdownRenderer

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from ..packages import PageResolver

_REFERENCE_HINT = (
    "template names are relative to the page directory; package files are "
    "referenced as @namespace/name:version/path"
)
_UNDEFINED_HINT = (
    "templates can use loveletters.project, loveletters.page, and today"
)


class ResolverLoader(BaseLoader):
    """Load template sources through a :class:`PageResolver`."""

    def __init__(self, resolver: PageResolver) -> None:
        self.resolver = resolver
        self.loaded: set[str] = set()

    def get_source(
        self, environment: Environment, template: str
    ) -> tuple[str, str, cabc.Callable[[], bool]]:
        try:
            file_id = FileId.parse(template)
        except ValueError as exc:
            raise TemplateNotFound(template, message=str(exc)) from exc
        try:
            source = self.resolver.read_text(file_id)
        except FileNotFoundError as exc:
            raise TemplateNotFound(template) from exc
        except UnicodeDecodeError as exc:
            msg = f"template {template!r} is not valid UTF-8"
            raise TemplateError(msg) from exc
        filename = str(self.resolver.resolve(file_id))
        self.loaded.add(filename)
        return source, filename, lambda: True


class PackageEnvironment(Environment):
    """Environment resolving plain names inside package templates to that package.

    A template loaded as ``@preview/quill:0.1.0/layouts/post.html.jinja`` that
    extends ``"base.html.jinja"`` gets
    ``@preview/quill:0.1.0/layouts/base.html.jinja``. Names used by page-local
    templates and names carrying their own ``@`` prefix pass through unchanged.
    """

    def join_path(self, template: str, parent: str) -> str:
        if template.startswith("@") or not parent.startswith("@"):
            return template
        try:
            parent_id = FileId.parse(parent)
        except ValueError:
            return template
        joined = posixpath.normpath(posixpath.join(str(parent_id.path.parent), template))
        return f"{parent_id.package}/{joined}"


class JinjaCompiler:
    """Compile page templates to HTML documents with Jinja2.

    Templates see ``loveletters`` (the render context), ``today`` (the build
    date), ``read_file(name)`` returning the text of another file, and
    ``pygments_css`` holding the stylesheet for highlighted code. The
    ``markdown`` and ``highlight`` filters render markdown and code snippets.
    """

    def __init__(self, *, pygments_style: str = "monokai") -> None:
        self.markdown = MarkdownRenderer(pygments_style)

    def compile(self, request: CompileRequest) -> CompileResult:
        """Render ``request.entry``; template errors become diagnostics."""
        loader = ResolverLoader(request.resolver)
        env = self._environment(loader, request)
        try:
            html = env.get_template(request.entry).render()
        except LovelettersError:
            raise
        except TemplateSyntaxError as exc:
            diagnostic = Diagnostic(
                Severity.ERROR,
                exc.message or "invalid template syntax",
                file=exc.filename or exc.name,
                line=exc.lineno,
            )
        except TemplateNotFound as exc:
            message = f"file not found: {exc.name}"
            if exc.message and exc.message != exc.name:
                message = exc.message
            diagnostic = Diagnostic(Severity.ERROR, message, hints=(_REFERENCE_HINT,))
        except UndefinedError as exc:
            file, line = _template_location(exc, loader.loaded)
            diagnostic = Diagnostic(
                Severity.ERROR,
                exc.message or "undefined value",
                file=file,
                line=line,
                hints=(_UNDEFINED_HINT,),
            )
        except Exception as exc:  # noqa: BLE001
            file, line = _template_location(exc, loader.loaded)
            if isinstance(exc, TemplateError):
                message = str(exc)
            else:
                message = f"{type(exc).__name__}: {exc}"
            diagnostic = Diagnostic(Severity.ERROR, message, file=file, line=line)
        else:
            return CompileResult(Document(html))
        return CompileResult(None, (diagnostic,))

    def _environment(self, loader: ResolverLoader, request: CompileRequest) -> Environment:
        env = PackageEnvironment(
            loader=loader,
            autoescape=select_autoescape(["html", "xml", "html.jinja", "xml.jinja"]),
            undefined=StrictUndefined,
            trim_blocks=True,
            lstrip_blocks=True,
            auto_reload=False,
        )
        env.globals["loveletters"] = request.context.to_value()
        env.globals["today"] = request.today
        env.globals["pygments_css"] = Markup(self.markdown.stylesheet)
        env.globals["read_file"] = lambda name: request.resolver.read_text(
            FileId.parse(name)
        )
        env.filters["markdown"] = lambda text: Markup(self.markdown.markdown(text))
        env.filters["highlight"] = lambda code, language=None: Markup(
            self.markdown.code_block(code, language)
        )
        return env


def _template_location(
    exc: BaseException, templates: set[str]
) -> tuple[str | None, int | None]:
    """Return the innermost template frame of ``exc``'s traceback."""
    for frame in reversed(traceback.extract_tb(exc.__traceback__)):
        if frame.filename in templates:
            return frame.filename, frame.lineno
    return None, None


__all__ = ["JinjaCompiler", "PackageEnvironment", "ResolverLoader"]
