"""Turn parsed pages into HTML documents.

The :class:`Renderer` walks a content tree, builds a :class:`RenderContext`
for each page and hands the page to a :class:`Compiler`. The default compiler
renders Jinja2 templates (:class:`JinjaCompiler`).
"""

from .compiler import (
    CompileRequest,
    CompileResult,
    Compiler,
    Diagnostic,
    Document,
    Severity,
)
from .context import PageContext, ProjectContext, RenderContext
from .jinja import JinjaCompiler, PackageEnvironment, ResolverLoader
from .markdown import MarkdownRenderer
from .renderer import RenderedPage, Renderer

__all__ = [
    "CompileRequest",
    "CompileResult",
    "Compiler",
    "Diagnostic",
    "Document",
    "JinjaCompiler",
    "MarkdownRenderer",
    "PackageEnvironment",
    "PageContext",
    "ProjectContext",
    "RenderContext",
    "RenderedPage",
    "Renderer",
    "ResolverLoader",
    "Severity",
]
