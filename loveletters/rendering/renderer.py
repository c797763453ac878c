"""Compile every page of a parsed content tree into a document."""

from __future__ import annotations

import dataclasses as dc
import datetime as dt
import typing as typ

import structlog

from ..errors import CompilationError, EntityKind, EntityNotFoundError
from ..packages import FileCache, PageResolver
from .compiler import CompileRequest, Compiler, Document
from .context import PageContext, ProjectContext, RenderContext
from .jinja import JinjaCompiler

if typ.TYPE_CHECKING:
    from pathlib import Path

    from ..config import ProjectConfig
    from ..frontmatter import ParsedPage
    from ..packages import PackageCache
    from ..page import PageKind
    from ..slug import Slug
    from ..tree import ContentTree, SectionPath

logger = structlog.get_logger()


@dc.dataclass(frozen=True, slots=True)
class RenderedPage:
    """A compiled page, ready to be written by the bundler."""

    slug: Slug
    kind: PageKind
    content_dir: Path
    document: Document


class Renderer:
    """Render parsed pages with a :class:`Compiler`.

    Parameters
    ----------
    config : ProjectConfig
        Project configuration exposed to templates.
    packages : PackageCache
        Resolves package references made by templates.
    compiler : Compiler, optional
        Defaults to :class:`~loveletters.rendering.jinja.JinjaCompiler`.
    today : datetime.date, optional
        Build date shown to templates; defaults to the current UTC date.
    """

    def __init__(
        self,
        config: ProjectConfig,
        packages: PackageCache,
        compiler: Compiler | None = None,
        today: dt.date | None = None,
    ) -> None:
        self.config = config
        self.packages = packages
        self.compiler = compiler or JinjaCompiler()
        self.today = today or dt.datetime.now(dt.UTC).date()

    def render(
        self, tree: ContentTree[ParsedPage, ParsedPage]
    ) -> ContentTree[RenderedPage, RenderedPage]:
        """Compile every page of ``tree``, stopping at the first failure.

        Raises
        ------
        EntityNotFoundError
            If a page directory has no entry template.
        CompilationError
            If the compiler reports diagnostics instead of a document.
        """
        project = ProjectContext(self.config, tree.to_value())
        files = FileCache()

        def render_page(path: SectionPath, slug: Slug | None, page: ParsedPage) -> RenderedPage:
            context = RenderContext(
                project, PageContext(path, slug, page.frontmatter.to_value())
            )
            return self._render_page(page, context, files)

        return tree.walk(
            lambda path, page: render_page(path, None, page),
            render_page,
        )

    def _render_page(
        self, page: ParsedPage, context: RenderContext, files: FileCache
    ) -> RenderedPage:
        entry = page.entry_path
        if not entry.is_file():
            raise EntityNotFoundError(EntityKind.ENTRY_FILE, entry)
        logger.debug(
            "page_rendering",
            path="/".join(context.page.to_value()["path"]),
            slug=page.slug.value,
        )
        request = CompileRequest(
            root=page.content_dir,
            entry=page.kind.entry_filename,
            resolver=PageResolver(page.content_dir, self.packages, files),
            context=context,
            today=self.today,
        )
        result = self.compiler.compile(request)
        if result.document is None:
            raise CompilationError(page.content_dir, result.diagnostics)
        return RenderedPage(page.slug, page.kind, page.content_dir, result.document)


__all__ = ["RenderedPage", "Renderer"]
