"""Context values handed to the compiler for each page."""

from __future__ import annotations

import dataclasses as dc
import typing as typ

if typ.TYPE_CHECKING:
    from ..config import ProjectConfig
    from ..slug import Slug
    from ..tree import SectionPath


@dc.dataclass(frozen=True, slots=True)
class ProjectContext:
    """Project-wide context shared by every page of a render pass.

    Attributes
    ----------
    config : ProjectConfig
        Parsed ``loveletters.toml``.
    content : dict[str, Any]
        Serialized view of the whole content tree (see
        :meth:`~loveletters.tree.ContentTree.to_value`).
    """

    config: ProjectConfig
    content: dict[str, typ.Any]

    def to_value(self) -> dict[str, typ.Any]:
        return {**self.config.to_value(), "content": self.content}


@dc.dataclass(frozen=True, slots=True)
class PageContext:
    """Where a page lives and what its frontmatter says."""

    path: SectionPath
    slug: Slug | None
    frontmatter: dict[str, typ.Any]

    def to_value(self) -> dict[str, typ.Any]:
        value: dict[str, typ.Any] = {
            "path": [slug.value for slug in self.path],
            "frontmatter": self.frontmatter,
        }
        if self.slug is not None:
            value["slug"] = self.slug.value
        return value


@dc.dataclass(frozen=True, slots=True)
class RenderContext:
    """Everything the compiler may expose to a page's templates."""

    project: ProjectContext
    page: PageContext

    def to_value(self) -> dict[str, typ.Any]:
        return {"project": self.project.to_value(), "page": self.page.to_value()}


__all__ = ["PageContext", "ProjectContext", "RenderContext"]
