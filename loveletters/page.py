"""Page kinds and the raw page handles produced by discovery."""

from __future__ import annotations

import dataclasses as dc
import enum
import typing as typ

if typ.TYPE_CHECKING:
    from pathlib import Path

    from .slug import Slug


@dc.dataclass(frozen=True, slots=True)
class PageKindConfig:
    """Filenames that distinguish one kind of page from another.

    Attributes
    ----------
    marker_filename : str
        Frontmatter file whose presence marks a page directory; it is also the
        file parsed for the page's metadata.
    entry_filename : str
        Template handed to the compiler as the page's entry point.
    """

    marker_filename: str
    entry_filename: str


class PageKind(enum.Enum):
    """Closed set of page kinds; match on it wherever behaviour differs."""

    INDEX = PageKindConfig("index.toml", "index.html.jinja")
    LEAF = PageKindConfig("page.toml", "page.html.jinja")

    @property
    def marker_filename(self) -> str:
        return self.value.marker_filename

    @property
    def entry_filename(self) -> str:
        return self.value.entry_filename


@dc.dataclass(frozen=True, slots=True)
class RawPage:
    """Unparsed handle to a self-contained page directory."""

    slug: Slug
    content_dir: Path
    kind: PageKind

    @property
    def marker_path(self) -> Path:
        return self.content_dir / self.kind.marker_filename

    @property
    def entry_path(self) -> Path:
        return self.content_dir / self.kind.entry_filename


__all__ = ["PageKind", "PageKindConfig", "RawPage"]
