"""Turn a content directory into a tree of raw page handles.

Discovery applies the project's filesystem conventions and nothing more: it
does not read any page file. Each section directory keeps its own index page
under ``_index/``; leaf pages are the immediate subdirectories carrying a
``page.toml`` marker; ``posts`` and any other subdirectory holding an
``_index/`` directory are discovered recursively as sub-sections.

Example
-------
>>> from pathlib import Path
>>> from loveletters.discovery import Discoverer
>>> tree = Discoverer(Path("site/content")).discover()  # doctest: +SKIP
>>> sorted(str(slug) for slug in tree.children)  # doctest: +SKIP
['posts']
"""

from __future__ import annotations

import os
import typing as typ

import structlog

from ._constants import INDEX_DIRNAME, POSTS_DIRNAME, RESERVED_DIRNAMES
from .errors import FileIOError, MalformedStructureError, SlugCollisionError
from .page import PageKind, RawPage
from .slug import Slug
from .tree import ContentTree

if typ.TYPE_CHECKING:
    from pathlib import Path

logger = structlog.get_logger()

_DirIdentity = tuple[int, int]


class Discoverer:
    """Walk a content directory and build a ``ContentTree[RawPage, RawPage]``."""

    def __init__(self, content_dir: Path) -> None:
        self.content_dir = content_dir

    def discover(self) -> ContentTree[RawPage, RawPage]:
        """Return the tree rooted at the content directory.

        Raises
        ------
        MalformedStructureError
            If following a symlink leads back to one of its ancestors.
        SlugCollisionError
            If a directory is marked as both a leaf page and a section.
        InvalidSlugError
            If a page or section directory name cannot be used as a slug.
        FileIOError
            For any other filesystem failure, with the offending path.
        """
        root_identity = self._identity(self.content_dir)
        return self._discover_section(self.content_dir, (root_identity,))

    def _discover_section(
        self, section_dir: Path, ancestors: tuple[_DirIdentity, ...]
    ) -> ContentTree[RawPage, RawPage]:
        index = RawPage(Slug.index(), section_dir / INDEX_DIRNAME, PageKind.INDEX)
        leaves: dict[Slug, RawPage] = {}
        children: dict[Slug, ContentTree[RawPage, RawPage]] = {}

        for entry in self._subdirectories(section_dir):
            is_section = entry.name == POSTS_DIRNAME or (
                entry.name not in RESERVED_DIRNAMES and self._has_index(entry)
            )
            if entry.name in RESERVED_DIRNAMES and not is_section:
                continue
            is_leaf = self._is_leaf(entry)
            if is_leaf and is_section:
                raise SlugCollisionError(entry, entry.name)
            if is_leaf:
                slug = Slug.from_dir(entry)
                logger.debug("page_discovered", path=str(entry))
                leaves[slug] = RawPage(slug, entry, PageKind.LEAF)
            elif is_section:
                # only directories that are descended into can close a loop
                identity = self._identity(entry)
                if identity in ancestors:
                    raise MalformedStructureError(
                        entry, f"symlink loop detected at '{entry}'"
                    )
                slug = Slug.from_dir(entry)
                logger.debug("section_discovered", path=str(entry))
                children[slug] = self._discover_section(entry, (*ancestors, identity))

        return ContentTree(index, leaves, children)

    @staticmethod
    def _subdirectories(section_dir: Path) -> list[Path]:
        """Return the visible subdirectories of ``section_dir`` in name order."""
        try:
            entries = sorted(section_dir.iterdir())
        except OSError as exc:
            raise FileIOError(section_dir) from exc
        subdirectories: list[Path] = []
        for entry in entries:
            if entry.name.startswith("."):
                continue
            try:
                if entry.is_dir():
                    subdirectories.append(entry)
            except OSError as exc:
                raise FileIOError(entry) from exc
        return subdirectories

    @staticmethod
    def _is_leaf(directory: Path) -> bool:
        try:
            return (directory / PageKind.LEAF.marker_filename).is_file()
        except OSError as exc:
            raise FileIOError(directory) from exc

    @staticmethod
    def _has_index(directory: Path) -> bool:
        try:
            return (directory / INDEX_DIRNAME).is_dir()
        except OSError as exc:
            raise FileIOError(directory) from exc

    @staticmethod
    def _identity(directory: Path) -> _DirIdentity:
        """Return ``(device, inode)`` of the directory a path resolves to."""
        try:
            stat = os.stat(directory)
        except OSError as exc:
            raise FileIOError(directory) from exc
        return stat.st_dev, stat.st_ino


def discover(content_dir: Path) -> ContentTree[RawPage, RawPage]:
    """Convenience wrapper around :meth:`Discoverer.discover`."""
    return Discoverer(content_dir).discover()


__all__ = ["Discoverer", "discover"]
