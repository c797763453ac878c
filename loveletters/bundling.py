"""Write rendered pages to the output directory.

Every page becomes ``index.html`` inside a directory mirroring its position in
the content tree, so the output can be served as-is by a static web server::

    out/index.html
    out/posts/index.html
    out/posts/<slug>/index.html
"""

from __future__ import annotations

import typing as typ

import structlog

from ._constants import OUTPUT_FILENAME
from .errors import FileIOError

if typ.TYPE_CHECKING:
    from pathlib import Path

    from .rendering import RenderedPage
    from .slug import Slug
    from .tree import ContentTree, SectionPath

logger = structlog.get_logger()


class Bundler:
    """Lay out rendered documents under ``output_dir``."""

    def __init__(self, output_dir: Path) -> None:
        self.output_dir = output_dir

    def bundle(self, tree: ContentTree[RenderedPage, RenderedPage]) -> list[Path]:
        """Write every page of ``tree`` and return the written paths.

        Raises
        ------
        FileIOError
            If a directory cannot be created or a file cannot be written.
        """
        written: list[Path] = []

        def write_index(path: SectionPath, page: RenderedPage) -> None:
            written.append(self._write(self._section_dir(path), page))

        def write_leaf(path: SectionPath, slug: Slug, page: RenderedPage) -> None:
            written.append(self._write(self._section_dir(path) / slug.value, page))

        tree.walk(write_index, write_leaf)
        return written

    def _section_dir(self, path: SectionPath) -> Path:
        return self.output_dir.joinpath(*(slug.value for slug in path))

    @staticmethod
    def _write(directory: Path, page: RenderedPage) -> Path:
        target = directory / OUTPUT_FILENAME
        try:
            directory.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise FileIOError(directory) from exc
        try:
            target.write_bytes(page.document.to_bytes())
        except OSError as exc:
            raise FileIOError(target) from exc
        logger.debug("page_bundled", path=str(target))
        return target


__all__ = ["Bundler"]
