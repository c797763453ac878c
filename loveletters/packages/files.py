"""Per-page file resolution backed by the package cache.

A :class:`PageResolver` answers the compiler's file requests for one page:
plain paths are read relative to the page directory, ``@namespace/name:version``
prefixed paths are read from the package the prefix names. Reads go through a
:class:`FileCache` shared by every page of a render pass so a template used by
many pages is read from disk once.
"""

from __future__ import annotations

import dataclasses as dc
import typing as typ
from pathlib import Path, PurePosixPath

from ..errors import FileIOError
from .spec import PackageSpec

if typ.TYPE_CHECKING:
    from .cache import PackageCache


@dc.dataclass(frozen=True, slots=True)
class FileId:
    """A file requested by the compiler.

    Examples
    --------
    >>> FileId.parse("@preview/theme:0.1.0/base.html.jinja")
    FileId(package=PackageSpec(namespace='preview', name='theme', version=PackageVersion(major=0, minor=1, patch=0)), path=PurePosixPath('base.html.jinja'))
    >>> FileId.parse("partials/nav.html.jinja").package is None
    True
    """

    package: PackageSpec | None
    path: PurePosixPath

    @classmethod
    def parse(cls, name: str) -> FileId:
        """Parse a template name, rejecting paths that escape their root."""
        package: PackageSpec | None = None
        rest = name
        if name.startswith("@"):
            head, sep, rest = name.partition("/")
            version_part, sep, rest = rest.partition("/")
            if not sep:
                msg = f"Package file reference {name!r} names no file"
                raise ValueError(msg)
            package = PackageSpec.parse(f"{head}/{version_part}")
        path = PurePosixPath(rest)
        if path.is_absolute() or ".." in path.parts or not path.parts:
            msg = f"File reference {name!r} must be a relative path inside its root"
            raise ValueError(msg)
        return cls(package, path)

    def __str__(self) -> str:
        if self.package is None:
            return str(self.path)
        return f"{self.package}/{self.path}"


class FileCache:
    """Memoize file contents by absolute path for the lifetime of one build.

    Not synchronized; callers rendering pages in parallel must guard it with a
    lock or keep one cache per worker.
    """

    def __init__(self) -> None:
        self._entries: dict[Path, bytes] = {}

    def read(self, path: Path) -> bytes:
        """Return the bytes of ``path``, reading the disk on first access only."""
        content = self._entries.get(path)
        if content is None:
            content = path.read_bytes()
            self._entries[path] = content
        return content

    def __contains__(self, path: object) -> bool:
        return path in self._entries

    def __len__(self) -> int:
        return len(self._entries)


class PageResolver:
    """Resolve and read files on behalf of one page's compilation."""

    def __init__(self, root: Path, packages: PackageCache, files: FileCache) -> None:
        self.root = root
        self.packages = packages
        self.files = files

    def resolve(self, file_id: FileId) -> Path:
        """Return the absolute filesystem path of ``file_id``.

        Package references are resolved (and downloaded if necessary) through
        the package cache; its errors propagate unchanged.
        """
        if file_id.package is None:
            base = self.root
        else:
            base = self.packages.resolve(file_id.package).path
        return (base / Path(*file_id.path.parts)).absolute()

    def read_bytes(self, file_id: FileId) -> bytes:
        """Return the contents of ``file_id``.

        Raises
        ------
        FileNotFoundError
            If the file does not exist.
        FileIOError
            For any other read failure.
        """
        path = self.resolve(file_id)
        try:
            return self.files.read(path)
        except FileNotFoundError:
            raise
        except OSError as exc:
            raise FileIOError(path) from exc

    def read_text(self, file_id: FileId) -> str:
        """Return the UTF-8 contents of ``file_id`` without a leading BOM."""
        return self.read_bytes(file_id).decode("utf-8").removeprefix("\ufeff")


__all__ = ["FileCache", "FileId", "PageResolver"]
