"""Validated identifiers naming pages and sections within their parent."""

from __future__ import annotations

import dataclasses as dc
import os
import typing as typ

from ._constants import INDEX_DIRNAME
from .errors import InvalidSlugError

if typ.TYPE_CHECKING:
    from pathlib import Path


@dc.dataclass(frozen=True, slots=True, order=True)
class Slug:
    """Immutable, non-empty name derived from a content directory.

    Slugs compare and hash by value so they can key the leaf and child maps of
    a :class:`~loveletters.tree.ContentTree`.

    Examples
    --------
    >>> from pathlib import Path
    >>> Slug.from_dir(Path("content/posts/hello-world"))
    Slug('hello-world')
    >>> Slug.index().is_index
    True
    """

    value: str

    def __post_init__(self) -> None:
        if not self.value:
            msg = "Slug cannot be empty"
            raise ValueError(msg)

    @classmethod
    def from_dir(cls, path: Path) -> Slug:
        """Return the slug for the directory at ``path``.

        Raises
        ------
        InvalidSlugError
            If the base name is empty, a relative marker (``.``/``..``), or
            not representable as UTF-8 text.
        """
        name = path.name
        if not name or name in {".", ".."} or os.sep in name:
            raise InvalidSlugError(path)
        try:
            name.encode("utf-8")
        except UnicodeEncodeError as exc:
            raise InvalidSlugError(path) from exc
        return cls(name)

    @classmethod
    def index(cls) -> Slug:
        """Return the reserved slug used for a section's index page."""
        return cls(INDEX_DIRNAME)

    @property
    def is_index(self) -> bool:
        return self.value == INDEX_DIRNAME

    def __str__(self) -> str:
        return self.value

    def __repr__(self) -> str:
        return f"Slug({self.value!r})"


__all__ = ["Slug"]
