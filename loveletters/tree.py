"""Recursive content tree threaded through every stage of the build.

A :class:`ContentTree` holds one index payload, a mapping of leaf payloads and
a mapping of nested sub-trees, all keyed by :class:`~loveletters.slug.Slug`.
The tree is generic over its payload types: discovery produces a tree of raw
page handles, metadata attachment turns it into a tree of parsed pages,
rendering into a tree of documents, and so on. Each stage is a :meth:`map` or
:meth:`walk` that returns a new tree of identical shape.

Transformation functions signal failure by raising. The first exception
aborts the traversal and reaches the caller unchanged; no partially
transformed tree is ever returned.

Examples
--------
>>> from loveletters.slug import Slug
>>> tree = ContentTree("home", {Slug("about"): "about me"}, {})
>>> tree.map(str.upper, str.upper).leaves[Slug("about")]
'ABOUT ME'
>>> tree.walk(lambda path, index: path, lambda path, slug, leaf: (*path, slug)).index
()
"""

from __future__ import annotations

import collections.abc as cabc
import dataclasses as dc
import typing as typ
from pathlib import PurePosixPath

from .errors import SlugCollisionError

if typ.TYPE_CHECKING:
    from .slug import Slug

I = typ.TypeVar("I")  # noqa: E741
L = typ.TypeVar("L")
J = typ.TypeVar("J")
M = typ.TypeVar("M")

SectionPath = tuple["Slug", ...]


class SupportsValue(typ.Protocol):
    """Payload that can project itself onto plain structured values."""

    def to_value(self) -> typ.Any: ...


@dc.dataclass(frozen=True, slots=True)
class ContentTree(typ.Generic[I, L]):
    """One section of a project: its index page, leaf pages and sub-sections.

    Attributes
    ----------
    index : I
        Payload of the section's own index page.
    leaves : dict[Slug, L]
        Leaf pages contained directly in this section.
    children : dict[Slug, ContentTree[I, L]]
        Nested sections.

    Raises
    ------
    SlugCollisionError
        If a slug names both a leaf and a child of the same section.
    """

    index: I
    leaves: dict[Slug, L] = dc.field(default_factory=dict)
    children: dict[Slug, ContentTree[I, L]] = dc.field(default_factory=dict)

    def __post_init__(self) -> None:
        collisions = sorted(self.leaves.keys() & self.children.keys())
        if collisions:
            slug = collisions[0]
            raise SlugCollisionError(PurePosixPath(slug.value), slug.value)

    def map(
        self,
        f_index: cabc.Callable[[I], J],
        f_leaf: cabc.Callable[[L], M],
    ) -> ContentTree[J, M]:
        """Transform every payload, ignoring where it sits in the tree.

        If you need the fully qualified section path of a payload, use
        :meth:`walk` instead.
        """
        return self.walk(
            lambda _path, index: f_index(index),
            lambda _path, _slug, leaf: f_leaf(leaf),
        )

    def walk(
        self,
        f_index: cabc.Callable[[SectionPath, I], J],
        f_leaf: cabc.Callable[[SectionPath, Slug, L], M],
    ) -> ContentTree[J, M]:
        """Transform every payload with access to its position in the tree.

        ``f_index`` receives the sequence of slugs leading from the root to the
        section owning the index page (empty for the root itself).
        ``f_leaf`` receives the path of the containing section together with
        the leaf's own slug.
        """
        return self._walk((), f_index, f_leaf)

    def _walk(
        self,
        path: SectionPath,
        f_index: cabc.Callable[[SectionPath, I], J],
        f_leaf: cabc.Callable[[SectionPath, Slug, L], M],
    ) -> ContentTree[J, M]:
        new_index = f_index(path, self.index)
        new_leaves = {slug: f_leaf(path, slug, leaf) for slug, leaf in self.leaves.items()}
        new_children = {
            slug: child._walk((*path, slug), f_index, f_leaf)
            for slug, child in self.children.items()
        }
        return ContentTree(new_index, new_leaves, new_children)

    def to_value(
        self: ContentTree[SupportsValue, SupportsValue],
    ) -> dict[str, typ.Any]:
        """Project the tree onto nested dictionaries of plain values."""
        return {
            "index": self.index.to_value(),
            "pages": {
                slug.value: leaf.to_value() for slug, leaf in self.leaves.items()
            },
            "subsections": {
                slug.value: child.to_value() for slug, child in self.children.items()
            },
        }

    def iter_pages(self) -> cabc.Iterator[tuple[SectionPath, Slug | None, I | L]]:
        """Yield ``(section_path, leaf_slug, payload)`` depth-first.

        Index pages are yielded with ``None`` in place of the leaf slug.
        """
        yield from self._iter_pages(())

    def _iter_pages(
        self, path: SectionPath
    ) -> cabc.Iterator[tuple[SectionPath, Slug | None, I | L]]:
        yield path, None, self.index
        for slug, leaf in self.leaves.items():
            yield path, slug, leaf
        for slug, child in self.children.items():
            yield from child._iter_pages((*path, slug))

    def shape(self) -> dict[str, typ.Any]:
        """Return the slugs and nesting of the tree without any payloads."""
        return {
            "pages": sorted(slug.value for slug in self.leaves),
            "subsections": {
                slug.value: child.shape() for slug, child in self.children.items()
            },
        }

    def __len__(self) -> int:
        return 1 + len(self.leaves) + sum(len(child) for child in self.children.values())


__all__ = ["ContentTree", "SectionPath", "SupportsValue"]
