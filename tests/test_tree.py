"""Unit tests for the content tree transformations."""

from __future__ import annotations

import dataclasses as dc

import pytest

from loveletters.errors import SlugCollisionError
from loveletters.slug import Slug
from loveletters.tree import ContentTree


@dc.dataclass(frozen=True, slots=True)
class Payload:
    name: str

    def to_value(self) -> dict[str, str]:
        return {"name": self.name}


def _sample_tree() -> ContentTree[str, str]:
    posts = ContentTree(
        "posts-index",
        {Slug("a"): "post-a", Slug("b"): "post-b"},
        {Slug("drafts"): ContentTree("drafts-index", {Slug("c"): "post-c"}, {})},
    )
    return ContentTree("home", {Slug("about"): "about-page"}, {Slug("posts"): posts})


def test_map_preserves_shape() -> None:
    tree = _sample_tree()
    mapped = tree.map(str.upper, len)

    assert mapped.shape() == tree.shape(), "map must not change slugs or nesting"
    assert mapped.index == "HOME", f"expected index to be mapped, got {mapped.index!r}"
    assert mapped.leaves[Slug("about")] == len("about-page"), (
        "expected leaf function to be applied to leaves"
    )
    drafts = mapped.children[Slug("posts")].children[Slug("drafts")]
    assert drafts.index == "DRAFTS-INDEX", "expected nested index pages to be mapped"


def test_map_with_identity_reproduces_tree() -> None:
    tree = _sample_tree()
    assert tree.map(lambda index: index, lambda leaf: leaf) == tree, (
        "mapping with identity functions should yield an equal tree"
    )


def test_map_composes() -> None:
    tree = _sample_tree()
    chained = tree.map(str.upper, str.upper).map(len, len)
    fused = tree.map(lambda s: len(s.upper()), lambda s: len(s.upper()))
    assert chained == fused, "two maps should equal one map of the composition"


def test_walk_hands_out_section_paths() -> None:
    seen: list[tuple[tuple[str, ...], str | None]] = []

    def on_index(path: tuple[Slug, ...], index: str) -> str:
        seen.append((tuple(slug.value for slug in path), None))
        return index

    def on_leaf(path: tuple[Slug, ...], slug: Slug, leaf: str) -> str:
        seen.append((tuple(s.value for s in path), slug.value))
        return leaf

    _sample_tree().walk(on_index, on_leaf)

    assert seen == [
        ((), None),
        ((), "about"),
        (("posts",), None),
        (("posts",), "a"),
        (("posts",), "b"),
        (("posts", "drafts"), None),
        (("posts", "drafts"), "c"),
    ], f"unexpected traversal order or paths: {seen!r}"


def test_walk_paths_are_immutable_tuples() -> None:
    tree = _sample_tree()
    result = tree.walk(lambda path, _index: path, lambda path, _slug, _leaf: path)
    nested = result.children[Slug("posts")].children[Slug("drafts")]
    assert isinstance(nested.index, tuple), "paths should be tuples"
    assert nested.index == (Slug("posts"), Slug("drafts")), (
        f"expected nested index path, got {nested.index!r}"
    )
    assert result.index == (), "the root index should receive an empty path"


def test_map_propagates_first_failure() -> None:
    calls: list[str] = []

    def failing_leaf(leaf: str) -> str:
        calls.append(leaf)
        if leaf == "post-a":
            msg = "boom"
            raise ValueError(msg)
        return leaf

    with pytest.raises(ValueError, match="boom"):
        _sample_tree().map(lambda index: index, failing_leaf)

    assert "post-b" not in calls, "traversal should stop at the first failure"


def test_to_value_projects_payloads() -> None:
    tree = ContentTree(
        Payload("home"),
        {Slug("about"): Payload("about")},
        {Slug("posts"): ContentTree(Payload("posts"), {Slug("a"): Payload("a")}, {})},
    )
    assert tree.to_value() == {
        "index": {"name": "home"},
        "pages": {"about": {"name": "about"}},
        "subsections": {
            "posts": {
                "index": {"name": "posts"},
                "pages": {"a": {"name": "a"}},
                "subsections": {},
            }
        },
    }, "to_value should mirror the tree with plain dictionaries"


def test_iter_pages_and_len_cover_every_page() -> None:
    tree = _sample_tree()
    pages = list(tree.iter_pages())
    assert len(pages) == len(tree) == 7, f"expected 7 pages, got {len(pages)}"
    assert pages[0] == ((), None, "home"), "the root index page should come first"


def test_colliding_slugs_are_rejected() -> None:
    with pytest.raises(SlugCollisionError) as excinfo:
        ContentTree("home", {Slug("posts"): "leaf"}, {Slug("posts"): ContentTree("x")})
    assert excinfo.value.slug == "posts", "expected the colliding slug to be reported"
