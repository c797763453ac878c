"""Attach parsed frontmatter to every discovered page.

Index pages and leaf pages each have their own schema
(:class:`IndexFrontmatter` and :class:`LeafFrontmatter`). Both require a
``title`` and a ``publication`` timestamp; any further keys are preserved in
``extra`` so templates can use them without a schema change.
"""

from __future__ import annotations

import dataclasses as dc
import datetime as dt
import tomllib
import typing as typ

from .errors import FileIOError, MalformedFrontmatterError
from .page import PageKind

if typ.TYPE_CHECKING:
    from pathlib import Path

    from .page import RawPage
    from .slug import Slug
    from .tree import ContentTree

_REQUIRED_KEYS = ("title", "publication")


@dc.dataclass(frozen=True, slots=True)
class _Frontmatter:
    title: str
    publication: dt.datetime
    extra: dict[str, typ.Any] = dc.field(default_factory=dict)

    @classmethod
    def from_mapping(cls, data: typ.Mapping[str, typ.Any], *, path: Path) -> typ.Self:
        """Validate ``data`` and build the frontmatter record.

        Raises
        ------
        MalformedFrontmatterError
            If a required key is missing or has the wrong type.
        """
        missing = [key for key in _REQUIRED_KEYS if key not in data]
        if missing:
            msg = f"missing required key(s): {', '.join(missing)}"
            raise MalformedFrontmatterError(path, msg)
        title = data["title"]
        if not isinstance(title, str):
            msg = f"'title' must be a string, got {type(title).__name__}"
            raise MalformedFrontmatterError(path, msg)
        publication = _parse_publication(data["publication"])
        if publication is None:
            msg = f"'publication' is not a valid datetime: {data['publication']!r}"
            raise MalformedFrontmatterError(path, msg)
        extra = {k: v for k, v in data.items() if k not in _REQUIRED_KEYS}
        return cls(title=title, publication=publication, extra=extra)

    def to_value(self) -> dict[str, typ.Any]:
        return {**self.extra, "title": self.title, "publication": self.publication}


class IndexFrontmatter(_Frontmatter):
    """Metadata of a section's index page (``index.toml``)."""

    __slots__ = ()


class LeafFrontmatter(_Frontmatter):
    """Metadata of a leaf page (``page.toml``)."""

    __slots__ = ()


def _parse_publication(value: object) -> dt.datetime | None:
    """Return a timezone-aware UTC datetime parsed from ``value``, or None."""
    match value:
        case dt.datetime():
            parsed = value
        case dt.date():
            parsed = dt.datetime.combine(value, dt.time())
        case str() as text:
            sanitized = text.strip()
            if sanitized.endswith("Z"):
                sanitized = sanitized[:-1] + "+00:00"
            try:
                parsed = dt.datetime.fromisoformat(sanitized)
            except ValueError:
                return None
        case _:
            return None
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=dt.UTC)
    return parsed.astimezone(dt.UTC)


F = typ.TypeVar("F", bound=_Frontmatter)


@dc.dataclass(frozen=True, slots=True)
class ParsedPage(typ.Generic[F]):
    """A page directory together with its parsed frontmatter."""

    slug: Slug
    content_dir: Path
    kind: PageKind
    frontmatter: F

    @property
    def entry_path(self) -> Path:
        return self.content_dir / self.kind.entry_filename

    def to_value(self) -> dict[str, typ.Any]:
        return {"frontmatter": self.frontmatter.to_value()}


def parse_page(page: RawPage) -> ParsedPage[_Frontmatter]:
    """Read and validate the frontmatter file of ``page``.

    Raises
    ------
    FileIOError
        If the marker file cannot be read.
    MalformedFrontmatterError
        If the file is not valid TOML or does not match the page kind's schema.
    """
    schema: type[_Frontmatter]
    match page.kind:
        case PageKind.INDEX:
            schema = IndexFrontmatter
        case PageKind.LEAF:
            schema = LeafFrontmatter
    path = page.marker_path
    try:
        text = path.read_text(encoding="utf-8")
    except UnicodeDecodeError as exc:
        raise MalformedFrontmatterError(path, "file is not valid UTF-8") from exc
    except OSError as exc:
        raise FileIOError(path) from exc
    try:
        data = tomllib.loads(text)
    except tomllib.TOMLDecodeError as exc:
        raise MalformedFrontmatterError(path, str(exc)) from exc
    frontmatter = schema.from_mapping(data, path=path)
    return ParsedPage(page.slug, page.content_dir, page.kind, frontmatter)


def attach_metadata(
    tree: ContentTree[RawPage, RawPage],
) -> ContentTree[ParsedPage[IndexFrontmatter], ParsedPage[LeafFrontmatter]]:
    """Parse the frontmatter of every page, failing on the first bad page."""
    return tree.map(parse_page, parse_page)  # type: ignore[arg-type]


__all__ = [
    "IndexFrontmatter",
    "LeafFrontmatter",
    "ParsedPage",
    "attach_metadata",
    "parse_page",
]
