"""Shared fixtures for building loveletters projects on disk."""

from __future__ import annotations

import collections.abc as cabc
import dataclasses as dc
import datetime as dt
import gzip
import io
import tarfile
import threading
import typing as typ
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer

import pytest
import requests
import structlog
import tomlkit

if typ.TYPE_CHECKING:
    from pathlib import Path

PUBLISHED = dt.datetime(2024, 5, 1, 12, 0, tzinfo=dt.UTC)

INDEX_TEMPLATE = """\
<!doctype html>
<html>
  <head><title>{{ loveletters.page.frontmatter.title }}</title></head>
  <body>
    <h1>{{ loveletters.project.title }}</h1>
    <ul class="pages">
    {% for slug, page in loveletters.project.content.subsections.posts.pages.items() %}
      <li data-slug="{{ slug }}">{{ page.frontmatter.title }}</li>
    {% endfor %}
    </ul>
  </body>
</html>
"""

POSTS_INDEX_TEMPLATE = """\
<html><body><h1>{{ loveletters.page.frontmatter.title }}</h1></body></html>
"""

LEAF_TEMPLATE = """\
<html>
  <body>
    <article data-slug="{{ loveletters.page.slug }}">
      <h1>{{ loveletters.page.frontmatter.title }}</h1>
      <p class="byline">{{ loveletters.project.author }}</p>
    </article>
  </body>
</html>
"""


def write_toml(path: Path, data: dict[str, typ.Any]) -> Path:
    """Serialize ``data`` to ``path`` with tomlkit, creating parent folders."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(tomlkit.dumps(data), encoding="utf-8")
    return path


def write_page(
    directory: Path,
    marker: str,
    entry: str,
    *,
    title: str,
    template: str,
    **extra: typ.Any,
) -> Path:
    """Create a page directory with frontmatter and an entry template."""
    write_toml(directory / marker, {"title": title, "publication": PUBLISHED, **extra})
    (directory / entry).write_text(template, encoding="utf-8")
    return directory


def write_index(directory: Path, *, title: str, template: str, **extra: typ.Any) -> Path:
    return write_page(
        directory, "index.toml", "index.html.jinja", title=title, template=template, **extra
    )


def write_leaf(directory: Path, *, title: str, template: str, **extra: typ.Any) -> Path:
    return write_page(
        directory, "page.toml", "page.html.jinja", title=title, template=template, **extra
    )


def make_archive(files: dict[str, str]) -> bytes:
    """Return a gzip-compressed tarball holding ``files``."""
    buffer = io.BytesIO()
    with tarfile.open(fileobj=buffer, mode="w") as tar:
        for name, text in files.items():
            payload = text.encode("utf-8")
            info = tarfile.TarInfo(name)
            info.size = len(payload)
            tar.addfile(info, io.BytesIO(payload))
    return gzip.compress(buffer.getvalue())


@dc.dataclass(slots=True)
class SiteLayout:
    """Paths of a sample project created by the ``site`` fixture."""

    input_dir: Path
    output_dir: Path
    cache_dir: Path

    @property
    def content_dir(self) -> Path:
        return self.input_dir / "content"

    @property
    def posts_dir(self) -> Path:
        return self.content_dir / "posts"


@pytest.fixture
def site(tmp_path: Path) -> SiteLayout:
    """Return a project with a home page, a posts section and two posts."""
    layout = SiteLayout(tmp_path / "site", tmp_path / "public", tmp_path / "cache")
    layout.output_dir.mkdir()
    layout.cache_dir.mkdir()
    write_toml(
        layout.input_dir / "loveletters.toml",
        {"title": "Love Letters", "author": "Ada", "root": "https://example.org/blog"},
    )
    write_index(layout.content_dir / "_index", title="Home", template=INDEX_TEMPLATE)
    write_index(
        layout.posts_dir / "_index", title="Posts", template=POSTS_INDEX_TEMPLATE
    )
    write_leaf(layout.posts_dir / "a", title="First letter", template=LEAF_TEMPLATE)
    write_leaf(layout.posts_dir / "b", title="Second letter", template=LEAF_TEMPLATE)
    return layout


@pytest.fixture(autouse=True)
def _reset_logging() -> cabc.Iterator[None]:
    """Undo logging configuration applied by CLI commands."""
    yield
    structlog.reset_defaults()


@dc.dataclass(slots=True)
class FakeRegistry:
    """Scripted package registry served over HTTP on localhost.

    Each request consumes the next entry of ``replies``: a ``(status, body)``
    pair, or ``None`` to drop the connection without answering. Requests
    beyond the script get a ``404``.
    """

    url: str = ""
    replies: list[tuple[int, bytes] | None] = dc.field(default_factory=list)
    paths: list[str] = dc.field(default_factory=list)
    session: requests.Session = dc.field(default_factory=requests.Session)


class _RegistryHandler(BaseHTTPRequestHandler):
    registry: FakeRegistry

    def do_GET(self) -> None:  # noqa: N802 - http.server naming
        self.registry.paths.append(self.path)
        reply = self.registry.replies.pop(0) if self.registry.replies else (404, b"")
        if reply is None:
            self.close_connection = True
            return
        status, body = reply
        self.send_response(status)
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    def log_message(self, *_args: typ.Any) -> None:
        return


@pytest.fixture
def registry() -> cabc.Iterator[FakeRegistry]:
    """Serve a :class:`FakeRegistry` from a background thread."""
    fake = FakeRegistry()
    fake.session.trust_env = False
    handler = type("_BoundRegistryHandler", (_RegistryHandler,), {"registry": fake})
    server = ThreadingHTTPServer(("127.0.0.1", 0), handler)
    fake.url = f"http://127.0.0.1:{server.server_address[1]}"
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    try:
        yield fake
    finally:
        server.shutdown()
        server.server_close()
        thread.join()
        fake.session.close()
