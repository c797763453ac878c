"""Build a whole loveletters project from its input directory.

Example
-------
>>> from pathlib import Path
>>> from loveletters.project import render_project
>>> result = render_project(Path("site"), Path("public"))  # doctest: +SKIP
>>> [str(path) for path in result.written]  # doctest: +SKIP
['public/index.html', 'public/posts/index.html', 'public/posts/hello/index.html']
"""

from __future__ import annotations

import dataclasses as dc
import typing as typ

import structlog

from ._constants import CONTENT_DIRNAME, PROJECT_CONFIG_FILENAME, PROJECT_PACKAGES_DIRNAME
from .bundling import Bundler
from .config import load_project_config
from .discovery import Discoverer
from .errors import EntityKind, EntityNotFoundError
from .frontmatter import attach_metadata
from .packages import PackageCache
from .rendering import Renderer

if typ.TYPE_CHECKING:
    import datetime as dt
    from pathlib import Path

    import requests

    from .rendering import Compiler, RenderedPage
    from .tree import ContentTree

logger = structlog.get_logger()


@dc.dataclass(frozen=True, slots=True)
class BuildResult:
    """Outcome of a successful build."""

    tree: ContentTree[RenderedPage, RenderedPage]
    written: list[Path]
    output_dir: Path


def _require_dir(path: Path, kind: EntityKind) -> Path:
    if not path.is_dir():
        raise EntityNotFoundError(kind, path)
    return path.resolve()


def render_project(
    input_dir: Path,
    output_dir: Path,
    *,
    compiler: Compiler | None = None,
    cache_dir: Path | None = None,
    session: requests.Session | None = None,
    today: dt.date | None = None,
) -> BuildResult:
    """Discover, render and bundle the project in ``input_dir``.

    Nothing is written to ``output_dir`` unless every page renders.

    Parameters
    ----------
    input_dir : Path
        Project directory holding ``loveletters.toml`` and ``content/``.
    output_dir : Path
        Existing directory receiving the generated site.
    compiler : Compiler, optional
        Page compiler; defaults to the Jinja2 compiler.
    cache_dir : Path, optional
        Root of the package download cache.
    session : requests.Session, optional
        HTTP session used to download registry packages.
    today : datetime.date, optional
        Build date shown to templates.

    Raises
    ------
    EntityNotFoundError
        If the input directory, output directory, project configuration or
        content directory is missing.
    LovelettersError
        For any failure of discovery, metadata parsing, rendering or writing.
    """
    input_dir = _require_dir(input_dir, EntityKind.INPUT_DIRECTORY)
    output_dir = _require_dir(output_dir, EntityKind.OUTPUT_DIRECTORY)
    config = load_project_config(input_dir / PROJECT_CONFIG_FILENAME)
    content_dir = _require_dir(input_dir / CONTENT_DIRNAME, EntityKind.CONTENT_DIRECTORY)

    logger.info("project_rendering", input_dir=str(input_dir), output_dir=str(output_dir))
    tree = attach_metadata(Discoverer(content_dir).discover())
    packages = PackageCache(
        input_dir / PROJECT_PACKAGES_DIRNAME,
        cache_dir=cache_dir,
        registry=config.packages.registry,
        session=session,
    )
    rendered = Renderer(config, packages, compiler, today).render(tree)
    written = Bundler(output_dir).bundle(rendered)
    logger.info("project_rendered", pages=len(written))
    return BuildResult(rendered, written, output_dir)


__all__ = ["BuildResult", "render_project"]
