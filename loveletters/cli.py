"""Cyclopts CLI entrypoint for building loveletters sites.

The ``loveletters`` console script renders a project directory into a static
site and can pre-populate the package cache so later builds work offline.

Examples
--------
Render the project in ``site`` into ``public``:

>>> from loveletters.cli import app
>>> app(["render", "site", "public"])  # doctest: +SKIP

Download a registry package ahead of time:

>>> app(["fetch", "@preview/quill:0.1.0"])  # doctest: +SKIP
"""

from __future__ import annotations

import logging
import sys
import typing as typ
from pathlib import Path

import cyclopts
import structlog
from cyclopts import App, Parameter

from ._constants import PROJECT_PACKAGES_DIRNAME
from .errors import CompilationError, LovelettersError
from .packages import PackageCache, PackageSpec
from .project import render_project

app = App(name="loveletters", config=cyclopts.config.Env("LOVELETTERS_", command=False))  # type: ignore[unknown-argument]


def _format_path(path: Path) -> str:
    """Return a cwd-relative path when possible, otherwise the absolute path."""
    if path.is_absolute():
        try:
            return str(path.relative_to(Path.cwd()))
        except ValueError:
            return str(path)
    return str(path)


def _configure_logging(*, verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(colors=False),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
    )


def _fail(exc: LovelettersError) -> typ.NoReturn:
    """Report ``exc`` on stderr and exit with status 1."""
    if isinstance(exc, CompilationError):
        print(exc.describe(), file=sys.stderr)
    else:
        print(f"error: {exc}", file=sys.stderr)
    raise SystemExit(1) from exc


@app.command(help="Render a project directory into a static site.")
def render(
    input_dir: typ.Annotated[Path, Parameter(help="Project directory")],
    output_dir: typ.Annotated[Path, Parameter(help="Existing output directory")],
    *,
    verbose: typ.Annotated[
        bool, Parameter(help="Log every discovered and rendered page")
    ] = False,
    cache_dir: typ.Annotated[
        Path | None,
        Parameter(
            help="Package cache root (defaults to $CACHE_DIRECTORY or the temp dir)",
            env_var="LOVELETTERS_CACHE_DIR",
        ),
    ] = None,
) -> None:
    """Render ``input_dir`` into ``output_dir``.

    Parameters
    ----------
    input_dir : Path
        Project directory holding ``loveletters.toml`` and ``content/``.
    output_dir : Path
        Directory receiving the generated HTML; it must already exist.
    verbose : bool, optional
        Enable debug logging.
    cache_dir : Path or None, optional
        Override the package cache root.

    Raises
    ------
    SystemExit
        With status 1 when the build fails.
    """
    _configure_logging(verbose=verbose)
    try:
        result = render_project(input_dir, output_dir, cache_dir=cache_dir)
    except LovelettersError as exc:
        _fail(exc)
    for path in result.written:
        print(f"wrote {_format_path(path)}")


@app.command(help="Download a package into the cache and print its location.")
def fetch(
    spec: typ.Annotated[str, Parameter(help="Package spec, e.g. @preview/quill:0.1.0")],
    *,
    packages_dir: typ.Annotated[
        Path,
        Parameter(
            help="Directory of the project's own packages",
            env_var="LOVELETTERS_PACKAGES_DIR",
        ),
    ] = Path(PROJECT_PACKAGES_DIRNAME),
    cache_dir: typ.Annotated[
        Path | None,
        Parameter(
            help="Package cache root (defaults to $CACHE_DIRECTORY or the temp dir)",
            env_var="LOVELETTERS_CACHE_DIR",
        ),
    ] = None,
) -> None:
    """Resolve ``spec`` through the package cache and print the directory.

    Raises
    ------
    SystemExit
        With status 1 when the package spec is malformed or the package cannot be
        found or downloaded.
    """
    _configure_logging(verbose=False)
    try:
        package = PackageSpec.parse(spec)
    except ValueError as exc:
        print(f"error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc
    try:
        entry = PackageCache(packages_dir, cache_dir=cache_dir).resolve(package)
    except LovelettersError as exc:
        _fail(exc)
    print(f"{entry.provenance.value} {_format_path(entry.path)}")


def main() -> None:
    """Invoke the Cyclopts application behind the ``loveletters`` command.

    Examples
    --------
    >>> main()  # doctest: +SKIP
    """
    app()


if __name__ == "__main__":  # pragma: no cover - manual invocation helper
    main()
