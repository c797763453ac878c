"""Static site builder rendering a directory of pages into HTML.

A loveletters project is a directory holding ``loveletters.toml`` and a
``content/`` tree of page directories. Each page carries TOML frontmatter and
a Jinja2 entry template; templates may pull shared layouts from versioned
resource packages, either vendored under ``packages/`` or downloaded from a
package registry.

Exports
-------
- ``app``: Cyclopts application behind the ``loveletters`` command.
- ``main``: Convenience function that invokes the Cyclopts app.
- ``render_project``: Build a project programmatically.

Examples
--------
>>> from pathlib import Path
>>> from loveletters import render_project
>>> render_project(Path("site"), Path("public")).written  # doctest: +SKIP
[PosixPath('public/index.html'), PosixPath('public/posts/index.html')]
"""

from __future__ import annotations

from .cli import app, main
from .project import BuildResult, render_project

__all__ = ["BuildResult", "app", "main", "render_project"]
