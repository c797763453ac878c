"""Load and validate the project configuration of a loveletters site.

This subpackage parses the project's ``loveletters.toml`` and produces typed
dataclasses (:class:`ProjectConfig`, :class:`RootUrl`, :class:`PackagesConfig`)
that the renderer exposes to templates. The primary entry point is
:func:`load_project_config`.

Examples
--------
>>> from pathlib import Path
>>> from loveletters.config import load_project_config
>>> config = load_project_config(Path("site/loveletters.toml"))  # doctest: +SKIP
>>> config.to_value()["root"]  # doctest: +SKIP
{'server': 'https://example.org', 'path': '/blog'}
"""

from .loader import load_project_config
from .models import PackagesConfig, ProjectConfig, RootUrl

__all__ = [
    "PackagesConfig",
    "ProjectConfig",
    "RootUrl",
    "load_project_config",
]
