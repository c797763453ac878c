"""Load ``loveletters.toml`` into typed dataclasses."""

from __future__ import annotations

import tomllib
import typing as typ
from urllib.parse import urlsplit

from ..errors import EntityKind, EntityNotFoundError, FileIOError, MalformedConfigError
from .models import PackagesConfig, ProjectConfig, RootUrl

if typ.TYPE_CHECKING:
    from pathlib import Path


def load_project_config(path: Path) -> ProjectConfig:
    """Load the TOML file describing the project's title, author, and root URL.

    Parameters
    ----------
    path : Path
        Filesystem path to the project configuration (``loveletters.toml``).

    Returns
    -------
    ProjectConfig
        Parsed configuration with package registry defaults applied.

    Raises
    ------
    EntityNotFoundError
        If no file exists at ``path`` (kind ``PROJECT_CONFIG``).
    FileIOError
        If the file exists but cannot be read.
    MalformedConfigError
        If the TOML is invalid, a required field is missing or mistyped, or
        ``root`` is not an absolute URL.

    Examples
    --------
    >>> from pathlib import Path
    >>> config = load_project_config(Path("site/loveletters.toml"))  # doctest: +SKIP
    >>> config.root.server  # doctest: +SKIP
    'https://example.org'
    """
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        raise EntityNotFoundError(EntityKind.PROJECT_CONFIG, path) from exc
    except OSError as exc:
        raise FileIOError(path) from exc
    except UnicodeDecodeError as exc:
        raise MalformedConfigError(path, "file is not valid UTF-8") from exc

    try:
        raw = tomllib.loads(text)
    except tomllib.TOMLDecodeError as exc:
        raise MalformedConfigError(path, str(exc)) from exc

    title = _require_str(raw, "title", path)
    author = _require_str(raw, "author", path)
    root = _build_root_url(_require_str(raw, "root", path), path)
    packages = _build_packages_config(raw.get("packages"), path)
    return ProjectConfig(title=title, author=author, root=root, packages=packages)


def _require_str(raw: typ.Mapping[str, typ.Any], key: str, path: Path) -> str:
    """Return ``raw[key]`` when it is a string, raising otherwise."""
    if key not in raw:
        msg = f"missing required key '{key}'"
        raise MalformedConfigError(path, msg)
    value = raw[key]
    if not isinstance(value, str):
        msg = f"'{key}' must be a string, got {type(value).__name__}"
        raise MalformedConfigError(path, msg)
    return value


def _build_root_url(value: str, path: Path) -> RootUrl:
    parts = urlsplit(value.strip())
    if parts.scheme not in {"http", "https"} or not parts.netloc:
        msg = f"'root' must be an absolute http(s) URL, got {value!r}"
        raise MalformedConfigError(path, msg)
    return RootUrl(value.strip())


def _build_packages_config(payload: object, path: Path) -> PackagesConfig:
    match payload:
        case None:
            return PackagesConfig()
        case {"registry": str() as registry}:
            return PackagesConfig(registry=registry.rstrip("/"))
        case dict() if "registry" not in payload:
            return PackagesConfig()
        case _:
            msg = "'packages' must be a table with a string 'registry'"
            raise MalformedConfigError(path, msg)


__all__ = ["load_project_config"]
