"""Typed dataclasses describing a loveletters project configuration."""

from __future__ import annotations

import dataclasses as dc
import typing as typ
from urllib.parse import urlsplit

from .._constants import DEFAULT_REGISTRY_URL


@dc.dataclass(frozen=True, slots=True)
class RootUrl:
    """Public URL the rendered site is served from."""

    url: str

    @property
    def server(self) -> str:
        """Return ``scheme://host[:port]`` without the path."""
        parts = urlsplit(self.url)
        return f"{parts.scheme}://{parts.netloc}"

    @property
    def path(self) -> str:
        """Return the URL path, ``/`` when the URL has none."""
        return urlsplit(self.url).path or "/"

    def to_value(self) -> dict[str, str]:
        return {"server": self.server, "path": self.path}


@dc.dataclass(frozen=True, slots=True)
class PackagesConfig:
    """Where registry packages are downloaded from."""

    registry: str = DEFAULT_REGISTRY_URL


@dc.dataclass(frozen=True, slots=True)
class ProjectConfig:
    """Top-level settings read from ``loveletters.toml``.

    Attributes
    ----------
    title : str
        Site title exposed to templates.
    author : str
        Site author exposed to templates.
    root : RootUrl
        Absolute URL the site is published under.
    packages : PackagesConfig
        Package registry settings.
    """

    title: str
    author: str
    root: RootUrl
    packages: PackagesConfig = dc.field(default_factory=PackagesConfig)

    def to_value(self) -> dict[str, typ.Any]:
        return {
            "title": self.title,
            "author": self.author,
            "root": self.root.to_value(),
        }


__all__ = ["PackagesConfig", "ProjectConfig", "RootUrl"]
