"""Namespaced resource packages: lookup, download, extraction, and caching."""

from .cache import CacheEntry, PackageCache, Provenance, default_cache_dir
from .files import FileCache, FileId, PageResolver
from .spec import PackageSpec, PackageVersion

__all__ = [
    "CacheEntry",
    "FileCache",
    "FileId",
    "PackageCache",
    "PackageSpec",
    "PackageVersion",
    "PageResolver",
    "Provenance",
    "default_cache_dir",
]
