"""Resolve resource packages to unpacked directories on disk.

Packages in the ``loveletters`` namespace are vendored with the project under
``<project>/packages/<name>/<version>`` and never touch the network. Every other
namespace is served by a package registry: archives are downloaded once,
unpacked under ``<cache-root>/<namespace>/<name>/<version>`` and reused by
later builds.

Example
-------
>>> from pathlib import Path
>>> from loveletters.packages import PackageCache, PackageSpec
>>> cache = PackageCache(Path("site/packages"))  # doctest: +SKIP
>>> cache.resolve(PackageSpec.parse("@preview/theme:0.1.0")).path  # doctest: +SKIP
PosixPath('/tmp/preview/theme/0.1.0')
"""

from __future__ import annotations

import dataclasses as dc
import enum
import gzip
import io
import os
import shutil
import tarfile
import tempfile
import typing as typ
import zlib
from http import HTTPStatus
from pathlib import Path

import requests
import structlog
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from .._constants import (
    CACHE_DIR_ENV,
    DEFAULT_REGISTRY_URL,
    PROJECT_NAMESPACE,
    REGISTRY_ARCHIVE_TEMPLATE,
)
from ..errors import (
    PackageFetchError,
    PackageNotFoundError,
    PackageVersionNotFoundError,
)

if typ.TYPE_CHECKING:
    from .spec import PackageSpec

logger = structlog.get_logger()

RETRY_STATUSES = frozenset(range(HTTPStatus.BAD_REQUEST, 600))


class Provenance(enum.Enum):
    """Where a resolved package directory came from."""

    VENDORED = "vendored"
    CACHED = "cached"
    DOWNLOADED = "downloaded"


@dc.dataclass(frozen=True, slots=True)
class CacheEntry:
    """Resolved on-disk location of a package."""

    spec: PackageSpec
    path: Path
    provenance: Provenance


def default_cache_dir() -> Path:
    """Return ``$CACHE_DIRECTORY`` when set, else the platform temp directory."""
    override = os.environ.get(CACHE_DIR_ENV)
    if override:
        return Path(override)
    return Path(tempfile.gettempdir())


def download_retry() -> Retry:
    """Return the retry policy for registry downloads.

    A failed attempt (connection error, timeout or error status) is retried
    exactly once without backoff. Redirects are left to ``requests``; the last
    response is returned rather than raised so the caller can report its
    status code.
    """
    return Retry(
        total=1,
        connect=1,
        read=1,
        status=1,
        status_forcelist=RETRY_STATUSES,
        allowed_methods=("GET",),
        backoff_factor=0,
        raise_on_status=False,
    )


class PackageCache:
    """Look up vendored packages and download registry packages on demand.

    The cache is safe to share across every page of one build. It is not
    synchronized: concurrent resolutions of the same spec would download the
    archive twice.
    """

    def __init__(
        self,
        project_packages_dir: Path,
        *,
        cache_dir: Path | None = None,
        registry: str = DEFAULT_REGISTRY_URL,
        session: requests.Session | None = None,
        timeout: float = 30.0,
    ) -> None:
        """Initialise the cache.

        Parameters
        ----------
        project_packages_dir : Path
            Directory holding packages of the ``loveletters`` namespace.
        cache_dir : Path, optional
            Root of the download cache; defaults to :func:`default_cache_dir`.
        registry : str, optional
            Base URL of the package registry.
        session : requests.Session, optional
            Session used for downloads; a new one is created when omitted.
        timeout : float, optional
            Per-request timeout in seconds. Defaults to ``30.0``.
        """
        self.project_packages_dir = project_packages_dir
        self.cache_dir = cache_dir or default_cache_dir()
        self.registry = registry.rstrip("/")
        self._session = session or requests.Session()
        adapter = HTTPAdapter(max_retries=download_retry())
        self._session.mount("https://", adapter)
        self._session.mount("http://", adapter)
        self._headers = {"User-Agent": "loveletters/0.1"}
        self.timeout = timeout

    def resolve(self, spec: PackageSpec) -> CacheEntry:
        """Return the unpacked directory for ``spec``, fetching it if needed.

        Raises
        ------
        PackageNotFoundError
            If a project-namespace package has no directory.
        PackageVersionNotFoundError
            If a project-namespace package lacks the requested version.
        PackageFetchError
            If the download fails twice or the archive cannot be unpacked.
        """
        if spec.namespace == PROJECT_NAMESPACE:
            return self._resolve_project(spec)
        return self._resolve_registry(spec)

    def archive_url(self, spec: PackageSpec) -> str:
        """Return the registry URL of the archive for ``spec``."""
        return REGISTRY_ARCHIVE_TEMPLATE.format(
            registry=self.registry,
            namespace=spec.namespace,
            name=spec.name,
            version=spec.version,
        )

    def _resolve_project(self, spec: PackageSpec) -> CacheEntry:
        package_dir = self.project_packages_dir / spec.name
        if not package_dir.is_dir():
            raise PackageNotFoundError(spec, package_dir)
        version_dir = package_dir / str(spec.version)
        if not version_dir.is_dir():
            raise PackageVersionNotFoundError(spec, spec.version, version_dir)
        return CacheEntry(spec, version_dir, Provenance.VENDORED)

    def _resolve_registry(self, spec: PackageSpec) -> CacheEntry:
        path = self.cache_dir / spec.cache_subdir
        if path.is_dir():
            logger.debug("package_cache_hit", spec=str(spec), path=str(path))
            return CacheEntry(spec, path, Provenance.CACHED)

        url = self.archive_url(spec)
        logger.info("package_downloading", spec=str(spec), url=url)
        archive = self._get(spec, url)
        self._unpack(spec, archive, path)
        return CacheEntry(spec, path, Provenance.DOWNLOADED)

    def _get(self, spec: PackageSpec, url: str) -> bytes:
        """Return the body of a 2xx response; the mounted adapter retries once."""
        try:
            response = self._session.get(
                url, headers=self._headers, timeout=self.timeout
            )
        except requests.RequestException as exc:
            raise PackageFetchError(spec, str(exc)) from exc
        if not HTTPStatus.OK <= response.status_code < HTTPStatus.MULTIPLE_CHOICES:
            msg = f"response returned unsuccessful status code {response.status_code}"
            raise PackageFetchError(spec, msg)
        return response.content

    @staticmethod
    def _unpack(spec: PackageSpec, archive: bytes, target: Path) -> None:
        """Unpack a gzip-compressed tarball into ``target``.

        Extraction happens in a hidden staging directory beside ``target`` that
        is renamed into place on success and removed on failure, so ``target``
        only ever exists fully extracted.
        """
        try:
            raw = gzip.decompress(archive)
        except (OSError, EOFError, zlib.error) as exc:
            msg = f"malformed archive: {exc}"
            raise PackageFetchError(spec, msg) from exc

        staging = target.with_name(f".{target.name}.partial")
        try:
            shutil.rmtree(staging, ignore_errors=True)
            staging.mkdir(parents=True)
            with tarfile.open(fileobj=io.BytesIO(raw), mode="r:") as tar:
                tar.extractall(staging, filter="data")
            staging.rename(target)
        except (tarfile.TarError, OSError) as exc:
            shutil.rmtree(staging, ignore_errors=True)
            msg = f"malformed archive: {exc}"
            raise PackageFetchError(spec, msg) from exc


__all__ = [
    "CacheEntry",
    "PackageCache",
    "Provenance",
    "default_cache_dir",
    "download_retry",
]
