"""Unit tests for package resolution, download and caching."""

from __future__ import annotations

import gzip
import typing as typ

import pytest
import requests
from conftest import FakeRegistry, make_archive

from loveletters.errors import (
    EntityKind,
    PackageFetchError,
    PackageNotFoundError,
    PackageVersionNotFoundError,
)
from loveletters.packages import PackageCache, PackageSpec, Provenance, default_cache_dir

if typ.TYPE_CHECKING:
    from pathlib import Path

    from pytest_mock import MockerFixture

THEME = PackageSpec.parse("@preview/theme:0.1.0")


def _response(mocker: MockerFixture, status: int, content: bytes = b"") -> typ.Any:
    response = mocker.Mock()
    response.status_code = status
    response.content = content
    return response


def _cache(tmp_path: Path, session: requests.Session) -> PackageCache:
    return PackageCache(
        tmp_path / "packages",
        cache_dir=tmp_path / "cache",
        registry="https://registry.example.invalid/",
        session=session,
    )


def test_download_extracts_into_cache(tmp_path: Path, mocker: MockerFixture) -> None:
    session = mocker.Mock(spec=requests.Session)
    archive = make_archive({"base.html.jinja": "<main>{% block body %}{% endblock %}</main>"})
    session.get.return_value = _response(mocker, 200, archive)

    entry = _cache(tmp_path, session).resolve(THEME)

    assert entry.provenance is Provenance.DOWNLOADED
    assert entry.path == tmp_path / "cache" / "preview" / "theme" / "0.1.0"
    assert (entry.path / "base.html.jinja").is_file(), "archive should be unpacked"
    called_url = session.get.call_args.args[0]
    assert called_url == "https://registry.example.invalid/preview/theme-0.1.0.tar.gz", (
        f"unexpected archive URL {called_url!r}"
    )
    assert session.get.call_args.kwargs["headers"]["User-Agent"].startswith("loveletters"), (
        "downloads should identify the client"
    )


def test_cached_package_skips_network(tmp_path: Path, mocker: MockerFixture) -> None:
    session = mocker.Mock(spec=requests.Session)
    cached = tmp_path / "cache" / "preview" / "theme" / "0.1.0"
    cached.mkdir(parents=True)

    entry = _cache(tmp_path, session).resolve(THEME)

    assert entry.provenance is Provenance.CACHED
    assert entry.path == cached
    session.get.assert_not_called()


def test_second_resolution_uses_cache(tmp_path: Path, mocker: MockerFixture) -> None:
    session = mocker.Mock(spec=requests.Session)
    session.get.return_value = _response(mocker, 200, make_archive({"a.txt": "a"}))
    cache = _cache(tmp_path, session)

    first = cache.resolve(THEME)
    second = cache.resolve(THEME)

    assert first.path == second.path
    assert second.provenance is Provenance.CACHED
    assert session.get.call_count == 1, "a cached package must not be downloaded again"


def _registry_cache(tmp_path: Path, registry: FakeRegistry) -> PackageCache:
    return PackageCache(
        tmp_path / "packages",
        cache_dir=tmp_path / "cache",
        registry=registry.url,
        session=registry.session,
    )


def test_download_adapter_retries_once(tmp_path: Path) -> None:
    session = requests.Session()
    _cache(tmp_path, session)

    retry = session.get_adapter("https://registry.example.invalid/").max_retries

    assert retry.total == 1, "downloads should be attempted at most twice"
    assert retry.backoff_factor == 0
    assert {404, 500, 503} <= set(retry.status_forcelist or ())
    assert not retry.raise_on_status, "the last status should reach the caller"


def test_error_status_is_retried(tmp_path: Path, registry: FakeRegistry) -> None:
    registry.replies = [(503, b""), (200, make_archive({"a.txt": "a"}))]

    entry = _registry_cache(tmp_path, registry).resolve(THEME)

    assert entry.provenance is Provenance.DOWNLOADED
    assert registry.paths == ["/preview/theme-0.1.0.tar.gz"] * 2, (
        f"expected exactly one retry, got {registry.paths!r}"
    )


def test_dropped_connection_is_retried(tmp_path: Path, registry: FakeRegistry) -> None:
    registry.replies = [None, (200, make_archive({"a.txt": "a"}))]

    entry = _registry_cache(tmp_path, registry).resolve(THEME)

    assert (entry.path / "a.txt").read_text(encoding="utf-8") == "a"
    assert len(registry.paths) == 2


def test_two_failures_raise_fetch_error(tmp_path: Path, registry: FakeRegistry) -> None:
    registry.replies = [(404, b""), (404, b""), (200, make_archive({"a.txt": "a"}))]

    with pytest.raises(PackageFetchError, match="unsuccessful status code 404") as excinfo:
        _registry_cache(tmp_path, registry).resolve(THEME)

    assert excinfo.value.spec == THEME
    assert len(registry.paths) == 2, "expected the initial attempt plus one retry"
    assert not (tmp_path / "cache" / "preview" / "theme" / "0.1.0").exists()


def test_two_dropped_connections_raise_fetch_error(
    tmp_path: Path, registry: FakeRegistry
) -> None:
    registry.replies = [None, None]

    with pytest.raises(PackageFetchError):
        _registry_cache(tmp_path, registry).resolve(THEME)

    assert len(registry.paths) == 2


def test_corrupt_archive_leaves_no_cache_entry(
    tmp_path: Path, mocker: MockerFixture
) -> None:
    session = mocker.Mock(spec=requests.Session)
    session.get.return_value = _response(mocker, 200, b"definitely not gzip")

    with pytest.raises(PackageFetchError, match="malformed archive"):
        _cache(tmp_path, session).resolve(THEME)

    theme_dir = tmp_path / "cache" / "preview" / "theme"
    leftovers = list(theme_dir.iterdir()) if theme_dir.exists() else []
    assert leftovers == [], f"no partial extraction should remain, found {leftovers!r}"


def test_truncated_tarball_leaves_no_cache_entry(
    tmp_path: Path, mocker: MockerFixture
) -> None:
    session = mocker.Mock(spec=requests.Session)
    payload = gzip.decompress(make_archive({"a.txt": "a" * 4096}))
    session.get.return_value = _response(mocker, 200, gzip.compress(payload[:700]))

    with pytest.raises(PackageFetchError):
        _cache(tmp_path, session).resolve(THEME)

    theme_dir = tmp_path / "cache" / "preview" / "theme"
    leftovers = list(theme_dir.iterdir()) if theme_dir.exists() else []
    assert leftovers == [], f"no partial extraction should remain, found {leftovers!r}"


def test_failed_extraction_is_downloaded_again(
    tmp_path: Path, mocker: MockerFixture
) -> None:
    session = mocker.Mock(spec=requests.Session)
    session.get.side_effect = [
        _response(mocker, 200, b"definitely not gzip"),
        _response(mocker, 200, make_archive({"a.txt": "a"})),
    ]
    cache = _cache(tmp_path, session)

    with pytest.raises(PackageFetchError, match="malformed archive"):
        cache.resolve(THEME)
    entry = cache.resolve(THEME)

    assert entry.provenance is Provenance.DOWNLOADED, (
        "a failed extraction must not leave a cache hit behind"
    )
    assert (entry.path / "a.txt").read_text(encoding="utf-8") == "a"
    assert session.get.call_count == 2


def test_project_packages_are_vendored(tmp_path: Path, mocker: MockerFixture) -> None:
    session = mocker.Mock(spec=requests.Session)
    vendored = tmp_path / "packages" / "layout" / "1.2.3"
    vendored.mkdir(parents=True)

    entry = _cache(tmp_path, session).resolve(PackageSpec.parse("@loveletters/layout:1.2.3"))

    assert entry.provenance is Provenance.VENDORED
    assert entry.path == vendored
    session.get.assert_not_called()


def test_missing_project_package(tmp_path: Path, mocker: MockerFixture) -> None:
    session = mocker.Mock(spec=requests.Session)

    with pytest.raises(PackageNotFoundError) as excinfo:
        _cache(tmp_path, session).resolve(PackageSpec.parse("@loveletters/nope:1.0.0"))

    assert excinfo.value.kind is EntityKind.PACKAGE
    session.get.assert_not_called()


def test_missing_project_package_version(tmp_path: Path, mocker: MockerFixture) -> None:
    session = mocker.Mock(spec=requests.Session)
    (tmp_path / "packages" / "layout" / "1.0.0").mkdir(parents=True)

    with pytest.raises(PackageVersionNotFoundError) as excinfo:
        _cache(tmp_path, session).resolve(PackageSpec.parse("@loveletters/layout:2.0.0"))

    assert excinfo.value.kind is EntityKind.PACKAGE_VERSION
    assert str(excinfo.value.version) == "2.0.0"


def test_default_cache_dir_honours_environment(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setenv("CACHE_DIRECTORY", str(tmp_path))
    assert default_cache_dir() == tmp_path
    monkeypatch.delenv("CACHE_DIRECTORY")
    assert default_cache_dir() != tmp_path


@pytest.mark.parametrize(
    "text", ["preview/theme:0.1.0", "@preview/theme", "@preview/theme:1.2", "@/x:1.0.0"]
)
def test_malformed_specs_are_rejected(text: str) -> None:
    with pytest.raises(ValueError, match="Invalid package"):
        PackageSpec.parse(text)
