"""Failure conditions raised while building a loveletters project.

Every fallible stage of the pipeline raises a subclass of
:class:`LovelettersError` carrying the context needed to act on the failure
(the offending path, package spec, or compiler diagnostics). Underlying
exceptions are chained with ``raise ... from exc`` so the original cause stays
available for debugging.

Examples
--------
>>> from pathlib import Path
>>> from loveletters.errors import EntityKind, EntityNotFoundError
>>> str(EntityNotFoundError(EntityKind.PROJECT_CONFIG, Path("site/loveletters.toml")))
"failed to find project configuration file at 'site/loveletters.toml'"
"""

from __future__ import annotations

import enum
import typing as typ

if typ.TYPE_CHECKING:
    import collections.abc as cabc
    from pathlib import Path

    from .packages.spec import PackageSpec, PackageVersion
    from .rendering.compiler import Diagnostic


class EntityKind(enum.StrEnum):
    """Entities of a loveletters project that may be missing."""

    INPUT_DIRECTORY = "input directory"
    OUTPUT_DIRECTORY = "output directory"
    CONTENT_DIRECTORY = "content directory"
    PROJECT_CONFIG = "project configuration file"
    ENTRY_FILE = "compiler entry file"
    PACKAGE = "package"
    PACKAGE_VERSION = "package version"


class LovelettersError(RuntimeError):
    """Base class for every error raised by the build pipeline."""


class EntityNotFoundError(LovelettersError):
    """Raised when a required file, directory, or package does not exist."""

    def __init__(self, kind: EntityKind, path: Path, message: str | None = None) -> None:
        self.kind = kind
        self.path = path
        super().__init__(message or f"failed to find {kind} at '{path}'")


class PackageNotFoundError(EntityNotFoundError):
    """Raised when a project-namespace package has no directory at all."""

    def __init__(self, spec: PackageSpec, path: Path) -> None:
        self.spec = spec
        super().__init__(
            EntityKind.PACKAGE, path, f"package {spec} not found at '{path}'"
        )


class PackageVersionNotFoundError(EntityNotFoundError):
    """Raised when a package exists but the requested version does not."""

    def __init__(self, spec: PackageSpec, version: PackageVersion, path: Path) -> None:
        self.spec = spec
        self.version = version
        super().__init__(
            EntityKind.PACKAGE_VERSION,
            path,
            f"package {spec} has no version {version} (searched '{path}')",
        )


class InvalidSlugError(LovelettersError):
    """Raised when a directory name cannot be turned into a slug."""

    def __init__(self, path: Path) -> None:
        self.path = path
        super().__init__(f"failed to derive slug for path '{path}'")


class FileIOError(LovelettersError):
    """Raised for filesystem failures not covered by a more specific error."""

    def __init__(self, path: Path | None = None) -> None:
        self.path = path
        desc = f" for path '{path}'" if path is not None else ""
        super().__init__(f"failed to perform file IO{desc}")


class MalformedConfigError(LovelettersError):
    """Raised when ``loveletters.toml`` cannot be parsed or validated."""

    def __init__(self, path: Path, detail: str) -> None:
        self.path = path
        self.detail = detail
        super().__init__(
            f"failed to parse the project configuration from '{path}': {detail}"
        )


class MalformedFrontmatterError(LovelettersError):
    """Raised when a page's frontmatter file cannot be parsed or validated."""

    def __init__(self, path: Path, detail: str) -> None:
        self.path = path
        self.detail = detail
        super().__init__(f"failed to parse frontmatter from '{path}': {detail}")


class MalformedStructureError(LovelettersError):
    """Raised when the content directory violates the project structure."""

    def __init__(self, path: Path, message: str | None = None) -> None:
        self.path = path
        super().__init__(
            message or f"detected malformed project structure at '{path}'"
        )


class SlugCollisionError(MalformedStructureError):
    """Raised when a leaf page and a sub-section share a slug."""

    def __init__(self, path: Path, slug: str) -> None:
        self.slug = slug
        super().__init__(
            path,
            f"slug '{slug}' names both a page and a section at '{path}'",
        )


class CompilationError(LovelettersError):
    """Raised when the compiler rejects a page.

    Attributes
    ----------
    page : Path
        Content directory of the page that failed to compile.
    diagnostics : tuple[Diagnostic, ...]
        Messages reported by the compiler, in the order they were produced.
    """

    def __init__(self, page: Path, diagnostics: cabc.Sequence[Diagnostic]) -> None:
        self.page = page
        self.diagnostics = tuple(diagnostics)
        super().__init__(f"failed to compile content of page at '{page}'")

    def describe(self) -> str:
        """Return the error message followed by one line per diagnostic."""
        lines = [str(self)]
        lines.extend(f"  {diagnostic}" for diagnostic in self.diagnostics)
        return "\n".join(lines)


class PackageFetchError(LovelettersError):
    """Raised when a registry package cannot be downloaded or unpacked."""

    def __init__(self, spec: PackageSpec, reason: str) -> None:
        self.spec = spec
        self.reason = reason
        super().__init__(f"failed to fetch package {spec}: {reason}")


__all__ = [
    "CompilationError",
    "EntityKind",
    "EntityNotFoundError",
    "FileIOError",
    "InvalidSlugError",
    "LovelettersError",
    "MalformedConfigError",
    "MalformedFrontmatterError",
    "MalformedStructureError",
    "PackageFetchError",
    "PackageNotFoundError",
    "PackageVersionNotFoundError",
    "SlugCollisionError",
]
