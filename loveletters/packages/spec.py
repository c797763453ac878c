"""Identifiers for namespaced, versioned resource packages."""

from __future__ import annotations

import dataclasses as dc
import re

_VERSION_PATTERN = re.compile(r"^(0|[1-9]\d*)\.(0|[1-9]\d*)\.(0|[1-9]\d*)$")
_NAME_PATTERN = re.compile(r"^[A-Za-z0-9_][A-Za-z0-9_-]*$")
_SPEC_PATTERN = re.compile(r"^@(?P<namespace>[^/:]+)/(?P<name>[^/:]+):(?P<version>[^/:]+)$")


@dc.dataclass(frozen=True, slots=True, order=True)
class PackageVersion:
    """Semantic version triple of a package."""

    major: int
    minor: int
    patch: int

    @classmethod
    def parse(cls, text: str) -> PackageVersion:
        """Parse ``major.minor.patch``.

        Examples
        --------
        >>> PackageVersion.parse("0.2.10")
        PackageVersion(major=0, minor=2, patch=10)
        """
        match = _VERSION_PATTERN.match(text.strip())
        if match is None:
            msg = f"Invalid package version {text!r}; expected 'major.minor.patch'"
            raise ValueError(msg)
        major, minor, patch = (int(part) for part in match.groups())
        return cls(major, minor, patch)

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"


@dc.dataclass(frozen=True, slots=True)
class PackageSpec:
    """Fully qualified reference to one version of a package.

    Examples
    --------
    >>> spec = PackageSpec.parse("@preview/theme:0.1.0")
    >>> spec.namespace, spec.name, str(spec.version)
    ('preview', 'theme', '0.1.0')
    >>> str(spec)
    '@preview/theme:0.1.0'
    """

    namespace: str
    name: str
    version: PackageVersion

    def __post_init__(self) -> None:
        for label, value in (("namespace", self.namespace), ("name", self.name)):
            if not _NAME_PATTERN.match(value):
                msg = f"Invalid package {label} {value!r}"
                raise ValueError(msg)

    @classmethod
    def parse(cls, text: str) -> PackageSpec:
        """Parse the ``@namespace/name:version`` form."""
        match = _SPEC_PATTERN.match(text.strip())
        if match is None:
            msg = f"Invalid package spec {text!r}; expected '@namespace/name:version'"
            raise ValueError(msg)
        return cls(
            namespace=match["namespace"],
            name=match["name"],
            version=PackageVersion.parse(match["version"]),
        )

    @property
    def cache_subdir(self) -> str:
        """Return the ``namespace/name/version`` cache layout for this spec."""
        return f"{self.namespace}/{self.name}/{self.version}"

    def __str__(self) -> str:
        return f"@{self.namespace}/{self.name}:{self.version}"


__all__ = ["PackageSpec", "PackageVersion"]
