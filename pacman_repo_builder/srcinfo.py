"""Reading fields out of ``.SRCINFO`` text."""

from __future__ import annotations

from collections.abc import Callable, Iterator
from dataclasses import dataclass
from itertools import chain

from .dependency import ReasonedDependency, UnreasonedDependency
from .package_file_name import PackageFileName
from .text import extract_value_from_line
from .version import Version


@dataclass(frozen=True)
class SrcInfo:
    """The text of a ``.SRCINFO`` file."""

    text: str

    def _values(self, key: str) -> Iterator[str]:
        for line in self.text.split("\n"):
            value = extract_value_from_line(key, line)
            if value is not None:
                yield value

    def _first(self, key: str) -> str | None:
        return next(self._values(key), None)

    def pkgbase(self) -> str | None:
        """The ``pkgbase`` value, if any."""
        return self._first("pkgbase")

    def pkgname(self) -> Iterator[str]:
        """All ``pkgname`` values."""
        return self._values("pkgname")

    def arch(self) -> Iterator[str]:
        """All ``arch`` values."""
        return self._values("arch")

    def version(self) -> Version:
        """The package version; raise ``ValueError`` if pkgver or pkgrel is missing."""
        pkgver = self._first("pkgver")
        if pkgver is None:
            raise ValueError("missing pkgver")
        pkgrel = self._first("pkgrel")
        if pkgrel is None:
            raise ValueError("missing pkgrel")
        return Version(pkgver, pkgrel, self._first("epoch") or "")

    def _dependencies(self, key: str) -> Iterator[UnreasonedDependency]:
        return (UnreasonedDependency.parse(value) for value in self._values(key))

    def depends(self) -> Iterator[UnreasonedDependency]:
        return self._dependencies("depends")

    def makedepends(self) -> Iterator[UnreasonedDependency]:
        return self._dependencies("makedepends")

    def checkdepends(self) -> Iterator[UnreasonedDependency]:
        return self._dependencies("checkdepends")

    def optdepends(self) -> Iterator[ReasonedDependency]:
        return (ReasonedDependency.parse(value) for value in self._values("optdepends"))

    def conflicts(self) -> Iterator[UnreasonedDependency]:
        return self._dependencies("conflicts")

    def all_required_dependencies(self) -> Iterator[UnreasonedDependency]:
        """Run-time, build-time and check-time dependencies, in that order."""
        return chain(self.depends(), self.makedepends(), self.checkdepends())

    def package_file_base_names(
        self, filter_arch: Callable[[str], bool]
    ) -> list[PackageFileName]:
        """File names of every package for every accepted architecture.

        Raise ``ValueError`` if the version is missing or invalid.
        """
        version = self.version().try_to_string()
        archs = [arch for arch in self.arch() if filter_arch(arch)]
        return [
            PackageFileName(pkgname, version, arch)
            for pkgname in self.pkgname()
            for arch in archs
        ]