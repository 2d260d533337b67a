"""Names of built package files."""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Sequence
from dataclasses import dataclass
from typing import Any, TypeVar

_EXTENSION = ".pkg.tar.zst"

_Latest = TypeVar("_Latest")


@dataclass(frozen=True)
class PackageFileName:
    """The parts of a package file name: ``pkgname-version-arch.pkg.tar.zst``."""

    pkgname: str
    version: str
    arch: str

    def without_ext(self) -> str:
        """The file name without its extension."""
        return f"{self.pkgname}-{self.version}-{self.arch}"

    def __str__(self) -> str:
        return self.without_ext() + _EXTENSION

    def to_dict(self) -> dict[str, str]:
        """The YAML mapping form."""
        return {"pkgname": self.pkgname, "version": self.version, "arch": self.arch}

    @classmethod
    def from_dict(cls, data: Any) -> PackageFileName:
        """Build from the YAML mapping form; raise ``ValueError`` if it is malformed."""
        if not isinstance(data, dict):
            raise ValueError(f"expected a mapping, got {type(data).__name__}")
        values = {}
        for key in ("pkgname", "version", "arch"):
            if key not in data:
                raise ValueError(f"missing field `{key}`")
            value = data[key]
            if not isinstance(value, str):
                raise ValueError(f"field `{key}` must be a string")
            values[key] = value
        return cls(**values)


def outdated_packages(
    latest_packages: Iterable[_Latest],
    current_packages: Sequence[str],
    failed_builds: Iterable[Any],
) -> Iterator[tuple[str, _Latest]]:
    """Yield ``(file_name, package)`` for latest packages that are neither present nor failed."""
    current = set(current_packages)
    failed = {str(record) for record in failed_builds}
    for latest in latest_packages:
        file_name = str(latest)
        if file_name not in current and file_name not in failed:
            yield file_name, latest