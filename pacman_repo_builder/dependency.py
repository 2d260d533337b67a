"""Dependency entries of build information files."""

from __future__ import annotations

from dataclasses import dataclass

from .text import extract_pkgname_prefix, split_str_once


@dataclass(frozen=True)
class UnreasonedDependency:
    """A dependency: package name and version range."""

    name: str
    range: str

    @classmethod
    def parse(cls, text: str) -> UnreasonedDependency:
        """Parse an entry such as ``foo>=3``."""
        name, version_range = extract_pkgname_prefix(text)
        return cls(name, version_range)

    def with_reason(self, reason: str | None) -> ReasonedDependency:
        """Attach a reason, giving an optional dependency."""
        return ReasonedDependency(self.name, self.range, reason)


@dataclass(frozen=True)
class ReasonedDependency:
    """An optional dependency: package name, version range and a reason."""

    name: str
    range: str
    reason: str | None = None

    @classmethod
    def parse(cls, text: str) -> ReasonedDependency:
        """Parse an entry such as ``foo>=3: Install for fun``."""
        name_range, reason = split_str_once(text, lambda char, _: char == ":")
        name, version_range = extract_pkgname_prefix(name_range)
        return cls(name, version_range, reason[1:].strip() if reason else None)

    def without_reason(self) -> UnreasonedDependency:
        """Drop the reason."""
        return UnreasonedDependency(self.name, self.range)