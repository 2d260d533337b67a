"""Manifest settings: global settings, members and their option types."""

from __future__ import annotations

import enum
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, TypeVar

_T = TypeVar("_T")


class TriState(enum.Enum):
    """A switch that may also defer to makepkg's own default."""

    ENABLED = "enabled"
    DISABLED = "disabled"
    INHERIT = "inherit"

    @classmethod
    def parse(cls, text: str) -> TriState:
        """Parse ``enabled``, ``disabled`` or ``inherit``; raise ``ValueError`` otherwise."""
        if isinstance(text, str):
            for member in cls:
                if member.value == text:
                    return member
        raise ValueError(f'"{text}" is not a valid state')


class BuildMetadata(enum.Enum):
    """Where build information is read from."""

    SRCINFO = "srcinfo"
    PKGBUILD = "pkgbuild"
    EITHER = "either"


@dataclass(frozen=True)
class ArchFilter:
    """Which architectures to build; ``archs`` of ``None`` accepts every one."""

    archs: tuple[str, ...] | None = None

    @property
    def is_any(self) -> bool:
        return self.archs is None

    def test(self, arch: str) -> bool:
        """Whether ``arch`` passes the filter; ``any`` always passes."""
        if arch == "any" or self.archs is None:
            return True
        return arch in self.archs

    @classmethod
    def from_arch_list(cls, archs: Iterable[str]) -> ArchFilter | None:
        """Build from a list of names; ``None`` when empty, any when it holds ``any``."""
        arch_list = [str(arch) for arch in archs]
        if not arch_list:
            return None
        if "any" in arch_list:
            return cls()
        return cls(tuple(arch_list))

    def to_yaml_value(self) -> str | list[str]:
        """``"any"`` or the list of architectures."""
        return "any" if self.archs is None else list(self.archs)

    @classmethod
    def from_yaml_value(cls, value: Any) -> ArchFilter:
        """Build from ``"any"`` or a list of strings; raise ``ValueError`` otherwise."""
        if value == "any":
            return cls()
        if isinstance(value, list) and all(isinstance(item, str) for item in value):
            return cls(tuple(value))
        raise ValueError(f"invalid arch filter: {value!r}")


def _bool(value: Any, key: str) -> bool:
    if not isinstance(value, bool):
        raise ValueError(f"field `{key}` must be a boolean")
    return value


def _str(value: Any, key: str) -> str:
    if not isinstance(value, str):
        raise ValueError(f"field `{key}` must be a string")
    return value


def _path(value: Any, key: str) -> Path:
    return Path(_str(value, key))


def _build_metadata(value: Any, key: str) -> BuildMetadata:
    for member in BuildMetadata:
        if member.value == value:
            return member
    raise ValueError(f"field `{key}` has invalid value {value!r}")


def _tristate(value: Any, key: str) -> TriState:
    try:
        return TriState.parse(value)
    except ValueError as error:
        raise ValueError(f"field `{key}`: {error}") from None


def _arch_filter(value: Any, key: str) -> ArchFilter:
    try:
        return ArchFilter.from_yaml_value(value)
    except ValueError as error:
        raise ValueError(f"field `{key}`: {error}") from None


def _optional(data: dict, key: str, convert: Callable[[Any, str], _T]) -> _T | None:
    value = data.get(key)
    return None if value is None else convert(value, key)


def _require_mapping(data: Any) -> dict:
    if not isinstance(data, dict):
        raise ValueError(f"expected a mapping, got {type(data).__name__}")
    return data


def _serialize_optional(value: Any) -> Any:
    if isinstance(value, enum.Enum):
        return value.value
    if isinstance(value, Path):
        return str(value)
    if isinstance(value, ArchFilter):
        return value.to_yaml_value()
    return value


@dataclass
class GlobalSettings:
    """Settings that apply to the whole repository and to every member."""

    repository: Path = field(default_factory=Path)
    container: Path | None = None
    read_build_metadata: BuildMetadata | None = None
    record_failed_builds: Path | None = None
    install_missing_dependencies: bool | None = None
    clean_before_build: bool | None = None
    clean_after_build: bool | None = None
    force_rebuild: bool | None = None
    arch_filter: ArchFilter | None = None
    check: TriState | None = None
    pacman: str | None = None
    packager: str | None = None
    allow_failure: bool | None = None
    dereference_database_symlinks: bool | None = None

    _OPTIONAL = (
        ("container", _path),
        ("read_build_metadata", _build_metadata),
        ("record_failed_builds", _path),
        ("install_missing_dependencies", _bool),
        ("clean_before_build", _bool),
        ("clean_after_build", _bool),
        ("force_rebuild", _bool),
        ("arch_filter", _arch_filter),
        ("check", _tristate),
        ("pacman", _str),
        ("packager", _str),
        ("allow_failure", _bool),
        ("dereference_database_symlinks", _bool),
    )

    def to_dict(self) -> dict[str, Any]:
        """The YAML mapping form, with unset fields left out."""
        result: dict[str, Any] = {"repository": str(self.repository)}
        for name, _ in self._OPTIONAL:
            value = getattr(self, name)
            if value is not None:
                result[name.replace("_", "-")] = _serialize_optional(value)
        return result

    @classmethod
    def from_dict(cls, data: Any) -> GlobalSettings:
        """Build from the YAML mapping form; raise ``ValueError`` if it is malformed."""
        data = _require_mapping(data)
        if "repository" not in data:
            raise ValueError("missing field `repository`")
        values = {
            name: _optional(data, name.replace("_", "-"), convert)
            for name, convert in cls._OPTIONAL
        }
        return cls(repository=_path(data["repository"], "repository"), **values)


@dataclass
class Member:
    """A build directory listed in the manifest, with its own overrides."""

    directory: Path
    read_build_metadata: BuildMetadata | None = None
    install_missing_dependencies: bool | None = None
    clean_before_build: bool | None = None
    clean_after_build: bool | None = None
    force_rebuild: bool | None = None
    check: TriState | None = None
    pacman: str | None = None
    allow_failure: bool | None = None

    _OPTIONAL = (
        ("read_build_metadata", _build_metadata),
        ("install_missing_dependencies", _bool),
        ("clean_before_build", _bool),
        ("clean_after_build", _bool),
        ("force_rebuild", _bool),
        ("check", _tristate),
        ("pacman", _str),
        ("allow_failure", _bool),
    )

    def to_dict(self) -> dict[str, Any]:
        """The YAML mapping form, with unset fields left out."""
        result: dict[str, Any] = {"directory": str(self.directory)}
        for name, _ in self._OPTIONAL:
            value = getattr(self, name)
            if value is not None:
                result[name.replace("_", "-")] = _serialize_optional(value)
        return result

    @classmethod
    def from_dict(cls, data: Any) -> Member:
        """Build from the YAML mapping form; raise ``ValueError`` if it is malformed."""
        data = _require_mapping(data)
        if "directory" not in data:
            raise ValueError("missing field `directory`")
        values = {
            name: _optional(data, name.replace("_", "-"), convert)
            for name, convert in cls._OPTIONAL
        }
        return cls(directory=_path(data["directory"], "directory"), **values)

    def resolve(self, global_settings: GlobalSettings) -> Member:
        """Fill unset fields from the global settings and place the directory in the container."""
        directory = (
            global_settings.container / self.directory
            if global_settings.container is not None
            else self.directory
        )
        values = {
            name: getattr(self, name)
            if getattr(self, name) is not None
            else getattr(global_settings, name)
            for name, _ in self._OPTIONAL
        }
        return Member(directory=directory, **values)