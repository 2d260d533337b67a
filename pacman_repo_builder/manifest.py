"""The manifest files: ``build-pacman-repo.yaml`` and ``init-aur-builder.yaml``."""

from __future__ import annotations

import dataclasses
from collections.abc import Callable, Iterator
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, TypeVar

import yaml

from .settings import GlobalSettings, Member

BUILD_PACMAN_REPO = "build-pacman-repo.yaml"
INIT_AUR_BUILDER = "init-aur-builder.yaml"

_T = TypeVar("_T")


class ManifestError(Exception):
    """A manifest file exists but cannot be opened or understood."""


def _require_mapping(data: Any) -> dict:
    if not isinstance(data, dict):
        raise ValueError(f"expected a mapping, got {type(data).__name__}")
    return data


def _required(data: dict, key: str) -> Any:
    if key not in data:
        raise ValueError(f"missing field `{key}`")
    return data[key]


def _read_manifest(
    file: str | Path, type_name: str, parse: Callable[[Any], _T]
) -> _T | None:
    """Parse a manifest file; ``None`` when the file does not exist."""
    file = Path(file)
    try:
        with file.open("rb") as stream:
            content = stream.read()
    except FileNotFoundError:
        return None
    except IsADirectoryError as error:
        raise ManifestError(
            f'cannot deserialize "{file}" as {type_name}: {error}'
        ) from error
    except OSError as error:
        raise ManifestError(f'cannot open "{file}" as a file: {error}') from error
    try:
        return parse(yaml.safe_load(content.decode("utf-8")))
    except (yaml.YAMLError, ValueError) as error:
        raise ManifestError(
            f'cannot deserialize "{file}" as {type_name}: {error}'
        ) from error


@dataclass
class BuildPacmanRepo:
    """The build manifest: global settings and the list of member directories."""

    global_settings: GlobalSettings = field(default_factory=GlobalSettings)
    members: list[Member] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """The YAML mapping form."""
        return {
            "global-settings": self.global_settings.to_dict(),
            "members": [member.to_dict() for member in self.members],
        }

    @classmethod
    def from_dict(cls, data: Any) -> BuildPacmanRepo:
        """Build from the YAML mapping form; raise ``ValueError`` if it is malformed."""
        data = _require_mapping(data)
        global_settings = GlobalSettings.from_dict(_required(data, "global-settings"))
        members = _required(data, "members")
        if not isinstance(members, list):
            raise ValueError("field `members` must be a sequence")
        return cls(global_settings, [Member.from_dict(member) for member in members])

    def resolve_members(self) -> Iterator[Member]:
        """Every member with the global settings filled in."""
        return (member.resolve(self.global_settings) for member in self.members)

    @classmethod
    def from_file(cls, file: str | Path) -> BuildPacmanRepo:
        """Load a manifest; a missing file gives the default manifest.

        Raise ``ManifestError`` when the file cannot be read or parsed.
        """
        loaded = _read_manifest(file, "BuildPacmanRepo", cls.from_dict)
        return cls() if loaded is None else loaded

    @classmethod
    def from_env(cls) -> BuildPacmanRepo:
        """Load ``build-pacman-repo.yaml`` from the current directory."""
        return cls.from_file(Path(BUILD_PACMAN_REPO))


@dataclass
class InitAurBuilder:
    """The manifest listing AUR packages whose build directories are to be created."""

    global_settings: GlobalSettings = field(default_factory=GlobalSettings)
    aur_package_names: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """The YAML mapping form."""
        return {
            "global-settings": self.global_settings.to_dict(),
            "aur-package-names": list(self.aur_package_names),
        }

    @classmethod
    def from_dict(cls, data: Any) -> InitAurBuilder:
        """Build from the YAML mapping form; raise ``ValueError`` if it is malformed."""
        data = _require_mapping(data)
        global_settings = GlobalSettings.from_dict(_required(data, "global-settings"))
        names = _required(data, "aur-package-names")
        if not isinstance(names, list) or not all(isinstance(name, str) for name in names):
            raise ValueError("field `aur-package-names` must be a sequence of strings")
        return cls(global_settings, list(names))

    @classmethod
    def from_file(cls, file: str | Path) -> InitAurBuilder:
        """Load a manifest; a missing file gives the default manifest.

        Raise ``ManifestError`` when the file cannot be read or parsed.
        """
        loaded = _read_manifest(file, "InitAurBuilder", cls.from_dict)
        return cls() if loaded is None else loaded

    @classmethod
    def from_env(cls) -> InitAurBuilder:
        """Load ``init-aur-builder.yaml`` from the current directory."""
        return cls.from_file(Path(INIT_AUR_BUILDER))

    def with_global_settings(self, global_settings: GlobalSettings) -> InitAurBuilder:
        """A copy with other global settings."""
        return dataclasses.replace(self, global_settings=global_settings)

    def with_package(self, package_name: str) -> InitAurBuilder:
        """A copy with one more package name."""
        return dataclasses.replace(
            self, aur_package_names=[*self.aur_package_names, package_name]
        )