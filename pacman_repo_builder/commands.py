"""The subcommands of the program."""

from __future__ import annotations

import enum
import os
import sys
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path

from .database import CyclicDependencyError, PackageFileNameError
from .db_init import init_database
from .deref_db import run_deref_db
from .failed_builds import load_failed_build_record
from .makepkg import SrcInfoReadError, read_srcinfo_from_pkgbuild
from .manifest import BuildPacmanRepo, ManifestError
from .package_file_name import PackageFileName, outdated_packages
from .settings import ArchFilter, BuildMetadata, GlobalSettings, Member, TriState
from .status import Code, Failure
from .yaml_docs import serialize_iter_yaml


def _eprint(message: str = "") -> None:
    print(message, file=sys.stderr)


def _fail_if_errors(error_count: int, message: str = "errors occurred") -> None:
    if error_count:
        _eprint(f"{error_count} {message}")
        raise Failure(Code.GENERIC_FAILURE)


class OutdatedDetails(enum.Enum):
    """How much is printed about each outdated package."""

    PKGNAME = "pkgname"
    PKG_FILE_PATH = "pkg-file-path"
    LOSSY_YAML = "lossy-yaml"
    STRICT_YAML = "strict-yaml"

    @classmethod
    def parse(cls, text: str) -> OutdatedDetails:
        """Parse a level name; raise ``ValueError`` for an unknown one."""
        for member in cls:
            if member.value == text:
                return member
        raise ValueError(f"invalid choice: {text}")


@dataclass
class PrintConfigOptions:
    """What ``print-config`` puts in the generated manifest."""

    repository: Path
    containers: list[Path] = field(default_factory=list)
    require_pkgbuild: bool = False
    require_srcinfo: bool = False
    with_record_failed_builds: Path | None = None
    with_install_missing_dependencies: bool | None = None
    with_clean_before_build: bool | None = None
    with_clean_after_build: bool | None = None
    with_force_rebuild: bool | None = None
    with_arch_filter: list[str] = field(default_factory=list)
    with_check: TriState | None = None
    with_pacman: str | None = None
    with_packager: str | None = None
    with_allow_failure: bool | None = None
    with_dereference_database_symlinks: bool | None = None


def sort() -> None:
    """Print every pkgbase of the manifest in build order."""
    value = init_database()
    error_count = value.error_count
    try:
        order = value.database.build_order()
    except CyclicDependencyError as error:
        _eprint(f"⮾ {error}")
        error_count += 1
    else:
        for pkgbase in order:
            print(pkgbase)
    _fail_if_errors(error_count)


_ESCAPES = {'"': '\\"', "\\": "\\\\", "\n": "\\n", "\r": "\\r", "\t": "\\t", "\0": "\\0"}


def _quote(text: str) -> str:
    parts = []
    for char in text:
        if char in _ESCAPES:
            parts.append(_ESCAPES[char])
        elif ord(char) < 0x20 or ord(char) == 0x7F:
            parts.append(f"\\u{{{ord(char):x}}}")
        else:
            parts.append(char)
    return '"' + "".join(parts) + '"'


def _print_outdated(details: OutdatedDetails, file_name: str, package: PackageFileName) -> None:
    if details is OutdatedDetails.PKGNAME:
        print(package.pkgname)
    elif details is OutdatedDetails.PKG_FILE_PATH:
        print(file_name)
    else:
        show = _quote if details is OutdatedDetails.STRICT_YAML else str
        print("---")
        print(f"file-name: {show(file_name)}")
        print(f"pkgname: {show(package.pkgname)}")
        print(f"version: {show(package.version)}")
        print(f"arch: {show(package.arch)}")


def outdated(details: OutdatedDetails | None = None) -> None:
    """Print the packages whose files are missing from the repository directory."""
    details = details or OutdatedDetails.PKG_FILE_PATH
    value = init_database()
    manifest = value.manifest
    error_count = value.error_count

    arch_filter = manifest.global_settings.arch_filter or ArchFilter()

    latest_packages: list[PackageFileName] = []
    for item in value.database.package_file_base_names(arch_filter.test):
        if isinstance(item, PackageFileNameError):
            _eprint(f"⮾ Error in pkgbase of {item.pkgbase}: {item.message}")
            error_count += 1
        else:
            latest_packages.append(item)

    repository = Path(manifest.global_settings.repository)
    directory = repository.parent
    if directory == repository:
        _eprint(f'⮾ Repository cannot be a directory: "{repository}"')
        raise Failure(Code.GENERIC_FAILURE)

    try:
        names = os.listdir(directory)
    except OSError as error:
        _eprint(f'⮾ Cannot read "{directory}" as a directory: {error}')
        raise Failure(error) from error

    current_packages: list[str] = []
    for name in names:
        try:
            name.encode("utf-8")
        except UnicodeEncodeError:
            _eprint(f"cannot convert {name!r} to UTF-8")
            error_count += 1
        else:
            current_packages.append(name)

    try:
        failed_builds = load_failed_build_record(manifest.global_settings.record_failed_builds)
    except OSError as error:
        _eprint(f"⮾ {error}")
        raise Failure(Code.FAILED_BUILD_RECORD_LOADING_FAILURE) from error

    for file_name, package in outdated_packages(latest_packages, current_packages, failed_builds):
        _print_outdated(details, file_name, package)

    _fail_if_errors(error_count)


def _read_build_metadata(require_pkgbuild: bool, require_srcinfo: bool) -> BuildMetadata:
    if require_pkgbuild == require_srcinfo:
        return BuildMetadata.EITHER
    return BuildMetadata.SRCINFO if require_srcinfo else BuildMetadata.PKGBUILD


def print_config(options: PrintConfigOptions) -> None:
    """Print a manifest listing the build directories found in the containers."""
    error_count = 0

    global_settings = GlobalSettings(
        repository=Path(options.repository),
        container=None,
        read_build_metadata=_read_build_metadata(
            options.require_pkgbuild, options.require_srcinfo
        ),
        record_failed_builds=None
        if options.with_record_failed_builds is None
        else Path(options.with_record_failed_builds),
        install_missing_dependencies=options.with_install_missing_dependencies,
        clean_before_build=options.with_clean_before_build,
        clean_after_build=options.with_clean_after_build,
        force_rebuild=options.with_force_rebuild,
        arch_filter=ArchFilter.from_arch_list(options.with_arch_filter),
        check=options.with_check,
        pacman=options.with_pacman,
        packager=options.with_packager,
        allow_failure=options.with_allow_failure,
        dereference_database_symlinks=options.with_dereference_database_symlinks,
    )

    members: list[Member] = []
    for container in options.containers:
        container = Path(container)
        try:
            names = os.listdir(container)
        except OSError as error:
            _eprint(f'⮾ Cannot read directory "{container}": {error}')
            error_count += 1
            continue
        for name in names:
            directory = container / name
            try:
                if not directory.stat().st_mode or not directory.is_dir():
                    continue
            except OSError as error:
                _eprint(f'⮾ Cannot stat "{directory}": {error}')
                error_count += 1
                continue
            if options.require_pkgbuild and not (directory / "PKGBUILD").is_file():
                continue
            if options.require_srcinfo and not (directory / ".SRCINFO").is_file():
                continue
            members.append(Member(directory=directory))
    members.sort(key=lambda member: member.directory.parts)

    manifest = BuildPacmanRepo(global_settings, members)
    text = serialize_iter_yaml([manifest]).removeprefix("---\n")
    try:
        sys.stdout.write(text)
        sys.stdout.flush()
    except OSError as error:
        _eprint(f"⮾ Cannot write yaml to stdout: {error}")
        error_count += 1

    _fail_if_errors(error_count, "errors occurred.")


def _comparable(text: str) -> list[str]:
    return [stripped for line in text.split("\n") if (stripped := line.rstrip())]


def _check_member(member: Member, update: bool) -> str | tuple[bool, Path] | None:
    """An error message, ``(up_to_date, directory)``, or ``None`` when skipped."""
    directory = Path(member.directory)
    metadata = member.read_build_metadata or BuildMetadata.EITHER
    if metadata is not BuildMetadata.PKGBUILD and not (directory / "PKGBUILD").exists():
        return None

    try:
        new_content = read_srcinfo_from_pkgbuild(directory)
    except SrcInfoReadError as error:
        return str(error)

    srcinfo_file = directory / ".SRCINFO"
    try:
        old_content = srcinfo_file.read_bytes().decode("utf-8")
    except FileNotFoundError:
        old_content = ""
    except (OSError, UnicodeDecodeError) as error:
        return f'⮾ Cannot read "{srcinfo_file}" as a file: {error}'

    if _comparable(new_content) == _comparable(old_content):
        return True, directory

    if update:
        try:
            srcinfo_file.write_bytes(new_content.encode("utf-8"))
        except OSError as error:
            return f'⮾ Cannot write content to "{srcinfo_file}" as a file: {error}'

    return False, directory


def sync_srcinfo(update: bool = False) -> None:
    """Print the build directories whose ``.SRCINFO`` differs from their ``PKGBUILD``.

    With ``update`` the outdated files are rewritten. Without it, raise
    ``Failure`` with the out-of-sync code when any directory is outdated.
    """
    try:
        manifest = BuildPacmanRepo.from_env()
    except ManifestError as error:
        _eprint(f"⮾ {error}")
        raise Failure(Code.MANIFEST_LOADING_FAILURE) from error

    members = list(manifest.resolve_members())
    with ThreadPoolExecutor() as executor:
        results = list(executor.map(lambda member: _check_member(member, update), members))

    outdated_count = 0
    error_count = 0
    for result in results:
        if result is None:
            continue
        if isinstance(result, str):
            _eprint(result)
            error_count += 1
            continue
        up_to_date, directory = result
        if not up_to_date:
            print(directory)
            outdated_count += 1

    _fail_if_errors(error_count)

    if not update and outdated_count:
        raise Failure(Code.SRCINFO_OUT_OF_SYNC)


def deref_db() -> None:
    """Replace the database symlinks of the repository directory by real files."""
    try:
        manifest = BuildPacmanRepo.from_env()
    except ManifestError as error:
        _eprint(f"⮾ {error}")
        raise Failure(Code.MANIFEST_LOADING_FAILURE) from error

    repository = Path(manifest.global_settings.repository)
    directory = repository.parent
    if directory == repository:
        _eprint(f'⮾ Cannot get the directory of repository "{repository}"')
        raise Failure(Code.GENERIC_FAILURE)

    try:
        run_deref_db(directory)
    except OSError as error:
        _eprint(f"⮾ {error}")
        raise Failure(error) from error