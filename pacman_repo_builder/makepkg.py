"""Running makepkg and reading build information of build directories."""

from __future__ import annotations

import os
import subprocess
from collections.abc import Callable, Mapping
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

from .manifest import BuildPacmanRepo
from .settings import BuildMetadata, Member

_REMOVED_VARIABLES = (
    "PACMAN",
    "MAKEPKG_CONF",
    "PKGDEST",
    "SRCDEST",
    "LOGDEST",
    "PACKAGER",
    "SRCPKGDEST",
    "BUILDDIR",
    "GNUPGHOME",
    "GPGKEY",
    "SOURCE_DATE_EPOCH",
)

_FIXED_VARIABLES = {
    "PKGEXT": ".pkg.tar.zst",
    "SRCEXT": ".src.tar.gz",
}


class SrcInfoReadError(Exception):
    """Build information of a directory cannot be read."""


def makepkg_environment(base: Mapping[str, str] | None = None) -> dict[str, str]:
    """The environment makepkg runs in, derived from ``base`` (default: the current one).

    Variables that would move or alter package output are removed and the
    package and source extensions are fixed.
    """
    environment = dict(os.environ if base is None else base)
    for name in _REMOVED_VARIABLES:
        environment.pop(name, None)
    environment.update(_FIXED_VARIABLES)
    return environment


def read_srcinfo_file(file: str | Path) -> str:
    """Read a ``.SRCINFO`` file as UTF-8 text; raise ``SrcInfoReadError`` on failure."""
    file = Path(file)
    try:
        content = file.read_bytes()
    except OSError as error:
        raise SrcInfoReadError(f'⮾ Cannot read file "{file}": {error}') from error
    try:
        return content.decode("utf-8")
    except UnicodeDecodeError as error:
        raise SrcInfoReadError(
            f'⮾ Cannot convert content of file "{file}" to UTF-8: {error}'
        ) from error


def read_srcinfo_from_pkgbuild(directory: str | Path) -> str:
    """Run ``makepkg --printsrcinfo`` in ``directory`` and return its output.

    Raise ``SrcInfoReadError`` when makepkg cannot run, fails, or prints
    something that is not UTF-8.
    """
    directory = Path(directory)
    try:
        output = subprocess.run(
            ["makepkg", "--printsrcinfo"],
            cwd=directory,
            env=makepkg_environment(),
            capture_output=True,
            check=False,
        )
    except OSError as error:
        raise SrcInfoReadError(
            f"⮾ Fail to execute 'makepkg --printsrcinfo' in directory \"{directory}\": {error}"
        ) from error

    if output.returncode != 0:
        code = output.returncode if output.returncode > 0 else None
        stderr = output.stderr.decode("utf-8", errors="replace")
        raise SrcInfoReadError(
            f"⮾ Execution of 'makepkg --printsrcinfo' in directory \"{directory}\" "
            f"exits with code {code}\n{stderr}"
        )

    try:
        return output.stdout.decode("utf-8")
    except UnicodeDecodeError as error:
        raise SrcInfoReadError(
            f"⮾ Fail to convert output of 'makepkg --printsrcinfo' in directory "
            f'"{directory}" to UTF-8: {error}'
        ) from error


def read_srcinfo_from_directory(directory: str | Path) -> str:
    """Read ``.SRCINFO`` if present, otherwise generate it from ``PKGBUILD``.

    Raise ``SrcInfoReadError`` when the directory holds neither file.
    """
    directory = Path(directory)
    srcinfo_file = directory / ".SRCINFO"
    if srcinfo_file.is_file():
        return read_srcinfo_file(srcinfo_file)
    if (directory / "PKGBUILD").is_file():
        return read_srcinfo_from_pkgbuild(directory)
    raise SrcInfoReadError(
        f'⮾ Directory "{directory}" contains neither .SRCINFO nor PKGBUILD'
    )


def _read_member(member: Member) -> str:
    metadata = member.read_build_metadata or BuildMetadata.EITHER
    if metadata is BuildMetadata.PKGBUILD:
        return read_srcinfo_from_pkgbuild(member.directory)
    if metadata is BuildMetadata.SRCINFO:
        return read_srcinfo_file(member.directory / ".SRCINFO")
    return read_srcinfo_from_directory(member.directory)


def _try_read_member(member: Member) -> tuple[str | None, str | None]:
    try:
        return _read_member(member), None
    except SrcInfoReadError as error:
        return None, str(error)


def read_srcinfo_texts(
    manifest: BuildPacmanRepo, handle_error: Callable[[str], None]
) -> list[tuple[str, Member]]:
    """Read the build information of every resolved member, in manifest order.

    Members whose information cannot be read are passed over after their
    error message is handed to ``handle_error``.
    """
    members = list(manifest.resolve_members())
    with ThreadPoolExecutor() as executor:
        results = list(executor.map(_try_read_member, members))

    texts = []
    for member, (content, error) in zip(members, results):
        if error is not None:
            handle_error(error)
        else:
            texts.append((content, member))
    return texts