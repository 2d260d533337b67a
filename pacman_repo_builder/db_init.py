"""Loading the manifest and building the package database from it."""

from __future__ import annotations

import sys
from dataclasses import dataclass
from pathlib import Path

from .database import Database, InsertionError
from .makepkg import read_srcinfo_texts
from .manifest import BuildPacmanRepo, ManifestError
from .srcinfo import SrcInfo
from .status import Code, Failure


@dataclass
class DbInitValue:
    """The manifest, the database built from it and how many errors occurred."""

    manifest: BuildPacmanRepo
    database: Database
    error_count: int


def _eprint(message: str) -> None:
    print(message, file=sys.stderr)


def init_database(manifest: BuildPacmanRepo | None = None) -> DbInitValue:
    """Build the database of every member of ``manifest``.

    Without a manifest, ``build-pacman-repo.yaml`` in the current directory
    is loaded; raise ``Failure`` with the manifest loading code when that
    fails. Errors in single members are reported on stderr and counted.
    """
    if manifest is None:
        try:
            manifest = BuildPacmanRepo.from_env()
        except ManifestError as error:
            _eprint(str(error))
            raise Failure(Code.MANIFEST_LOADING_FAILURE) from error

    error_count = 0

    def handle_error(message: str) -> None:
        nonlocal error_count
        _eprint(message)
        error_count += 1

    texts = read_srcinfo_texts(manifest, handle_error)

    database = Database()
    duplications: dict[str, dict[Path, None]] = {}
    for text, member in texts:
        try:
            removal = database.insert_srcinfo(SrcInfo(text), member.directory)
        except InsertionError as error:
            _eprint(f'⮾ Error in directory "{member.directory}": {error}')
            error_count += 1
            continue
        if removal is not None:
            duplications.setdefault(removal.pkgbase, {})[removal.db_value.directory] = None

    if duplications:
        _eprint("⮾ Duplication detected")
        for pkgbase, directories in duplications.items():
            _eprint(f"  * pkgbase: {pkgbase}")
            for directory in directories:
                _eprint(f"    - directory: {directory}")
        error_count += len(duplications)

    return DbInitValue(manifest=manifest, database=database, error_count=error_count)