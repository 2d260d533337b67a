"""Turning repository database symlinks into real files."""

from __future__ import annotations

import os
import shutil
import sys
from pathlib import Path


def run_deref_db(repository_directory: str | Path) -> None:
    """Replace every ``*.db`` and ``*.files`` symlink in the directory by a copy of its target.

    Raise ``OSError`` when the directory or a link target cannot be read,
    or a file cannot be removed or copied.
    """
    canonical_directory = Path(repository_directory).resolve(strict=True)
    with os.scandir(repository_directory) as entries:
        names = [
            entry.name
            for entry in entries
            if entry.is_symlink()
            and (entry.name.endswith(".db") or entry.name.endswith(".files"))
        ]
    for name in names:
        link_path = canonical_directory / name
        link_target = link_path.resolve(strict=True)
        print(f'  → Delete "{link_path}"', file=sys.stderr)
        link_path.unlink()
        print(f'  → Copy "{link_target}" to "{link_path}"', file=sys.stderr)
        shutil.copyfile(link_target, link_path)