"""Small string helpers for reading build information files."""

from __future__ import annotations

from typing import Callable

_PKGNAME_CHARS = frozenset(
    "abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789@._+-"
)


def split_str_once(text: str, when: Callable[[str, int], bool]) -> tuple[str, str]:
    """Split ``text`` before the first character for which ``when(char, index)`` holds."""
    for index, char in enumerate(text):
        if when(char, index):
            return text[:index], text[index:]
    return text, ""


def extract_pkgname_prefix(text: str) -> tuple[str, str]:
    """Split a dependency string into the package name and the rest."""
    return split_str_once(text, lambda char, _: char not in _PKGNAME_CHARS)


def extract_value_from_line(prefix: str, line: str) -> str | None:
    """Return the value of a ``key = value`` line whose key is ``prefix``."""
    line = line.strip()
    if not line.startswith(prefix):
        return None
    rest = line[len(prefix):].lstrip()
    if not rest.startswith("="):
        return None
    return rest[1:].strip()