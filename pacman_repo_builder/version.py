"""Package versions and pacman's version comparison."""

from __future__ import annotations

import string
from dataclasses import dataclass

_DIGITS = frozenset(string.digits)
_ALPHA = frozenset(string.ascii_letters)
_ALNUM = _DIGITS | _ALPHA


def _parse_epoch(epoch: str) -> int:
    text = epoch[1:] if epoch.startswith("+") and not epoch.startswith("++") else epoch
    if not text or text[0] not in _DIGITS or any(c not in _DIGITS and c != "_" for c in text):
        raise ValueError(f"invalid epoch: invalid digit found in string {epoch!r}")
    return int(text.replace("_", ""))


@dataclass(frozen=True, eq=False)
class Version:
    """A package version made of ``pkgver``, ``pkgrel`` and an optional ``epoch``."""

    pkgver: str
    pkgrel: str
    epoch: str = ""

    def try_to_string(self) -> str:
        """Render as ``[epoch:]pkgver-pkgrel``; raise ``ValueError`` on a bad epoch."""
        prefix = ""
        if self.epoch:
            value = _parse_epoch(self.epoch)
            if value:
                prefix = f"{value}:"
        return f"{prefix}{self.pkgver}-{self.pkgrel}"

    def _compare(self, other: object) -> int | None:
        if not isinstance(other, Version):
            return None
        try:
            left = self.try_to_string()
            right = other.try_to_string()
        except ValueError:
            return None
        return vercmp(left, right)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self._compare(other) == 0

    def __hash__(self) -> int:
        return hash((self.pkgver, self.pkgrel, self.epoch))

    def __lt__(self, other: Version) -> bool:
        result = self._compare(other)
        return result is not None and result < 0

    def __le__(self, other: Version) -> bool:
        result = self._compare(other)
        return result is not None and result <= 0

    def __gt__(self, other: Version) -> bool:
        result = self._compare(other)
        return result is not None and result > 0

    def __ge__(self, other: Version) -> bool:
        result = self._compare(other)
        return result is not None and result >= 0


def _parse_evr(evr: str) -> tuple[str, str, str | None]:
    start = 0
    while start < len(evr) and evr[start] in _DIGITS:
        start += 1
    dash = evr.rfind("-", start)
    if start < len(evr) and evr[start] == ":":
        epoch = evr[:start] or "0"
        version_start = start + 1
    else:
        epoch = "0"
        version_start = 0
    if dash == -1:
        return epoch, evr[version_start:], None
    return epoch, evr[version_start:dash], evr[dash + 1:]


def _rpmvercmp(a: str, b: str) -> int:
    if a == b:
        return 0
    one = two = 0
    end1 = end2 = 0
    len_a, len_b = len(a), len(b)
    while one < len_a and two < len_b:
        while one < len_a and a[one] not in _ALNUM:
            one += 1
        while two < len_b and b[two] not in _ALNUM:
            two += 1
        if one >= len_a or two >= len_b:
            break
        if one - end1 != two - end2:
            return -1 if one - end1 < two - end2 else 1
        end1, end2 = one, two
        if a[end1] in _DIGITS:
            kind = _DIGITS
            is_number = True
        else:
            kind = _ALPHA
            is_number = False
        while end1 < len_a and a[end1] in kind:
            end1 += 1
        while end2 < len_b and b[end2] in kind:
            end2 += 1
        segment1, segment2 = a[one:end1], b[two:end2]
        if not segment1:
            return -1
        if not segment2:
            return 1 if is_number else -1
        if is_number:
            segment1 = segment1.lstrip("0")
            segment2 = segment2.lstrip("0")
            if len(segment1) != len(segment2):
                return 1 if len(segment1) > len(segment2) else -1
        if segment1 != segment2:
            return -1 if segment1 < segment2 else 1
        one, two = end1, end2
    one_done = one >= len_a
    two_done = two >= len_b
    if one_done and two_done:
        return 0
    if (one_done and b[two] not in _ALPHA) or (not one_done and a[one] in _ALPHA):
        return -1
    return 1


def vercmp(left: str, right: str) -> int:
    """Compare two full version strings the way pacman does; return -1, 0 or 1."""
    if left == right:
        return 0
    epoch1, ver1, rel1 = _parse_evr(left)
    epoch2, ver2, rel2 = _parse_evr(right)
    result = _rpmvercmp(epoch1, epoch2)
    if result == 0:
        result = _rpmvercmp(ver1, ver2)
        if result == 0 and rel1 is not None and rel2 is not None:
            result = _rpmvercmp(rel1, rel2)
    return result