"""Exit codes and the failure exception carried up to the command line."""

from __future__ import annotations

import enum


class Code(enum.IntEnum):
    """Exit codes reported by the program."""

    GENERIC_FAILURE = 1
    MANIFEST_LOADING_FAILURE = 2
    SRCINFO_OUT_OF_SYNC = 3
    CYCLIC_DEPENDENCY = 4
    UNRECOGNIZED_MAKEPKG = 5
    FAILED_BUILD_RECORD_LOADING_FAILURE = 6
    FAILED_BUILD_RECORD_WRITING_FAILURE = 7


class Failure(Exception):
    """A failure that ends the program with a non-zero exit code.

    It is built either from an exit code (a ``Code`` or any non-zero
    integer) or from an ``OSError``, whose errno becomes the exit code.
    """

    def __init__(self, reason: int | OSError) -> None:
        if isinstance(reason, OSError):
            self.error: OSError | None = reason
            self.code: int = reason.errno or 1
            message = str(reason)
        else:
            code = int(reason)
            if code == 0:
                raise ValueError("a failure cannot have exit code 0")
            self.error = None
            self.code = code
            message = f"exit code {code}"
        super().__init__(message)


def status_of_code(code: int) -> None:
    """Raise a ``Failure`` for a non-zero exit code; do nothing for zero."""
    if code != 0:
        raise Failure(code)