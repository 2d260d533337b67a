"""Loading the record of package builds that failed before."""

from __future__ import annotations

import sys
from pathlib import Path

import yaml

from .package_file_name import PackageFileName


def _parse_record(text: str) -> list[PackageFileName]:
    data = yaml.safe_load(text)
    if not isinstance(data, list):
        raise ValueError("expected a sequence of package file names")
    return [PackageFileName.from_dict(item) for item in data]


def load_failed_build_record(record_path: str | Path | None) -> list[PackageFileName]:
    """Load the failed build record.

    No path or a missing file gives an empty record, and so does a file that
    cannot be parsed (with a warning on stderr). Raise ``OSError`` when the
    file exists but cannot be read.
    """
    if record_path is None:
        return []
    record_path = Path(record_path)
    try:
        content = record_path.read_bytes()
    except FileNotFoundError:
        return []
    except IsADirectoryError as error:
        _warn_unparsable(record_path, error)
        return []
    except OSError as error:
        raise OSError(
            error.errno, f'Cannot read "{record_path}" as a file: {error.strerror}'
        ) from error
    try:
        return _parse_record(content.decode("utf-8"))
    except (yaml.YAMLError, ValueError) as error:
        _warn_unparsable(record_path, error)
        return []


def _warn_unparsable(record_path: Path, error: Exception) -> None:
    print(
        f'⚠ Cannot parse file "{record_path}" as a FailedBuildRecord: {error}',
        file=sys.stderr,
    )