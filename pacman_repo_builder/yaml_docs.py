"""Writing and reading streams of several YAML documents."""

from __future__ import annotations

import enum
from collections.abc import Iterable, Iterator
from pathlib import PurePath
from typing import Any

import yaml

_DOCUMENT_END = "...\n"


def _to_data(value: Any) -> Any:
    """Turn a value of this package into plain YAML data."""
    if hasattr(value, "to_dict"):
        return _to_data(value.to_dict())
    if hasattr(value, "to_yaml_value"):
        return _to_data(value.to_yaml_value())
    if isinstance(value, enum.Enum):
        return _to_data(value.value)
    if isinstance(value, PurePath):
        return str(value)
    if isinstance(value, dict):
        return {_to_data(key): _to_data(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_to_data(item) for item in value]
    return value


def _dump(value: Any) -> str:
    text = yaml.safe_dump(
        _to_data(value),
        default_flow_style=False,
        sort_keys=False,
        allow_unicode=True,
        width=1_000_000,
    )
    if text.endswith("\n" + _DOCUMENT_END):
        text = text[: -len(_DOCUMENT_END)]
    return text


def serialize_iter_yaml(values: Iterable[Any]) -> str:
    """Serialize every value as its own YAML document, each opened by ``---``."""
    return "".join("---\n" + _dump(value) for value in values)


def deserialize_multi_docs_yaml(yaml_text: str) -> Iterator[Any]:
    """Yield the data of every non-blank document in a ``---`` separated stream.

    Raise ``yaml.YAMLError`` when a document cannot be parsed.
    """
    for part in yaml_text.split("\n---\n"):
        if part.strip():
            yield yaml.safe_load(part)