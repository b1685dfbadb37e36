from __future__ import annotations

from pathlib import Path
from typing import Mapping

import yaml


class MessageTableError(ValueError):
    pass


def dump_message_table(entries: Mapping[str, str], path: Path) -> None:
    text = yaml.safe_dump(
        {str(key): str(value) for key, value in entries.items()},
        allow_unicode=True,
        sort_keys=False,
        default_flow_style=False,
    )
    path.write_text(text, encoding="utf-8")


def load_message_table(path: Path) -> dict[str, str]:
    data = yaml.safe_load(path.read_text(encoding="utf-8"))
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise MessageTableError(f"Expected a key/value mapping in '{path}', found {type(data).__name__}")
    entries: dict[str, str] = {}
    for key, value in data.items():
        if value is None:
            value = ""
        if isinstance(value, (dict, list)):
            raise MessageTableError(f"Message '{key}' in '{path}' must be a string")
        entries[str(key)] = str(value)
    return entries
