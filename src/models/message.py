from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Message:
    text: str
    is_error: bool = False

    @classmethod
    def success(cls, text: str) -> "Message":
        return cls(text, False)

    @classmethod
    def error(cls, text: str) -> "Message":
        return cls(text, True)
