"""Line kinds produced by the bin archive disassembler."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True)
class Destination:
    dest_id: int

    def render(self) -> str:
        return f"DEST: {self.dest_id}"


@dataclass(frozen=True)
class Label:
    text: str

    def render(self) -> str:
        return f"LABEL: {self.text}"


@dataclass(frozen=True)
class PointerSource:
    dest_id: int
    text: str | None = None

    def render(self) -> str:
        if self.text is None:
            return f"SRC: {self.dest_id}"
        return f"SRC: {self.dest_id} // {self.text}"


@dataclass(frozen=True)
class RawWord:
    data: bytes

    def render(self) -> str:
        return self.data.hex().upper()


@dataclass(frozen=True)
class PlainString:
    text: str

    def render(self) -> str:
        return self.text


DisassemblyLine = Union[Destination, Label, PointerSource, RawWord, PlainString]
