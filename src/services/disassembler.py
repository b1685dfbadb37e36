"""Render a word-addressed binary buffer as labelled, line-oriented text."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol, Sequence

from models.disassembly_line import (
    Destination,
    DisassemblyLine,
    Label,
    PlainString,
    PointerSource,
    RawWord,
)

WORD_SIZE = 4


class BinaryBuffer(Protocol):
    """Word-addressed view of a bin archive.

    ``encoding`` names the codec ``read_string`` decodes with. The disassembler
    re-encodes each plain string with it to find how many words the string spans.
    """

    encoding: str

    def size(self) -> int: ...

    def read_pointer(self, offset: int) -> int | None: ...

    def read_labels(self, offset: int) -> Sequence[str]: ...

    def read_c_string(self, offset: int) -> str | None: ...

    def read_string(self, offset: int) -> str | None: ...

    def read_bytes(self, offset: int, length: int) -> bytes: ...


@dataclass
class PointerMap:
    sources: dict[int, int] = field(default_factory=dict)
    destinations: dict[int, int] = field(default_factory=dict)


def _word_offsets(buffer: BinaryBuffer) -> range:
    size = buffer.size()
    if size % WORD_SIZE:
        raise ValueError(f"Buffer size {size} is not a multiple of {WORD_SIZE}")
    return range(0, size, WORD_SIZE)


def _aligned_span(byte_length: int) -> int:
    return (byte_length + WORD_SIZE - 1) // WORD_SIZE * WORD_SIZE


def build_pointer_map(buffer: BinaryBuffer) -> PointerMap:
    """Assign destination ids in the order targets are first seen by an ascending scan."""
    pointer_map = PointerMap()
    for offset in _word_offsets(buffer):
        target = buffer.read_pointer(offset)
        if target is None:
            continue
        dest_id = pointer_map.destinations.setdefault(target, len(pointer_map.destinations))
        pointer_map.sources[offset] = dest_id
    return pointer_map


def disassemble_lines(buffer: BinaryBuffer) -> list[DisassemblyLine]:
    offsets = _word_offsets(buffer)
    pointer_map = build_pointer_map(buffer)
    lines: list[DisassemblyLine] = []
    # Interior words of a multi-word string are skipped outright, along with
    # any destination marker or labels that sit on them.
    resume_at = 0
    for offset in offsets:
        if offset < resume_at:
            continue
        dest_id = pointer_map.destinations.get(offset)
        if dest_id is not None:
            lines.append(Destination(dest_id))
        for label in buffer.read_labels(offset):
            lines.append(Label(label))

        source_id = pointer_map.sources.get(offset)
        if source_id is not None:
            text = buffer.read_c_string(offset)
            if text is not None and text.strip():
                lines.append(PointerSource(source_id, text))
            else:
                lines.append(PointerSource(source_id))
            continue

        text = buffer.read_string(offset)
        if text:
            lines.append(PlainString(text))
            encoded_length = len(text.encode(buffer.encoding)) + 1
            resume_at = offset + _aligned_span(encoded_length)
            continue

        lines.append(RawWord(buffer.read_bytes(offset, WORD_SIZE)))
    return lines


def disassemble(buffer: BinaryBuffer) -> str:
    return "\n".join(line.render() for line in disassemble_lines(buffer))
