"""Read-only view over relocatable game-data ``.bin`` archives."""

from __future__ import annotations

import struct

HEADER_SIZE = 0x20
WORD_SIZE = 4
DEFAULT_ENCODING = "shift_jis"


class BinArchiveError(ValueError):
    """Raised when a blob does not follow the bin archive layout."""

    pass


def _byte_order_prefix(byte_order: str) -> str:
    if byte_order == "big":
        return ">"
    if byte_order == "little":
        return "<"
    raise ValueError(f"Unsupported byte order '{byte_order}'")


class BinArchive:
    """Data section of a bin archive plus its pointer and label tables.

    Offsets passed to the read methods are relative to the start of the data
    section, which is also how the pointer table and stored pointer values are
    expressed.
    """

    def __init__(
        self,
        data: bytes,
        pointers: set[int] | None = None,
        labels: dict[int, list[str]] | None = None,
        *,
        byte_order: str = "big",
        encoding: str = DEFAULT_ENCODING,
    ) -> None:
        if len(data) % WORD_SIZE:
            raise BinArchiveError(f"Data size {len(data)} is not a multiple of {WORD_SIZE}")
        self._data = bytes(data)
        self._pointers = set(pointers or ())
        self._labels = {offset: list(names) for offset, names in (labels or {}).items()}
        self._prefix = _byte_order_prefix(byte_order)
        self.byte_order = byte_order
        self.encoding = encoding

    @classmethod
    def from_bytes(
        cls,
        raw: bytes,
        byte_order: str = "big",
        *,
        encoding: str = DEFAULT_ENCODING,
    ) -> "BinArchive":
        prefix = _byte_order_prefix(byte_order)
        if len(raw) < HEADER_SIZE:
            raise BinArchiveError(f"Blob of {len(raw)} bytes is too small for a bin archive header")
        file_size, data_size, pointer_count, label_count = struct.unpack_from(f"{prefix}4I", raw, 0)
        if file_size != len(raw):
            raise BinArchiveError(f"Header declares {file_size} bytes but blob holds {len(raw)}")

        data_end = HEADER_SIZE + data_size
        pointer_end = data_end + pointer_count * 4
        label_end = pointer_end + label_count * 8
        if label_end > len(raw):
            raise BinArchiveError("Pointer or label table runs past the end of the blob")

        data = raw[HEADER_SIZE:data_end]
        pointers = set(struct.unpack_from(f"{prefix}{pointer_count}I", raw, data_end))
        for source in pointers:
            if source % WORD_SIZE or source + WORD_SIZE > data_size:
                raise BinArchiveError(f"Pointer table entry 0x{source:X} is outside the data section")

        names_blob = raw[label_end:]
        labels: dict[int, list[str]] = {}
        for index in range(label_count):
            offset, name_offset = struct.unpack_from(f"{prefix}2I", raw, pointer_end + index * 8)
            if name_offset >= len(names_blob):
                raise BinArchiveError(f"Label name offset 0x{name_offset:X} is outside the name table")
            end = names_blob.find(b"\x00", name_offset)
            if end < 0:
                end = len(names_blob)
            name = names_blob[name_offset:end].decode(encoding, errors="replace")
            labels.setdefault(offset, []).append(name)

        return cls(data, pointers, labels, byte_order=byte_order, encoding=encoding)

    def size(self) -> int:
        return len(self._data)

    def read_bytes(self, offset: int, length: int) -> bytes:
        if offset < 0 or offset + length > len(self._data):
            raise BinArchiveError(f"Read of {length} bytes at 0x{offset:X} is out of range")
        return self._data[offset : offset + length]

    def read_u32(self, offset: int) -> int:
        return struct.unpack(f"{self._prefix}I", self.read_bytes(offset, WORD_SIZE))[0]

    def read_pointer(self, offset: int) -> int | None:
        if offset not in self._pointers:
            return None
        target = self.read_u32(offset)
        if target % WORD_SIZE or target >= len(self._data):
            return None
        return target

    def read_labels(self, offset: int) -> list[str]:
        return list(self._labels.get(offset, ()))

    def read_c_string(self, offset: int) -> str | None:
        """Decode the zero-terminated string at ``offset``; ``None`` when unreadable."""
        if offset < 0 or offset >= len(self._data):
            return None
        end = self._data.find(b"\x00", offset)
        if end < 0:
            return None
        try:
            text = self._data[offset:end].decode(self.encoding)
        except UnicodeDecodeError:
            return None
        if not text.isprintable():
            return None
        return text

    def read_string(self, offset: int) -> str | None:
        text = self.read_c_string(offset)
        return text or None
