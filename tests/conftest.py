import json
import os
import struct
import sys
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Mapping, Tuple

import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")
ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
for path in (str(SRC), str(ROOT)):
    if path not in sys.path:
        sys.path.insert(0, path)

from services.codec_backend import DefaultBackend  # noqa: E402

LabelRow = Tuple[int, str]


class FakeBackend(DefaultBackend):
    """In-memory stand-in for the container and message archive codecs."""

    name = "fake"

    def pack_container(self, files: Mapping[str, bytes]) -> bytes:
        return json.dumps({key: data.hex() for key, data in files.items()}).encode("utf-8")

    def unpack_container(self, data: bytes) -> Dict[str, bytes]:
        return {key: bytes.fromhex(value) for key, value in json.loads(data.decode("utf-8")).items()}

    def open_text_archive(self, data: bytes, encoding: str, byte_order: str) -> Dict[str, str]:
        return json.loads(data.decode(encoding))

    def serialize_text_archive(self, entries: Mapping[str, str], encoding: str, byte_order: str) -> bytes:
        return json.dumps(dict(entries), ensure_ascii=False).encode(encoding)


def build_bin_archive(
    data: bytes,
    pointers: Iterable[int] = (),
    labels: Iterable[LabelRow] = (),
    byte_order: str = "big",
) -> bytes:
    prefix = ">" if byte_order == "big" else "<"
    pointer_list: List[int] = list(pointers)
    label_list: List[LabelRow] = list(labels)
    names = b""
    label_table = b""
    for offset, name in label_list:
        label_table += struct.pack(f"{prefix}2I", offset, len(names))
        names += name.encode("shift_jis") + b"\x00"
    pointer_table = b"".join(struct.pack(f"{prefix}I", source) for source in pointer_list)
    body = data + pointer_table + label_table + names
    header = struct.pack(f"{prefix}4I", 0x20 + len(body), len(data), len(pointer_list), len(label_list))
    return header + b"\x00" * 16 + body


@pytest.fixture
def fake_backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def make_bin_archive() -> Callable[..., bytes]:
    return build_bin_archive
