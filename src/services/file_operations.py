"""File operations selected for each dropped path."""

from __future__ import annotations

from pathlib import Path, PurePosixPath
from typing import Callable, Iterator

from models.message import Message
from models.work_item import DropModifiers, WorkItem
from services.codec_backend import ArchiveBackend, DefaultBackend
from services.disassembler import disassemble
from services.message_table import dump_message_table, load_message_table


class OperationError(RuntimeError):
    pass


class UnsupportedPathError(OperationError):
    pass


def _describe_error(exc: BaseException) -> str:
    parts = [f"{type(exc).__name__}: {exc}"]
    seen = {id(exc)}
    cause = exc.__cause__ or exc.__context__
    while cause is not None and id(cause) not in seen:
        seen.add(id(cause))
        parts.append(f"caused by {type(cause).__name__}: {cause}")
        cause = cause.__cause__ or cause.__context__
    return "; ".join(parts)


def _iter_files(root: Path) -> Iterator[Path]:
    for entry in sorted(root.iterdir(), key=lambda p: p.name):
        if entry.is_dir() and not entry.is_symlink():
            yield from _iter_files(entry)
        elif entry.is_file():
            yield entry


def _container_key(root: Path, path: Path) -> str:
    return path.relative_to(root).as_posix()


def _safe_member_path(write_dir: Path, key: str) -> Path:
    member = PurePosixPath(key.replace("\\", "/"))
    if member.is_absolute() or ".." in member.parts or not member.parts:
        raise OperationError(f"Refusing to extract unsafe container entry '{key}'")
    return write_dir.joinpath(*member.parts)


class FileOperations:
    """Map a dropped path to exactly one archive, codec or disassembly operation."""

    def __init__(
        self,
        backend: ArchiveBackend | None = None,
        *,
        byte_order: str = "big",
        text_encoding: str = "shift_jis",
    ) -> None:
        self.backend = backend or DefaultBackend()
        self.byte_order = byte_order
        self.text_encoding = text_encoding
        self._by_extension: dict[str, Callable[[Path], list[Message]]] = {
            "cmp": self.extract_cmp,
            "cms": self.extract_cms,
            "m": self.extract_message,
            "bin": self.extract_bin,
            "yml": self.pack_message,
        }

    def select(self, path: Path, modifiers: DropModifiers) -> Callable[[Path], list[Message]]:
        if path.is_dir():
            return self.pack_cmp
        if not path.is_file():
            raise UnsupportedPathError(f"Bad path '{path}'")
        if modifiers.command_only():
            return self.compress_bin
        if modifiers.shift_only():
            return self.decompress_bin
        operation = self._by_extension.get(path.suffix[1:])
        if operation is None:
            raise UnsupportedPathError(f"Unsupported file extension for path '{path}'")
        return operation

    def process(self, path: Path, modifiers: DropModifiers | None = None) -> list[Message]:
        operation = self.select(path, modifiers or DropModifiers())
        return operation(path)

    def run_work_item(self, item: WorkItem) -> list[Message]:
        try:
            return self.process(item.path, item.modifiers)
        except Exception as exc:
            return [
                Message.error(f"Failed to process path '{item.path}'"),
                Message.error(_describe_error(exc)),
            ]

    def pack_cmp(self, path: Path) -> list[Message]:
        files: dict[str, bytes] = {}
        for file_path in _iter_files(path):
            try:
                files[_container_key(path, file_path)] = file_path.read_bytes()
            except OSError as exc:
                raise OperationError(f"Failed to read path '{file_path}'") from exc

        output_path = path.with_name(path.name + ".cmp")
        container = self.backend.pack_container(files)
        output_path.write_bytes(self.backend.compress(container))
        return [Message.success(f"Packed '{len(files)}' files under path '{path}' to cmp '{output_path}'")]

    def extract_cmp(self, path: Path) -> list[Message]:
        decompressed = self.backend.decompress(path.read_bytes())
        entries = self.backend.unpack_container(decompressed)
        write_dir = path.parent / path.stem

        messages: list[Message] = []
        for key, data in entries.items():
            write_path = _safe_member_path(write_dir, key)
            write_path.parent.mkdir(parents=True, exist_ok=True)
            write_path.write_bytes(data)
            messages.append(Message.success(f"Extracted cmp file to path '{write_path}'"))
        return messages

    def extract_cms(self, path: Path) -> list[Message]:
        decompressed = self.backend.decompress(path.read_bytes())
        output_path = path.with_suffix(".bin")
        output_path.write_bytes(decompressed)
        messages = [Message.success(f"Decompressed cms '{path}' to path '{output_path}'")]
        try:
            messages.extend(self._dump_disassembly(path, decompressed))
        except Exception:
            # Not every compressed blob is a bin archive.
            pass
        return messages

    def extract_bin(self, path: Path) -> list[Message]:
        return self._dump_disassembly(path, path.read_bytes())

    def _dump_disassembly(self, path: Path, raw: bytes) -> list[Message]:
        archive = self.backend.load_binary_buffer(raw, self.byte_order, self.text_encoding)
        text = disassemble(archive)
        output_path = path.with_suffix(".txt")
        output_path.write_text(text, encoding="utf-8")
        return [Message.success(f"Extracted bin archive '{path}' to path '{output_path}'")]

    def extract_message(self, path: Path) -> list[Message]:
        entries = self.backend.open_text_archive(path.read_bytes(), self.text_encoding, self.byte_order)
        output_path = path.with_suffix(".yml")
        dump_message_table(entries, output_path)
        return [Message.success(f"Extracted message archive from path '{path}' to '{output_path}'")]

    def pack_message(self, path: Path) -> list[Message]:
        entries = load_message_table(path)
        raw = self.backend.serialize_text_archive(entries, self.text_encoding, self.byte_order)
        output_path = path.with_suffix(".m")
        output_path.write_bytes(raw)
        return [Message.success(f"Packed message archive '{path}' to path '{output_path}'")]

    def compress_bin(self, path: Path) -> list[Message]:
        output_path = path.with_suffix(".cms")
        output_path.write_bytes(self.backend.compress(path.read_bytes()))
        return [Message.success(f"Compressed path '{path}' to path '{output_path}'")]

    def decompress_bin(self, path: Path) -> list[Message]:
        output_path = path.with_suffix(".bin")
        output_path.write_bytes(self.backend.decompress(path.read_bytes()))
        return [Message.success(f"Decompressed path '{path}' to path '{output_path}'")]
