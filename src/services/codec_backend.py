"""Codec operations the file operations delegate to.

Container and text-archive formats are supplied by a pluggable backend; the
bundled default covers LZ10 (via ``ndspy``) and bin archive buffers.
"""

from __future__ import annotations

import importlib
from typing import Any, Mapping

import ndspy.lz10

from services.bin_archive import BinArchive

DEFAULT_BACKEND = "services.codec_backend:DefaultBackend"


class BackendError(RuntimeError):
    """Raised when the configured backend cannot perform an operation."""

    pass


class ArchiveBackend:
    """Contract for the archive, compression and text-archive collaborator."""

    name = "abstract"

    def pack_container(self, files: Mapping[str, bytes]) -> bytes:
        raise BackendError(f"Codec backend '{self.name}' cannot pack containers")

    def unpack_container(self, data: bytes) -> dict[str, bytes]:
        raise BackendError(f"Codec backend '{self.name}' cannot unpack containers")

    def compress(self, data: bytes) -> bytes:
        raise BackendError(f"Codec backend '{self.name}' cannot compress data")

    def decompress(self, data: bytes) -> bytes:
        raise BackendError(f"Codec backend '{self.name}' cannot decompress data")

    def open_text_archive(self, data: bytes, encoding: str, byte_order: str) -> dict[str, str]:
        raise BackendError(f"Codec backend '{self.name}' cannot read message archives")

    def serialize_text_archive(self, entries: Mapping[str, str], encoding: str, byte_order: str) -> bytes:
        raise BackendError(f"Codec backend '{self.name}' cannot write message archives")

    def load_binary_buffer(self, data: bytes, byte_order: str, encoding: str = "shift_jis") -> Any:
        raise BackendError(f"Codec backend '{self.name}' cannot load binary buffers")


class DefaultBackend(ArchiveBackend):
    name = "default"

    def compress(self, data: bytes) -> bytes:
        return ndspy.lz10.compress(data)

    def decompress(self, data: bytes) -> bytes:
        return ndspy.lz10.decompress(data)

    def load_binary_buffer(self, data: bytes, byte_order: str, encoding: str = "shift_jis") -> BinArchive:
        return BinArchive.from_bytes(data, byte_order, encoding=encoding)


def load_backend(spec: str | None = None) -> ArchiveBackend:
    """Instantiate the backend named by a ``module:attribute`` path."""
    target = (spec or DEFAULT_BACKEND).strip()
    module_name, sep, attr = target.partition(":")
    if not sep or not module_name or not attr:
        raise BackendError(f"Backend path '{target}' must look like 'package.module:ClassName'")
    try:
        module = importlib.import_module(module_name)
    except ImportError as exc:
        raise BackendError(f"Unable to import backend module '{module_name}': {exc}") from exc
    factory = getattr(module, attr, None)
    if factory is None:
        raise BackendError(f"Backend module '{module_name}' has no attribute '{attr}'")
    backend = factory() if callable(factory) else factory
    if not isinstance(backend, ArchiveBackend):
        raise BackendError(f"'{target}' did not produce an ArchiveBackend")
    return backend
