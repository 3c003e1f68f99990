"""Git LFS pointer files and the LFS content store."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import BinaryIO

from gitnest.storage import ObjectReader, ObjectStorage, lfs_storage

BLOB_SIZE_CUTOFF = 1024

META_FILE_IDENTIFIER = "version https://git-lfs.github.com/spec/v1"
META_FILE_OID_PREFIX = "oid sha256:"

_OID_PATTERN = re.compile(r"^[a-f\d]{64}$", re.ASCII)


@dataclass(frozen=True)
class Pointer:
    oid: str = ""
    size: int = 0

    def is_valid(self) -> bool:
        if len(self.oid) != 64:
            return False
        if not _OID_PATTERN.match(self.oid):
            return False
        return self.size >= 0

    def relative_path(self) -> str:
        """Sharded content store path: ``ab/cd/ef...``."""
        if len(self.oid) < 5:
            return self.oid
        return f"{self.oid[0:2]}/{self.oid[2:4]}/{self.oid[4:]}"


def read_pointer_from_buffer(buf: bytes) -> Pointer:
    """Parse an LFS pointer; returns an invalid ``Pointer()`` when ``buf`` is not one."""
    if len(buf) > BLOB_SIZE_CUTOFF:
        return Pointer()

    try:
        text = buf.decode("utf-8")
    except UnicodeDecodeError:
        return Pointer()

    if not text.startswith(META_FILE_IDENTIFIER):
        return Pointer()

    lines = text.split("\n")
    if len(lines) < 3:
        return Pointer()

    oid_line, size_line = lines[1], lines[2]
    if not oid_line.startswith(META_FILE_OID_PREFIX):
        return Pointer()
    oid = oid_line[len(META_FILE_OID_PREFIX) :]
    if len(oid) != 64 or not _OID_PATTERN.match(oid):
        return Pointer()

    if not size_line.startswith("size "):
        return Pointer()
    try:
        size = int(size_line[len("size ") :])
    except ValueError:
        return Pointer()
    if size < 0:
        return Pointer()

    return Pointer(oid=oid, size=size)


def read_pointer(stream: BinaryIO) -> Pointer:
    """Read at most one cutoff's worth from ``stream`` and parse it as a pointer."""
    buf = stream.read(BLOB_SIZE_CUTOFF + 1)
    return read_pointer_from_buffer(buf)


async def read_meta_object(pointer: Pointer, storage: ObjectStorage | None = None) -> ObjectReader:
    content_store = storage if storage is not None else lfs_storage()
    return await content_store.open(pointer.relative_path())
