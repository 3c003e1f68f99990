from __future__ import annotations

import io

from gitnest.lfs import BLOB_SIZE_CUTOFF, Pointer, read_pointer, read_pointer_from_buffer
from gitnest.testing.git_test_helpers import lfs_pointer


def test_read_valid_pointer() -> None:
    oid, pointer_bytes = lfs_pointer(b"large file content")

    pointer = read_pointer_from_buffer(pointer_bytes)
    assert pointer.is_valid()
    assert pointer.oid == oid
    assert pointer.size == len(b"large file content")


def test_relative_path_is_sharded() -> None:
    pointer = Pointer(oid="ab" + "cd" + "e" * 60, size=1)
    assert pointer.relative_path() == "ab/cd/" + "e" * 60


def test_non_pointer_text_is_invalid() -> None:
    assert not read_pointer_from_buffer(b"just a regular file\n").is_valid()


def test_pointer_with_bad_oid_is_invalid() -> None:
    buf = b"version https://git-lfs.github.com/spec/v1\noid sha256:XYZ\nsize 3\n"
    assert read_pointer_from_buffer(buf) == Pointer()


def test_pointer_with_negative_size_is_invalid() -> None:
    buf = (
        b"version https://git-lfs.github.com/spec/v1\noid sha256:"
        + b"a" * 64
        + b"\nsize -1\n"
    )
    assert not read_pointer_from_buffer(buf).is_valid()


def test_oversized_buffer_is_never_a_pointer() -> None:
    _, pointer_bytes = lfs_pointer(b"x")
    padded = pointer_bytes + b"#" * BLOB_SIZE_CUTOFF
    assert not read_pointer(io.BytesIO(padded)).is_valid()


def test_pointer_oid_must_be_ascii_hex() -> None:
    # Arabic-Indic digits are Unicode decimals but never valid hex.
    assert not Pointer(oid="١" * 64, size=1).is_valid()
