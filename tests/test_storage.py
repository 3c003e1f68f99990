from __future__ import annotations

from pathlib import Path
from urllib.parse import parse_qs, urlsplit

import pytest

from gitnest.errors import ObjectNotExistError, ServeDirectUnsupportedError
from gitnest.settings import Settings
from gitnest.storage import (
    LocalStorage,
    MinioStorage,
    avatar_storage,
    clean_path,
    iter_reader,
    quote_filename,
)


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("ab/cd/ef", "ab/cd/ef"),
        ("../../etc/passwd", "etc/passwd"),
        ("/abs//path/", "abs/path"),
        ("a\\b", "a/b"),
        ("", ""),
    ],
)
def test_clean_path_stays_inside_root(raw: str, expected: str) -> None:
    assert clean_path(raw) == expected


@pytest.mark.asyncio
async def test_local_storage_save_open_delete(tmp_path: Path) -> None:
    storage = LocalStorage(tmp_path / "store")

    assert await storage.save("ab/cd/object", b"payload") == 7

    reader = await storage.open("ab/cd/object")
    try:
        chunks = [chunk async for chunk in iter_reader(reader, chunk_size=3)]
    finally:
        await reader.close()
    assert b"".join(chunks) == b"payload"
    assert chunks[0] == b"pay"

    await storage.delete("ab/cd/object")
    await storage.delete("ab/cd/object")
    with pytest.raises(ObjectNotExistError):
        await storage.open("ab/cd/object")


@pytest.mark.asyncio
async def test_local_storage_has_no_direct_urls(tmp_path: Path) -> None:
    with pytest.raises(ServeDirectUnsupportedError):
        await LocalStorage(tmp_path).url("x", "x.bin")


def test_storage_backend_follows_settings() -> None:
    local = avatar_storage(Settings(avatar_storage_type="local", avatar_upload_path="/tmp/av"))
    assert isinstance(local, LocalStorage)
    assert local.root == Path("/tmp/av")

    minio = avatar_storage(
        Settings(avatar_storage_type="minio", minio_endpoint="minio:9000", minio_use_ssl=True)
    )
    assert isinstance(minio, MinioStorage)
    assert minio.endpoint_url == "https://minio:9000"
    assert minio._key("ab/cd") == "avatars/ab/cd"


@pytest.mark.parametrize(
    ("name", "expected"),
    [
        ("my report.bin", "my report.bin"),
        ('say "hi".txt', 'say \\"hi\\".txt'),
        ("back\\slash", "back\\\\slash"),
    ],
)
def test_quote_filename_escapes_only_quotes_and_backslashes(name: str, expected: str) -> None:
    assert quote_filename(name) == expected


@pytest.mark.asyncio
async def test_minio_signed_url_keeps_plain_filename() -> None:
    storage = MinioStorage(
        endpoint="localhost:9000",
        access_key_id="gitnest",
        secret_access_key="gitnest-secret",
        bucket="gitnest",
        location="us-east-1",
        base_path="lfs/",
    )

    signed = await storage.url("ab/cd/ef", "my report.bin")

    parts = urlsplit(signed)
    assert parts.netloc == "localhost:9000"
    assert parts.path == "/gitnest/lfs/ab/cd/ef"
    query = parse_qs(parts.query)
    assert query["response-content-disposition"] == ['attachment; filename="my report.bin"']
