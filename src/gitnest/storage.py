"""Object storage for LFS content and avatars.

Two backends share one async interface: a directory on the local filesystem
and an S3 compatible bucket (MinIO, AWS). S3 operations create a fresh
aiobotocore client per call rather than sharing a long-lived pool.
"""

from __future__ import annotations

import posixpath
from collections.abc import AsyncIterator
from contextlib import AbstractAsyncContextManager, AsyncExitStack
from pathlib import Path
from typing import Any, Protocol

import aiofiles
import aiofiles.os
from aiobotocore.session import get_session
from botocore.config import Config
from botocore.exceptions import ClientError

from gitnest.errors import ObjectNotExistError, ServeDirectUnsupportedError
from gitnest.settings import Settings, get_settings


_MISSING_KEY_CODES = {"NoSuchKey", "404", "NotFound"}


class ObjectReader(Protocol):
    async def read(self, size: int = -1) -> bytes: ...

    async def close(self) -> None: ...


class ObjectStorage(Protocol):
    async def open(self, path: str) -> ObjectReader: ...

    async def save(self, path: str, data: bytes) -> int: ...

    async def delete(self, path: str) -> None: ...

    async def url(self, path: str, name: str) -> str: ...


def clean_path(path: str) -> str:
    """Normalize a storage key and keep it inside the storage root."""
    cleaned = posixpath.normpath("/" + path.replace("\\", "/")).lstrip("/")
    return "" if cleaned == "." else cleaned


def quote_filename(name: str) -> str:
    """Escape ``name`` for a quoted-string ``filename`` parameter."""
    return name.replace("\\", "\\\\").replace('"', '\\"')


async def iter_reader(reader: ObjectReader, chunk_size: int = 64 * 1024) -> AsyncIterator[bytes]:
    while True:
        chunk = await reader.read(chunk_size)
        if not chunk:
            return
        yield chunk


class _LocalObjectReader:
    def __init__(self, handle: Any) -> None:
        self._handle = handle

    async def read(self, size: int = -1) -> bytes:
        data: bytes = await self._handle.read(size)
        return data

    async def close(self) -> None:
        await self._handle.close()


class LocalStorage:
    def __init__(self, root: str | Path) -> None:
        self.root = Path(root)

    def _build_path(self, path: str) -> Path:
        return self.root / clean_path(path)

    async def open(self, path: str) -> ObjectReader:
        try:
            handle = await aiofiles.open(self._build_path(path), "rb")
        except FileNotFoundError as exc:
            raise ObjectNotExistError(path) from exc
        return _LocalObjectReader(handle)

    async def save(self, path: str, data: bytes) -> int:
        target = self._build_path(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        tmp = target.with_name(target.name + ".tmp")
        async with aiofiles.open(tmp, "wb") as handle:
            await handle.write(data)
        await aiofiles.os.replace(tmp, target)
        return len(data)

    async def delete(self, path: str) -> None:
        try:
            await aiofiles.os.remove(self._build_path(path))
        except FileNotFoundError:
            return

    async def url(self, path: str, name: str) -> str:
        raise ServeDirectUnsupportedError("local storage cannot serve direct URLs")


class _S3ObjectReader:
    def __init__(self, body: Any, stack: AsyncExitStack) -> None:
        self._body = body
        self._stack = stack

    async def read(self, size: int = -1) -> bytes:
        if size < 0:
            data: bytes = await self._body.read()
        else:
            data = await self._body.read(size)
        return data

    async def close(self) -> None:
        try:
            self._body.close()
        finally:
            await self._stack.aclose()


class MinioStorage:
    def __init__(
        self,
        *,
        endpoint: str,
        access_key_id: str,
        secret_access_key: str,
        bucket: str,
        location: str,
        base_path: str,
        use_ssl: bool = False,
        url_expiry_seconds: int = 300,
    ) -> None:
        scheme = "https" if use_ssl else "http"
        self.endpoint_url = endpoint if "://" in endpoint else f"{scheme}://{endpoint}"
        self.access_key_id = access_key_id
        self.secret_access_key = secret_access_key
        self.bucket = bucket
        self.location = location
        self.base_path = base_path
        self.url_expiry_seconds = url_expiry_seconds

    def _client(self) -> AbstractAsyncContextManager[Any]:
        return get_session().create_client(
            "s3",
            endpoint_url=self.endpoint_url,
            aws_access_key_id=self.access_key_id,
            aws_secret_access_key=self.secret_access_key,
            region_name=self.location,
            config=Config(
                connect_timeout=60, read_timeout=300, s3={"addressing_style": "path"}
            ),
        )

    def _key(self, path: str) -> str:
        return posixpath.join(self.base_path, clean_path(path))

    async def open(self, path: str) -> ObjectReader:
        stack = AsyncExitStack()
        s3_client = await stack.enter_async_context(self._client())
        try:
            response = await s3_client.get_object(Bucket=self.bucket, Key=self._key(path))
        except ClientError as exc:
            await stack.aclose()
            if exc.response.get("Error", {}).get("Code") in _MISSING_KEY_CODES:
                raise ObjectNotExistError(path) from exc
            raise
        except BaseException:
            await stack.aclose()
            raise
        return _S3ObjectReader(response["Body"], stack)

    async def save(self, path: str, data: bytes) -> int:
        async with self._client() as s3_client:
            await s3_client.put_object(Bucket=self.bucket, Key=self._key(path), Body=data)
        return len(data)

    async def delete(self, path: str) -> None:
        async with self._client() as s3_client:
            await s3_client.delete_object(Bucket=self.bucket, Key=self._key(path))

    async def url(self, path: str, name: str) -> str:
        disposition = f'attachment; filename="{quote_filename(name)}"'
        async with self._client() as s3_client:
            signed: str = await s3_client.generate_presigned_url(
                "get_object",
                Params={
                    "Bucket": self.bucket,
                    "Key": self._key(path),
                    "ResponseContentDisposition": disposition,
                },
                ExpiresIn=self.url_expiry_seconds,
            )
        return signed


def _minio_storage(settings: Settings, base_path: str) -> MinioStorage:
    return MinioStorage(
        endpoint=settings.minio_endpoint,
        access_key_id=settings.minio_access_key_id,
        secret_access_key=settings.minio_secret_access_key.get_secret_value(),
        bucket=settings.minio_bucket,
        location=settings.minio_location,
        base_path=base_path,
        use_ssl=settings.minio_use_ssl,
        url_expiry_seconds=settings.minio_url_expiry_seconds,
    )


def lfs_storage(settings: Settings | None = None) -> ObjectStorage:
    selected = settings if settings is not None else get_settings()
    if selected.lfs_storage_type == "minio":
        return _minio_storage(selected, selected.lfs_minio_base_path)
    return LocalStorage(selected.lfs_content_path)


def avatar_storage(settings: Settings | None = None) -> ObjectStorage:
    selected = settings if settings is not None else get_settings()
    if selected.avatar_storage_type == "minio":
        return _minio_storage(selected, selected.avatar_minio_base_path)
    return LocalStorage(selected.avatar_upload_path)
