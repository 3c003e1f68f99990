"""Streaming responses for git blobs and LFS objects.

Every stream opened here is closed exactly once: either after the response body
has been sent, or immediately when serving fails before a response exists.
"""

from __future__ import annotations

import logging
import posixpath
from collections.abc import AsyncIterator, MutableMapping
from datetime import datetime
from typing import BinaryIO
from urllib.parse import quote

from fastapi import Request
from fastapi.responses import RedirectResponse
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.background import BackgroundTask
from starlette.responses import Response, StreamingResponse

from gitnest.db.models import Repository
from gitnest.db.repos import LFSMetaObjectRepository
from gitnest.errors import ServeDirectUnsupportedError
from gitnest.git import Blob
from gitnest.httpcache import handle_generic_etag_cache, handle_generic_etag_time_cache
from gitnest.lfs import Pointer, read_meta_object, read_pointer
from gitnest.logging_config import log_with_fields
from gitnest.settings import get_settings
from gitnest.storage import ObjectReader, iter_reader, lfs_storage
from gitnest.typesniffer import SNIFF_LEN, SVG_MIME_TYPE, TEXT_PLAIN, detect_content_type

logger = logging.getLogger("gitnest.serve")

PUBLIC_CACHE_CONTROL = "public,max-age=86400"
SANDBOX_CSP = "default-src 'none'; style-src 'unsafe-inline'; sandbox"

_TRUTHY = {"1", "true", "on", "yes"}


class _BlobReader:
    """Async view over a blob's synchronous data stream."""

    def __init__(self, stream: BinaryIO) -> None:
        self._stream = stream

    async def read(self, size: int = -1) -> bytes:
        return self._stream.read(size)

    async def close(self) -> None:
        self._stream.close()


class _CloseOnce:
    def __init__(self, reader: ObjectReader, name: str) -> None:
        self._reader = reader
        self._name = name
        self.closed = False

    async def read(self, size: int = -1) -> bytes:
        return await self._reader.read(size)

    async def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        try:
            await self._reader.close()
        except Exception:
            log_with_fields(logger, logging.ERROR, "stream close failed", name=self._name, exc_info=True)


async def _stream_body(head: bytes, reader: _CloseOnce) -> AsyncIterator[bytes]:
    try:
        if head:
            yield head
        async for chunk in iter_reader(reader):
            yield chunk
    finally:
        await reader.close()


def _content_disposition(disposition: str, file_name: str) -> str:
    try:
        file_name.encode("latin-1")
    except UnicodeEncodeError:
        return f"{disposition}; filename*=UTF-8''{quote(file_name)}"
    return f'{disposition}; filename="{file_name}"'


def _render_requested(request: Request) -> bool:
    return request.query_params.get("render", "").strip().lower() in _TRUTHY


async def serve_data(
    request: Request,
    file_path: str,
    size: int,
    reader: ObjectReader,
    headers: MutableMapping[str, str] | None = None,
) -> Response:
    """Stream ``reader`` with headers chosen from its sniffed leading bytes.

    Takes ownership of ``reader``.
    """
    guarded = reader if isinstance(reader, _CloseOnce) else _CloseOnce(reader, file_path)
    try:
        head = await guarded.read(SNIFF_LEN)
    except BaseException:
        await guarded.close()
        raise

    response_headers: dict[str, str] = dict(headers or {})
    response_headers["Cache-Control"] = PUBLIC_CACHE_CONTROL
    if size >= 0:
        response_headers["Content-Length"] = str(size)
    else:
        log_with_fields(logger, logging.ERROR, "serving data with unknown size", name=file_path, size=size)

    file_name = posixpath.basename(file_path.rstrip("/")).replace(",", " ")
    sniffed = detect_content_type(head)
    enable_svg = get_settings().enable_svg

    if sniffed.is_text or _render_requested(request):
        response_headers["Content-Type"] = TEXT_PLAIN
    else:
        response_headers["Access-Control-Expose-Headers"] = "Content-Disposition"
        if (sniffed.is_image or sniffed.is_pdf) and (enable_svg or not sniffed.is_svg_image):
            response_headers["Content-Disposition"] = _content_disposition("inline", file_name)
            response_headers["Content-Type"] = sniffed.content_type
            if sniffed.is_svg_image or sniffed.is_pdf:
                response_headers["Content-Security-Policy"] = SANDBOX_CSP
                response_headers["X-Content-Type-Options"] = "nosniff"
                if sniffed.is_svg_image:
                    response_headers["Content-Type"] = SVG_MIME_TYPE
        else:
            response_headers["Content-Disposition"] = _content_disposition("attachment", file_name)
            response_headers["Content-Type"] = sniffed.content_type

    return StreamingResponse(
        _stream_body(head, guarded),
        headers=response_headers,
        background=BackgroundTask(guarded.close),
    )


async def serve_blob(
    request: Request,
    blob: Blob,
    last_modified: datetime | None,
) -> Response:
    headers: dict[str, str] = {}
    if handle_generic_etag_time_cache(request, headers, f'"{blob.id}"', last_modified):
        return Response(status_code=304)

    return await serve_data(request, blob.name, blob.size, _BlobReader(blob.data_stream()), headers)


async def serve_blob_or_lfs(
    request: Request,
    session: AsyncSession,
    repository: Repository,
    blob: Blob,
    last_modified: datetime | None,
    tree_path: str = "",
) -> Response:
    """Serve ``blob``, or the LFS object it points to when this repository has it."""
    headers: dict[str, str] = {}
    if handle_generic_etag_time_cache(request, headers, f'"{blob.id}"', last_modified):
        return Response(status_code=304)

    stream = blob.data_stream()
    try:
        pointer = read_pointer(stream)
    finally:
        stream.close()

    if not pointer.is_valid():
        return await serve_blob(request, blob, last_modified)

    meta = await LFSMetaObjectRepository(session).get_by_oid(repository.id, pointer.oid)
    if meta is None:
        return await serve_blob(request, blob, last_modified)

    if handle_generic_etag_cache(request, headers, f'"{pointer.oid}"'):
        return Response(status_code=304)

    store = lfs_storage()
    if get_settings().lfs_serve_direct:
        signed_url = ""
        try:
            signed_url = await store.url(pointer.relative_path(), blob.name)
        except ServeDirectUnsupportedError:
            pass
        except Exception:
            log_with_fields(
                logger,
                logging.WARNING,
                "lfs signed url failed, proxying content",
                repo=repository.full_name,
                oid=pointer.oid,
                exc_info=True,
            )
        if signed_url:
            return RedirectResponse(url=signed_url, status_code=302)

    lfs_reader = await read_meta_object(Pointer(oid=meta.oid, size=meta.size), store)
    return await serve_data(request, tree_path or blob.name, meta.size, lfs_reader, headers)
