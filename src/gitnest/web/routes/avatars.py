from __future__ import annotations

import logging
import re

from fastapi import APIRouter, HTTPException, Request
from starlette.responses import Response

from gitnest.errors import ObjectNotExistError
from gitnest.httpcache import handle_generic_etag_cache
from gitnest.storage import avatar_storage
from gitnest.typesniffer import detect_content_type
from gitnest.web.routes.common import server_error

router = APIRouter()
logger = logging.getLogger("gitnest.avatars")

_AVATAR_HASH = re.compile(r"^[0-9a-f]{32}$")


@router.get("/avatars/{avatar_hash}", name="avatar")
async def avatar(request: Request, avatar_hash: str) -> Response:
    if not _AVATAR_HASH.match(avatar_hash):
        raise HTTPException(status_code=404)

    headers: dict[str, str] = {}
    if handle_generic_etag_cache(request, headers, f'"{avatar_hash}"'):
        return Response(status_code=304)

    try:
        reader = await avatar_storage().open(avatar_hash)
    except ObjectNotExistError as exc:
        raise HTTPException(status_code=404) from exc
    except Exception as exc:
        raise server_error(logger, "avatar open failed", avatar=avatar_hash) from exc

    try:
        data = await reader.read()
    finally:
        await reader.close()

    headers["Cache-Control"] = "public,max-age=86400"
    return Response(
        content=data,
        headers=headers,
        media_type=detect_content_type(data).content_type,
    )
