from __future__ import annotations

import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Literal, TypeAlias

from fastapi import HTTPException, Request
from fastapi.responses import RedirectResponse
from fastapi.templating import Jinja2Templates
from starlette.responses import Response

from gitnest.db.models import User
from gitnest.i18n import language_options, request_language, tr
from gitnest.logging_config import log_with_fields
from gitnest.services import avatar_link
from gitnest.settings import get_settings

FlashLevel: TypeAlias = Literal["success", "error", "info", "warning"]

_FLASH_SESSION_KEY = "_flash"


def flash(request: Request, level: FlashLevel, message: str) -> None:
    pending = list(request.session.get(_FLASH_SESSION_KEY, []))
    pending.append({"level": level, "message": message})
    request.session[_FLASH_SESSION_KEY] = pending


def pop_flashes(request: Request) -> list[dict[str, str]]:
    pending: list[dict[str, str]] = request.session.pop(_FLASH_SESSION_KEY, [])
    return pending


def app_url(path: str) -> str:
    return f"{get_settings().app_sub_url}{path}"


def redirect(path: str) -> RedirectResponse:
    return RedirectResponse(url=app_url(path), status_code=303)


def server_error(logger: logging.Logger, message: str, **fields: object) -> HTTPException:
    """Log the active exception and build an opaque 500 for the caller to raise."""
    log_with_fields(logger, logging.ERROR, message, exc_info=True, **fields)
    return HTTPException(status_code=500, detail="Internal Server Error")


def render(
    request: Request,
    name: str,
    context: Mapping[str, Any],
    *,
    current_user: User | None,
    status_code: int = 200,
) -> Response:
    lang = request_language(request, current_user)
    full_context: dict[str, Any] = {
        "current_user": current_user,
        "lang": lang,
        "flashes": pop_flashes(request),
    }
    full_context.update(context)
    return templates.TemplateResponse(request, name, full_context, status_code=status_code)


templates_dir = Path(__file__).resolve().parent.parent / "templates"
templates = Jinja2Templates(directory=str(templates_dir))
templates.env.globals["tr"] = tr
templates.env.globals["all_langs"] = language_options
templates.env.globals["app_url"] = app_url
templates.env.globals["avatar_link"] = avatar_link
templates.env.globals["themes"] = lambda: get_settings().themes
