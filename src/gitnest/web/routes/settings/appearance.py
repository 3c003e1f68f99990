from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import RedirectResponse
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.responses import Response

from gitnest.auth import require_user
from gitnest.db import get_session
from gitnest.db.models import User
from gitnest.db.repos import SETTINGS_KEY_HIDDEN_COMMENT_TYPES, UserSettingRepository
from gitnest.i18n import request_language, tr
from gitnest.logging_config import log_with_fields
from gitnest.security.audit import audit_settings_success
from gitnest.security.audit_constants import (
    SETTINGS_EVENT_LANGUAGE_UPDATE,
    SETTINGS_EVENT_THEME_UPDATE,
)
from gitnest.services import (
    HIDDEN_COMMENT_TYPE_GROUPS,
    hidden_comment_types_from_form,
    is_group_checked,
    parse_hidden_comment_types,
    update_user_setting,
)
from gitnest.settings import get_settings
from gitnest.web.routes.common import flash, redirect, render, server_error
from gitnest.web.routes.settings.forms import THEME_MAX_LENGTH
from gitnest.web.routes.settings.profile import set_locale_cookie

router = APIRouter()
logger = logging.getLogger("gitnest.settings.appearance")

APPEARANCE_PATH = "/user/settings/appearance"


@router.get(APPEARANCE_PATH, name="settings_appearance")
async def appearance(
    request: Request,
    session: AsyncSession = Depends(get_session),
    current_user: User = Depends(require_user),
) -> Response:
    try:
        raw = await UserSettingRepository(session).get_value(
            current_user.id, SETTINGS_KEY_HIDDEN_COMMENT_TYPES
        )
    except Exception as exc:
        raise server_error(logger, "user setting lookup failed", user_id=current_user.id) from exc

    hidden_comment_types = parse_hidden_comment_types(raw)
    groups = [
        (group, is_group_checked(group, hidden_comment_types))
        for group in HIDDEN_COMMENT_TYPE_GROUPS
    ]
    return render(
        request,
        "user/settings/appearance.html",
        {
            "page_is_settings_appearance": True,
            "comment_type_groups": groups,
            "current_theme": current_user.theme or get_settings().default_theme,
        },
        current_user=current_user,
    )


@router.post(f"{APPEARANCE_PATH}/theme", response_class=RedirectResponse, name="settings_theme")
async def update_theme(
    request: Request,
    theme: str = Form(""),
    session: AsyncSession = Depends(get_session),
    current_user: User = Depends(require_user),
) -> RedirectResponse:
    lang = request_language(request, current_user)
    selected = theme.strip()
    if not selected or len(selected) > THEME_MAX_LENGTH:
        return redirect(APPEARANCE_PATH)

    if selected not in get_settings().themes:
        flash(request, "error", tr(lang, "settings.theme_update_error"))
        return redirect(APPEARANCE_PATH)

    current_user.theme = selected
    try:
        await session.commit()
    except Exception:
        log_with_fields(
            logger, logging.ERROR, "theme update failed", user_id=current_user.id, exc_info=True
        )
        await session.rollback()
        flash(request, "error", tr(lang, "settings.theme_update_error"))
        return redirect(APPEARANCE_PATH)

    audit_settings_success(event=SETTINGS_EVENT_THEME_UPDATE, actor=current_user, theme=selected)
    flash(request, "success", tr(lang, "settings.theme_update_success"))
    return redirect(APPEARANCE_PATH)


@router.post(
    f"{APPEARANCE_PATH}/language", response_class=RedirectResponse, name="settings_language"
)
async def update_language(
    request: Request,
    language: str = Form(""),
    session: AsyncSession = Depends(get_session),
    current_user: User = Depends(require_user),
) -> RedirectResponse:
    selected = language.strip()
    if selected:
        if selected not in get_settings().langs:
            lang = request_language(request, current_user)
            flash(request, "error", tr(lang, "settings.update_language_not_found", selected))
            return redirect(APPEARANCE_PATH)
        current_user.language = selected

    try:
        await update_user_setting(session, current_user)
    except Exception as exc:
        raise server_error(logger, "language update failed", user_id=current_user.id) from exc

    audit_settings_success(
        event=SETTINGS_EVENT_LANGUAGE_UPDATE, actor=current_user, language=current_user.language
    )
    flash(request, "success", tr(current_user.language, "settings.update_language_success"))
    response = redirect(APPEARANCE_PATH)
    set_locale_cookie(response, current_user.language)
    return response


@router.post(
    f"{APPEARANCE_PATH}/hidden_comments",
    response_class=RedirectResponse,
    name="settings_hidden_comments",
)
async def update_hidden_comments(
    request: Request,
    session: AsyncSession = Depends(get_session),
    current_user: User = Depends(require_user),
) -> RedirectResponse:
    lang = request_language(request, current_user)
    form = await request.form()
    fields = {key: value for key, value in form.items() if isinstance(value, str)}
    bitmask = hidden_comment_types_from_form(fields)

    try:
        await UserSettingRepository(session).set_value(
            current_user.id, SETTINGS_KEY_HIDDEN_COMMENT_TYPES, str(bitmask)
        )
        await session.commit()
    except Exception as exc:
        raise server_error(logger, "hidden comment types update failed", user_id=current_user.id) from exc

    log_with_fields(logger, logging.INFO, "user settings updated", user_name=current_user.name)
    flash(request, "success", tr(lang, "settings.saved_successfully"))
    return redirect(APPEARANCE_PATH)
