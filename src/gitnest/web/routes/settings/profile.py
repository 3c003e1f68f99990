from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, File, Form, Request, UploadFile
from fastapi.responses import RedirectResponse
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.responses import Response

from gitnest.auth import require_user
from gitnest.db import get_session
from gitnest.db.models import User, Visibility
from gitnest.errors import (
    AvatarNotImageError,
    AvatarTooBigError,
    EmailAlreadyUsedError,
    GitnestError,
    NameCharsNotAllowedError,
    NamePatternNotAllowedError,
    NameReservedError,
    NotLocalUserError,
    UserAlreadyExistError,
)
from gitnest.i18n import LOCALE_COOKIE_NAME, request_language, tr
from gitnest.logging_config import log_with_fields
from gitnest.security.audit import audit_settings_denied, audit_settings_success
from gitnest.security.audit_constants import (
    SETTINGS_EVENT_AVATAR_DELETE,
    SETTINGS_EVENT_AVATAR_UPDATE,
    SETTINGS_EVENT_PROFILE_UPDATE,
    SETTINGS_EVENT_USERNAME_CHANGE,
    SETTINGS_REASON_AVATAR_NOT_IMAGE,
    SETTINGS_REASON_AVATAR_TOO_BIG,
    SETTINGS_REASON_EMAIL_USED,
    SETTINGS_REASON_NAME_CHARS_NOT_ALLOWED,
    SETTINGS_REASON_NAME_PATTERN_NOT_ALLOWED,
    SETTINGS_REASON_NAME_RESERVED,
    SETTINGS_REASON_NAME_TAKEN,
    SETTINGS_REASON_NOT_LOCAL_USER,
)
from gitnest.services import (
    AvatarUpload,
    ProfileUpdate,
    delete_avatar,
    update_avatar_setting,
    update_profile,
)
from gitnest.settings import get_settings
from gitnest.web.routes.common import flash, redirect, render, server_error
from gitnest.web.routes.settings.forms import (
    ProfileForm,
    allowed_visibility_modes,
    is_checked,
    validate_profile_form,
)

router = APIRouter()
logger = logging.getLogger("gitnest.settings.profile")

SETTINGS_PATH = "/user/settings"


def set_locale_cookie(response: Response, lang: str) -> None:
    response.set_cookie(
        LOCALE_COOKIE_NAME,
        lang,
        path=get_settings().app_sub_url or "/",
        samesite="lax",
    )


def _profile_form_from_user(user: User) -> ProfileForm:
    return ProfileForm(
        name=user.name,
        full_name=user.full_name,
        website=user.website,
        location=user.location,
        description=user.description,
        visibility=user.visibility.value,
        keep_email_private=user.keep_email_private,
        keep_activity_private=user.keep_activity_private,
    )


def render_profile_template(
    request: Request,
    *,
    user: User,
    form: ProfileForm | None = None,
    error: str | None = None,
) -> Response:
    return render(
        request,
        "user/settings/profile.html",
        {
            "page_is_settings_profile": True,
            "form": form or _profile_form_from_user(user),
            "error": error,
            "allowed_visibility_modes": allowed_visibility_modes(),
        },
        current_user=user,
    )


def _rename_failure(lang: str, exc: GitnestError, new_name: str) -> tuple[str, str]:
    """Map a rename failure to its flash message and audit reason."""
    if isinstance(exc, NotLocalUserError):
        return tr(lang, "form.username_change_not_local_user"), SETTINGS_REASON_NOT_LOCAL_USER
    if isinstance(exc, UserAlreadyExistError):
        return tr(lang, "form.username_been_taken"), SETTINGS_REASON_NAME_TAKEN
    if isinstance(exc, EmailAlreadyUsedError):
        return tr(lang, "form.email_been_used"), SETTINGS_REASON_EMAIL_USED
    if isinstance(exc, NameReservedError):
        return tr(lang, "user.form.name_reserved", new_name), SETTINGS_REASON_NAME_RESERVED
    if isinstance(exc, NamePatternNotAllowedError):
        return (
            tr(lang, "user.form.name_pattern_not_allowed", new_name),
            SETTINGS_REASON_NAME_PATTERN_NOT_ALLOWED,
        )
    if isinstance(exc, NameCharsNotAllowedError):
        return (
            tr(lang, "user.form.name_chars_not_allowed", new_name),
            SETTINGS_REASON_NAME_CHARS_NOT_ALLOWED,
        )
    raise exc


@router.get(SETTINGS_PATH, name="settings_profile")
async def profile(
    request: Request,
    current_user: User = Depends(require_user),
) -> Response:
    return render_profile_template(request, user=current_user)


@router.post(SETTINGS_PATH, name="settings_profile_post")
async def profile_post(
    request: Request,
    name: str = Form(""),
    full_name: str = Form(""),
    website: str = Form(""),
    location: str = Form(""),
    description: str = Form(""),
    visibility: str = Form(""),
    keep_email_private: str | None = Form(None),
    keep_activity_private: str | None = Form(None),
    session: AsyncSession = Depends(get_session),
    current_user: User = Depends(require_user),
) -> Response:
    lang = request_language(request, current_user)
    form = ProfileForm(
        name=name.strip(),
        full_name=full_name.strip(),
        website=website.strip(),
        location=location.strip(),
        description=description.strip(),
        visibility=visibility.strip().lower(),
        keep_email_private=is_checked(keep_email_private),
        keep_activity_private=is_checked(keep_activity_private),
    )
    error = validate_profile_form(form, lang)
    if error is not None:
        return render_profile_template(request, user=current_user, form=form, error=error)

    old_name = current_user.name
    new_name = form.name if form.name and form.name != current_user.name else None
    update = ProfileUpdate(
        full_name=form.full_name,
        website=form.website,
        location=form.location,
        description=form.description,
        visibility=Visibility(form.visibility) if form.visibility else current_user.visibility,
        keep_email_private=form.keep_email_private,
        keep_activity_private=form.keep_activity_private,
    )

    try:
        await update_profile(session, current_user, new_name=new_name, profile=update)
    except (
        NotLocalUserError,
        UserAlreadyExistError,
        EmailAlreadyUsedError,
        NameReservedError,
        NamePatternNotAllowedError,
        NameCharsNotAllowedError,
    ) as exc:
        message, reason = _rename_failure(lang, exc, new_name or "")
        event = (
            SETTINGS_EVENT_PROFILE_UPDATE
            if isinstance(exc, EmailAlreadyUsedError)
            else SETTINGS_EVENT_USERNAME_CHANGE
        )
        audit_settings_denied(event=event, reason=reason, actor=current_user, new_name=new_name)
        flash(request, "error", message)
        return redirect(SETTINGS_PATH)
    except Exception as exc:
        raise server_error(logger, "profile update failed", user_id=current_user.id) from exc

    if new_name is not None:
        audit_settings_success(
            event=SETTINGS_EVENT_USERNAME_CHANGE,
            actor=current_user,
            old_name=old_name,
            new_name=current_user.name,
        )
    audit_settings_success(event=SETTINGS_EVENT_PROFILE_UPDATE, actor=current_user)

    flash(request, "success", tr(current_user.language, "settings.update_profile_success"))
    response = redirect(SETTINGS_PATH)
    set_locale_cookie(response, current_user.language)
    return response


async def _avatar_upload_from_form(avatar: UploadFile | None) -> AvatarUpload | None:
    if avatar is None:
        return None
    max_size = get_settings().avatar_max_file_size
    filename = avatar.filename or ""
    if avatar.size is not None and avatar.size > max_size:
        # Oversized uploads are rejected on size alone; the body is never read.
        await avatar.close()
        return AvatarUpload(filename=filename, size=avatar.size, data=b"")
    data = await avatar.read(max_size + 1)
    await avatar.close()
    size = avatar.size if avatar.size is not None else len(data)
    return AvatarUpload(filename=filename, size=size, data=data)


@router.post(f"{SETTINGS_PATH}/avatar", response_class=RedirectResponse, name="settings_avatar")
async def avatar_post(
    request: Request,
    source: str = Form(""),
    gravatar: str = Form(""),
    avatar: UploadFile | None = File(None),
    session: AsyncSession = Depends(get_session),
    current_user: User = Depends(require_user),
) -> RedirectResponse:
    lang = request_language(request, current_user)
    upload = await _avatar_upload_from_form(avatar)

    try:
        await update_avatar_setting(
            session,
            current_user,
            source=source.strip(),
            gravatar=gravatar.strip(),
            upload=upload,
        )
    except AvatarTooBigError:
        audit_settings_denied(
            event=SETTINGS_EVENT_AVATAR_UPDATE,
            reason=SETTINGS_REASON_AVATAR_TOO_BIG,
            actor=current_user,
        )
        flash(request, "error", tr(lang, "settings.uploaded_avatar_is_too_big"))
    except AvatarNotImageError:
        audit_settings_denied(
            event=SETTINGS_EVENT_AVATAR_UPDATE,
            reason=SETTINGS_REASON_AVATAR_NOT_IMAGE,
            actor=current_user,
        )
        flash(request, "error", tr(lang, "settings.uploaded_avatar_not_a_image"))
    except Exception:
        log_with_fields(
            logger, logging.ERROR, "avatar update failed", user_id=current_user.id, exc_info=True
        )
        flash(request, "error", tr(lang, "settings.update_user_avatar_error"))
    else:
        audit_settings_success(
            event=SETTINGS_EVENT_AVATAR_UPDATE,
            actor=current_user,
            use_custom_avatar=current_user.use_custom_avatar,
        )
        flash(request, "success", tr(lang, "settings.update_avatar_success"))

    return redirect(SETTINGS_PATH)


@router.post(
    f"{SETTINGS_PATH}/avatar/delete",
    response_class=RedirectResponse,
    name="settings_avatar_delete",
)
async def avatar_delete(
    request: Request,
    session: AsyncSession = Depends(get_session),
    current_user: User = Depends(require_user),
) -> RedirectResponse:
    lang = request_language(request, current_user)
    try:
        await delete_avatar(session, current_user)
    except Exception:
        log_with_fields(
            logger, logging.ERROR, "avatar delete failed", user_id=current_user.id, exc_info=True
        )
        flash(request, "error", tr(lang, "settings.delete_user_avatar_error"))
    else:
        audit_settings_success(event=SETTINGS_EVENT_AVATAR_DELETE, actor=current_user)

    return redirect(SETTINGS_PATH)
