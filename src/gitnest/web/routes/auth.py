from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.responses import Response

from gitnest.auth import hash_password, optional_user, verify_password
from gitnest.db import get_session
from gitnest.db.models import User, Visibility
from gitnest.db.repos import UserRepository
from gitnest.errors import InvalidNameError
from gitnest.naming import is_usable_username
from gitnest.security.audit import audit_auth_denied, audit_auth_success
from gitnest.security.audit_constants import (
    AUTH_EVENT_LOGOUT,
    AUTH_EVENT_PASSWORD_LOGIN,
    AUTH_EVENT_SIGNUP,
    AUTH_REASON_ACCOUNT_EXISTS,
    AUTH_REASON_ACCOUNT_NOT_FOUND,
    AUTH_REASON_INACTIVE_USER,
    AUTH_REASON_INVALID_CREDENTIALS,
    AUTH_REASON_INVALID_NAME,
)
from gitnest.settings import get_settings
from gitnest.web.routes.common import redirect, render

router = APIRouter(prefix="/user")
logger = logging.getLogger("gitnest.auth")

_AFTER_SIGN_IN = "/user/settings"


def render_login_template(
    request: Request,
    *,
    error: str | None,
    login_name: str = "",
    status_code: int = 200,
) -> Response:
    return render(
        request,
        "user/auth/login.html",
        {"error": error, "login_name": login_name},
        current_user=None,
        status_code=status_code,
    )


def _render_signup_template(
    request: Request,
    *,
    error: str | None,
    form: dict[str, str] | None = None,
    status_code: int = 200,
) -> Response:
    return render(
        request,
        "user/auth/signup.html",
        {"error": error, "form": form or {"name": "", "email": ""}},
        current_user=None,
        status_code=status_code,
    )


async def _find_login_user(session: AsyncSession, login_name: str) -> User | None:
    users = UserRepository(session)
    if "@" in login_name:
        return await users.get_individual_by_email(login_name)
    user = await users.get_by_name(login_name)
    if user is None or user.is_organization:
        return None
    return user


@router.get("/login", response_class=Response)
async def login_form(
    request: Request,
    current_user: User | None = Depends(optional_user),
) -> Response:
    if current_user is not None:
        return redirect(_AFTER_SIGN_IN)
    return render_login_template(request, error=None)


@router.post("/login", response_class=HTMLResponse)
async def login(
    request: Request,
    login_name: str = Form(...),
    password: str = Form(...),
    session: AsyncSession = Depends(get_session),
) -> Response:
    normalized = login_name.strip()
    user = await _find_login_user(session, normalized)

    if user is None:
        audit_auth_denied(
            event=AUTH_EVENT_PASSWORD_LOGIN,
            reason=AUTH_REASON_ACCOUNT_NOT_FOUND,
            actor_name=normalized,
        )
        return render_login_template(
            request,
            error="Account not found. Create one first.",
            login_name=normalized,
            status_code=401,
        )

    if not user.is_active:
        audit_auth_denied(
            event=AUTH_EVENT_PASSWORD_LOGIN,
            reason=AUTH_REASON_INACTIVE_USER,
            actor=user,
        )
        return render_login_template(
            request,
            error="This account is deactivated. Contact an admin.",
            login_name=normalized,
            status_code=403,
        )

    if user.password_hash is None or not verify_password(password, user.password_hash):
        audit_auth_denied(
            event=AUTH_EVENT_PASSWORD_LOGIN,
            reason=AUTH_REASON_INVALID_CREDENTIALS,
            actor=user,
        )
        return render_login_template(
            request,
            error="Invalid username or password",
            login_name=normalized,
            status_code=401,
        )

    request.session["user_id"] = str(user.id)
    audit_auth_success(event=AUTH_EVENT_PASSWORD_LOGIN, actor=user)
    return redirect(_AFTER_SIGN_IN)


@router.get("/sign_up", response_class=Response)
async def signup_form(
    request: Request,
    current_user: User | None = Depends(optional_user),
) -> Response:
    if current_user is not None:
        return redirect(_AFTER_SIGN_IN)
    return _render_signup_template(request, error=None)


@router.post("/sign_up", response_class=HTMLResponse)
async def signup(
    request: Request,
    name: str = Form(...),
    email: str = Form(...),
    password: str = Form(...),
    session: AsyncSession = Depends(get_session),
) -> Response:
    normalized_name = name.strip()
    normalized_email = email.strip().lower()
    form = {"name": normalized_name, "email": normalized_email}

    try:
        is_usable_username(normalized_name)
    except InvalidNameError as exc:
        audit_auth_denied(
            event=AUTH_EVENT_SIGNUP,
            reason=AUTH_REASON_INVALID_NAME,
            actor_name=normalized_name,
        )
        return _render_signup_template(request, error=str(exc), form=form, status_code=400)

    users = UserRepository(session)
    if await users.name_exists(normalized_name) or await users.email_used(normalized_email):
        audit_auth_denied(
            event=AUTH_EVENT_SIGNUP,
            reason=AUTH_REASON_ACCOUNT_EXISTS,
            actor_name=normalized_name,
        )
        return _render_signup_template(
            request,
            error="Account already exists. Sign in instead.",
            form=form,
            status_code=400,
        )

    user = User(
        name=normalized_name,
        lower_name=normalized_name.lower(),
        email=normalized_email,
        visibility=Visibility(get_settings().default_user_visibility),
        password_hash=hash_password(password),
    )
    session.add(user)
    await session.commit()
    await session.refresh(user)

    request.session["user_id"] = str(user.id)
    audit_auth_success(event=AUTH_EVENT_SIGNUP, actor=user)
    return redirect(_AFTER_SIGN_IN)


@router.post("/logout", response_class=RedirectResponse)
async def logout(request: Request) -> RedirectResponse:
    user_id = request.session.get("user_id")
    audit_auth_success(event=AUTH_EVENT_LOGOUT, actor_user_id=user_id)
    request.session.clear()
    return redirect("/user/login")
