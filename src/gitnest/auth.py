from __future__ import annotations

import uuid

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHash, VerificationError, VerifyMismatchError
from fastapi import Depends, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession

from gitnest.db import get_session
from gitnest.db.models import User
from gitnest.db.repos import UserRepository

_password_hasher = PasswordHasher()


def hash_password(password: str) -> str:
    return _password_hasher.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return _password_hasher.verify(password_hash, password)
    except (VerifyMismatchError, InvalidHash, VerificationError):
        return False


def get_current_user_id(request: Request) -> uuid.UUID | None:
    raw = request.session.get("user_id")
    if raw is None:
        return None

    try:
        return uuid.UUID(str(raw))
    except ValueError:
        return None


async def _load_active_user(request: Request, session: AsyncSession) -> User | None:
    user_id = get_current_user_id(request)
    if user_id is None:
        return None

    user = await UserRepository(session).get_by_id(user_id)
    if user is None or not user.is_active or user.is_organization:
        return None
    return user


async def require_user(
    request: Request,
    session: AsyncSession = Depends(get_session),
) -> User:
    user = await _load_active_user(request, session)
    if user is None:
        raise HTTPException(status_code=401, detail="Not authenticated")
    return user


async def optional_user(
    request: Request,
    session: AsyncSession = Depends(get_session),
) -> User | None:
    return await _load_active_user(request, session)
