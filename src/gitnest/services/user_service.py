"""Account mutations: renames, profile fields and avatars.

Every function either commits all of its changes or rolls the session back and
re-raises, leaving the stored user unchanged.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from sqlalchemy.ext.asyncio import AsyncSession

from gitnest.avatar import hash_avatar, hash_email, random_image
from gitnest.db.models import User, Visibility
from gitnest.db.repos import RepositoryRepository, UserRepository
from gitnest.errors import (
    AvatarNotImageError,
    AvatarTooBigError,
    EmailAlreadyUsedError,
    NotLocalUserError,
    UserAlreadyExistError,
)
from gitnest.logging_config import log_with_fields
from gitnest.naming import is_usable_username
from gitnest.settings import get_settings
from gitnest.storage import ObjectStorage, avatar_storage
from gitnest.typesniffer import detect_content_type

logger = logging.getLogger("gitnest.services.user")

AVATAR_SOURCE_LOCAL = "local"
AVATAR_SOURCE_LOOKUP = "lookup"

_MAX_TEXT_FIELD = 255


@dataclass(frozen=True)
class ProfileUpdate:
    full_name: str
    website: str
    location: str
    description: str
    visibility: Visibility
    keep_email_private: bool
    keep_activity_private: bool


@dataclass(frozen=True)
class AvatarUpload:
    filename: str
    size: int
    data: bytes


def user_path(user_name: str) -> Path:
    return Path(get_settings().repo_root) / user_name.lower()


def _truncate(value: str, limit: int = _MAX_TEXT_FIELD) -> str:
    return value[:limit]


async def _rollback(session: AsyncSession, user: User) -> None:
    await session.rollback()
    await session.refresh(user)


def _rename_user_dir(old_lower: str, new_lower: str) -> bool:
    """Move the user's repository directory; False when there was nothing to move."""
    if old_lower == new_lower:
        return False
    source = user_path(old_lower)
    if not source.exists():
        return False
    target = user_path(new_lower)
    if target.exists():
        raise UserAlreadyExistError(new_lower)
    source.rename(target)
    return True


async def validate_username_change(session: AsyncSession, user: User, new_name: str) -> None:
    if not user.is_local:
        raise NotLocalUserError(user.name)
    if user.lower_name == new_name.lower():
        return
    is_usable_username(new_name)
    if await UserRepository(session).name_exists(new_name, exclude_id=user.id):
        raise UserAlreadyExistError(new_name)


async def _apply_name(session: AsyncSession, user: User, new_name: str) -> None:
    await RepositoryRepository(session).update_owner_names(user.id, new_name)
    user.name = new_name
    user.lower_name = new_name.lower()


async def _ensure_email_unused(session: AsyncSession, user: User) -> None:
    if not user.email:
        return
    # The pending row must not be flushed before the check; the unique index would fire first.
    with session.no_autoflush:
        used = await UserRepository(session).email_used(user.email, exclude_id=user.id)
    if used:
        raise EmailAlreadyUsedError(user.email)


async def _commit_with_rename(session: AsyncSession, user: User, old_lower: str) -> None:
    moved = False
    try:
        await session.flush()
        moved = _rename_user_dir(old_lower, user.lower_name)
        await session.commit()
    except Exception:
        if moved:
            user_path(user.lower_name).rename(user_path(old_lower))
        await _rollback(session, user)
        raise


async def change_user_name(session: AsyncSession, user: User, new_name: str) -> None:
    await validate_username_change(session, user, new_name)
    old_name, old_lower = user.name, user.lower_name
    await _apply_name(session, user, new_name)
    await _commit_with_rename(session, user, old_lower)
    log_with_fields(logger, logging.INFO, "user name changed", old_name=old_name, new_name=new_name)


async def update_profile(
    session: AsyncSession,
    user: User,
    *,
    new_name: str | None,
    profile: ProfileUpdate,
) -> None:
    """Apply an optional rename and the profile fields in one transaction."""
    old_lower = user.lower_name
    if new_name and new_name != user.name:
        await validate_username_change(session, user, new_name)
        await _apply_name(session, user, new_name)

    user.full_name = profile.full_name
    user.website = _truncate(profile.website)
    user.location = _truncate(profile.location)
    user.description = _truncate(profile.description)
    user.visibility = profile.visibility
    user.keep_email_private = profile.keep_email_private
    user.keep_activity_private = profile.keep_activity_private

    try:
        await _ensure_email_unused(session, user)
    except EmailAlreadyUsedError:
        await _rollback(session, user)
        raise

    await _commit_with_rename(session, user, old_lower)


async def update_user_setting(session: AsyncSession, user: User) -> None:
    user.website = _truncate(user.website)
    user.location = _truncate(user.location)
    user.description = _truncate(user.description)
    try:
        await _ensure_email_unused(session, user)
        await session.commit()
    except Exception:
        await _rollback(session, user)
        raise


async def upload_avatar(
    session: AsyncSession,
    user: User,
    data: bytes,
    *,
    storage: ObjectStorage | None = None,
    commit: bool = True,
) -> None:
    store = storage if storage is not None else avatar_storage()
    user.use_custom_avatar = True
    user.avatar = hash_avatar(user.id, data)
    await store.save(user.avatar, data)
    if commit:
        await session.commit()


async def delete_avatar(
    session: AsyncSession,
    user: User,
    *,
    storage: ObjectStorage | None = None,
) -> None:
    store = storage if storage is not None else avatar_storage()
    try:
        if user.use_custom_avatar and user.avatar:
            await store.delete(user.avatar)
        user.use_custom_avatar = False
        user.avatar = ""
        await session.commit()
    except Exception:
        await _rollback(session, user)
        raise


async def generate_random_avatar(
    session: AsyncSession,
    user: User,
    *,
    storage: ObjectStorage | None = None,
    commit: bool = True,
) -> None:
    store = storage if storage is not None else avatar_storage()
    seed = user.email or user.name
    user.avatar = hash_email(seed)
    await store.save(user.avatar, random_image(seed.encode("utf-8")))
    if commit:
        await session.commit()
    log_with_fields(logger, logging.INFO, "random avatar generated", user_name=user.name)


def _validate_avatar_upload(upload: AvatarUpload, max_file_size: int) -> None:
    if upload.size > max_file_size:
        raise AvatarTooBigError(upload.filename)
    sniffed = detect_content_type(upload.data)
    if not sniffed.is_image or sniffed.is_svg_image:
        raise AvatarNotImageError(upload.filename)


async def update_avatar_setting(
    session: AsyncSession,
    user: User,
    *,
    source: str,
    gravatar: str,
    upload: AvatarUpload | None,
    storage: ObjectStorage | None = None,
) -> None:
    """Switch between uploaded and looked-up avatars.

    ``upload`` is the submitted file field (possibly with an empty filename); an
    invalid upload raises before anything is changed.
    """
    settings = get_settings()
    store = storage if storage is not None else avatar_storage()
    file_upload = upload if upload is not None and upload.filename else None
    if file_upload is not None:
        _validate_avatar_upload(file_upload, settings.avatar_max_file_size)

    user.use_custom_avatar = source == AVATAR_SOURCE_LOCAL
    if gravatar:
        user.avatar = hash_email(gravatar) if upload is not None else ""
        user.avatar_email = gravatar

    try:
        if file_upload is not None:
            await upload_avatar(session, user, file_upload.data, storage=store, commit=False)
        elif user.use_custom_avatar and not user.avatar:
            # Custom avatars enabled without an image: fall back to a generated one.
            try:
                await generate_random_avatar(session, user, storage=store, commit=False)
            except Exception:
                log_with_fields(
                    logger,
                    logging.ERROR,
                    "random avatar generation failed",
                    user_id=user.id,
                    exc_info=True,
                )
        await session.commit()
    except Exception:
        await _rollback(session, user)
        raise


def avatar_link(user: User) -> str:
    settings = get_settings()
    if user.use_custom_avatar and user.avatar:
        return f"{settings.app_sub_url}/avatars/{user.avatar}"
    if not settings.disable_gravatar:
        seed = user.avatar_email or user.email or user.name
        return f"{settings.gravatar_source}{hash_email(seed)}?d=identicon"
    return f"{settings.app_sub_url}/static/img/avatar_default.svg"
