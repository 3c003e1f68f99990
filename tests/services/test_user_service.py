from __future__ import annotations

from pathlib import Path

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from gitnest.avatar import hash_email, random_image
from gitnest.db.models import LoginType, Repository, User, Visibility
from gitnest.db.repos import RepositoryRepository, UserRepository
from gitnest.errors import (
    AvatarNotImageError,
    AvatarTooBigError,
    EmailAlreadyUsedError,
    NameReservedError,
    NotLocalUserError,
    UserAlreadyExistError,
)
from gitnest.services.user_service import (
    AvatarUpload,
    ProfileUpdate,
    avatar_link,
    change_user_name,
    delete_avatar,
    update_avatar_setting,
    update_profile,
)
from gitnest.storage import LocalStorage


def _profile(**overrides: object) -> ProfileUpdate:
    values: dict[str, object] = {
        "full_name": "Alice Example",
        "website": "https://example.com",
        "location": "Berlin",
        "description": "hello",
        "visibility": Visibility.limited,
        "keep_email_private": True,
        "keep_activity_private": False,
    }
    values.update(overrides)
    return ProfileUpdate(**values)  # type: ignore[arg-type]


async def _add_user(session: AsyncSession, name: str, **kwargs: object) -> User:
    user = User(name=name, lower_name=name.lower(), email=f"{name.lower()}@example.com", **kwargs)
    await UserRepository(session).add(user)
    await session.commit()
    return user


@pytest.mark.asyncio
async def test_update_profile_renames_user_dir_and_repositories(
    db_session: AsyncSession, repo_root: Path
) -> None:
    alice = await _add_user(db_session, "alice")
    db_session.add(
        Repository(owner_id=alice.id, owner_name="alice", name="demo", lower_name="demo")
    )
    await db_session.commit()
    (repo_root / "alice" / "demo.git").mkdir(parents=True)

    await update_profile(db_session, alice, new_name="Alicia", profile=_profile())

    assert alice.name == "Alicia"
    assert alice.lower_name == "alicia"
    assert alice.visibility == Visibility.limited
    assert alice.full_name == "Alice Example"
    assert (repo_root / "alicia" / "demo.git").is_dir()
    assert not (repo_root / "alice").exists()

    repo = await RepositoryRepository(db_session).get_by_owner_and_name(alice.id, "demo")
    assert repo is not None
    await db_session.refresh(repo)
    assert repo.owner_name == "Alicia"


@pytest.mark.asyncio
async def test_case_only_rename_skips_directory_move(
    db_session: AsyncSession, repo_root: Path
) -> None:
    alice = await _add_user(db_session, "alice")
    (repo_root / "alice").mkdir(parents=True)

    await change_user_name(db_session, alice, "Alice")

    assert alice.name == "Alice"
    assert (repo_root / "alice").is_dir()


@pytest.mark.asyncio
async def test_rename_to_taken_name_leaves_user_unchanged(db_session: AsyncSession) -> None:
    alice = await _add_user(db_session, "alice")
    await _add_user(db_session, "bob")

    with pytest.raises(UserAlreadyExistError):
        await update_profile(db_session, alice, new_name="BOB", profile=_profile())

    await db_session.refresh(alice)
    assert alice.name == "alice"
    assert alice.full_name == ""


@pytest.mark.asyncio
async def test_rename_rejects_reserved_and_non_local(db_session: AsyncSession) -> None:
    alice = await _add_user(db_session, "alice")
    with pytest.raises(NameReservedError):
        await change_user_name(db_session, alice, "explore")

    remote = await _add_user(db_session, "remote", login_type=LoginType.oauth2)
    with pytest.raises(NotLocalUserError):
        await change_user_name(db_session, remote, "remote2")


@pytest.mark.asyncio
async def test_duplicate_email_rolls_back_profile(db_session: AsyncSession) -> None:
    alice = await _add_user(db_session, "alice")
    await _add_user(db_session, "bob")

    alice.email = "bob@example.com"
    with pytest.raises(EmailAlreadyUsedError):
        await update_profile(db_session, alice, new_name=None, profile=_profile())

    assert alice.email == "alice@example.com"
    assert alice.location == ""


@pytest.mark.asyncio
async def test_long_profile_fields_are_truncated(db_session: AsyncSession) -> None:
    alice = await _add_user(db_session, "alice")

    await update_profile(
        db_session, alice, new_name=None, profile=_profile(description="x" * 400)
    )
    assert len(alice.description) == 255


@pytest.mark.asyncio
async def test_avatar_upload_and_delete(db_session: AsyncSession, tmp_path: Path) -> None:
    storage = LocalStorage(tmp_path / "avatars")
    alice = await _add_user(db_session, "alice")
    image = random_image(b"alice", size=20)

    await update_avatar_setting(
        db_session,
        alice,
        source="local",
        gravatar="",
        upload=AvatarUpload(filename="me.png", size=len(image), data=image),
        storage=storage,
    )
    assert alice.use_custom_avatar
    assert (tmp_path / "avatars" / alice.avatar).read_bytes() == image
    assert avatar_link(alice) == f"/avatars/{alice.avatar}"

    stored = alice.avatar
    await delete_avatar(db_session, alice, storage=storage)
    assert not alice.use_custom_avatar
    assert alice.avatar == ""
    assert not (tmp_path / "avatars" / stored).exists()


@pytest.mark.asyncio
async def test_avatar_upload_validation(
    db_session: AsyncSession, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setenv("GITNEST_AVATAR_MAX_FILE_SIZE", "64")
    storage = LocalStorage(tmp_path / "avatars")
    alice = await _add_user(db_session, "alice")

    with pytest.raises(AvatarTooBigError):
        await update_avatar_setting(
            db_session,
            alice,
            source="local",
            gravatar="",
            upload=AvatarUpload(filename="big.png", size=65, data=b"\x89PNG\r\n\x1a\n"),
            storage=storage,
        )

    svg = b'<svg xmlns="http://www.w3.org/2000/svg"></svg>'
    with pytest.raises(AvatarNotImageError):
        await update_avatar_setting(
            db_session,
            alice,
            source="local",
            gravatar="",
            upload=AvatarUpload(filename="x.svg", size=len(svg), data=svg),
            storage=storage,
        )
    assert not alice.use_custom_avatar


@pytest.mark.asyncio
async def test_custom_avatar_without_upload_generates_one(
    db_session: AsyncSession, tmp_path: Path
) -> None:
    storage = LocalStorage(tmp_path / "avatars")
    alice = await _add_user(db_session, "alice")

    await update_avatar_setting(
        db_session,
        alice,
        source="local",
        gravatar="",
        upload=AvatarUpload(filename="", size=0, data=b""),
        storage=storage,
    )
    assert alice.use_custom_avatar
    assert alice.avatar == hash_email("alice@example.com")
    assert (tmp_path / "avatars" / alice.avatar).read_bytes().startswith(b"\x89PNG")


@pytest.mark.asyncio
async def test_lookup_avatar_records_gravatar_email(
    db_session: AsyncSession, tmp_path: Path
) -> None:
    alice = await _add_user(db_session, "alice")

    await update_avatar_setting(
        db_session,
        alice,
        source="lookup",
        gravatar="Other@Example.com",
        upload=None,
        storage=LocalStorage(tmp_path / "avatars"),
    )
    assert not alice.use_custom_avatar
    assert alice.avatar_email == "Other@Example.com"
    assert alice.avatar == ""
