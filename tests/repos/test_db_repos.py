from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from gitnest.db.models import LFSMetaObject, Repository, User, UserType, Visibility
from gitnest.db.repos import (
    FindOrgOptions,
    LFSMetaObjectRepository,
    OrganizationRepository,
    RepositoryRepository,
    SearchRepoOptions,
    UserRepository,
    UserSettingRepository,
)


def _user(name: str, **kwargs: object) -> User:
    return User(name=name, lower_name=name.lower(), email=f"{name.lower()}@example.com", **kwargs)


def _org(name: str, visibility: Visibility = Visibility.public) -> User:
    return User(
        name=name,
        lower_name=name.lower(),
        type=UserType.organization,
        email=None,
        visibility=visibility,
    )


def _repo(owner: User, name: str, **kwargs: object) -> Repository:
    return Repository(
        owner_id=owner.id,
        owner_name=owner.name,
        name=name,
        lower_name=name.lower(),
        **kwargs,
    )


@pytest.mark.asyncio
async def test_user_lookup_by_name_and_email(db_session: AsyncSession) -> None:
    users = UserRepository(db_session)
    alice = await users.add(_user("Alice"))
    await users.add(_org("Acme"))
    await users.commit()

    got = await users.get_by_name("ALICE")
    assert got is not None
    assert got.id == alice.id
    assert await users.get_individual_by_email(" Alice@Example.com ") is not None
    assert await users.name_exists("alice")
    assert not await users.name_exists("alice", exclude_id=alice.id)
    assert await users.email_used("alice@example.com")


@pytest.mark.asyncio
async def test_find_orgs_respects_membership_and_privacy(db_session: AsyncSession) -> None:
    users = UserRepository(db_session)
    orgs = OrganizationRepository(db_session)
    alice = await users.add(_user("alice"))
    public_org = await users.add(_org("public-org"))
    hidden_org = await users.add(_org("hidden-org", Visibility.private))
    await users.add(_org("unrelated"))
    await orgs.add_member(public_org.id, alice.id, is_public=True)
    await orgs.add_member(hidden_org.id, alice.id, is_public=False)
    await users.commit()

    everything = FindOrgOptions(user_id=alice.id, include_private=True)
    names = [org.name for org in await orgs.find_orgs(everything)]
    assert names == ["hidden-org", "public-org"]
    assert await orgs.count_orgs(everything) == 2

    public_only = FindOrgOptions(user_id=alice.id)
    assert [org.name for org in await orgs.find_orgs(public_only)] == ["public-org"]

    second_page = FindOrgOptions(user_id=alice.id, include_private=True, page=2, page_size=1)
    assert [org.name for org in await orgs.find_orgs(second_page)] == ["public-org"]

    assert await orgs.is_member(public_org.id, alice.id)


@pytest.mark.asyncio
async def test_user_repositories_paging_and_filters(db_session: AsyncSession) -> None:
    users = UserRepository(db_session)
    repos = RepositoryRepository(db_session)
    alice = await users.add(_user("alice"))
    now = datetime.now(UTC)
    await repos.add(_repo(alice, "Old", updated_at=now - timedelta(days=2)))
    await repos.add(_repo(alice, "new", updated_at=now))
    await repos.add(_repo(alice, "secret", is_private=True, updated_at=now - timedelta(days=1)))
    await repos.commit()

    visible, total = await repos.get_user_repositories(SearchRepoOptions(owner_id=alice.id))
    assert total == 2
    assert [repo.name for repo in visible] == ["new", "Old"]

    everything, total = await repos.get_user_repositories(
        SearchRepoOptions(owner_id=alice.id, include_private=True, page=2, page_size=2)
    )
    assert total == 3
    assert [repo.name for repo in everything] == ["Old"]

    named, total = await repos.get_user_repositories(
        SearchRepoOptions(owner_id=alice.id, include_private=True, lower_names=["old", "missing"])
    )
    assert [repo.name for repo in named] == ["Old"]
    assert total == 1

    found = await repos.get_by_owner_and_name(alice.id, "OLD")
    assert found is not None
    assert found.full_name == "alice/Old"


@pytest.mark.asyncio
async def test_update_owner_names(db_session: AsyncSession) -> None:
    users = UserRepository(db_session)
    repos = RepositoryRepository(db_session)
    alice = await users.add(_user("alice"))
    repo = await repos.add(_repo(alice, "demo"))
    await repos.commit()

    await repos.update_owner_names(alice.id, "alicia")
    await repos.commit()
    await db_session.refresh(repo)
    assert repo.owner_name == "alicia"


@pytest.mark.asyncio
async def test_user_setting_upsert(db_session: AsyncSession) -> None:
    users = UserRepository(db_session)
    settings = UserSettingRepository(db_session)
    alice = await users.add(_user("alice"))

    assert await settings.get_value(alice.id, "Issue.Hidden_Comment_Types", "none") == "none"
    await settings.set_value(alice.id, "Issue.Hidden_Comment_Types", "4")
    await settings.set_value(alice.id, "issue.hidden_comment_types", "8")
    await settings.commit()

    assert await settings.get_value(alice.id, "issue.hidden_comment_types") == "8"
    assert await settings.count_where() == 1


@pytest.mark.asyncio
async def test_lfs_meta_lookup_is_scoped_to_repository(db_session: AsyncSession) -> None:
    users = UserRepository(db_session)
    repos = RepositoryRepository(db_session)
    alice = await users.add(_user("alice"))
    first = await repos.add(_repo(alice, "first"))
    second = await repos.add(_repo(alice, "second"))
    oid = "a" * 64
    db_session.add(LFSMetaObject(repository_id=first.id, oid=oid, size=10))
    await db_session.commit()

    metas = LFSMetaObjectRepository(db_session)
    meta = await metas.get_by_oid(first.id, oid)
    assert meta is not None
    assert meta.size == 10
    assert await metas.get_by_oid(second.id, oid) is None
    assert await metas.get_by_oid(first.id, "") is None
