from __future__ import annotations

import argparse
import asyncio

import gitnest.db as db
from gitnest.auth import hash_password
from gitnest.db.models import Base, User, UserType, Visibility
from gitnest.db.repos import OrganizationRepository, UserRepository
from gitnest.errors import GitnestError
from gitnest.naming import is_usable_username
from gitnest.settings import get_settings


async def _init_db() -> None:
    async with db.engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def _create_user(*, name: str, email: str, password: str, admin: bool) -> None:
    is_usable_username(name)
    async with db.SessionMaker() as session:
        users = UserRepository(session)
        if await users.name_exists(name) or await users.email_used(email):
            raise SystemExit(f"user {name} or email {email} already exists")

        user = User(
            name=name,
            lower_name=name.lower(),
            email=email.strip().lower(),
            visibility=Visibility(get_settings().default_user_visibility),
            is_admin=admin,
            password_hash=hash_password(password),
        )
        await users.add(user)
        await session.commit()

    print(f"Created user {name}")


async def _create_org(*, name: str, owner_name: str) -> None:
    is_usable_username(name)
    async with db.SessionMaker() as session:
        users = UserRepository(session)
        owner = await users.get_by_name(owner_name)
        if owner is None or owner.is_organization:
            raise SystemExit(f"owner {owner_name} does not exist")
        if await users.name_exists(name):
            raise SystemExit(f"name {name} is already taken")

        org = User(
            name=name,
            lower_name=name.lower(),
            type=UserType.organization,
            email=None,
        )
        await users.add(org)
        await OrganizationRepository(session).add_member(org.id, owner.id, is_public=True)
        await session.commit()

    print(f"Created organization {name} owned by {owner.name}")


def main() -> None:
    parser = argparse.ArgumentParser(prog="gitnest")
    sub = parser.add_subparsers(dest="cmd", required=True)

    sub.add_parser("init-db")

    create_user = sub.add_parser("create-user")
    create_user.add_argument("--name", required=True)
    create_user.add_argument("--email", required=True)
    create_user.add_argument("--password", required=True)
    create_user.add_argument("--admin", action="store_true")

    create_org = sub.add_parser("create-org")
    create_org.add_argument("--name", required=True)
    create_org.add_argument("--owner", required=True)

    args = parser.parse_args()

    try:
        if args.cmd == "init-db":
            asyncio.run(_init_db())
        elif args.cmd == "create-user":
            asyncio.run(
                _create_user(
                    name=args.name, email=args.email, password=args.password, admin=args.admin
                )
            )
        elif args.cmd == "create-org":
            asyncio.run(_create_org(name=args.name, owner_name=args.owner))
        else:
            raise SystemExit(2)
    except GitnestError as exc:
        raise SystemExit(str(exc)) from exc
