from __future__ import annotations

from httpx import AsyncClient
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from gitnest.db.models import User


async def sign_up_user(
    client: AsyncClient,
    name: str,
    password: str = "pw123456",
    *,
    email: str | None = None,
) -> None:
    """Register ``name`` and leave the client signed in; logs in when the account exists."""
    resp = await client.post(
        "/user/sign_up",
        data={
            "name": name,
            "email": email or f"{name.lower()}@example.com",
            "password": password,
        },
        follow_redirects=True,
    )
    if resp.status_code == 200:
        return

    resp = await client.post(
        "/user/login",
        data={"login_name": name, "password": password},
        follow_redirects=True,
    )
    assert resp.status_code == 200


async def get_user(db_session: AsyncSession, name: str) -> User:
    # Drop cached rows so changes committed by request handlers are visible.
    db_session.expire_all()
    return (
        await db_session.execute(select(User).where(User.lower_name == name.lower()))
    ).scalar_one()
