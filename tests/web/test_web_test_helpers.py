from __future__ import annotations

import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from gitnest.testing.web_test_helpers import get_user, sign_up_user


@pytest.mark.asyncio
async def test_sign_up_user_falls_back_to_login_for_existing_account(
    client: AsyncClient, db_session: AsyncSession
) -> None:
    await sign_up_user(client, "helper", "pw-helper")
    await client.post("/user/logout", follow_redirects=True)

    await sign_up_user(client, "helper", "pw-helper")

    settings_page = await client.get("/user/settings")
    assert settings_page.status_code == 200

    user = await get_user(db_session, "HELPER")
    assert user.email == "helper@example.com"
