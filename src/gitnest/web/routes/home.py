from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import RedirectResponse

from gitnest.auth import optional_user
from gitnest.db.models import User
from gitnest.web.routes.common import redirect

router = APIRouter()


@router.get("/", response_class=RedirectResponse, name="home")
async def home(current_user: User | None = Depends(optional_user)) -> RedirectResponse:
    if current_user is None:
        return redirect("/user/login")
    return redirect("/user/settings")
