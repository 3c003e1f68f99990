from __future__ import annotations

from fastapi import APIRouter

from gitnest.web.routes.auth import router as auth_router
from gitnest.web.routes.avatars import router as avatars_router
from gitnest.web.routes.home import router as home_router
from gitnest.web.routes.repo import router as repo_router
from gitnest.web.routes.settings import router as settings_router

router = APIRouter()
router.include_router(home_router)
router.include_router(auth_router)
router.include_router(settings_router)
router.include_router(avatars_router)
router.include_router(repo_router)
