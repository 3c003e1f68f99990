from __future__ import annotations

from fastapi import APIRouter

from gitnest.web.routes.settings.appearance import router as appearance_router
from gitnest.web.routes.settings.lists import router as lists_router
from gitnest.web.routes.settings.profile import router as profile_router

router = APIRouter()
router.include_router(profile_router)
router.include_router(lists_router)
router.include_router(appearance_router)

__all__ = ["router"]
