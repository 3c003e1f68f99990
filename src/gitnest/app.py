from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager
from pathlib import Path
from time import perf_counter
from uuid import uuid4

from fastapi import FastAPI, HTTPException
from fastapi.exception_handlers import http_exception_handler
from fastapi.staticfiles import StaticFiles
from starlette.middleware.sessions import SessionMiddleware
from starlette.requests import Request
from starlette.responses import Response

from gitnest.db import engine
from gitnest.db.models import Base
from gitnest.logging_config import (
    configure_logging,
    log_with_fields,
    reset_request_id,
    set_request_id,
)
from gitnest.settings import Settings, get_settings
from gitnest.web.routes import router as web_router
from gitnest.web.routes.common import redirect

logger = logging.getLogger("gitnest.http")


def _ensure_data_dirs(settings: Settings) -> None:
    dirs = [settings.repo_root]
    if settings.lfs_storage_type == "local":
        dirs.append(settings.lfs_content_path)
    if settings.avatar_storage_type == "local":
        dirs.append(settings.avatar_upload_path)
    for path in dirs:
        Path(path).mkdir(parents=True, exist_ok=True)


def create_app() -> FastAPI:
    settings = get_settings()
    configure_logging(settings)

    @asynccontextmanager
    async def lifespan(_: FastAPI) -> AsyncIterator[None]:
        _ensure_data_dirs(settings)
        if settings.auto_create_db:
            async with engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
        yield

    app = FastAPI(lifespan=lifespan)

    @app.exception_handler(HTTPException)
    async def sign_in_redirect_handler(request: Request, exc: HTTPException) -> Response:
        # Browsers asking for a page while signed out go to the sign-in form.
        if exc.status_code == 401 and request.method == "GET":
            return redirect("/user/login")
        return await http_exception_handler(request, exc)

    @app.middleware("http")
    async def request_logging_middleware(
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        request_id = (request.headers.get("x-request-id") or "").strip() or uuid4().hex
        token = set_request_id(request_id)
        start = perf_counter()

        try:
            response = await call_next(request)
        except Exception:
            if settings.log_http_requests:
                duration_ms = (perf_counter() - start) * 1000
                log_with_fields(
                    logger,
                    logging.ERROR,
                    "request failed",
                    method=request.method,
                    path=request.url.path,
                    duration_ms=f"{duration_ms:.2f}",
                    exc_info=True,
                )
            raise
        finally:
            reset_request_id(token)

        response.headers["X-Request-ID"] = request_id
        if settings.log_http_requests:
            duration_ms = (perf_counter() - start) * 1000
            log_with_fields(
                logger,
                logging.INFO,
                "request complete",
                method=request.method,
                path=request.url.path,
                status_code=response.status_code,
                duration_ms=f"{duration_ms:.2f}",
            )
        return response

    app.add_middleware(
        SessionMiddleware,
        secret_key=settings.session_secret.get_secret_value(),
        session_cookie=settings.session_cookie_name,
        same_site="lax",
    )

    app.include_router(web_router)

    static_dir = Path(__file__).resolve().parent / "web" / "static"
    app.mount("/static", StaticFiles(directory=str(static_dir)), name="static")

    return app


app = create_app()
