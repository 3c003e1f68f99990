from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import RedirectResponse
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.concurrency import run_in_threadpool
from starlette.responses import Response

from gitnest.auth import require_user
from gitnest.db import get_session
from gitnest.db.models import Repository, User
from gitnest.db.repos import (
    FindOrgOptions,
    OrganizationRepository,
    RepositoryRepository,
    SearchRepoOptions,
)
from gitnest.errors import GitnestError
from gitnest.i18n import request_language, tr
from gitnest.naming import is_usable_repo_name
from gitnest.pagination import Pagination, parse_page
from gitnest.security.audit import audit_settings_denied, audit_settings_success
from gitnest.security.audit_constants import (
    SETTINGS_EVENT_UNADOPTED_REPO_ADOPT,
    SETTINGS_EVENT_UNADOPTED_REPO_DELETE,
    SETTINGS_REASON_PERMISSION_DENIED,
)
from gitnest.services import (
    adopt_repository,
    delete_unadopted_repository,
    list_user_repo_dirs,
    unadopted_dir_exists,
)
from gitnest.settings import get_settings
from gitnest.web.routes.common import flash, redirect, render, server_error

router = APIRouter()
logger = logging.getLogger("gitnest.settings.lists")

REPOS_PATH = "/user/settings/repos"

_PAGER_LINKS = 5


def _allow_adopt(user: User) -> bool:
    return user.is_admin or get_settings().allow_adoption_of_unadopted_repositories


def _allow_delete(user: User) -> bool:
    return user.is_admin or get_settings().allow_deletion_of_unadopted_repositories


@router.get("/user/settings/organization", name="settings_organization")
async def organization(
    request: Request,
    page: str | None = None,
    session: AsyncSession = Depends(get_session),
    current_user: User = Depends(require_user),
) -> Response:
    opts = FindOrgOptions(
        user_id=current_user.id,
        include_private=True,
        page=parse_page(page),
        page_size=get_settings().admin_user_paging_num,
    )
    orgs_repo = OrganizationRepository(session)
    try:
        orgs = await orgs_repo.find_orgs(opts)
        total = await orgs_repo.count_orgs(opts)
    except Exception as exc:
        raise server_error(logger, "organization listing failed", user_id=current_user.id) from exc

    pager = Pagination(total=total, page_size=opts.page_size, current=opts.page, num_links=_PAGER_LINKS)
    return render(
        request,
        "user/settings/organization.html",
        {"page_is_settings_organization": True, "orgs": orgs, "page": pager},
        current_user=current_user,
    )


@router.get(REPOS_PATH, name="settings_repos")
async def repos(
    request: Request,
    page: str | None = None,
    session: AsyncSession = Depends(get_session),
    current_user: User = Depends(require_user),
) -> Response:
    settings = get_settings()
    current_page = parse_page(page)
    page_size = settings.admin_user_paging_num
    start = (current_page - 1) * page_size
    end = start + page_size

    allow_adopt = _allow_adopt(current_user)
    allow_delete = _allow_delete(current_user)
    adopt_or_delete = current_user.is_admin or (
        settings.allow_adoption_of_unadopted_repositories
        and settings.allow_deletion_of_unadopted_repositories
    )

    context: dict[str, object] = {
        "page_is_settings_repos": True,
        "allow_adopt": allow_adopt,
        "allow_delete": allow_delete,
        "adopt_or_delete": adopt_or_delete,
        "owner": current_user,
    }
    repositories = RepositoryRepository(session)

    try:
        if adopt_or_delete:
            dirs, count = await run_in_threadpool(list_user_repo_dirs, current_user.name, start, end)
            adopted, _ = await repositories.get_user_repositories(
                SearchRepoOptions(
                    owner_id=current_user.id,
                    include_private=True,
                    lower_names=dirs,
                    page=1,
                    page_size=page_size,
                )
            )
            repos_map: dict[str, Repository] = {repo.lower_name: repo for repo in adopted}
            context["dirs"] = dirs
            context["repos_map"] = repos_map
        else:
            user_repos, count = await repositories.get_user_repositories(
                SearchRepoOptions(
                    owner_id=current_user.id,
                    include_private=True,
                    page=current_page,
                    page_size=page_size,
                )
            )
            context["repos"] = user_repos
    except Exception as exc:
        raise server_error(logger, "repository listing failed", user_id=current_user.id) from exc

    context["page"] = Pagination(
        total=count, page_size=page_size, current=current_page, num_links=_PAGER_LINKS
    )
    return render(request, "user/settings/repos.html", context, current_user=current_user)


@router.post(f"{REPOS_PATH}/unadopted", response_class=RedirectResponse, name="settings_repos_unadopted")
async def adopt_or_delete_repository(
    request: Request,
    dir_id: str = Form("", alias="id"),
    action: str = Form(""),
    session: AsyncSession = Depends(get_session),
    current_user: User = Depends(require_user),
) -> RedirectResponse:
    lang = request_language(request, current_user)
    dir_name = dir_id.strip()
    try:
        is_usable_repo_name(dir_name)
    except GitnestError:
        return redirect(REPOS_PATH)

    existing = await RepositoryRepository(session).get_by_owner_and_name(current_user.id, dir_name)
    if existing is not None or not unadopted_dir_exists(current_user, dir_name):
        return redirect(REPOS_PATH)

    if action == "adopt":
        if not _allow_adopt(current_user):
            audit_settings_denied(
                event=SETTINGS_EVENT_UNADOPTED_REPO_ADOPT,
                reason=SETTINGS_REASON_PERMISSION_DENIED,
                actor=current_user,
                repo=dir_name,
            )
            return redirect(REPOS_PATH)
        try:
            await adopt_repository(session, current_user, dir_name)
        except Exception as exc:
            raise server_error(logger, "repository adoption failed", repo=dir_name) from exc
        audit_settings_success(
            event=SETTINGS_EVENT_UNADOPTED_REPO_ADOPT, actor=current_user, repo=dir_name
        )
        flash(request, "success", tr(lang, "repo.adopt_preexisting_success", dir_name))
    elif action == "delete":
        if not _allow_delete(current_user):
            audit_settings_denied(
                event=SETTINGS_EVENT_UNADOPTED_REPO_DELETE,
                reason=SETTINGS_REASON_PERMISSION_DENIED,
                actor=current_user,
                repo=dir_name,
            )
            return redirect(REPOS_PATH)
        try:
            await delete_unadopted_repository(session, current_user, dir_name)
        except Exception as exc:
            raise server_error(logger, "unadopted repository delete failed", repo=dir_name) from exc
        audit_settings_success(
            event=SETTINGS_EVENT_UNADOPTED_REPO_DELETE, actor=current_user, repo=dir_name
        )
        flash(request, "success", tr(lang, "repo.delete_preexisting_success", dir_name))

    return redirect(REPOS_PATH)
