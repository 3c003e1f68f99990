from __future__ import annotations

import logging
from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.concurrency import run_in_threadpool
from starlette.responses import Response

from gitnest.db import get_session
from gitnest.db.models import Repository
from gitnest.errors import GitObjectNotFoundError
from gitnest.git import (
    REF_KIND_BRANCH,
    REF_KIND_COMMIT,
    REF_KIND_TAG,
    Blob,
    LastCommitCache,
    last_commit_for_path,
    open_repository,
    reaches_commits_count,
)
from gitnest.settings import get_settings
from gitnest.web.routes.common import server_error
from gitnest.web.routes.repo.access import RepoContext, repo_context
from gitnest.web.routes.repo.serve import serve_blob, serve_blob_or_lfs

router = APIRouter()
logger = logging.getLogger("gitnest.download")

_REF_KINDS = frozenset({REF_KIND_BRANCH, REF_KIND_TAG, REF_KIND_COMMIT})


def _blob_for_entry(
    repository: Repository, kind: str, ref_and_path: str
) -> tuple[Blob, datetime | None, str]:
    """Resolve ``ref_and_path`` to a file blob and the time its path last changed."""
    settings = get_settings()
    with open_repository(repository.owner_name, repository.name, settings.repo_root) as git_repo:
        resolved = git_repo.resolve_ref(kind, ref_and_path)
        entry = git_repo.get_tree_entry_by_path(resolved.commit.id, resolved.tree_path)
        if entry.is_dir() or entry.is_submodule():
            raise GitObjectNotFoundError(f"blob {resolved.tree_path}")

        cache: LastCommitCache | None = None
        if settings.last_commit_cache_enabled and reaches_commits_count(
            repository.full_name,
            git_repo,
            resolved.commit.id,
            settings.last_commit_cache_commits_count,
            settings.last_commit_cache_ttl_seconds,
        ):
            cache = LastCommitCache(
                repository.full_name, git_repo, settings.last_commit_cache_ttl_seconds
            )

        last_commit = last_commit_for_path(git_repo, resolved.commit.id, entry.path, cache)
        blob = git_repo.entry_blob(entry)

    last_modified = last_commit.committed_at if last_commit is not None else None
    return blob, last_modified, entry.path


def _blob_by_id(repository: Repository, sha: str) -> Blob:
    settings = get_settings()
    with open_repository(repository.owner_name, repository.name, settings.repo_root) as git_repo:
        return git_repo.get_blob(sha)


async def _load_entry(
    ctx: RepoContext, kind: str, ref_and_path: str
) -> tuple[Blob, datetime | None, str]:
    if kind not in _REF_KINDS:
        raise HTTPException(status_code=404)
    try:
        return await run_in_threadpool(_blob_for_entry, ctx.repository, kind, ref_and_path)
    except GitObjectNotFoundError as exc:
        raise HTTPException(status_code=404) from exc
    except Exception as exc:
        raise server_error(
            logger, "tree entry lookup failed", repo=ctx.repository.full_name, path=ref_and_path
        ) from exc


async def _load_blob(ctx: RepoContext, sha: str) -> Blob:
    try:
        return await run_in_threadpool(_blob_by_id, ctx.repository, sha)
    except GitObjectNotFoundError as exc:
        raise HTTPException(status_code=404) from exc
    except Exception as exc:
        raise server_error(logger, "blob lookup failed", repo=ctx.repository.full_name, sha=sha) from exc


@router.get("/{owner}/{repo}/raw/blob/{sha}", name="download_by_id")
async def download_by_id(
    request: Request,
    sha: str,
    ctx: RepoContext = Depends(repo_context),
) -> Response:
    blob = await _load_blob(ctx, sha)
    try:
        return await serve_blob(request, blob, None)
    except Exception as exc:
        raise server_error(logger, "serve blob failed", repo=ctx.repository.full_name) from exc


@router.get("/{owner}/{repo}/raw/{kind}/{ref_and_path:path}", name="single_download")
async def single_download(
    request: Request,
    kind: str,
    ref_and_path: str,
    ctx: RepoContext = Depends(repo_context),
) -> Response:
    blob, last_modified, _ = await _load_entry(ctx, kind, ref_and_path)
    try:
        return await serve_blob(request, blob, last_modified)
    except Exception as exc:
        raise server_error(logger, "serve blob failed", repo=ctx.repository.full_name) from exc


@router.get("/{owner}/{repo}/media/blob/{sha}", name="download_by_id_or_lfs")
async def download_by_id_or_lfs(
    request: Request,
    sha: str,
    ctx: RepoContext = Depends(repo_context),
    session: AsyncSession = Depends(get_session),
) -> Response:
    blob = await _load_blob(ctx, sha)
    try:
        return await serve_blob_or_lfs(request, session, ctx.repository, blob, None)
    except Exception as exc:
        raise server_error(logger, "serve blob or lfs failed", repo=ctx.repository.full_name) from exc


@router.get("/{owner}/{repo}/media/{kind}/{ref_and_path:path}", name="single_download_or_lfs")
async def single_download_or_lfs(
    request: Request,
    kind: str,
    ref_and_path: str,
    ctx: RepoContext = Depends(repo_context),
    session: AsyncSession = Depends(get_session),
) -> Response:
    blob, last_modified, tree_path = await _load_entry(ctx, kind, ref_and_path)
    try:
        return await serve_blob_or_lfs(
            request, session, ctx.repository, blob, last_modified, tree_path
        )
    except Exception as exc:
        raise server_error(logger, "serve blob or lfs failed", repo=ctx.repository.full_name) from exc
