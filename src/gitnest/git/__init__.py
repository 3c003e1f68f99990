from __future__ import annotations

from gitnest.git.last_commit_cache import (
    LastCommitCache,
    last_commit_for_path,
    reaches_commits_count,
)
from gitnest.git.repo import (
    REF_KIND_BRANCH,
    REF_KIND_COMMIT,
    REF_KIND_TAG,
    Blob,
    CommitInfo,
    GitRepo,
    ResolvedRef,
    TreeEntry,
    open_repository,
    repo_path,
)

__all__ = [
    "REF_KIND_BRANCH",
    "REF_KIND_COMMIT",
    "REF_KIND_TAG",
    "Blob",
    "CommitInfo",
    "GitRepo",
    "LastCommitCache",
    "ResolvedRef",
    "TreeEntry",
    "last_commit_for_path",
    "open_repository",
    "reaches_commits_count",
    "repo_path",
]
