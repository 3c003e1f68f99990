from __future__ import annotations

from dataclasses import dataclass
from threading import Lock
from time import monotonic

from gitnest.git.repo import CommitInfo, GitRepo


@dataclass(frozen=True)
class _CacheEntry:
    value: str
    expires_at: float


_entries: dict[str, _CacheEntry] = {}
_lock = Lock()
_ops_since_sweep = 0

_SWEEP_EVERY_OPS = 256


def _sweep_expired(now: float) -> None:
    expired = [key for key, entry in _entries.items() if entry.expires_at <= now]
    for key in expired:
        _entries.pop(key, None)


def _maybe_sweep(now: float) -> None:
    global _ops_since_sweep
    _ops_since_sweep += 1
    if _ops_since_sweep < _SWEEP_EVERY_OPS:
        return
    _ops_since_sweep = 0
    _sweep_expired(now)


def clear() -> None:
    global _ops_since_sweep
    with _lock:
        _entries.clear()
        _ops_since_sweep = 0


class LastCommitCache:
    """Remembers which commit last touched a path, per repository and ref commit."""

    def __init__(self, repo_full_name: str, git_repo: GitRepo, ttl_seconds: int) -> None:
        self.repo_full_name = repo_full_name
        self.git_repo = git_repo
        self.ttl_seconds = ttl_seconds

    def _key(self, ref_commit_id: str, tree_path: str) -> str:
        return f"last_commit:{self.repo_full_name}:{ref_commit_id}:{tree_path}"

    def get(self, ref_commit_id: str, tree_path: str) -> CommitInfo | None:
        key = self._key(ref_commit_id, tree_path)
        now = monotonic()
        with _lock:
            _maybe_sweep(now)
            entry = _entries.get(key)
            if entry is None:
                return None
            if entry.expires_at <= now:
                _entries.pop(key, None)
                return None
            commit_id = entry.value
        return self.git_repo.get_commit(commit_id)

    def put(self, ref_commit_id: str, tree_path: str, commit: CommitInfo) -> None:
        key = self._key(ref_commit_id, tree_path)
        now = monotonic()
        with _lock:
            _maybe_sweep(now)
            _entries[key] = _CacheEntry(value=commit.id, expires_at=now + self.ttl_seconds)


def last_commit_for_path(
    git_repo: GitRepo,
    ref_commit_id: str,
    tree_path: str,
    cache: LastCommitCache | None,
) -> CommitInfo | None:
    if cache is not None:
        cached = cache.get(ref_commit_id, tree_path)
        if cached is not None:
            return cached

    commit = git_repo.last_commit_for_path(ref_commit_id, tree_path)
    if commit is not None and cache is not None:
        cache.put(ref_commit_id, tree_path, commit)
    return commit


def reaches_commits_count(
    repo_full_name: str,
    git_repo: GitRepo,
    commit_id: str,
    threshold: int,
    ttl_seconds: int,
) -> bool:
    """Whether the history behind ``commit_id`` holds at least ``threshold`` commits.

    The walk stops at ``threshold`` and its result is remembered per commit.
    """
    key = f"commits_count:{repo_full_name}:{commit_id}:{threshold}"
    now = monotonic()
    with _lock:
        entry = _entries.get(key)
        if entry is not None and entry.expires_at > now:
            return int(entry.value) >= threshold

    count = git_repo.commits_count(commit_id, limit=threshold)
    with _lock:
        _maybe_sweep(now)
        _entries[key] = _CacheEntry(value=str(count), expires_at=now + ttl_seconds)
    return count >= threshold
