from __future__ import annotations

from pathlib import Path

import pytest

from gitnest.errors import GitObjectNotFoundError
from gitnest.git import (
    GitRepo,
    LastCommitCache,
    last_commit_for_path,
    open_repository,
    reaches_commits_count,
)
from gitnest.testing.git_test_helpers import blob_id, init_bare_repo, write_commit


def _history(repo_root: Path) -> tuple[str, str]:
    path = init_bare_repo(repo_root, "alice", "demo")
    first = write_commit(path, {"a.txt": b"one", "b.txt": b"one"}, commit_time=1_000)
    second = write_commit(
        path, {"a.txt": b"one", "b.txt": b"two"}, parents=[first], commit_time=2_000
    )
    return first, second


def test_resolve_ref_and_tree_entry(repo_root: Path) -> None:
    _, second = _history(repo_root)

    with open_repository("alice", "demo", repo_root) as git_repo:
        resolved = git_repo.resolve_ref("branch", "main/b.txt")
        assert resolved.name == "main"
        assert resolved.commit.id == second
        assert resolved.tree_path == "b.txt"

        entry = git_repo.get_tree_entry_by_path(second, "b.txt")
        assert not entry.is_dir()
        blob = git_repo.entry_blob(entry)
        assert blob.data == b"two"
        assert blob.id == blob_id(b"two")
        assert blob.name == "b.txt"

        assert git_repo.commits_count(second) == 2

        with pytest.raises(GitObjectNotFoundError):
            git_repo.resolve_ref("branch", "develop/b.txt")
        with pytest.raises(GitObjectNotFoundError):
            git_repo.get_tree_entry_by_path(second, "c.txt")
        with pytest.raises(GitObjectNotFoundError):
            git_repo.get_commit("not-a-sha")


def test_open_missing_repository(repo_root: Path) -> None:
    repo_root.mkdir(parents=True, exist_ok=True)
    with pytest.raises(GitObjectNotFoundError):
        open_repository("alice", "missing", repo_root)


def test_last_commit_for_path_uses_cache(repo_root: Path) -> None:
    first, second = _history(repo_root)

    with open_repository("alice", "demo", repo_root) as git_repo:
        cache = LastCommitCache("alice/demo", git_repo, ttl_seconds=60)

        unchanged = last_commit_for_path(git_repo, second, "a.txt", cache)
        assert unchanged is not None
        assert unchanged.id == first

        changed = last_commit_for_path(git_repo, second, "b.txt", cache)
        assert changed is not None
        assert changed.id == second
        assert int(changed.committed_at.timestamp()) == 2_000

        cached = cache.get(second, "a.txt")
        assert cached is not None
        assert cached.id == first


def test_expired_cache_entry_is_dropped(repo_root: Path) -> None:
    first, second = _history(repo_root)

    with open_repository("alice", "demo", repo_root) as git_repo:
        cache = LastCommitCache("alice/demo", git_repo, ttl_seconds=0)
        assert last_commit_for_path(git_repo, second, "a.txt", cache) is not None
        assert cache.get(second, "a.txt") is None


def _linear_history(repo_root: Path, length: int) -> str:
    path = init_bare_repo(repo_root, "alice", "long")
    head = write_commit(path, {"f0.txt": b"0"}, commit_time=1_000)
    for i in range(1, length):
        head = write_commit(
            path, {f"f{i}.txt": str(i).encode()}, parents=[head], commit_time=1_000 + i
        )
    return head


def test_commits_count_stops_at_limit(repo_root: Path) -> None:
    head = _linear_history(repo_root, 6)

    with open_repository("alice", "long", repo_root) as git_repo:
        assert git_repo.commits_count(head) == 6
        assert git_repo.commits_count(head, limit=3) == 3
        assert git_repo.commits_count(head, limit=10) == 6


def test_reaches_commits_count_is_remembered(
    repo_root: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    head = _linear_history(repo_root, 4)
    limits: list[int | None] = []
    original = GitRepo.commits_count

    def counting(self: GitRepo, commit_id: str, limit: int | None = None) -> int:
        limits.append(limit)
        return original(self, commit_id, limit)

    monkeypatch.setattr(GitRepo, "commits_count", counting)

    with open_repository("alice", "long", repo_root) as git_repo:
        assert reaches_commits_count("alice/long", git_repo, head, 3, 60)
        assert reaches_commits_count("alice/long", git_repo, head, 3, 60)
        assert not reaches_commits_count("alice/long", git_repo, head, 5, 60)

    assert limits == [3, 5]
