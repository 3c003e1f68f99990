"""Build small bare repositories on disk for download tests."""

from __future__ import annotations

import hashlib
from collections.abc import Mapping, Sequence
from pathlib import Path

from dulwich.index import commit_tree
from dulwich.objects import Blob, Commit
from dulwich.repo import Repo

from gitnest.git import repo_path

DEFAULT_COMMIT_TIME = 1_700_000_000
_FILE_MODE = 0o100644
_SUBMODULE_MODE = 0o160000


def init_bare_repo(repo_root: str | Path, owner_name: str, repo_name: str) -> Path:
    path = repo_path(repo_root, owner_name, repo_name)
    path.mkdir(parents=True)
    Repo.init_bare(str(path)).close()
    return path


def write_commit(
    path: Path,
    files: Mapping[str, bytes],
    *,
    ref: str = "refs/heads/main",
    message: str = "update files",
    parents: Sequence[str] = (),
    commit_time: int = DEFAULT_COMMIT_TIME,
    submodules: Mapping[str, str] | None = None,
) -> str:
    """Commit ``files`` (the whole tree) onto ``ref`` and return the commit id."""
    repo = Repo(str(path))
    try:
        entries: list[tuple[bytes, bytes, int]] = []
        for file_path, data in files.items():
            blob = Blob.from_string(data)
            repo.object_store.add_object(blob)
            entries.append((file_path.encode("utf-8"), blob.id, _FILE_MODE))
        for module_path, module_sha in (submodules or {}).items():
            entries.append((module_path.encode("utf-8"), module_sha.encode("ascii"), _SUBMODULE_MODE))

        commit = Commit()
        commit.tree = commit_tree(repo.object_store, entries)
        commit.parents = [parent.encode("ascii") for parent in parents]
        commit.author = commit.committer = b"Test User <test@example.com>"
        commit.author_time = commit.commit_time = commit_time
        commit.author_timezone = commit.commit_timezone = 0
        commit.encoding = b"UTF-8"
        commit.message = message.encode("utf-8")
        repo.object_store.add_object(commit)
        repo.refs[ref.encode("utf-8")] = commit.id
        return commit.id.decode("ascii")
    finally:
        repo.close()


def blob_id(data: bytes) -> str:
    return Blob.from_string(data).id.decode("ascii")


def lfs_pointer(content: bytes) -> tuple[str, bytes]:
    """Return the oid of ``content`` and the pointer file text referring to it."""
    oid = hashlib.sha256(content).hexdigest()
    pointer = (
        "version https://git-lfs.github.com/spec/v1\n"
        f"oid sha256:{oid}\n"
        f"size {len(content)}\n"
    )
    return oid, pointer.encode("utf-8")
