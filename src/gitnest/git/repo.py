"""Read-only access to bare repositories on disk.

dulwich is synchronous; async callers run these methods through
``starlette.concurrency.run_in_threadpool``.
"""

from __future__ import annotations

import io
import re
import stat
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path
from typing import BinaryIO

from dulwich.errors import NotGitRepository, NotTreeError
from dulwich.object_store import tree_lookup_path
from dulwich.objects import Blob as DulwichBlob
from dulwich.objects import Commit as DulwichCommit
from dulwich.objects import Tag as DulwichTag
from dulwich.repo import Repo

from gitnest.errors import GitObjectNotFoundError
from gitnest.settings import get_settings

_SHA_PATTERN = re.compile(r"^[0-9a-f]{40}$")

REF_KIND_BRANCH = "branch"
REF_KIND_TAG = "tag"
REF_KIND_COMMIT = "commit"

_REF_PREFIXES = {
    REF_KIND_BRANCH: b"refs/heads/",
    REF_KIND_TAG: b"refs/tags/",
}

_MAX_TAG_DEPTH = 10


@dataclass(frozen=True)
class Blob:
    id: str
    name: str
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)

    def data_stream(self) -> BinaryIO:
        """A fresh reader over the blob content; the caller must close it."""
        return io.BytesIO(self.data)


@dataclass(frozen=True)
class CommitInfo:
    id: str
    committed_at: datetime
    message: str


@dataclass(frozen=True)
class TreeEntry:
    path: str
    mode: int
    sha: str

    @property
    def name(self) -> str:
        return self.path.rsplit("/", 1)[-1]

    def is_dir(self) -> bool:
        return stat.S_ISDIR(self.mode)

    def is_submodule(self) -> bool:
        return stat.S_IFMT(self.mode) == 0o160000


@dataclass(frozen=True)
class ResolvedRef:
    name: str
    commit: CommitInfo
    tree_path: str


def repo_path(repo_root: str | Path, owner_name: str, repo_name: str) -> Path:
    return Path(repo_root) / owner_name.lower() / f"{repo_name.lower()}.git"


def open_repository(owner_name: str, repo_name: str, repo_root: str | Path | None = None) -> GitRepo:
    root = repo_root if repo_root is not None else get_settings().repo_root
    return GitRepo.open(repo_path(root, owner_name, repo_name), f"{owner_name}/{repo_name}")


def _commit_info(commit: DulwichCommit) -> CommitInfo:
    return CommitInfo(
        id=commit.id.decode("ascii"),
        committed_at=datetime.fromtimestamp(commit.commit_time, UTC),
        message=commit.message.decode("utf-8", errors="replace"),
    )


class GitRepo:
    def __init__(self, repo: Repo, full_name: str) -> None:
        self._repo = repo
        self.full_name = full_name

    @classmethod
    def open(cls, path: str | Path, full_name: str) -> GitRepo:
        try:
            return cls(Repo(str(path)), full_name)
        except NotGitRepository as exc:
            raise GitObjectNotFoundError(f"repository {full_name}") from exc

    def close(self) -> None:
        self._repo.close()

    def __enter__(self) -> GitRepo:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    def _object(self, sha: bytes) -> object:
        try:
            return self._repo[sha]
        except KeyError as exc:
            raise GitObjectNotFoundError(sha.decode("ascii", errors="replace")) from exc

    def _peel_to_commit(self, sha: bytes) -> DulwichCommit | None:
        obj = self._repo.get_object(sha)
        depth = 0
        while isinstance(obj, DulwichTag) and depth < _MAX_TAG_DEPTH:
            obj = self._repo.get_object(obj.object[1])
            depth += 1
        return obj if isinstance(obj, DulwichCommit) else None

    def _ref_commit(self, kind: str, name: str) -> DulwichCommit | None:
        ref = _REF_PREFIXES[kind] + name.encode("utf-8")
        try:
            sha = self._repo.refs[ref]
        except KeyError:
            return None
        try:
            return self._peel_to_commit(sha)
        except KeyError:
            return None

    def get_commit(self, sha: str) -> CommitInfo:
        if not _SHA_PATTERN.match(sha):
            raise GitObjectNotFoundError(f"commit {sha}")
        obj = self._object(sha.encode("ascii"))
        if not isinstance(obj, DulwichCommit):
            raise GitObjectNotFoundError(f"commit {sha}")
        return _commit_info(obj)

    def resolve_ref(self, kind: str, ref_and_path: str) -> ResolvedRef:
        """Split ``ref_and_path`` into a ref of ``kind`` and the remaining tree path.

        Branch and tag names may contain slashes; the shortest existing ref wins.
        """
        parts = [part for part in ref_and_path.strip("/").split("/") if part]
        if not parts:
            raise GitObjectNotFoundError(f"{kind} ref")

        if kind == REF_KIND_COMMIT:
            info = self.get_commit(parts[0].lower())
            return ResolvedRef(name=info.id, commit=info, tree_path="/".join(parts[1:]))

        if kind not in _REF_PREFIXES:
            raise GitObjectNotFoundError(f"{kind} ref")

        for index in range(len(parts)):
            name = "/".join(parts[: index + 1])
            commit = self._ref_commit(kind, name)
            if commit is not None:
                return ResolvedRef(
                    name=name,
                    commit=_commit_info(commit),
                    tree_path="/".join(parts[index + 1 :]),
                )
        raise GitObjectNotFoundError(f"{kind} {ref_and_path}")

    def get_tree_entry_by_path(self, commit_id: str, tree_path: str) -> TreeEntry:
        commit = self._object(commit_id.encode("ascii"))
        if not isinstance(commit, DulwichCommit):
            raise GitObjectNotFoundError(f"commit {commit_id}")

        cleaned = tree_path.strip("/")
        if not cleaned:
            return TreeEntry(path="", mode=stat.S_IFDIR, sha=commit.tree.decode("ascii"))

        try:
            mode, sha = tree_lookup_path(self._repo.get_object, commit.tree, cleaned.encode("utf-8"))
        except (KeyError, NotTreeError) as exc:
            raise GitObjectNotFoundError(f"path {cleaned}") from exc
        return TreeEntry(path=cleaned, mode=mode, sha=sha.decode("ascii"))

    def get_blob(self, sha: str, name: str = "") -> Blob:
        normalized = sha.strip().lower()
        if not _SHA_PATTERN.match(normalized):
            raise GitObjectNotFoundError(f"blob {sha}")
        obj = self._object(normalized.encode("ascii"))
        if not isinstance(obj, DulwichBlob):
            raise GitObjectNotFoundError(f"blob {sha}")
        return Blob(id=normalized, name=name or normalized, data=obj.as_raw_string())

    def entry_blob(self, entry: TreeEntry) -> Blob:
        return self.get_blob(entry.sha, entry.name)

    def last_commit_for_path(self, commit_id: str, tree_path: str) -> CommitInfo | None:
        """The most recent commit reachable from ``commit_id`` that touched ``tree_path``."""
        paths = [tree_path.strip("/").encode("utf-8")] if tree_path.strip("/") else None
        walker = self._repo.get_walker(
            include=[commit_id.encode("ascii")],
            paths=paths,
            max_entries=1,
        )
        for walk_entry in walker:
            return _commit_info(walk_entry.commit)
        return None

    def commits_count(self, commit_id: str, limit: int | None = None) -> int:
        """Number of commits reachable from ``commit_id``, counting no further than ``limit``."""
        walker = self._repo.get_walker(include=[commit_id.encode("ascii")], max_entries=limit)
        return sum(1 for _ in walker)
