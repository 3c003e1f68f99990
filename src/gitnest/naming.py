from __future__ import annotations

import re

from gitnest.errors import (
    NameCharsNotAllowedError,
    NameEmptyError,
    NamePatternNotAllowedError,
    NameReservedError,
)

RESERVED_USERNAMES: frozenset[str] = frozenset(
    {
        ".",
        "..",
        ".well-known",
        "admin",
        "api",
        "assets",
        "attachments",
        "avatar",
        "avatars",
        "captcha",
        "commits",
        "debug",
        "error",
        "explore",
        "favicon.ico",
        "ghost",
        "issues",
        "login",
        "manifest.json",
        "metrics",
        "milestones",
        "new",
        "notifications",
        "org",
        "pulls",
        "raw",
        "repo",
        "repo-avatars",
        "robots.txt",
        "search",
        "serviceworker.js",
        "ssh_info",
        "swagger.v1.json",
        "user",
        "v2",
    }
)
RESERVED_USERNAME_PATTERNS: tuple[str, ...] = ("*.keys", "*.gpg", "*.rss", "*.atom")

RESERVED_REPO_NAMES: frozenset[str] = frozenset({".", "..", "-"})
RESERVED_REPO_PATTERNS: tuple[str, ...] = ("*.git", "*.wiki", "*.rss", "*.atom")

_VALID_USERNAME = re.compile(r"^[\da-zA-Z][-.\w]*$", re.ASCII)
_INVALID_USERNAME = re.compile(r"[-._]{2,}|[-._]$")
_INVALID_REPO_CHARS = re.compile(r"[^\w\-.]", re.ASCII)


def is_valid_username(name: str) -> bool:
    return bool(_VALID_USERNAME.fullmatch(name)) and not _INVALID_USERNAME.search(name)


def is_usable_name(
    name: str,
    *,
    reserved_names: frozenset[str],
    reserved_patterns: tuple[str, ...],
) -> None:
    lowered = name.strip().lower()
    if not lowered:
        raise NameEmptyError(name)

    if lowered in reserved_names:
        raise NameReservedError(name)

    for pattern in reserved_patterns:
        if pattern.startswith("*") and lowered.endswith(pattern[1:]):
            raise NamePatternNotAllowedError(pattern)
        if pattern.endswith("*") and lowered.startswith(pattern[:-1]):
            raise NamePatternNotAllowedError(pattern)


def is_usable_username(name: str) -> None:
    """Raise the matching name error if ``name`` cannot be used for a user or organization."""
    if not is_valid_username(name):
        raise NameCharsNotAllowedError(name)
    is_usable_name(
        name,
        reserved_names=RESERVED_USERNAMES,
        reserved_patterns=RESERVED_USERNAME_PATTERNS,
    )


def is_usable_repo_name(name: str) -> None:
    if _INVALID_REPO_CHARS.search(name):
        raise NameCharsNotAllowedError(name)
    is_usable_name(
        name,
        reserved_names=RESERVED_REPO_NAMES,
        reserved_patterns=RESERVED_REPO_PATTERNS,
    )
