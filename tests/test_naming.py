from __future__ import annotations

import pytest

from gitnest.errors import (
    NameCharsNotAllowedError,
    NameEmptyError,
    NamePatternNotAllowedError,
    NameReservedError,
)
from gitnest.naming import is_usable_repo_name, is_usable_username, is_valid_username


@pytest.mark.parametrize("name", ["alice", "a.b-c_d", "User1", "x"])
def test_valid_usernames(name: str) -> None:
    assert is_valid_username(name)
    is_usable_username(name)


@pytest.mark.parametrize(
    "name",
    ["-alice", "al--ice", "alice.", "al ice", "ali/ce", "", "alice\n", "añb", "a中文", "١abc", "useré"],
)
def test_invalid_username_characters(name: str) -> None:
    with pytest.raises(NameCharsNotAllowedError):
        is_usable_username(name)


def test_reserved_username_is_case_insensitive() -> None:
    with pytest.raises(NameReservedError):
        is_usable_username("Admin")


def test_reserved_username_pattern() -> None:
    with pytest.raises(NamePatternNotAllowedError) as excinfo:
        is_usable_username("alice.keys")
    assert excinfo.value.name == "*.keys"


def test_repo_name_rules() -> None:
    is_usable_repo_name("demo.project")
    with pytest.raises(NameReservedError):
        is_usable_repo_name("..")
    with pytest.raises(NamePatternNotAllowedError):
        is_usable_repo_name("demo.wiki")
    with pytest.raises(NameCharsNotAllowedError):
        is_usable_repo_name("../etc")
    with pytest.raises(NameCharsNotAllowedError):
        is_usable_repo_name("dépôt")
    with pytest.raises(NameEmptyError):
        is_usable_repo_name("")
