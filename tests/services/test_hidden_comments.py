from __future__ import annotations

from gitnest.services.hidden_comments import (
    HIDDEN_COMMENT_TYPE_GROUPS,
    CommentType,
    hidden_comment_types_from_form,
    is_group_checked,
    parse_hidden_comment_types,
)


def test_form_bits_cover_every_type_in_checked_groups() -> None:
    bitmask = hidden_comment_types_from_form({"label": "on", "deadline": "true", "title": ""})

    expected = 1 << CommentType.label
    for comment_type in HIDDEN_COMMENT_TYPE_GROUPS["deadline"]:
        expected |= 1 << comment_type
    assert bitmask == expected


def test_group_checked_when_any_type_bit_is_set() -> None:
    bitmask = 1 << CommentType.unlock
    assert is_group_checked("lock", bitmask)
    assert not is_group_checked("label", bitmask)


def test_unknown_group_or_missing_value_is_unchecked() -> None:
    assert not is_group_checked("nope", (1 << 40) - 1)
    assert not is_group_checked("label", None)


def test_parse_stored_value() -> None:
    assert parse_hidden_comment_types("") is None
    assert parse_hidden_comment_types("garbage") is None
    assert parse_hidden_comment_types("-4") is None
    assert parse_hidden_comment_types(" 128 ") == 128


def test_all_groups_round_trip_through_form() -> None:
    form = {group: "on" for group in HIDDEN_COMMENT_TYPE_GROUPS}
    bitmask = hidden_comment_types_from_form(form)
    assert all(is_group_checked(group, bitmask) for group in HIDDEN_COMMENT_TYPE_GROUPS)
