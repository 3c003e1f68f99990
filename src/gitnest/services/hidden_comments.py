"""Per-user hidden issue comment types, stored as an integer bitmask."""

from __future__ import annotations

import enum
from collections.abc import Mapping


class CommentType(enum.IntEnum):
    comment = 0
    reopen = 1
    close = 2
    issue_ref = 3
    commit_ref = 4
    comment_ref = 5
    pull_ref = 6
    label = 7
    milestone = 8
    assignees = 9
    change_title = 10
    delete_branch = 11
    start_tracking = 12
    stop_tracking = 13
    add_time_manual = 14
    cancel_tracking = 15
    added_deadline = 16
    modified_deadline = 17
    removed_deadline = 18
    add_dependency = 19
    remove_dependency = 20
    code = 21
    review = 22
    lock = 23
    unlock = 24
    change_target_branch = 25
    delete_time_manual = 26
    review_request = 27
    merge_pull = 28
    pull_request_push = 29
    project = 30
    project_board = 31
    dismiss_review = 32
    change_issue_ref = 33


HIDDEN_COMMENT_TYPE_GROUPS: dict[str, tuple[CommentType, ...]] = {
    "reference": (
        CommentType.issue_ref,
        CommentType.commit_ref,
        CommentType.comment_ref,
        CommentType.pull_ref,
    ),
    "label": (CommentType.label,),
    "milestone": (CommentType.milestone,),
    "assignee": (CommentType.assignees,),
    "title": (CommentType.change_title,),
    "branch": (CommentType.change_target_branch, CommentType.delete_branch),
    "time_tracking": (
        CommentType.start_tracking,
        CommentType.stop_tracking,
        CommentType.add_time_manual,
        CommentType.cancel_tracking,
        CommentType.delete_time_manual,
    ),
    "deadline": (
        CommentType.added_deadline,
        CommentType.modified_deadline,
        CommentType.removed_deadline,
    ),
    "dependency": (CommentType.add_dependency, CommentType.remove_dependency),
    "lock": (CommentType.lock, CommentType.unlock),
    "review_request": (CommentType.review_request,),
    "pull_request_push": (CommentType.pull_request_push,),
    "project": (CommentType.project, CommentType.project_board),
    "issue_ref": (CommentType.change_issue_ref,),
}

_TRUTHY = {"1", "true", "on", "yes"}


def parse_hidden_comment_types(raw: str) -> int | None:
    """Parse the stored decimal bitmask; None when empty or malformed."""
    text = raw.strip()
    if not text:
        return None
    try:
        value = int(text, 10)
    except ValueError:
        return None
    return value if value >= 0 else None


def is_group_checked(group: str, hidden_comment_types: int | None) -> bool:
    comment_types = HIDDEN_COMMENT_TYPE_GROUPS.get(group)
    if comment_types is None or hidden_comment_types is None:
        return False
    return any((hidden_comment_types >> int(comment_type)) & 1 for comment_type in comment_types)


def hidden_comment_types_from_form(form: Mapping[str, str]) -> int:
    bitmask = 0
    for group, comment_types in HIDDEN_COMMENT_TYPE_GROUPS.items():
        if form.get(group, "").strip().lower() not in _TRUTHY:
            continue
        for comment_type in comment_types:
            bitmask |= 1 << int(comment_type)
    return bitmask
