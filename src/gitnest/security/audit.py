from __future__ import annotations

import logging
from collections.abc import Mapping

from gitnest.db.models import User
from gitnest.logging_config import log_security_audit_event


def _actor_fields(
    *,
    actor: User | None = None,
    actor_user_id: object | None = None,
    actor_name: str | None = None,
) -> dict[str, object]:
    fields: dict[str, object] = {}

    resolved_user_id: object | None = actor_user_id
    resolved_name: str | None = actor_name

    if actor is not None:
        if resolved_user_id is None:
            resolved_user_id = actor.id
        if resolved_name is None:
            resolved_name = actor.name

    if resolved_user_id is not None:
        fields["actor_user_id"] = resolved_user_id
    if resolved_name is not None:
        fields["actor_name"] = resolved_name

    return fields


def _emit_security_audit(
    *,
    namespace: str,
    event: str,
    outcome: str,
    audit_level: int = logging.INFO,
    reason: str | None = None,
    actor: User | None = None,
    actor_user_id: object | None = None,
    actor_name: str | None = None,
    fields: Mapping[str, object] | None = None,
) -> None:
    payload: dict[str, object] = {}
    payload.update(_actor_fields(actor=actor, actor_user_id=actor_user_id, actor_name=actor_name))
    if fields:
        payload.update(fields)

    if reason is not None:
        payload["reason"] = reason

    log_security_audit_event(
        audit_event=f"{namespace}.{event}",
        outcome=outcome,
        audit_level=audit_level,
        **payload,
    )


def audit_auth_denied(
    *,
    event: str,
    reason: str,
    actor: User | None = None,
    actor_user_id: object | None = None,
    actor_name: str | None = None,
    **fields: object,
) -> None:
    _emit_security_audit(
        namespace="auth",
        event=event,
        outcome="denied",
        audit_level=logging.WARNING,
        reason=reason,
        actor=actor,
        actor_user_id=actor_user_id,
        actor_name=actor_name,
        fields=fields,
    )


def audit_auth_success(
    *,
    event: str,
    actor: User | None = None,
    actor_user_id: object | None = None,
    actor_name: str | None = None,
    **fields: object,
) -> None:
    _emit_security_audit(
        namespace="auth",
        event=event,
        outcome="success",
        actor=actor,
        actor_user_id=actor_user_id,
        actor_name=actor_name,
        fields=fields,
    )


def audit_settings_denied(
    *,
    event: str,
    reason: str,
    actor: User,
    **fields: object,
) -> None:
    _emit_security_audit(
        namespace="settings",
        event=event,
        outcome="denied",
        audit_level=logging.WARNING,
        reason=reason,
        actor=actor,
        fields=fields,
    )


def audit_settings_success(
    *,
    event: str,
    actor: User,
    **fields: object,
) -> None:
    _emit_security_audit(
        namespace="settings",
        event=event,
        outcome="success",
        actor=actor,
        fields=fields,
    )
