"""Conditional request handling (entity tags and Last-Modified)."""

from __future__ import annotations

from collections.abc import MutableMapping
from datetime import UTC, datetime
from email.utils import format_datetime, parsedate_to_datetime

from starlette.requests import Request

GENERIC_MAX_AGE_SECONDS = 300


def _cache_control(max_age: int) -> str:
    return f"private, max-age={max_age}"


def format_http_date(value: datetime) -> str:
    as_utc = value.replace(tzinfo=UTC) if value.tzinfo is None else value.astimezone(UTC)
    return format_datetime(as_utc, usegmt=True)


def _parse_http_date(value: str) -> datetime | None:
    try:
        parsed = parsedate_to_datetime(value)
    except (TypeError, ValueError):
        return None
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=UTC)
    return parsed


def _if_none_match_matches(request: Request, etag: str) -> bool:
    header = request.headers.get("if-none-match")
    if not header:
        return False
    for candidate in header.split(","):
        candidate = candidate.strip()
        if candidate == "*":
            return True
        if candidate.startswith("W/"):
            candidate = candidate[2:]
        if candidate == etag:
            return True
    return False


def _not_modified_since(request: Request, last_modified: datetime) -> bool:
    header = request.headers.get("if-modified-since")
    if not header:
        return False
    since = _parse_http_date(header)
    if since is None:
        return False
    modified = last_modified if last_modified.tzinfo else last_modified.replace(tzinfo=UTC)
    return int(modified.timestamp()) <= int(since.timestamp())


def handle_generic_etag_cache(
    request: Request,
    headers: MutableMapping[str, str],
    etag: str,
) -> bool:
    """Return True when the client copy is current (respond 304); else set cache headers."""
    if etag and _if_none_match_matches(request, etag):
        return True

    headers["Cache-Control"] = _cache_control(GENERIC_MAX_AGE_SECONDS)
    if etag:
        headers["ETag"] = etag
    return False


def handle_generic_etag_time_cache(
    request: Request,
    headers: MutableMapping[str, str],
    etag: str,
    last_modified: datetime | None,
) -> bool:
    """Like ``handle_generic_etag_cache`` but also honours If-Modified-Since."""
    if etag and _if_none_match_matches(request, etag):
        return True
    if last_modified is not None and _not_modified_since(request, last_modified):
        return True

    headers["Cache-Control"] = _cache_control(GENERIC_MAX_AGE_SECONDS)
    if etag:
        headers["ETag"] = etag
    if last_modified is not None:
        headers["Last-Modified"] = format_http_date(last_modified)
    return False
