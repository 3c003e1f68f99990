"""Server-side validation for the settings forms."""

from __future__ import annotations

from dataclasses import dataclass
from urllib.parse import urlparse

from gitnest.db.models import Visibility
from gitnest.i18n import tr
from gitnest.settings import get_settings

NAME_MAX_LENGTH = 40
FULL_NAME_MAX_LENGTH = 100
WEBSITE_MAX_LENGTH = 255
LOCATION_MAX_LENGTH = 50
DESCRIPTION_MAX_LENGTH = 255
THEME_MAX_LENGTH = 30


@dataclass(frozen=True)
class ProfileForm:
    name: str
    full_name: str
    website: str
    location: str
    description: str
    visibility: str
    keep_email_private: bool
    keep_activity_private: bool


def is_checked(value: str | None) -> bool:
    return value is not None and value.strip().lower() in {"1", "true", "on", "yes"}


def is_valid_site_url(value: str) -> bool:
    parsed = urlparse(value)
    return parsed.scheme in {"http", "https"} and bool(parsed.netloc)


def allowed_visibility_modes() -> list[Visibility]:
    modes: list[Visibility] = []
    for raw in get_settings().allowed_user_visibility_modes:
        try:
            modes.append(Visibility(raw.strip().lower()))
        except ValueError:
            continue
    return modes


def validate_profile_form(form: ProfileForm, lang: str) -> str | None:
    """Return the first validation error message, or None when the form is valid."""
    limits = (
        ("Username", form.name, NAME_MAX_LENGTH),
        ("Full Name", form.full_name, FULL_NAME_MAX_LENGTH),
        ("Website", form.website, WEBSITE_MAX_LENGTH),
        ("Location", form.location, LOCATION_MAX_LENGTH),
        ("Description", form.description, DESCRIPTION_MAX_LENGTH),
    )
    for label, value, limit in limits:
        if len(value) > limit:
            return tr(lang, "form.max_size_error", label, limit)

    if form.website and not is_valid_site_url(form.website):
        return tr(lang, "form.url_error", form.website)

    if form.visibility:
        try:
            visibility = Visibility(form.visibility)
        except ValueError:
            return tr(lang, "form.visibility_not_allowed")
        if visibility not in allowed_visibility_modes():
            return tr(lang, "form.visibility_not_allowed")

    return None
