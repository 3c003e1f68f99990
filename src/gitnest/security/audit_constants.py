from __future__ import annotations

from typing import Final, Literal, TypeAlias

# String values used in security-audit logging, kept in one place so event
# and reason names stay consistent across handlers.


AuthAuditEvent: TypeAlias = Literal[
    "password_login",
    "signup",
    "logout",
]

AuthDeniedReason: TypeAlias = Literal[
    "account_not_found",
    "inactive_user",
    "invalid_credentials",
    "account_exists",
    "invalid_name",
]

SettingsAuditEvent: TypeAlias = Literal[
    "username_change",
    "profile_update",
    "avatar_update",
    "avatar_delete",
    "unadopted_repo_adopt",
    "unadopted_repo_delete",
    "theme_update",
    "language_update",
]

SettingsDeniedReason: TypeAlias = Literal[
    "not_local_user",
    "name_taken",
    "email_used",
    "name_reserved",
    "name_pattern_not_allowed",
    "name_chars_not_allowed",
    "avatar_too_big",
    "avatar_not_image",
    "permission_denied",
]


# Auth events
AUTH_EVENT_PASSWORD_LOGIN: Final[str] = "password_login"
AUTH_EVENT_SIGNUP: Final[str] = "signup"
AUTH_EVENT_LOGOUT: Final[str] = "logout"

# Auth denied reasons
AUTH_REASON_ACCOUNT_NOT_FOUND: Final[str] = "account_not_found"
AUTH_REASON_INACTIVE_USER: Final[str] = "inactive_user"
AUTH_REASON_INVALID_CREDENTIALS: Final[str] = "invalid_credentials"
AUTH_REASON_ACCOUNT_EXISTS: Final[str] = "account_exists"
AUTH_REASON_INVALID_NAME: Final[str] = "invalid_name"

# Settings events
SETTINGS_EVENT_USERNAME_CHANGE: Final[str] = "username_change"
SETTINGS_EVENT_PROFILE_UPDATE: Final[str] = "profile_update"
SETTINGS_EVENT_AVATAR_UPDATE: Final[str] = "avatar_update"
SETTINGS_EVENT_AVATAR_DELETE: Final[str] = "avatar_delete"
SETTINGS_EVENT_UNADOPTED_REPO_ADOPT: Final[str] = "unadopted_repo_adopt"
SETTINGS_EVENT_UNADOPTED_REPO_DELETE: Final[str] = "unadopted_repo_delete"
SETTINGS_EVENT_THEME_UPDATE: Final[str] = "theme_update"
SETTINGS_EVENT_LANGUAGE_UPDATE: Final[str] = "language_update"

# Settings denied reasons
SETTINGS_REASON_NOT_LOCAL_USER: Final[str] = "not_local_user"
SETTINGS_REASON_NAME_TAKEN: Final[str] = "name_taken"
SETTINGS_REASON_EMAIL_USED: Final[str] = "email_used"
SETTINGS_REASON_NAME_RESERVED: Final[str] = "name_reserved"
SETTINGS_REASON_NAME_PATTERN_NOT_ALLOWED: Final[str] = "name_pattern_not_allowed"
SETTINGS_REASON_NAME_CHARS_NOT_ALLOWED: Final[str] = "name_chars_not_allowed"
SETTINGS_REASON_AVATAR_TOO_BIG: Final[str] = "avatar_too_big"
SETTINGS_REASON_AVATAR_NOT_IMAGE: Final[str] = "avatar_not_image"
SETTINGS_REASON_PERMISSION_DENIED: Final[str] = "permission_denied"
