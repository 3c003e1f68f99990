from __future__ import annotations

from starlette.requests import Request

from gitnest.db.models import User
from gitnest.settings import get_settings

LOCALE_COOKIE_NAME = "lang"
FALLBACK_LANGUAGE = "en-US"

LANGUAGE_NAMES: dict[str, str] = {
    "en-US": "English",
    "de-DE": "Deutsch",
    "fr-FR": "Français",
    "zh-CN": "简体中文",
}

_CATALOG: dict[str, dict[str, str]] = {
    "en-US": {
        "settings": "Settings",
        "settings.profile": "Profile",
        "settings.appearance": "Appearance",
        "settings.organization": "Organizations",
        "settings.repos": "Repositories",
        "settings.public_profile": "Public Profile",
        "settings.username": "Username",
        "settings.full_name": "Full Name",
        "settings.email": "Email Address",
        "settings.keep_email_private": "Hide Email Address",
        "settings.website": "Website",
        "settings.location": "Location",
        "settings.biography": "Biography",
        "settings.visibility": "User visibility",
        "settings.visibility.public": "Public",
        "settings.visibility.limited": "Limited",
        "settings.visibility.private": "Private",
        "settings.keep_activity_private": "Hide the activity from the profile page",
        "settings.update_profile": "Update Profile",
        "settings.update_profile_success": "Your profile has been updated.",
        "settings.avatar": "Avatar",
        "settings.lookup_avatar_by_mail": "Look Up Avatar by Email Address",
        "settings.avatar_email": "Avatar Email",
        "settings.enable_custom_avatar": "Use Custom Avatar",
        "settings.choose_new_avatar": "Choose new avatar",
        "settings.update_avatar": "Update Avatar",
        "settings.delete_current_avatar": "Delete Current Avatar",
        "settings.update_avatar_success": "Your avatar has been updated.",
        "settings.update_user_avatar_error": "Failed to update the avatar.",
        "settings.delete_user_avatar_error": "Failed to delete the avatar.",
        "settings.uploaded_avatar_is_too_big": "The uploaded file has exceeded the maximum size.",
        "settings.uploaded_avatar_not_a_image": "The uploaded file is not an image.",
        "settings.manage_themes": "Select default theme",
        "settings.update_theme": "Update Theme",
        "settings.theme_update_success": "Your theme was updated.",
        "settings.theme_update_error": "The selected theme does not exist.",
        "settings.language": "Language",
        "settings.update_language": "Update Language",
        "settings.update_language_success": "Language has been updated.",
        "settings.update_language_not_found": "Language '%s' is not available.",
        "settings.saved_successfully": "Your settings were saved successfully.",
        "settings.hidden_comment_types": "Hidden comment types",
        "settings.hidden_comment_types_description": "Comment types checked here will not be shown inside issue pages.",
        "settings.comment_type_group_reference": "Reference",
        "settings.comment_type_group_label": "Label",
        "settings.comment_type_group_milestone": "Milestone",
        "settings.comment_type_group_assignee": "Assignee",
        "settings.comment_type_group_title": "Title",
        "settings.comment_type_group_branch": "Branch",
        "settings.comment_type_group_time_tracking": "Time Tracking",
        "settings.comment_type_group_deadline": "Deadline",
        "settings.comment_type_group_dependency": "Dependency",
        "settings.comment_type_group_lock": "Lock status",
        "settings.comment_type_group_review_request": "Review request",
        "settings.comment_type_group_pull_request_push": "Added commits",
        "settings.comment_type_group_project": "Project",
        "settings.comment_type_group_issue_ref": "Issue reference",
        "settings.orgs": "Manage Organizations",
        "settings.orgs_none": "You are not a member of any organizations.",
        "settings.repos_none": "You do not own any repositories.",
        "save_application": "Save",
        "repo.desc.private": "Private",
        "repo.forked_from": "forked from",
        "repo.unadopted": "Unadopted Repository",
        "repo.adopt_preexisting_label": "Adopt Files",
        "repo.delete_preexisting_label": "Delete",
        "form.username_change_not_local_user": "Non-local users are not allowed to change their username.",
        "form.username_been_taken": "The username is already taken.",
        "form.email_been_used": "The email address is already used.",
        "form.max_size_error": "%s must contain at most %s characters.",
        "form.url_error": "`%s` is not a valid URL.",
        "form.email_error": "`%s` is not a valid email address.",
        "form.visibility_not_allowed": "The selected visibility is not allowed.",
        "user.form.name_reserved": "The username '%s' is reserved.",
        "user.form.name_pattern_not_allowed": "The pattern '%s' is not allowed in a username.",
        "user.form.name_chars_not_allowed": "User name '%s' contains invalid characters.",
        "repo.adopt_preexisting_success": "Adopted files and created repository from %s",
        "repo.delete_preexisting_success": "Deleted unadopted files in %s",
        "repo.adopt_preexisting_error": "Failed to adopt files",
    },
    "de-DE": {
        "settings": "Einstellungen",
        "settings.profile": "Profil",
        "settings.appearance": "Aussehen",
        "settings.organization": "Organisationen",
        "settings.repos": "Repositories",
        "settings.update_profile": "Profil aktualisieren",
        "settings.update_profile_success": "Dein Profil wurde aktualisiert.",
        "settings.update_avatar_success": "Dein Profilbild wurde geändert.",
        "settings.theme_update_success": "Dein Theme wurde aktualisiert.",
        "settings.update_language_success": "Sprache wurde aktualisiert.",
        "settings.saved_successfully": "Deine Einstellungen wurden erfolgreich gespeichert.",
    },
    "fr-FR": {
        "settings": "Paramètres",
        "settings.update_profile_success": "Votre profil a été mis à jour.",
        "settings.update_language_success": "La langue a été mise à jour.",
    },
    "zh-CN": {
        "settings": "设置",
        "settings.update_profile_success": "您的资料信息已经成功更新。",
        "settings.update_language_success": "语言已更新。",
    },
}


def tr(lang: str | None, key: str, *args: object) -> str:
    """Translate ``key`` into ``lang`` with English and then the key itself as fallbacks."""
    message = _CATALOG.get(lang or FALLBACK_LANGUAGE, {}).get(key)
    if message is None:
        message = _CATALOG[FALLBACK_LANGUAGE].get(key, key)
    if args:
        return message % args
    return message


def language_options() -> list[tuple[str, str]]:
    return [(code, LANGUAGE_NAMES.get(code, code)) for code in get_settings().langs]


def request_language(request: Request, user: User | None = None) -> str:
    settings = get_settings()
    if user is not None and user.language in settings.langs:
        return user.language
    cookie_lang = request.cookies.get(LOCALE_COOKIE_NAME, "")
    if cookie_lang in settings.langs:
        return cookie_lang
    return settings.default_language
