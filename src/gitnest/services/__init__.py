from gitnest.services.hidden_comments import (
    HIDDEN_COMMENT_TYPE_GROUPS,
    hidden_comment_types_from_form,
    is_group_checked,
    parse_hidden_comment_types,
)
from gitnest.services.repo_adoption import (
    adopt_repository,
    delete_unadopted_repository,
    list_user_repo_dirs,
    unadopted_dir_exists,
)
from gitnest.services.user_service import (
    AVATAR_SOURCE_LOCAL,
    AVATAR_SOURCE_LOOKUP,
    AvatarUpload,
    ProfileUpdate,
    avatar_link,
    change_user_name,
    delete_avatar,
    generate_random_avatar,
    update_avatar_setting,
    update_profile,
    update_user_setting,
    upload_avatar,
    validate_username_change,
)

__all__ = [
    "AVATAR_SOURCE_LOCAL",
    "AVATAR_SOURCE_LOOKUP",
    "HIDDEN_COMMENT_TYPE_GROUPS",
    "AvatarUpload",
    "ProfileUpdate",
    "adopt_repository",
    "avatar_link",
    "change_user_name",
    "delete_avatar",
    "delete_unadopted_repository",
    "generate_random_avatar",
    "hidden_comment_types_from_form",
    "is_group_checked",
    "list_user_repo_dirs",
    "parse_hidden_comment_types",
    "unadopted_dir_exists",
    "update_avatar_setting",
    "update_profile",
    "update_user_setting",
    "upload_avatar",
    "validate_username_change",
]
