"""Repository layer.

These repositories encapsulate common query patterns for the app's entities.
Keep them focused on persistence/query shaping; business logic lives in services.
"""

from gitnest.db.repos.lfs_meta import LFSMetaObjectRepository
from gitnest.db.repos.organizations import FindOrgOptions, OrganizationRepository
from gitnest.db.repos.repositories import RepositoryRepository, SearchRepoOptions
from gitnest.db.repos.user_settings import (
    SETTINGS_KEY_HIDDEN_COMMENT_TYPES,
    UserSettingRepository,
)
from gitnest.db.repos.users import UserRepository

__all__ = [
    "SETTINGS_KEY_HIDDEN_COMMENT_TYPES",
    "FindOrgOptions",
    "LFSMetaObjectRepository",
    "OrganizationRepository",
    "RepositoryRepository",
    "SearchRepoOptions",
    "UserRepository",
    "UserSettingRepository",
]
