from __future__ import annotations

from typing import Literal

from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

StorageType = Literal["local", "minio"]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="GITNEST_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
    )

    database_url: str = "sqlite+aiosqlite:///./gitnest.db"

    # For local development
    auto_create_db: bool = False

    # Session cookie auth. In production, override via env.
    session_secret: SecretStr = SecretStr("dev-insecure-change-me")
    session_cookie_name: str = "gitnest_session"

    log_level: str = "INFO"
    log_json: bool = False
    log_http_requests: bool = True

    # Prefix for every redirect location when served below a sub path.
    app_sub_url: str = ""

    # Bare repositories live at <repo_root>/<owner>/<repo>.git
    repo_root: str = "./data/repositories"

    lfs_storage_type: StorageType = "local"
    lfs_content_path: str = "./data/lfs"
    lfs_minio_base_path: str = "lfs/"
    # Redirect LFS downloads to a signed storage URL when the backend supports it.
    lfs_serve_direct: bool = False

    avatar_storage_type: StorageType = "local"
    avatar_upload_path: str = "./data/avatars"
    avatar_minio_base_path: str = "avatars/"
    avatar_max_file_size: int = 1048576
    disable_gravatar: bool = True
    gravatar_source: str = "https://secure.gravatar.com/avatar/"

    # S3 compatible object storage (optional)
    minio_endpoint: str = "localhost:9000"
    minio_access_key_id: str = ""
    minio_secret_access_key: SecretStr = SecretStr("")
    minio_bucket: str = "gitnest"
    minio_location: str = "us-east-1"
    minio_use_ssl: bool = False
    minio_url_expiry_seconds: int = 300

    last_commit_cache_enabled: bool = True
    # Only cache for refs with at least this many commits.
    last_commit_cache_commits_count: int = 1000
    last_commit_cache_ttl_seconds: int = 8760 * 3600

    admin_user_paging_num: int = 50

    allow_adoption_of_unadopted_repositories: bool = False
    allow_deletion_of_unadopted_repositories: bool = False

    langs: list[str] = ["en-US", "de-DE", "fr-FR", "zh-CN"]
    default_language: str = "en-US"
    themes: list[str] = ["auto", "light", "arc-green"]
    default_theme: str = "auto"

    allowed_user_visibility_modes: list[str] = ["public", "limited", "private"]
    default_user_visibility: str = "public"

    # Render SVG blobs inline (sandboxed) instead of as attachments.
    enable_svg: bool = True


def get_settings() -> Settings:
    return Settings()
