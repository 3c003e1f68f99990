"""Initial schema

Revision ID: 0001
Revises:
Create Date: 2026-10-19

"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision = "0001"
down_revision = None
branch_labels = None
depends_on = None

_user_type = sa.Enum("individual", "organization", name="usertype")
_login_type = sa.Enum("local", "oauth2", "ldap", "smtp", "pam", name="logintype")
_visibility = sa.Enum("public", "limited", "private", name="visibility")


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True, nullable=False),
        sa.Column("type", _user_type, nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("lower_name", sa.String(length=255), nullable=False),
        sa.Column("full_name", sa.String(length=255), nullable=False),
        sa.Column("email", sa.String(length=320), nullable=True),
        sa.Column("keep_email_private", sa.Boolean(), nullable=False),
        sa.Column("website", sa.String(length=255), nullable=False),
        sa.Column("location", sa.String(length=255), nullable=False),
        sa.Column("description", sa.String(length=255), nullable=False),
        sa.Column("keep_activity_private", sa.Boolean(), nullable=False),
        sa.Column("visibility", _visibility, nullable=False),
        sa.Column("language", sa.String(length=16), nullable=False),
        sa.Column("theme", sa.String(length=64), nullable=False),
        sa.Column("avatar", sa.String(length=2048), nullable=False),
        sa.Column("avatar_email", sa.String(length=320), nullable=False),
        sa.Column("use_custom_avatar", sa.Boolean(), nullable=False),
        sa.Column("login_type", _login_type, nullable=False),
        sa.Column("is_admin", sa.Boolean(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("password_hash", sa.String(length=255), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_users_lower_name", "users", ["lower_name"], unique=True)
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "org_user",
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True, nullable=False),
        sa.Column("org_id", sa.Uuid(as_uuid=True), nullable=False),
        sa.Column("user_id", sa.Uuid(as_uuid=True), nullable=False),
        sa.Column("is_public", sa.Boolean(), nullable=False),
        sa.ForeignKeyConstraint(["org_id"], ["users.id"], name="fk_org_user_org"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], name="fk_org_user_user"),
        sa.UniqueConstraint("org_id", "user_id", name="uq_org_user_org_user"),
    )
    op.create_index("ix_org_user_org_id", "org_user", ["org_id"], unique=False)
    op.create_index("ix_org_user_user_id", "org_user", ["user_id"], unique=False)

    op.create_table(
        "user_setting",
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True, nullable=False),
        sa.Column("user_id", sa.Uuid(as_uuid=True), nullable=False),
        sa.Column("setting_key", sa.String(length=255), nullable=False),
        sa.Column("setting_value", sa.Text(), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], name="fk_user_setting_user"),
        sa.UniqueConstraint("user_id", "setting_key", name="uq_user_setting_user_key"),
    )
    op.create_index("ix_user_setting_user_id", "user_setting", ["user_id"], unique=False)
    op.create_index("ix_user_setting_setting_key", "user_setting", ["setting_key"], unique=False)

    op.create_table(
        "repository",
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True, nullable=False),
        sa.Column("owner_id", sa.Uuid(as_uuid=True), nullable=False),
        sa.Column("owner_name", sa.String(length=255), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("lower_name", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("is_private", sa.Boolean(), nullable=False),
        sa.Column("is_fork", sa.Boolean(), nullable=False),
        sa.Column("fork_id", sa.Uuid(as_uuid=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["owner_id"], ["users.id"], name="fk_repository_owner"),
        sa.ForeignKeyConstraint(["fork_id"], ["repository.id"], name="fk_repository_fork"),
        sa.UniqueConstraint("owner_id", "lower_name", name="uq_repository_owner_lower_name"),
    )
    op.create_index("ix_repository_owner_id", "repository", ["owner_id"], unique=False)
    op.create_index("ix_repository_lower_name", "repository", ["lower_name"], unique=False)
    op.create_index("ix_repository_fork_id", "repository", ["fork_id"], unique=False)

    op.create_table(
        "lfs_meta_object",
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True, nullable=False),
        sa.Column("repository_id", sa.Uuid(as_uuid=True), nullable=False),
        sa.Column("oid", sa.String(length=64), nullable=False),
        sa.Column("size", sa.BigInteger(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(
            ["repository_id"], ["repository.id"], name="fk_lfs_meta_object_repository"
        ),
        sa.UniqueConstraint("repository_id", "oid", name="uq_lfs_meta_object_repository_oid"),
    )
    op.create_index(
        "ix_lfs_meta_object_repository_id", "lfs_meta_object", ["repository_id"], unique=False
    )
    op.create_index("ix_lfs_meta_object_oid", "lfs_meta_object", ["oid"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_lfs_meta_object_oid", table_name="lfs_meta_object")
    op.drop_index("ix_lfs_meta_object_repository_id", table_name="lfs_meta_object")
    op.drop_table("lfs_meta_object")

    op.drop_index("ix_repository_fork_id", table_name="repository")
    op.drop_index("ix_repository_lower_name", table_name="repository")
    op.drop_index("ix_repository_owner_id", table_name="repository")
    op.drop_table("repository")

    op.drop_index("ix_user_setting_setting_key", table_name="user_setting")
    op.drop_index("ix_user_setting_user_id", table_name="user_setting")
    op.drop_table("user_setting")

    op.drop_index("ix_org_user_user_id", table_name="org_user")
    op.drop_index("ix_org_user_org_id", table_name="org_user")
    op.drop_table("org_user")

    op.drop_index("ix_users_email", table_name="users")
    op.drop_index("ix_users_lower_name", table_name="users")
    op.drop_table("users")

    _visibility.drop(op.get_bind(), checkfirst=True)
    _login_type.drop(op.get_bind(), checkfirst=True)
    _user_type.drop(op.get_bind(), checkfirst=True)
