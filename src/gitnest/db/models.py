from __future__ import annotations

import enum
import uuid
from datetime import UTC, datetime

from sqlalchemy import (
    BigInteger,
    Boolean,
    DateTime,
    Enum,
    ForeignKey,
    String,
    Text,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    pass


def _utcnow() -> datetime:
    return datetime.now(UTC)


class UserType(enum.StrEnum):
    individual = "individual"
    organization = "organization"


class LoginType(enum.StrEnum):
    local = "local"
    oauth2 = "oauth2"
    ldap = "ldap"
    smtp = "smtp"
    pam = "pam"


class Visibility(enum.StrEnum):
    public = "public"
    limited = "limited"
    private = "private"


class User(Base):
    """An account row. Organizations are users with ``type == organization``."""

    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    type: Mapped[UserType] = mapped_column(Enum(UserType), default=UserType.individual)

    name: Mapped[str] = mapped_column(String(255))
    lower_name: Mapped[str] = mapped_column(String(255), unique=True, index=True)
    full_name: Mapped[str] = mapped_column(String(255), default="")
    # Organizations have no address; NULLs do not collide on the unique index.
    email: Mapped[str | None] = mapped_column(String(320), unique=True, index=True, nullable=True)
    keep_email_private: Mapped[bool] = mapped_column(Boolean, default=False)

    website: Mapped[str] = mapped_column(String(255), default="")
    location: Mapped[str] = mapped_column(String(255), default="")
    description: Mapped[str] = mapped_column(String(255), default="")
    keep_activity_private: Mapped[bool] = mapped_column(Boolean, default=False)
    visibility: Mapped[Visibility] = mapped_column(Enum(Visibility), default=Visibility.public)

    language: Mapped[str] = mapped_column(String(16), default="")
    theme: Mapped[str] = mapped_column(String(64), default="")

    avatar: Mapped[str] = mapped_column(String(2048), default="")
    avatar_email: Mapped[str] = mapped_column(String(320), default="")
    use_custom_avatar: Mapped[bool] = mapped_column(Boolean, default=False)

    login_type: Mapped[LoginType] = mapped_column(Enum(LoginType), default=LoginType.local)
    is_admin: Mapped[bool] = mapped_column(Boolean, default=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    password_hash: Mapped[str | None] = mapped_column(String(255), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, onupdate=_utcnow
    )

    repositories: Mapped[list[Repository]] = relationship(back_populates="owner")
    settings: Mapped[list[UserSetting]] = relationship(
        back_populates="user", cascade="all, delete-orphan"
    )

    @property
    def is_local(self) -> bool:
        return self.login_type == LoginType.local

    @property
    def is_organization(self) -> bool:
        return self.type == UserType.organization

    @property
    def display_name(self) -> str:
        return self.full_name.strip() or self.name


class OrgUser(Base):
    __tablename__ = "org_user"
    __table_args__ = (UniqueConstraint("org_id", "user_id", name="uq_org_user_org_user"),)

    id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    org_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("users.id"), index=True)
    user_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("users.id"), index=True)
    # Whether the membership is shown to people outside the organization.
    is_public: Mapped[bool] = mapped_column(Boolean, default=False)


class UserSetting(Base):
    __tablename__ = "user_setting"
    __table_args__ = (
        UniqueConstraint("user_id", "setting_key", name="uq_user_setting_user_key"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("users.id"), index=True)
    setting_key: Mapped[str] = mapped_column(String(255), index=True)
    setting_value: Mapped[str] = mapped_column(Text, default="")

    user: Mapped[User] = relationship(back_populates="settings")


class Repository(Base):
    __tablename__ = "repository"
    __table_args__ = (
        UniqueConstraint("owner_id", "lower_name", name="uq_repository_owner_lower_name"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    owner_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("users.id"), index=True)
    owner_name: Mapped[str] = mapped_column(String(255))

    name: Mapped[str] = mapped_column(String(255))
    lower_name: Mapped[str] = mapped_column(String(255), index=True)
    description: Mapped[str] = mapped_column(Text, default="")
    is_private: Mapped[bool] = mapped_column(Boolean, default=False)

    is_fork: Mapped[bool] = mapped_column(Boolean, default=False)
    fork_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("repository.id"), nullable=True, index=True
    )

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, onupdate=_utcnow
    )

    owner: Mapped[User] = relationship(back_populates="repositories")
    base_repo: Mapped[Repository | None] = relationship(remote_side=[id])

    @property
    def full_name(self) -> str:
        return f"{self.owner_name}/{self.name}"


class LFSMetaObject(Base):
    __tablename__ = "lfs_meta_object"
    __table_args__ = (
        UniqueConstraint("repository_id", "oid", name="uq_lfs_meta_object_repository_oid"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    repository_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("repository.id"), index=True)
    oid: Mapped[str] = mapped_column(String(64), index=True)
    size: Mapped[int] = mapped_column(BigInteger)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)
