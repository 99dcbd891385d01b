"""
SentenceBoard Backend - Account SQLAlchemy Model
==================================================

What:  ORM model for the `accounts` table: local and/or Google identities.
Who:   Written by AccountService (registration, federated sign-in); read by
       SessionService on every request that carries a session cookie.

Table Design:
    - UUID primary key, generated in Python
    - username / email are optional; email is stored lowercase
    - password_hash is present only for local accounts
    - google_id is present only for federated accounts (unique per provider)
    - Every row has at least one of password_hash / google_id (enforced by
      AccountService, the only writer)

Uniqueness:
    uq_accounts_username_lower and uq_accounts_email are partial unique
    indexes over rows that have a password hash. Two concurrent local
    registrations for "Alice" and "alice" cannot both commit. Federated
    rows are not covered, so a Google sign-in never fails on a name that a
    local account already uses.
"""

import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import DateTime, Index, String, Uuid, func, text
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base

DEFAULT_THUMBNAIL = "https://ui-avatars.com/api/?name=User"

MAX_USERNAME_LENGTH = 100
MAX_EMAIL_LENGTH = 255
MAX_THUMBNAIL_LENGTH = 500

_LOCAL_ONLY = text("password_hash IS NOT NULL")


class Account(Base):
    """A user identity, local and/or federated through Google."""

    __tablename__ = "accounts"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    username: Mapped[Optional[str]] = mapped_column(String(MAX_USERNAME_LENGTH), nullable=True)

    email: Mapped[Optional[str]] = mapped_column(String(MAX_EMAIL_LENGTH), nullable=True)

    # argon2 encoded hash (algorithm, parameters and salt included)
    password_hash: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    google_id: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True,
        unique=True,
    )

    thumbnail: Mapped[str] = mapped_column(
        String(MAX_THUMBNAIL_LENGTH),
        nullable=False,
        default=DEFAULT_THUMBNAIL,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=text("CURRENT_TIMESTAMP"),
    )

    __table_args__ = (
        Index(
            "uq_accounts_username_lower",
            func.lower(username),
            unique=True,
            postgresql_where=_LOCAL_ONLY,
            sqlite_where=_LOCAL_ONLY,
        ),
        Index(
            "uq_accounts_email",
            email,
            unique=True,
            postgresql_where=_LOCAL_ONLY,
            sqlite_where=_LOCAL_ONLY,
        ),
    )

    @property
    def is_local(self) -> bool:
        return self.password_hash is not None

    @property
    def display_name(self) -> str:
        """Name shown on pages and copied onto new sentences."""
        if self.username and self.username.strip():
            return self.username.strip()
        if self.email:
            return self.email.split("@", 1)[0][:MAX_USERNAME_LENGTH]
        return "User"

    def __repr__(self) -> str:
        return f"<Account(id={self.id}, username='{self.username}')>"
