"""
SentenceBoard Backend - Session SQLAlchemy Model
==================================================

What:  Server-side session rows binding an opaque token to one account.
How:   The browser holds the token (signed) in a cookie; SessionService
       looks the row up on every request. Logging out deletes the row, so a
       copied cookie stops working immediately even though its signature is
       still valid.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, ForeignKey, Index, String, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base


class LoginSession(Base):
    __tablename__ = "sessions"

    # secrets.token_urlsafe(32) output
    token: Mapped[str] = mapped_column(String(64), primary_key=True)

    account_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("accounts.id", ondelete="CASCADE"),
        nullable=False,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=text("CURRENT_TIMESTAMP"),
    )

    # Absolute expiry: created_at + settings.session_max_age
    expires_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
    )

    __table_args__ = (
        Index("idx_sessions_expires_at", expires_at),
        Index("idx_sessions_account_id", account_id),
    )

    def __repr__(self) -> str:
        return f"<LoginSession(account_id={self.account_id}, expires_at='{self.expires_at}')>"
