"""
SentenceBoard Backend - Sentence SQLAlchemy Model
===================================================

What:  ORM model representing the `sentences` table: short user-authored posts.
Who:   Used by SentenceService for CRUD and by Alembic for schema management.

Table Design:
    - UUID primary key
    - text: trimmed, 1..500 characters (checked by SentenceService; the
      column length is the hard cap)
    - author_id: the account that created the row. Ownership checks compare
      against this immutable id.
    - author_name: copy of the author's username at creation time. Used for
      display, filtering and search; renaming an account does not rewrite it.
    - category: one of CATEGORIES, defaults to "other"
    - created_at: UTC, immutable

Lifecycle:
    Created by an authenticated account; text/category edited and rows
    deleted only by that same account. Deletes are permanent.

Query Patterns:
    - Newest first:  ORDER BY created_at DESC        → idx_sentences_created_at
    - By author:     WHERE author_name = :name        → idx_sentences_author_name
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Index, String, Uuid, desc
from sqlalchemy import text as sql_text
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base

CATEGORIES = ("thoughts", "quotes", "stories", "jokes", "questions", "facts", "other")
DEFAULT_CATEGORY = "other"
MAX_TEXT_LENGTH = 500


class Sentence(Base):
    """A short text post with a category and a denormalized author name."""

    __tablename__ = "sentences"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    text: Mapped[str] = mapped_column(String(MAX_TEXT_LENGTH), nullable=False)

    author_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("accounts.id", ondelete="CASCADE"),
        nullable=False,
    )

    author_name: Mapped[str] = mapped_column(String(100), nullable=False)

    category: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=DEFAULT_CATEGORY,
        server_default=sql_text(f"'{DEFAULT_CATEGORY}'"),
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=sql_text("CURRENT_TIMESTAMP"),
    )

    __table_args__ = (
        CheckConstraint(
            "category IN (" + ", ".join(f"'{c}'" for c in CATEGORIES) + ")",
            name="ck_sentences_category",
        ),
        Index("idx_sentences_created_at", desc(created_at)),
        Index("idx_sentences_author_name", author_name),
    )

    def __repr__(self) -> str:
        return (
            f"<Sentence(id={self.id}, author_name='{self.author_name}', "
            f"category='{self.category}')>"
        )
