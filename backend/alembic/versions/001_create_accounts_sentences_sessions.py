"""Create accounts, sessions and sentences tables

Revision ID: 001
Revises: None
Create Date: 2026-10-18 00:00:00.000000+00:00

What:  Initial schema: accounts (local and Google identities), server-side
       login sessions, and sentences.
How:   Partial unique indexes keep local usernames (case-insensitive) and
       emails unique without constraining Google-only accounts.

Rollback: downgrade() drops all three tables (all data lost).
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

CATEGORIES = ("thoughts", "quotes", "stories", "jokes", "questions", "facts", "other")
LOCAL_ONLY = sa.text("password_hash IS NOT NULL")


def upgrade() -> None:
    op.create_table(
        "accounts",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("username", sa.String(100), nullable=True),
        sa.Column("email", sa.String(255), nullable=True, comment="Stored lowercase"),
        sa.Column(
            "password_hash",
            sa.String(255),
            nullable=True,
            comment="argon2 hash; NULL for Google-only accounts",
        ),
        sa.Column("google_id", sa.String(255), nullable=True),
        sa.Column(
            "thumbnail",
            sa.String(500),
            nullable=False,
            server_default=sa.text("'https://ui-avatars.com/api/?name=User'"),
        ),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id", name="pk_accounts"),
        sa.UniqueConstraint("google_id", name="uq_accounts_google_id"),
    )
    op.create_index(
        "uq_accounts_username_lower",
        "accounts",
        [sa.text("lower(username)")],
        unique=True,
        postgresql_where=LOCAL_ONLY,
        sqlite_where=LOCAL_ONLY,
    )
    op.create_index(
        "uq_accounts_email",
        "accounts",
        ["email"],
        unique=True,
        postgresql_where=LOCAL_ONLY,
        sqlite_where=LOCAL_ONLY,
    )

    op.create_table(
        "sessions",
        sa.Column("token", sa.String(64), nullable=False),
        sa.Column("account_id", sa.Uuid(), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("token", name="pk_sessions"),
        sa.ForeignKeyConstraint(
            ["account_id"], ["accounts.id"], name="fk_sessions_account_id", ondelete="CASCADE"
        ),
    )
    op.create_index("idx_sessions_expires_at", "sessions", ["expires_at"])
    op.create_index("idx_sessions_account_id", "sessions", ["account_id"])

    op.create_table(
        "sentences",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("text", sa.String(500), nullable=False),
        sa.Column("author_id", sa.Uuid(), nullable=False),
        sa.Column(
            "author_name",
            sa.String(100),
            nullable=False,
            comment="Author's display name when the sentence was created",
        ),
        sa.Column(
            "category",
            sa.String(20),
            nullable=False,
            server_default=sa.text("'other'"),
        ),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id", name="pk_sentences"),
        sa.ForeignKeyConstraint(
            ["author_id"], ["accounts.id"], name="fk_sentences_author_id", ondelete="CASCADE"
        ),
        sa.CheckConstraint(
            "category IN (" + ", ".join(f"'{c}'" for c in CATEGORIES) + ")",
            name="ck_sentences_category",
        ),
    )
    op.create_index(
        "idx_sentences_created_at",
        "sentences",
        [sa.text("created_at DESC")],
    )
    op.create_index("idx_sentences_author_name", "sentences", ["author_name"])


def downgrade() -> None:
    op.drop_index("idx_sentences_author_name", table_name="sentences")
    op.drop_index("idx_sentences_created_at", table_name="sentences")
    op.drop_table("sentences")
    op.drop_index("idx_sessions_account_id", table_name="sessions")
    op.drop_index("idx_sessions_expires_at", table_name="sessions")
    op.drop_table("sessions")
    op.drop_index("uq_accounts_email", table_name="accounts")
    op.drop_index("uq_accounts_username_lower", table_name="accounts")
    op.drop_table("accounts")
