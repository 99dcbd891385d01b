"""
SentenceBoard Backend - Sentence Service (Resource Store)
===========================================================

What:  CRUD, filtered listing and author lookups for sentences.
How:   Stateless service; receives the request's AsyncSession for each call.
       Store failures are wrapped in DatabaseError (generic 500 for the
       client, details in the server log). Application exceptions propagate
       unchanged.
Who:   Called by the /api/sentences route handlers.

Ownership:
    Authorship is bound at creation to the authenticated account, whatever
    the request body says. Mutations look the row up first (NotFound), then
    validate the new text, then check ownership (Forbidden), so a caller
    probing a missing id always sees 404.

Listing:
    category / author filters are equality matches ("all" or blank = no
    filter). A non-blank search is a case-insensitive substring match on
    text OR author name, AND-ed with the filters.

    sort_by:  newest (default) → created_at DESC
              oldest           → created_at ASC
              name             → author_name ASC, created_at DESC
"""

import logging
from typing import List, Optional
from uuid import UUID

from sqlalchemy import asc, desc, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import DatabaseError, NotFoundError, ValidationError
from app.models.account import Account
from app.models.sentence import CATEGORIES, DEFAULT_CATEGORY, MAX_TEXT_LENGTH, Sentence
from app.permissions import ensure_owner

logger = logging.getLogger(__name__)

def parse_sentence_id(raw: str) -> UUID:
    try:
        return UUID(str(raw))
    except ValueError:
        raise ValidationError(
            message="Invalid message ID format.",
            field="id",
            reason="invalid_id",
        )


def normalize_category(category: Optional[str]) -> str:
    """Unknown or missing categories fall back to "other"."""
    value = (category or "").strip().lower()
    return value if value in CATEGORIES else DEFAULT_CATEGORY


def clean_text(text: Optional[str]) -> str:
    """Trim and enforce 1..500 characters."""
    value = (text or "").strip()
    if not value:
        raise ValidationError(message="Message cannot be empty", field="text", reason="empty_text")
    if len(value) > MAX_TEXT_LENGTH:
        raise ValidationError(
            message=f"Message cannot be longer than {MAX_TEXT_LENGTH} characters",
            field="text",
            reason="text_too_long",
            context={"max_length": MAX_TEXT_LENGTH, "length": len(value)},
        )
    return value


def _like_pattern(term: str) -> str:
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


def _is_filter(value: Optional[str]) -> bool:
    return bool(value and value.strip() and value.strip() != "all")


class SentenceService:
    """
    Business logic layer for sentence operations.

    Error Handling Strategy:
        SentenceBoardError subclasses (validation, not found, forbidden)
        propagate as-is. Anything else raised while talking to the store is
        logged and re-raised as DatabaseError.
    """

    async def list_sentences(
        self,
        db: AsyncSession,
        category: Optional[str] = None,
        author: Optional[str] = None,
        search: Optional[str] = None,
        sort_by: Optional[str] = None,
    ) -> List[Sentence]:
        query = select(Sentence)

        if _is_filter(category):
            query = query.where(Sentence.category == category.strip())
        if _is_filter(author):
            query = query.where(Sentence.author_name == author.strip())

        if search and search.strip():
            pattern = _like_pattern(search.strip())
            query = query.where(
                or_(
                    Sentence.text.ilike(pattern, escape="\\"),
                    Sentence.author_name.ilike(pattern, escape="\\"),
                )
            )

        if sort_by == "oldest":
            query = query.order_by(asc(Sentence.created_at))
        elif sort_by == "name":
            query = query.order_by(asc(Sentence.author_name), desc(Sentence.created_at))
        else:
            query = query.order_by(desc(Sentence.created_at))

        try:
            result = await db.execute(query)
            return list(result.scalars().all())
        except Exception as e:
            logger.error("Database error listing sentences: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Failed to fetch messages",
                context={"error_type": type(e).__name__},
            )

    async def get_sentence(self, db: AsyncSession, sentence_id: UUID) -> Sentence:
        try:
            result = await db.execute(select(Sentence).where(Sentence.id == sentence_id))
            sentence = result.scalar_one_or_none()
        except Exception as e:
            logger.error("Database error fetching sentence %s: %s", sentence_id, str(e))
            raise DatabaseError(
                message="Failed to fetch message",
                context={"sentence_id": str(sentence_id)},
            )

        if sentence is None:
            raise NotFoundError(
                resource="message",
                resource_id=str(sentence_id),
                message="Message not found",
            )
        return sentence

    async def create_sentence(
        self,
        db: AsyncSession,
        text: Optional[str],
        category: Optional[str],
        author: Account,
    ) -> Sentence:
        sentence = Sentence(
            text=clean_text(text),
            category=normalize_category(category),
            author_id=author.id,
            author_name=author.display_name,
        )
        try:
            db.add(sentence)
            await db.flush()
        except Exception as e:
            logger.error("Database error saving sentence: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Failed to save message",
                context={"error_type": type(e).__name__},
            )

        logger.info("Sentence %s created by %s", sentence.id, author.id)
        return sentence

    async def update_sentence(
        self,
        db: AsyncSession,
        sentence_id: UUID,
        text: Optional[str],
        category: Optional[str],
        account: Account,
    ) -> Sentence:
        """
        Replace text (and category, when supplied) in place.

        id, created_at and the author fields are preserved.

        Raises:
            NotFoundError → ValidationError → ForbiddenError, in that order
        """
        sentence = await self.get_sentence(db, sentence_id)
        new_text = clean_text(text)
        ensure_owner(sentence, account, action="edit")

        sentence.text = new_text
        if category and category.strip():
            sentence.category = normalize_category(category)

        try:
            await db.flush()
        except Exception as e:
            logger.error("Database error updating sentence %s: %s", sentence_id, str(e))
            raise DatabaseError(
                message="Failed to update message",
                context={"sentence_id": str(sentence_id)},
            )

        logger.info("Sentence %s updated by %s", sentence.id, account.id)
        return sentence

    async def delete_sentence(
        self,
        db: AsyncSession,
        sentence_id: UUID,
        account: Account,
    ) -> None:
        """Permanently remove a sentence owned by `account`."""
        sentence = await self.get_sentence(db, sentence_id)
        ensure_owner(sentence, account, action="delete")

        try:
            await db.delete(sentence)
            await db.flush()
        except Exception as e:
            logger.error("Database error deleting sentence %s: %s", sentence_id, str(e))
            raise DatabaseError(
                message="Failed to delete message",
                context={"sentence_id": str(sentence_id)},
            )

        logger.info("Sentence %s deleted by %s", sentence_id, account.id)

    async def list_distinct_authors(self, db: AsyncSession) -> List[str]:
        try:
            result = await db.execute(
                select(Sentence.author_name).distinct()
            )
            return sorted(result.scalars().all())
        except Exception as e:
            logger.error("Database error listing authors: %s", str(e))
            raise DatabaseError(message="Failed to fetch users")

    async def list_by_author(self, db: AsyncSession, name: str) -> List[Sentence]:
        """
        All sentences with the given author name.

        An author with no sentences and an unknown author are the same
        condition here: both raise NotFoundError.
        """
        try:
            result = await db.execute(
                select(Sentence)
                .where(Sentence.author_name == name)
                .order_by(desc(Sentence.created_at))
            )
            sentences = list(result.scalars().all())
        except Exception as e:
            logger.error("Database error listing sentences for %s: %s", name, str(e))
            raise DatabaseError(message="Failed to fetch users")

        if not sentences:
            raise NotFoundError(resource="user", message=f"User not found: {name}")
        return sentences


# ── Singleton Instance ────────────────────────────────────────────────────
sentence_service = SentenceService()
