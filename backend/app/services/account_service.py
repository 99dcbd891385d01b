"""
SentenceBoard Backend - Account Service (Identity Resolver)
=============================================================

What:  Registration, local credential verification, and Google identity
       federation.
How:   Stateless service; the AsyncSession is passed into every call so the
       request's transaction boundary (get_db_session) stays in charge.
Who:   Called by the /auth routes.

Operations:
    register_local(username, email, password)   → Account | RegistrationError
    resolve_local(login, password)              → Account | AuthenticationError
    resolve_or_create_federated(profile)        → Account
    get_account(account_id)                     → Account | None

Failure reporting:
    A wrong password and an unknown login raise the same
    INVALID_CREDENTIALS reason and message, so the login form cannot be
    used to probe which usernames exist.
"""

import logging
from typing import Optional
from urllib.parse import quote
from uuid import UUID

from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import (
    AuthenticationError,
    AuthFailureReason,
    ConflictError,
    FieldTooLongError,
    RegistrationError,
    RegistrationFailureReason,
)
from app.models.account import (
    DEFAULT_THUMBNAIL,
    MAX_EMAIL_LENGTH,
    MAX_THUMBNAIL_LENGTH,
    MAX_USERNAME_LENGTH,
    Account,
)
from app.services.google_oauth import FederatedProfile
from app.services.passwords import hash_password_async, verify_password_async

logger = logging.getLogger(__name__)


def placeholder_thumbnail(username: str) -> str:
    url = (
        f"https://ui-avatars.com/api/?name={quote(username)}"
        "&background=38bdf8&color=0f172a&bold=true"
    )
    # Percent-encoding can push a long non-ASCII name past the column width
    if len(url) > MAX_THUMBNAIL_LENGTH:
        return DEFAULT_THUMBNAIL
    return url


class AccountService:
    """Business logic for accounts and credential checks."""

    # ── Lookups ───────────────────────────────────────────────────────────

    async def get_account(self, db: AsyncSession, account_id: UUID) -> Optional[Account]:
        result = await db.execute(select(Account).where(Account.id == account_id))
        return result.scalar_one_or_none()

    async def _find_by_username(self, db: AsyncSession, username: str) -> Optional[Account]:
        result = await db.execute(
            select(Account)
            .where(func.lower(Account.username) == username.lower())
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def _find_by_email(self, db: AsyncSession, email: str) -> Optional[Account]:
        result = await db.execute(
            select(Account).where(Account.email == email.lower()).limit(1)
        )
        return result.scalar_one_or_none()

    async def _find_by_google_id(self, db: AsyncSession, google_id: str) -> Optional[Account]:
        result = await db.execute(select(Account).where(Account.google_id == google_id))
        return result.scalar_one_or_none()

    # ── Registration ──────────────────────────────────────────────────────

    async def register_local(
        self,
        db: AsyncSession,
        username: Optional[str],
        email: Optional[str],
        password: Optional[str],
    ) -> Account:
        """
        Create a local account.

        Order of checks:
            1. All three fields present (after trimming username/email)
            2. Username and email fit their columns
            3. Username not taken by any account, case-insensitively
            4. Email not taken by any account (compared lowercase)

        The pre-checks give the user a precise message. The store's unique
        indexes still guard the insert; when a concurrent registration wins
        the race, the IntegrityError is re-checked and reported as the
        matching ConflictError instead of producing a duplicate.

        Raises:
            RegistrationError: MISSING_FIELDS
            FieldTooLongError: FIELD_TOO_LONG
            ConflictError: USERNAME_TAKEN or EMAIL_TAKEN
        """
        username = (username or "").strip()
        email = (email or "").strip()
        if not username or not email or not password:
            raise RegistrationError(
                reason=RegistrationFailureReason.MISSING_FIELDS,
                message="All fields are required.",
            )

        if len(username) > MAX_USERNAME_LENGTH:
            raise FieldTooLongError("username", MAX_USERNAME_LENGTH)
        if len(email) > MAX_EMAIL_LENGTH:
            raise FieldTooLongError("email", MAX_EMAIL_LENGTH)

        if await self._find_by_username(db, username) is not None:
            raise ConflictError.username_taken(username)

        if await self._find_by_email(db, email) is not None:
            raise ConflictError.email_taken(email)

        account = Account(
            username=username,
            email=email.lower(),
            password_hash=await hash_password_async(password),
            thumbnail=placeholder_thumbnail(username),
        )
        db.add(account)
        try:
            await db.flush()
        except IntegrityError:
            await db.rollback()
            logger.warning("Concurrent registration collided for username=%s", username)
            if await self._find_by_username(db, username) is not None:
                raise ConflictError.username_taken(username)
            raise ConflictError.email_taken(email)

        logger.info("Registered local account %s (%s)", account.id, username)
        return account

    # ── Local login ───────────────────────────────────────────────────────

    async def resolve_local(
        self,
        db: AsyncSession,
        login: Optional[str],
        password: Optional[str],
    ) -> Account:
        """
        Verify a username-or-email plus password.

        The login input matches an account whose username equals it
        case-insensitively, or whose email equals it lowercased. Anything
        other than exactly one match is treated as a failure.

        Raises:
            AuthenticationError: MISSING_CREDENTIALS, INVALID_CREDENTIALS,
                or OAUTH_ONLY_ACCOUNT
        """
        login = (login or "").strip()
        if not login or not password:
            raise AuthenticationError(AuthFailureReason.MISSING_CREDENTIALS)

        result = await db.execute(
            select(Account)
            .where(
                or_(
                    func.lower(Account.username) == login.lower(),
                    Account.email == login.lower(),
                )
            )
            .limit(2)
        )
        matches = list(result.scalars().all())

        if len(matches) != 1:
            if matches:
                logger.warning("Ambiguous login input matched %d accounts", len(matches))
            raise AuthenticationError(AuthFailureReason.INVALID_CREDENTIALS)

        account = matches[0]
        if not account.password_hash:
            raise AuthenticationError(AuthFailureReason.OAUTH_ONLY_ACCOUNT)

        if not await verify_password_async(account.password_hash, password):
            raise AuthenticationError(AuthFailureReason.INVALID_CREDENTIALS)

        return account

    # ── Federated login ───────────────────────────────────────────────────

    async def resolve_or_create_federated(
        self,
        db: AsyncSession,
        profile: FederatedProfile,
    ) -> Account:
        """
        Find the account linked to a Google id, creating it on first sign-in.

        New federated accounts take the provider's display name (cut to the
        column width), primary email (lowercased, may be None) and photo.
        Values that do not fit are dropped rather than failing the sign-in.
        No collision check is made against local usernames or emails.

        Two first sign-ins for the same Google id can race; the unique
        google_id index rejects the loser, which then returns the winner's
        account.
        """
        account = await self._find_by_google_id(db, profile.provider_id)
        if account is not None:
            return account

        email = profile.email.lower() if profile.email else None
        if email and len(email) > MAX_EMAIL_LENGTH:
            email = None
        thumbnail = profile.photo_url
        if not thumbnail or len(thumbnail) > MAX_THUMBNAIL_LENGTH:
            thumbnail = DEFAULT_THUMBNAIL

        account = Account(
            google_id=profile.provider_id,
            username=profile.display_name[:MAX_USERNAME_LENGTH] if profile.display_name else None,
            email=email,
            thumbnail=thumbnail,
        )
        db.add(account)
        try:
            await db.flush()
        except IntegrityError:
            await db.rollback()
            logger.warning("Concurrent first sign-in collided for a Google account")
            existing = await self._find_by_google_id(db, profile.provider_id)
            if existing is None:
                raise
            return existing

        logger.info("Created federated account %s for Google user", account.id)
        return account


# ── Singleton Instance ────────────────────────────────────────────────────
account_service = AccountService()
