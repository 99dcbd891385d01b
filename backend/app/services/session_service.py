"""
SentenceBoard Backend - Session Service (Session Manager)
===========================================================

What:  Issues, resolves and destroys login sessions.
How:   A random token is stored server-side in the `sessions` table with an
       absolute expiry (24 hours by default). The browser receives the token
       signed with itsdangerous, so a forged or truncated cookie is rejected
       before any database lookup, and a deleted row (logout) invalidates a
       cookie whose signature is still good.

Operations:
    create_session(db, account)          → cookie value
    resolve_session(db, cookie_value)    → Account | None
    destroy_session(db, cookie_value)    → None (idempotent)
    set_cookie(response, value) / clear_cookie(response)

The OAuth `state` round-trip cookie uses the same signer with its own salt.
"""

import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional

from itsdangerous import BadData, URLSafeTimedSerializer
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.responses import Response

from app.config import settings
from app.models.account import Account
from app.models.session import LoginSession

logger = logging.getLogger(__name__)

SESSION_SALT = "sentenceboard.session.v1"
OAUTH_STATE_SALT = "sentenceboard.oauth-state.v1"
OAUTH_STATE_COOKIE = "sentenceboard_oauth_state"


class SessionService:

    def __init__(self, secret: Optional[str] = None, max_age: Optional[int] = None):
        self.secret = secret or settings.session_secret
        self.max_age = max_age or settings.session_max_age
        self.cookie_name = settings.session_cookie_name

    def _signer(self, salt: str = SESSION_SALT) -> URLSafeTimedSerializer:
        return URLSafeTimedSerializer(secret_key=self.secret, salt=salt)

    def _unsign(self, cookie_value: Optional[str]) -> Optional[str]:
        if not cookie_value:
            return None
        try:
            token = self._signer().loads(cookie_value, max_age=self.max_age)
        except BadData:
            return None
        return token if isinstance(token, str) and token else None

    # ── Lifecycle ─────────────────────────────────────────────────────────

    async def create_session(self, db: AsyncSession, account: Account) -> str:
        """Bind a fresh token to `account` and return the signed cookie value."""
        now = datetime.now(timezone.utc)
        token = secrets.token_urlsafe(32)
        db.add(
            LoginSession(
                token=token,
                account_id=account.id,
                created_at=now,
                expires_at=now + timedelta(seconds=self.max_age),
            )
        )
        await db.flush()
        logger.info("Session created for account %s", account.id)
        return self._signer().dumps(token)

    async def resolve_session(
        self, db: AsyncSession, cookie_value: Optional[str]
    ) -> Optional[Account]:
        """
        Load the account behind a session cookie.

        Returns None when the cookie is missing, tampered with, older than
        max age, unknown to the store, expired, or bound to an account that
        no longer exists.
        """
        token = self._unsign(cookie_value)
        if token is None:
            return None

        result = await db.execute(
            select(Account)
            .join(LoginSession, LoginSession.account_id == Account.id)
            .where(
                LoginSession.token == token,
                LoginSession.expires_at > datetime.now(timezone.utc),
            )
        )
        return result.scalar_one_or_none()

    async def destroy_session(self, db: AsyncSession, cookie_value: Optional[str]) -> None:
        """Invalidate the session. Always succeeds, even for bad cookies."""
        token = self._unsign(cookie_value)
        if token is None:
            return
        await db.execute(delete(LoginSession).where(LoginSession.token == token))
        logger.info("Session destroyed")

    async def purge_expired(self, db: AsyncSession) -> int:
        result = await db.execute(
            delete(LoginSession).where(LoginSession.expires_at <= datetime.now(timezone.utc))
        )
        purged = result.rowcount or 0
        if purged:
            logger.info("Purged %d expired sessions", purged)
        return purged

    # ── Cookies ───────────────────────────────────────────────────────────

    def set_cookie(self, response: Response, cookie_value: str) -> None:
        response.set_cookie(
            key=self.cookie_name,
            value=cookie_value,
            max_age=self.max_age,
            httponly=True,
            samesite="lax",
            secure=settings.cookie_secure,
        )

    def clear_cookie(self, response: Response) -> None:
        response.delete_cookie(
            key=self.cookie_name,
            httponly=True,
            samesite="lax",
            secure=settings.cookie_secure,
        )

    # ── OAuth state ───────────────────────────────────────────────────────

    def issue_oauth_state(self, response: Response) -> str:
        """Create a random state value and pin it to the browser in a signed cookie."""
        state = secrets.token_urlsafe(24)
        response.set_cookie(
            key=OAUTH_STATE_COOKIE,
            value=self._signer(OAUTH_STATE_SALT).dumps(state),
            max_age=settings.oauth_state_max_age,
            httponly=True,
            samesite="lax",
            secure=settings.cookie_secure,
        )
        return state

    def check_oauth_state(self, cookie_value: Optional[str], state: Optional[str]) -> bool:
        if not cookie_value or not state:
            return False
        try:
            expected = self._signer(OAUTH_STATE_SALT).loads(
                cookie_value, max_age=settings.oauth_state_max_age
            )
        except BadData:
            return False
        return isinstance(expected, str) and secrets.compare_digest(expected, state)


# ── Singleton Instance ────────────────────────────────────────────────────
session_service = SessionService()
