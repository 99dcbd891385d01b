"""
SentenceBoard Backend - Authorization Gate
============================================

What:  Per-request identity resolution and the ownership rule.
How:   FastAPI dependencies. The resolved account (or None) is passed into
       each handler as an explicit argument; nothing is read from ambient
       per-request state.

Two authentication policies, chosen by the route:
    require_account_api      → 401 JSON        (/api/*)
    require_account_browser  → 303 to /auth/login with a message (pages)

Ownership (mutating sentence operations):
    ensure_owner(sentence, account) compares the sentence's author_id with
    the caller's account id. Callers load the sentence first, so a missing
    id is reported as 404 before ownership is ever checked.
"""

from typing import Optional

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.database import get_db_session
from app.exceptions import ForbiddenError, LoginRequiredError, UnauthenticatedError
from app.models.account import Account
from app.models.sentence import Sentence
from app.services.session_service import session_service


async def current_account_optional(
    request: Request,
    db: AsyncSession = Depends(get_db_session),
) -> Optional[Account]:
    cookie_value = request.cookies.get(settings.session_cookie_name)
    return await session_service.resolve_session(db, cookie_value)


async def require_account_api(
    account: Optional[Account] = Depends(current_account_optional),
) -> Account:
    if account is None:
        raise UnauthenticatedError()
    return account


async def require_account_browser(
    request: Request,
    account: Optional[Account] = Depends(current_account_optional),
) -> Account:
    if account is None:
        raise LoginRequiredError(next_path=request.url.path)
    return account


def ensure_owner(sentence: Sentence, account: Account, action: str = "modify") -> None:
    if sentence.author_id != account.id:
        raise ForbiddenError(
            message=f"Forbidden: You can only {action} your own messages.",
            context={"sentence_id": str(sentence.id)},
        )
