"""
SentenceBoard Backend - Page Routes
=====================================

What:  Top-level browser entry points outside /auth.
How:   `/` sends the visitor to the dashboard or the login form depending on
       the session; `/profile` renders the account page under the browser
       authentication policy.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse, RedirectResponse

from app.models.account import Account
from app.permissions import current_account_optional, require_account_browser
from app.routes.auth import DASHBOARD_PATH, LOGIN_PATH
from app.templating import templates

router = APIRouter(tags=["Pages"])


@router.get("/", include_in_schema=False)
async def index(
    account: Optional[Account] = Depends(current_account_optional),
) -> RedirectResponse:
    return RedirectResponse(url=DASHBOARD_PATH if account else LOGIN_PATH, status_code=303)


@router.get("/dashboard", include_in_schema=False)
async def dashboard_alias() -> RedirectResponse:
    return RedirectResponse(url=DASHBOARD_PATH, status_code=303)


@router.get("/profile", response_class=HTMLResponse, summary="Account details")
async def profile(
    request: Request,
    account: Account = Depends(require_account_browser),
):
    return templates.TemplateResponse(request, "profile.html", {"user": account})
