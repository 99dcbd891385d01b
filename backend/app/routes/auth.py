"""
SentenceBoard Backend - Authentication Route Handlers
=======================================================

What:  Browser-facing registration, login (local and Google), dashboard
       and logout under /auth.
How:   HTML forms post here; every outcome is a 303 redirect carrying an
       `error` or `message` query parameter that the next page displays.
       Login failures of every kind end on the login form; the exact
       AuthFailureReason goes to the server log only.

Routes:
    GET/POST /auth/register
    GET/POST /auth/login
    GET      /auth/google              → Google consent screen
    GET      /auth/google/redirect     → callback, session, dashboard
    GET      /auth/dashboard           (session required, browser policy)
    GET      /auth/logout
"""

import logging
from typing import Optional
from urllib.parse import urlencode

from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.database import get_db_session
from app.exceptions import AuthenticationError, OAuthError, RegistrationError
from app.models.account import Account
from app.permissions import current_account_optional, require_account_browser
from app.services.account_service import account_service
from app.services.google_oauth import google_oauth_client
from app.services.session_service import OAUTH_STATE_COOKIE, session_service
from app.templating import templates

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Auth"])

LOGIN_PATH = "/auth/login"
REGISTER_PATH = "/auth/register"
DASHBOARD_PATH = "/auth/dashboard"


def redirect_to(path: str, **params: Optional[str]) -> RedirectResponse:
    query = urlencode({k: v for k, v in params.items() if v})
    return RedirectResponse(url=f"{path}?{query}" if query else path, status_code=303)


def _safe_next(next_path: Optional[str]) -> str:
    """Only same-site absolute paths are followed after login."""
    if next_path and next_path.startswith("/") and not next_path.startswith("//"):
        return next_path
    return DASHBOARD_PATH


def _google_callback_url(request: Request) -> str:
    return settings.google_redirect_uri or str(request.url_for("google_callback"))


async def _start_session(
    db: AsyncSession,
    request: Request,
    account: Account,
    target: str,
) -> RedirectResponse:
    # Drop whatever session the browser carried before this login
    await session_service.destroy_session(db, request.cookies.get(settings.session_cookie_name))
    cookie_value = await session_service.create_session(db, account)
    response = RedirectResponse(url=target, status_code=303)
    session_service.set_cookie(response, cookie_value)
    return response


# ── Registration ──────────────────────────────────────────────────────────

@router.get("/register", response_class=HTMLResponse, summary="Registration form")
async def register_form(
    request: Request,
    error: Optional[str] = None,
    account: Optional[Account] = Depends(current_account_optional),
):
    return templates.TemplateResponse(
        request,
        "register.html",
        {"error_message": error, "user": account},
    )


@router.post("/register", summary="Create a local account")
async def register(
    username: str = Form(default=""),
    email: str = Form(default=""),
    password: str = Form(default=""),
    db: AsyncSession = Depends(get_db_session),
) -> RedirectResponse:
    try:
        await account_service.register_local(db, username, email, password)
    except RegistrationError as e:
        logger.info("Registration rejected: %s", e.reason.value)
        return redirect_to(REGISTER_PATH, error=e.message)

    return redirect_to(LOGIN_PATH, message="Registration successful! You can now log in.")


# ── Local login ───────────────────────────────────────────────────────────

@router.get("/login", response_class=HTMLResponse, summary="Login form")
async def login_form(
    request: Request,
    error: Optional[str] = None,
    message: Optional[str] = None,
    next: Optional[str] = None,
    account: Optional[Account] = Depends(current_account_optional),
):
    return templates.TemplateResponse(
        request,
        "login.html",
        {
            "error_message": error,
            "success_message": message,
            "next_path": next,
            "google_enabled": google_oauth_client.enabled,
            "user": account,
        },
    )


@router.post("/login", summary="Log in with username or email and password")
async def login(
    request: Request,
    username: str = Form(default=""),
    password: str = Form(default=""),
    next: Optional[str] = Form(default=None),
    db: AsyncSession = Depends(get_db_session),
) -> RedirectResponse:
    try:
        account = await account_service.resolve_local(db, username, password)
    except AuthenticationError as e:
        logger.info("Login rejected: %s", e.reason.value)
        return redirect_to(LOGIN_PATH, error=e.message, next=next)

    await session_service.purge_expired(db)
    logger.info("Account %s logged in with password", account.id)
    return await _start_session(db, request, account, _safe_next(next))


# ── Google OAuth ──────────────────────────────────────────────────────────

@router.get("/google", summary="Start Google sign-in")
async def google_login(request: Request) -> RedirectResponse:
    if not google_oauth_client.enabled:
        return redirect_to(LOGIN_PATH, error="Google login is not configured.")

    response = RedirectResponse(url=LOGIN_PATH, status_code=303)
    state = session_service.issue_oauth_state(response)
    response.headers["location"] = google_oauth_client.authorization_url(
        state, _google_callback_url(request)
    )
    return response


@router.get("/google/redirect", name="google_callback", summary="Google sign-in callback")
async def google_callback(
    request: Request,
    code: Optional[str] = None,
    state: Optional[str] = None,
    error: Optional[str] = None,
    db: AsyncSession = Depends(get_db_session),
) -> RedirectResponse:
    try:
        if error or not code:
            raise OAuthError(context={"provider_error": error or "missing code"})
        if not session_service.check_oauth_state(request.cookies.get(OAUTH_STATE_COOKIE), state):
            raise OAuthError(context={"reason": "state mismatch"})

        access_token = await google_oauth_client.exchange_code(code, _google_callback_url(request))
        profile = await google_oauth_client.fetch_profile(access_token)
    except OAuthError as e:
        logger.warning("Google login failed: %s", e.context)
        response = redirect_to(LOGIN_PATH, error=e.message)
        response.delete_cookie(OAUTH_STATE_COOKIE)
        return response

    account = await account_service.resolve_or_create_federated(db, profile)
    logger.info("Account %s logged in with Google", account.id)
    response = await _start_session(db, request, account, DASHBOARD_PATH)
    response.delete_cookie(OAUTH_STATE_COOKIE)
    return response


# ── Session pages ─────────────────────────────────────────────────────────

@router.get("/dashboard", response_class=HTMLResponse, summary="Logged-in landing page")
async def dashboard(
    request: Request,
    account: Account = Depends(require_account_browser),
):
    return templates.TemplateResponse(request, "dashboard.html", {"user": account})


@router.get("/logout", summary="End the session")
async def logout(
    request: Request,
    db: AsyncSession = Depends(get_db_session),
) -> RedirectResponse:
    await session_service.destroy_session(db, request.cookies.get(settings.session_cookie_name))
    response = RedirectResponse(url=LOGIN_PATH, status_code=303)
    session_service.clear_cookie(response)
    return response
