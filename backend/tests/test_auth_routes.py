"""
SentenceBoard Backend - Authentication Route Tests
====================================================

What:  Browser flows end to end through the ASGI app: registration, local
       login, dashboard guard, logout, and the Google callback with the
       provider calls mocked out.
"""

from unittest.mock import AsyncMock, patch
from urllib.parse import parse_qs, urlsplit

import pytest
from sqlalchemy import func, select

from app.config import settings
from app.database import async_session_factory
from app.exceptions import OAuthError
from app.models.account import Account
from app.services.google_oauth import FederatedProfile, GoogleOAuthClient


def _query(location: str) -> dict:
    return {k: v[0] for k, v in parse_qs(urlsplit(location).query).items()}


# ── Registration ──────────────────────────────────────────────────────────

class TestRegister:

    @pytest.mark.asyncio
    async def test_register_form_renders(self, test_client):
        response = await test_client.get("/auth/register")
        assert response.status_code == 200
        assert "Create an account" in response.text

    @pytest.mark.asyncio
    async def test_register_redirects_to_login_with_message(self, test_client):
        response = await test_client.post(
            "/auth/register",
            data={"username": "alice", "email": "alice@example.com", "password": "pw-alice"},
        )

        assert response.status_code == 303
        location = response.headers["location"]
        assert urlsplit(location).path == "/auth/login"
        assert _query(location)["message"] == "Registration successful! You can now log in."

        page = await test_client.get(location)
        assert "Registration successful!" in page.text

    @pytest.mark.asyncio
    async def test_register_missing_fields(self, test_client):
        response = await test_client.post("/auth/register", data={"username": "alice"})

        assert response.status_code == 303
        assert urlsplit(response.headers["location"]).path == "/auth/register"
        assert _query(response.headers["location"])["error"] == "All fields are required."

    @pytest.mark.asyncio
    async def test_register_duplicate_username(self, test_client, make_account):
        await make_account("alice")

        response = await test_client.post(
            "/auth/register",
            data={"username": "Alice", "email": "new@example.com", "password": "pw"},
        )

        assert _query(response.headers["location"])["error"] == (
            'The username "Alice" is already taken.'
        )

    @pytest.mark.asyncio
    async def test_register_overlong_username_returns_to_form(self, test_client):
        response = await test_client.post(
            "/auth/register",
            data={"username": "a" * 101, "email": "long@example.com", "password": "pw"},
        )

        assert response.status_code == 303
        assert urlsplit(response.headers["location"]).path == "/auth/register"
        assert _query(response.headers["location"])["error"] == (
            "The username cannot be longer than 100 characters."
        )

    @pytest.mark.asyncio
    async def test_register_overlong_email_returns_to_form(self, test_client):
        response = await test_client.post(
            "/auth/register",
            data={"username": "alice", "email": "a" * 250 + "@example.com", "password": "pw"},
        )

        assert response.status_code == 303
        assert urlsplit(response.headers["location"]).path == "/auth/register"
        assert _query(response.headers["location"])["error"] == (
            "The email cannot be longer than 255 characters."
        )

        async with async_session_factory() as session:
            count = await session.execute(select(func.count()).select_from(Account))
            assert count.scalar_one() == 0


# ── Local login / logout ──────────────────────────────────────────────────

class TestLocalLogin:

    @pytest.mark.asyncio
    async def test_login_sets_cookie_and_dashboard_greets(self, test_client, make_account, login):
        await make_account("alice")

        response = await login(test_client, "alice")
        assert settings.session_cookie_name in response.headers["set-cookie"]
        assert "httponly" in response.headers["set-cookie"].lower()

        dashboard = await test_client.get("/auth/dashboard")
        assert dashboard.status_code == 200
        assert "Welcome, alice" in dashboard.text

    @pytest.mark.asyncio
    async def test_login_with_email(self, test_client, make_account, login):
        await make_account("alice", email="alice@example.com")
        await login(test_client, "ALICE@example.com")

    @pytest.mark.asyncio
    async def test_wrong_password(self, test_client, make_account):
        await make_account("alice")

        response = await test_client.post(
            "/auth/login", data={"username": "alice", "password": "wrong"}
        )

        assert response.status_code == 303
        assert _query(response.headers["location"])["error"] == "Incorrect username or password."
        assert settings.session_cookie_name not in response.headers.get("set-cookie", "")

    @pytest.mark.asyncio
    async def test_login_honours_safe_next_only(self, client_factory, make_account):
        await make_account("alice")
        form = {"username": "alice", "password": "correct horse battery"}

        first = await client_factory()
        response = await first.post("/auth/login", data={**form, "next": "/profile"})
        assert response.headers["location"] == "/profile"

        second = await client_factory()
        response = await second.post("/auth/login", data={**form, "next": "//evil.example"})
        assert response.headers["location"] == "/auth/dashboard"

    @pytest.mark.asyncio
    async def test_dashboard_requires_login(self, test_client):
        response = await test_client.get("/auth/dashboard")

        assert response.status_code == 303
        query = _query(response.headers["location"])
        assert query["error"] == "You must be logged in to view the dashboard."
        assert query["next"] == "/auth/dashboard"

    @pytest.mark.asyncio
    async def test_logout_invalidates_session_server_side(
        self, test_client, client_factory, make_account, login
    ):
        await make_account("alice")
        await login(test_client, "alice")
        cookie_value = test_client.cookies.get(settings.session_cookie_name)
        assert cookie_value

        response = await test_client.get("/auth/logout")
        assert response.status_code == 303
        assert response.headers["location"] == "/auth/login"

        # Replaying the old cookie from elsewhere no longer works
        replay = await client_factory()
        response = await replay.post(
            "/api/sentences",
            json={"text": "still here?"},
            headers={"Cookie": f"{settings.session_cookie_name}={cookie_value}"},
        )
        assert response.status_code == 401


# ── Google OAuth ──────────────────────────────────────────────────────────

@pytest.fixture
def google_client():
    client = GoogleOAuthClient(client_id="client-id", client_secret="client-secret")
    client.exchange_code = AsyncMock(return_value="access-token")
    client.fetch_profile = AsyncMock(
        return_value=FederatedProfile(
            provider_id="g-123",
            display_name="Grace Hopper",
            email="Grace@Example.com",
            photo_url="https://example.com/grace.png",
        )
    )
    with patch("app.routes.auth.google_oauth_client", client):
        yield client


async def _start_google(client) -> str:
    response = await client.get("/auth/google")
    assert response.status_code == 303
    location = response.headers["location"]
    assert location.startswith("https://accounts.google.com/")
    return _query(location)["state"]


class TestGoogleLogin:

    @pytest.mark.asyncio
    async def test_disabled_when_not_configured(self, test_client):
        response = await test_client.get("/auth/google")

        assert response.status_code == 303
        assert _query(response.headers["location"])["error"] == "Google login is not configured."

    @pytest.mark.asyncio
    async def test_login_page_offers_google_when_configured(self, test_client, google_client):
        response = await test_client.get("/auth/login")
        assert "Sign in with Google" in response.text

    @pytest.mark.asyncio
    async def test_callback_creates_account_and_session(self, test_client, google_client):
        state = await _start_google(test_client)

        response = await test_client.get(
            "/auth/google/redirect", params={"code": "code-abc", "state": state}
        )

        assert response.status_code == 303
        assert response.headers["location"] == "/auth/dashboard"
        google_client.exchange_code.assert_awaited_once_with(
            "code-abc", "http://test/auth/google/redirect"
        )
        google_client.fetch_profile.assert_awaited_once_with("access-token")

        dashboard = await test_client.get("/auth/dashboard")
        assert "Welcome, Grace Hopper" in dashboard.text

    @pytest.mark.asyncio
    async def test_second_sign_in_reuses_account(self, client_factory, google_client):
        for _ in range(2):
            client = await client_factory()
            state = await _start_google(client)
            await client.get("/auth/google/redirect", params={"code": "c", "state": state})

        async with async_session_factory() as session:
            count = await session.execute(
                select(func.count()).select_from(Account).where(Account.google_id == "g-123")
            )
            assert count.scalar_one() == 1

    @pytest.mark.asyncio
    async def test_long_display_name_signs_in(self, test_client, google_client):
        google_client.fetch_profile.return_value = FederatedProfile(
            provider_id="g-long", display_name="G" * 300
        )
        state = await _start_google(test_client)

        response = await test_client.get(
            "/auth/google/redirect", params={"code": "c", "state": state}
        )

        assert response.status_code == 303
        assert response.headers["location"] == "/auth/dashboard"
        async with async_session_factory() as session:
            result = await session.execute(select(Account).where(Account.google_id == "g-long"))
            assert result.scalar_one().username == "G" * 100

    @pytest.mark.asyncio
    async def test_state_mismatch_rejected(self, test_client, google_client):
        await _start_google(test_client)

        response = await test_client.get(
            "/auth/google/redirect", params={"code": "code-abc", "state": "forged"}
        )

        assert _query(response.headers["location"])["error"] == "Google login failed."
        google_client.exchange_code.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_provider_failure_redirects_to_login(self, test_client, google_client):
        google_client.exchange_code.side_effect = OAuthError(context={"step": "token_exchange"})
        state = await _start_google(test_client)

        response = await test_client.get(
            "/auth/google/redirect", params={"code": "code-abc", "state": state}
        )

        assert urlsplit(response.headers["location"]).path == "/auth/login"
        assert _query(response.headers["location"])["error"] == "Google login failed."

    @pytest.mark.asyncio
    async def test_google_account_cannot_use_password_form(self, test_client, google_client):
        state = await _start_google(test_client)
        await test_client.get("/auth/google/redirect", params={"code": "c", "state": state})

        response = await test_client.post(
            "/auth/login", data={"username": "grace@example.com", "password": "guess"}
        )
        assert "created via OAuth (Google)" in _query(response.headers["location"])["error"]


# ── Pages ─────────────────────────────────────────────────────────────────

class TestPages:

    @pytest.mark.asyncio
    async def test_root_redirects_by_session(self, test_client, make_account, login):
        response = await test_client.get("/")
        assert response.headers["location"] == "/auth/login"

        await make_account("alice")
        await login(test_client, "alice")
        response = await test_client.get("/")
        assert response.headers["location"] == "/auth/dashboard"

    @pytest.mark.asyncio
    async def test_profile_shows_account(self, test_client, make_account, login):
        await make_account("alice", email="alice@example.com")
        await login(test_client, "alice")

        response = await test_client.get("/profile")
        assert response.status_code == 200
        assert "alice@example.com" in response.text
        assert "Password" in response.text

    @pytest.mark.asyncio
    async def test_health(self, test_client):
        response = await test_client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["database"] == "connected"
        assert body["google_oauth"] == "not_configured"
