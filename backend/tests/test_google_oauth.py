"""
SentenceBoard Backend - Google OAuth Client Tests
===================================================

What:  URL building, token exchange and profile fetch, with Google's
       endpoints replaced by an httpx.MockTransport.
"""

from unittest.mock import patch
from urllib.parse import parse_qs, urlsplit

import httpx
import pytest

from app.exceptions import OAuthError
from app.services.google_oauth import (
    GOOGLE_TOKEN_URL,
    GOOGLE_USERINFO_URL,
    GoogleOAuthClient,
)

_RealAsyncClient = httpx.AsyncClient


def _mock_google(handler):
    """Patch the module's AsyncClient so every request goes to `handler`."""

    def factory(**kwargs):
        return _RealAsyncClient(transport=httpx.MockTransport(handler), **kwargs)

    return patch("app.services.google_oauth.httpx.AsyncClient", side_effect=factory)


class TestGoogleOAuthClient:

    def setup_method(self):
        self.client = GoogleOAuthClient(client_id="cid", client_secret="csecret", timeout=5)

    def test_enabled_requires_both_credentials(self):
        assert self.client.enabled is True
        assert GoogleOAuthClient(client_id="cid", client_secret="").enabled is False

    def test_authorization_url(self):
        url = self.client.authorization_url("state-1", "http://test/auth/google/redirect")

        parts = urlsplit(url)
        query = {k: v[0] for k, v in parse_qs(parts.query).items()}
        assert parts.netloc == "accounts.google.com"
        assert query["client_id"] == "cid"
        assert query["state"] == "state-1"
        assert query["response_type"] == "code"
        assert query["redirect_uri"] == "http://test/auth/google/redirect"
        assert "email" in query["scope"]

    @pytest.mark.asyncio
    async def test_exchange_code_and_fetch_profile(self):
        def handler(request: httpx.Request) -> httpx.Response:
            if str(request.url) == GOOGLE_TOKEN_URL:
                form = parse_qs(request.content.decode())
                assert form["code"] == ["code-1"]
                assert form["grant_type"] == ["authorization_code"]
                return httpx.Response(200, json={"access_token": "tok-1"})
            if str(request.url) == GOOGLE_USERINFO_URL:
                assert request.headers["Authorization"] == "Bearer tok-1"
                return httpx.Response(
                    200,
                    json={
                        "sub": "1234",
                        "name": "Grace Hopper",
                        "email": "grace@example.com",
                        "picture": "https://example.com/g.png",
                    },
                )
            return httpx.Response(404)

        with _mock_google(handler):
            token = await self.client.exchange_code("code-1", "http://test/cb")
            profile = await self.client.fetch_profile(token)

        assert token == "tok-1"
        assert profile.provider_id == "1234"
        assert profile.display_name == "Grace Hopper"
        assert profile.email == "grace@example.com"
        assert profile.photo_url == "https://example.com/g.png"

    @pytest.mark.asyncio
    async def test_token_endpoint_error(self):
        with _mock_google(lambda request: httpx.Response(400, json={"error": "invalid_grant"})):
            with pytest.raises(OAuthError, match="Google login failed."):
                await self.client.exchange_code("bad", "http://test/cb")

    @pytest.mark.asyncio
    async def test_missing_access_token(self):
        with _mock_google(lambda request: httpx.Response(200, json={})):
            with pytest.raises(OAuthError):
                await self.client.exchange_code("code", "http://test/cb")

    @pytest.mark.asyncio
    async def test_transport_failure(self):
        def handler(request):
            raise httpx.ConnectTimeout("timed out", request=request)

        with _mock_google(handler):
            with pytest.raises(OAuthError):
                await self.client.fetch_profile("tok")

    @pytest.mark.asyncio
    async def test_profile_without_sub(self):
        with _mock_google(lambda request: httpx.Response(200, json={"name": "x"})):
            with pytest.raises(OAuthError):
                await self.client.fetch_profile("tok")
