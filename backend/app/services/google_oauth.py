"""
SentenceBoard Backend - Google OAuth Client
=============================================

What:  The three HTTP steps of Google's authorization-code flow.
How:   httpx.AsyncClient with a fixed timeout. Every call is a single
       attempt; any transport error, non-2xx answer, or missing field is
       raised as OAuthError and the route sends the user back to the login
       form.

Flow:
    GET /auth/google
        → authorization_url(state, redirect_uri)      browser goes to Google
    GET /auth/google/redirect?code=...&state=...
        → exchange_code(code, redirect_uri)           access token
        → fetch_profile(access_token)                 FederatedProfile
"""

import logging
from dataclasses import dataclass
from typing import Optional

import httpx

from app.config import settings
from app.exceptions import OAuthError

logger = logging.getLogger(__name__)

GOOGLE_AUTHORIZE_URL = "https://accounts.google.com/o/oauth2/v2/auth"
GOOGLE_TOKEN_URL = "https://oauth2.googleapis.com/token"
GOOGLE_USERINFO_URL = "https://openidconnect.googleapis.com/v1/userinfo"


@dataclass(frozen=True)
class FederatedProfile:
    """Identity facts supplied by the provider."""
    provider_id: str
    display_name: Optional[str] = None
    email: Optional[str] = None
    photo_url: Optional[str] = None


class GoogleOAuthClient:

    def __init__(
        self,
        client_id: Optional[str] = None,
        client_secret: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        self.client_id = client_id if client_id is not None else settings.google_client_id
        self.client_secret = (
            client_secret if client_secret is not None else settings.google_client_secret
        )
        self.timeout = timeout or settings.oauth_timeout

    @property
    def enabled(self) -> bool:
        return bool(self.client_id and self.client_secret)

    def authorization_url(self, state: str, redirect_uri: str) -> str:
        params = httpx.QueryParams(
            {
                "client_id": self.client_id,
                "redirect_uri": redirect_uri,
                "response_type": "code",
                "scope": settings.google_scope,
                "state": state,
                "access_type": "online",
                "prompt": "select_account",
            }
        )
        return f"{GOOGLE_AUTHORIZE_URL}?{params}"

    async def exchange_code(self, code: str, redirect_uri: str) -> str:
        """Trade the one-time authorization code for an access token."""
        payload = {
            "code": code,
            "client_id": self.client_id,
            "client_secret": self.client_secret,
            "redirect_uri": redirect_uri,
            "grant_type": "authorization_code",
        }
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(
                    GOOGLE_TOKEN_URL,
                    data=payload,
                    headers={"Accept": "application/json"},
                )
                response.raise_for_status()
                data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.warning("Google token exchange failed: %s", type(e).__name__)
            raise OAuthError(context={"step": "token_exchange"}) from e

        access_token = data.get("access_token")
        if not access_token:
            raise OAuthError(context={"step": "token_exchange", "reason": "no access_token"})
        return access_token

    async def fetch_profile(self, access_token: str) -> FederatedProfile:
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.get(
                    GOOGLE_USERINFO_URL,
                    headers={"Authorization": f"Bearer {access_token}"},
                )
                response.raise_for_status()
                data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.warning("Google profile fetch failed: %s", type(e).__name__)
            raise OAuthError(context={"step": "userinfo"}) from e

        sub = data.get("sub")
        if not sub:
            raise OAuthError(context={"step": "userinfo", "reason": "no sub"})

        return FederatedProfile(
            provider_id=str(sub),
            display_name=data.get("name") or data.get("given_name"),
            email=data.get("email"),
            photo_url=data.get("picture"),
        )


google_oauth_client = GoogleOAuthClient()
