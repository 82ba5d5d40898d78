"""Google sign-in token verification."""

import logging
from typing import Any

import httpx

from audiobook.config import get_settings

logger = logging.getLogger(__name__)

TOKENINFO_URL = "https://oauth2.googleapis.com/tokeninfo"
USERINFO_URL = "https://www.googleapis.com/oauth2/v3/userinfo"


class GoogleAuthService:
    """Resolves a Google ID token or access token to a profile dict."""

    def __init__(self, transport: httpx.AsyncBaseTransport | None = None) -> None:
        self.settings = get_settings()
        self.timeout = 10.0
        self.transport = transport

    async def verify(self, token: str) -> dict[str, Any] | None:
        """Return ``{"email", "name", "picture"}`` for a valid token, else None.

        The token is first checked as an ID token (audience must match the
        configured client id), then as an OAuth access token via userinfo.
        """
        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            profile = await self._verify_id_token(client, token)
            if profile is None:
                profile = await self._fetch_userinfo(client, token)
        return profile

    async def _verify_id_token(
        self, client: httpx.AsyncClient, token: str
    ) -> dict[str, Any] | None:
        try:
            response = await client.get(TOKENINFO_URL, params={"id_token": token})
        except httpx.HTTPError as e:
            logger.warning(f"Google tokeninfo request failed: {e}")
            return None
        if response.status_code != 200:
            return None

        try:
            claims = response.json()
        except ValueError:
            logger.warning("Google tokeninfo returned a non-JSON body")
            return None
        client_id = self.settings.google_client_id
        if client_id and claims.get("aud") != client_id:
            logger.warning("Google ID token issued for a different client")
            return None
        return claims

    async def _fetch_userinfo(
        self, client: httpx.AsyncClient, token: str
    ) -> dict[str, Any] | None:
        try:
            response = await client.get(
                USERINFO_URL, headers={"Authorization": f"Bearer {token}"}
            )
        except httpx.HTTPError as e:
            logger.warning(f"Google userinfo request failed: {e}")
            return None
        if response.status_code != 200:
            return None
        try:
            return response.json()
        except ValueError:
            logger.warning("Google userinfo returned a non-JSON body")
            return None


def get_google_auth_service() -> GoogleAuthService:
    """Get a Google auth service instance."""
    return GoogleAuthService()
