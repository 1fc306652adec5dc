"""
Firebase ID token authentication provider.

Sign-in happens in the browser against Firebase Auth. This provider only
checks the resulting ID token against Google's published keys.
"""

from __future__ import annotations

import time
from typing import Any

import httpx
from jose import JWTError, jwt

from niko.core.config import Settings
from niko.core.exceptions import AuthenticationError, ConfigurationError
from niko.interfaces.auth_provider import IAuthProvider, User

_FIREBASE_ISSUER_PREFIX = "https://securetoken.google.com/"


class FirebaseAuthProvider(IAuthProvider):
    """Verifies Firebase ID tokens (RS256, JWKS)."""

    def __init__(
        self,
        settings: Settings,
        jwks_ttl_seconds: int = 3600,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        if not settings.FIREBASE_PROJECT_ID:
            raise ConfigurationError("FIREBASE_PROJECT_ID must be set for Firebase auth")
        self._settings = settings
        self._jwks_ttl_seconds = jwks_ttl_seconds
        self._transport = transport
        self._jwks_cache: dict[str, Any] | None = None
        self._jwks_cache_expiry: float = 0.0

    @property
    def issuer(self) -> str:
        return f"{_FIREBASE_ISSUER_PREFIX}{self._settings.FIREBASE_PROJECT_ID}"

    async def _get_jwks(self) -> dict[str, Any]:
        now = time.time()
        if self._jwks_cache and now < self._jwks_cache_expiry:
            return self._jwks_cache

        async with httpx.AsyncClient(timeout=10.0, transport=self._transport) as client:
            response = await client.get(self._settings.FIREBASE_JWKS_URL)
            response.raise_for_status()
            jwks = response.json()

        self._jwks_cache = jwks
        self._jwks_cache_expiry = now + self._jwks_ttl_seconds
        return jwks

    async def _decode_token(self, token: str) -> dict[str, Any]:
        header = jwt.get_unverified_header(token)
        jwks = await self._get_jwks()
        key = None
        for candidate in jwks.get("keys", []):
            if candidate.get("kid") == header.get("kid"):
                key = candidate
                break
        if not key:
            raise JWTError("Signing key not found")

        return jwt.decode(
            token,
            key,
            algorithms=["RS256"],
            audience=self._settings.FIREBASE_PROJECT_ID,
            issuer=self.issuer,
        )

    async def verify_token(self, token: str) -> User:
        try:
            claims = await self._decode_token(token)
        except (JWTError, httpx.HTTPError) as e:
            raise AuthenticationError(f"Invalid Firebase ID token: {e}")

        subject = claims.get("sub")
        if not subject:
            raise AuthenticationError("Firebase ID token has no subject")

        email = claims.get("email")
        display_name = claims.get("name") or (email.split("@")[0] if email else None)
        return User(id=subject, email=email, display_name=display_name)

    def is_enabled(self) -> bool:
        return True
