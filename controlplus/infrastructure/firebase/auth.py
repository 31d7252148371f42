"""Firebase Authentication over the Identity Toolkit REST API.

Sign-up, sign-in, password and profile updates, and account deletion go to
identitytoolkit.googleapis.com with the project's web API key. ID tokens are
verified locally with google-auth against Google's public certificates.

Provider errors are raised as AuthProviderException with the provider's public
'auth/...' code so callers can localize them.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Any

import httpx

from controlplus.domain.entities.identity import AuthIdentity
from controlplus.domain.exceptions import AuthenticationException, AuthProviderException
from controlplus.shared.telemetry.logging import get_logger

logger = get_logger(__name__)

_IDENTITY_TOOLKIT = "https://identitytoolkit.googleapis.com/v1"

# Identity Toolkit error message -> public auth error code
_PROVIDER_ERROR_CODES: dict[str, str] = {
    "EMAIL_EXISTS": "auth/email-already-in-use",
    "INVALID_EMAIL": "auth/invalid-email",
    "MISSING_EMAIL": "auth/invalid-email",
    "WEAK_PASSWORD": "auth/weak-password",
    "MISSING_PASSWORD": "auth/invalid-password",
    "INVALID_PASSWORD": "auth/wrong-password",
    "INVALID_LOGIN_CREDENTIALS": "auth/wrong-password",
    "EMAIL_NOT_FOUND": "auth/user-not-found",
    "USER_NOT_FOUND": "auth/user-not-found",
    "USER_DISABLED": "auth/user-disabled",
    "TOO_MANY_ATTEMPTS_TRY_LATER": "auth/too-many-requests",
    "INVALID_ID_TOKEN": "auth/invalid-user-token",
    "TOKEN_EXPIRED": "auth/user-token-expired",
    "CREDENTIAL_TOO_OLD_LOGIN_AGAIN": "auth/requires-recent-login",
}


@dataclass
class AuthTokens:
    """Normalized Identity Toolkit sign-in/sign-up response."""

    uid: str
    email: str
    id_token: str
    refresh_token: str
    expires_in: int
    display_name: str = ""


def provider_error_code(payload: Any) -> str:
    """Map an Identity Toolkit error body to a public 'auth/...' code.

    Messages may carry a suffix ("WEAK_PASSWORD : Password should be ...").
    Unknown messages map to 'auth/internal-error'.
    """
    message = ""
    if isinstance(payload, dict):
        error = payload.get("error") or {}
        if isinstance(error, dict):
            message = str(error.get("message") or "")
    key = message.split(":", 1)[0].strip().split(" ", 1)[0]
    return _PROVIDER_ERROR_CODES.get(key, "auth/internal-error")


class IdentityToolkitClient:
    """Async client for the Firebase Auth REST endpoints.

    The HTTP client is injected (shared, closed by the lifespan) or created
    and owned by this instance.
    """

    def __init__(
        self,
        api_key: str,
        project_id: str,
        *,
        http_client: httpx.AsyncClient | None = None,
        timeout: float = 30.0,
    ) -> None:
        self._api_key = api_key
        self._project_id = project_id
        self._timeout = timeout
        self._http = http_client if http_client is not None else httpx.AsyncClient(timeout=timeout)
        self._owns_http = http_client is None

    async def aclose(self) -> None:
        if self._owns_http:
            await self._http.aclose()

    async def _post(self, endpoint: str, body: dict[str, Any]) -> dict[str, Any]:
        response = await self._http.post(
            f"{_IDENTITY_TOOLKIT}/{endpoint}",
            params={"key": self._api_key},
            json=body,
        )
        if response.status_code != 200:
            try:
                payload = response.json()
            except ValueError:
                payload = None
            code = provider_error_code(payload)
            logger.info(
                "Identity Toolkit %s failed: status=%d code=%s",
                endpoint,
                response.status_code,
                code,
            )
            raise AuthProviderException(code)
        return response.json()

    @staticmethod
    def _tokens(data: dict[str, Any]) -> AuthTokens:
        return AuthTokens(
            uid=data.get("localId", ""),
            email=data.get("email", ""),
            id_token=data.get("idToken", ""),
            refresh_token=data.get("refreshToken", ""),
            expires_in=int(data.get("expiresIn") or 0),
            display_name=data.get("displayName", ""),
        )

    async def sign_up(self, email: str, password: str) -> AuthTokens:
        """Create an email/password account and return its first session."""
        data = await self._post(
            "accounts:signUp",
            {"email": email, "password": password, "returnSecureToken": True},
        )
        return self._tokens(data)

    async def sign_in(self, email: str, password: str) -> AuthTokens:
        data = await self._post(
            "accounts:signInWithPassword",
            {"email": email, "password": password, "returnSecureToken": True},
        )
        return self._tokens(data)

    async def delete_account(self, id_token: str) -> None:
        """Delete the account the ID token belongs to."""
        await self._post("accounts:delete", {"idToken": id_token})

    async def update_password(self, id_token: str, new_password: str) -> AuthTokens:
        """Set a new password; the provider returns fresh tokens for the session."""
        data = await self._post(
            "accounts:update",
            {"idToken": id_token, "password": new_password, "returnSecureToken": True},
        )
        return self._tokens(data)

    async def update_profile(
        self,
        id_token: str,
        display_name: str | None = None,
        photo_url: str | None = None,
    ) -> None:
        """Update display name and/or photo URL; None leaves a field unchanged."""
        body: dict[str, Any] = {"idToken": id_token, "returnSecureToken": False}
        if display_name is not None:
            body["displayName"] = display_name
        if photo_url is not None:
            body["photoUrl"] = photo_url
        await self._post("accounts:update", body)

    async def verify_id_token(self, id_token: str) -> AuthIdentity:
        """Verify signature, audience and expiry; return the identity behind it."""
        claims = await asyncio.to_thread(_verify_firebase_token, id_token, self._project_id)
        uid = claims.get("user_id") or claims.get("sub")
        if not uid:
            raise AuthenticationException("Token has no subject")
        return AuthIdentity(
            uid=uid,
            email=claims.get("email", ""),
            display_name=claims.get("name", ""),
            photo_url=claims.get("picture", ""),
        )

    @asynccontextmanager
    async def isolated_session(self) -> AsyncIterator[IdentityToolkitClient]:
        """Secondary auth session used to provision or delete technicians.

        Runs on its own HTTP connection pool; tokens it obtains are never
        returned to or stored for the calling owner. Torn down on exit.
        """
        async with httpx.AsyncClient(timeout=self._timeout) as http:
            yield IdentityToolkitClient(
                self._api_key, self._project_id, http_client=http, timeout=self._timeout
            )


def _verify_firebase_token(id_token: str, project_id: str) -> dict[str, Any]:
    from google.auth import exceptions as google_auth_exceptions
    from google.auth.transport.requests import Request
    from google.oauth2 import id_token as google_id_token

    try:
        return google_id_token.verify_firebase_token(id_token, Request(), audience=project_id)
    except (ValueError, google_auth_exceptions.GoogleAuthError) as e:
        raise AuthenticationException("Invalid or expired token") from e
