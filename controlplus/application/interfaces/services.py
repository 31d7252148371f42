"""Service interfaces (ports) for external collaborators."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from contextlib import AbstractAsyncContextManager
from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from controlplus.domain.entities.identity import AuthIdentity


class IAuthTokens(Protocol):
    """Token bundle returned by the authentication provider."""

    uid: str
    email: str
    id_token: str
    refresh_token: str
    expires_in: int


class IAuthProvider(Protocol):
    """Protocol for the authentication provider."""

    async def sign_up(self, email: str, password: str) -> IAuthTokens:
        """Create an account and return its session tokens."""

    async def sign_in(self, email: str, password: str) -> IAuthTokens:
        """Authenticate and return session tokens."""

    async def delete_account(self, id_token: str) -> None:
        """Delete the account the token belongs to."""

    async def update_password(self, id_token: str, new_password: str) -> IAuthTokens:
        """Set a new password; returns refreshed tokens."""

    async def update_profile(
        self, id_token: str, display_name: str | None = None, photo_url: str | None = None
    ) -> None:
        """Update display name and/or photo URL."""

    async def verify_id_token(self, id_token: str) -> AuthIdentity:
        """Return the identity behind a valid ID token."""

    def isolated_session(self) -> AbstractAsyncContextManager[IAuthProvider]:
        """Secondary session that never touches the caller's tokens."""


class IListenerRegistration(Protocol):
    """Handle for an active realtime listener."""

    path: str

    def unsubscribe(self) -> None:
        """Stop the listener."""


class IListenerFactory(Protocol):
    """Protocol for realtime listeners over collections and documents."""

    def watch_collection(
        self,
        path: str,
        on_snapshot: Callable[[Any], Awaitable[None] | None],
        on_error: Callable[[Exception], Awaitable[None] | None] | None = None,
    ) -> IListenerRegistration:
        """Listen to a collection."""

    def watch_document(
        self,
        path: str,
        on_snapshot: Callable[[Any], Awaitable[None] | None],
        on_error: Callable[[Exception], Awaitable[None] | None] | None = None,
    ) -> IListenerRegistration:
        """Listen to a document."""
