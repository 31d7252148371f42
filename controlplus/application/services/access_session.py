"""Access session: resolved identity plus the realtime listeners bound to its scope.

Role resolution always finishes before any tenant listener is created, and
listeners live exactly as long as the owner uid they were created for: when a
refresh yields a different owner (or none), the old listeners are released
before new ones exist.
"""

from __future__ import annotations

import inspect
from collections.abc import Awaitable, Callable
from functools import partial
from typing import Any

from controlplus.application.dtos.access import PageAccessDecision, ResolvedIdentity
from controlplus.application.interfaces.services import IListenerFactory, IListenerRegistration
from controlplus.application.services.permission_gate import PageAccessGuard
from controlplus.application.services.role_resolver import RoleResolver
from controlplus.application.services.scope_provider import ScopeProvider
from controlplus.application.services.tenant_records_service import readable_collections
from controlplus.core.constants import COLLECTION_USERS, PAGE_DASHBOARD
from controlplus.domain.entities.identity import AuthIdentity
from controlplus.domain.exceptions import TenantScopeUnavailableException
from controlplus.shared.telemetry.logging import get_logger

logger = get_logger(__name__)

CollectionCallback = Callable[[str, list[dict[str, Any]]], Awaitable[None] | None]
SessionCallback = Callable[[ResolvedIdentity | None], Awaitable[None] | None]


class AccessSession:
    """One signed-in actor's session (one per WebSocket connection)."""

    def __init__(
        self,
        identity: AuthIdentity,
        resolver: RoleResolver,
        listeners: IListenerFactory,
        *,
        on_collection: CollectionCallback,
        on_session_change: SessionCallback | None = None,
        default_page: str = PAGE_DASHBOARD,
        on_warning: Callable[[str], None] | None = None,
    ) -> None:
        self._identity = identity
        self._resolver = resolver
        self._listeners = listeners
        self._on_collection = on_collection
        self._on_session_change = on_session_change
        self._scopes = ScopeProvider()
        self.guard = PageAccessGuard(default_page, on_warning)
        self._resolved: ResolvedIdentity | None = None
        self._bound_owner: str | None = None
        self._bound_collections: tuple[str, ...] = ()
        self._tenant_registrations: list[IListenerRegistration] = []
        self._profile_registration: IListenerRegistration | None = None
        self._closed = False

    @property
    def identity(self) -> AuthIdentity:
        return self._identity

    @property
    def resolved(self) -> ResolvedIdentity | None:
        return self._resolved

    @property
    def bound_owner(self) -> str | None:
        return self._bound_owner

    @property
    def listener_paths(self) -> list[str]:
        return [reg.path for reg in self._tenant_registrations]

    async def start(self) -> ResolvedIdentity | None:
        """Resolve the role, then bind tenant listeners and the profile watch."""
        await self.refresh()
        if not self._closed and self._profile_registration is None:
            self._profile_registration = self._listeners.watch_document(
                f"{COLLECTION_USERS}/{self._identity.uid}", self._on_profile_snapshot
            )
        return self._resolved

    async def refresh(self) -> ResolvedIdentity | None:
        """Re-run role resolution and rebind listeners if the scope changed."""
        resolved = await self._resolver.resolve(self._identity)
        if self._closed:
            return resolved
        self._resolved = resolved
        self._bind(resolved)
        if self._on_session_change is not None:
            result = self._on_session_change(resolved)
            if inspect.isawaitable(result):
                await result
        return resolved

    def check_page(self, page_id: str) -> PageAccessDecision:
        if self._resolved is None:
            raise TenantScopeUnavailableException(self._identity.uid)
        return self.guard.check(self._resolved, page_id)

    def close(self) -> None:
        """Release every listener; the session cannot be restarted."""
        self._closed = True
        self._release_tenant_listeners()
        if self._profile_registration is not None:
            self._profile_registration.unsubscribe()
            self._profile_registration = None

    def _bind(self, resolved: ResolvedIdentity | None) -> None:
        owner = resolved.owner_uid if resolved else None
        collections = tuple(readable_collections(resolved)) if resolved and owner else ()
        if owner == self._bound_owner and collections == self._bound_collections:
            return
        self._release_tenant_listeners()
        if owner is None or resolved is None:
            return
        scope = self._scopes.scope_for(resolved)
        for name in collections:
            self._tenant_registrations.append(
                self._listeners.watch_collection(
                    scope.collection_path(name), partial(self._on_collection, name)
                )
            )
        self._bound_owner = owner
        self._bound_collections = collections
        logger.info(
            "Bound %d listeners for %s under owner %s",
            len(collections),
            self._identity.uid,
            owner,
        )

    def _release_tenant_listeners(self) -> None:
        for registration in self._tenant_registrations:
            registration.unsubscribe()
        if self._tenant_registrations:
            logger.info("Released listeners of owner %s", self._bound_owner)
        self._tenant_registrations = []
        self._bound_owner = None
        self._bound_collections = ()

    async def _on_profile_snapshot(self, data: dict[str, Any] | None) -> None:
        # First snapshot mirrors the state start() just resolved.
        if self._resolved is not None and data is not None and self._matches(data):
            return
        await self.refresh()

    def _matches(self, data: dict[str, Any]) -> bool:
        resolved = self._resolved
        if resolved is None or resolved.profile is None:
            return False
        current = dict(resolved.profile.data)
        return {k: v for k, v in data.items() if k != "id"} == current
