"""Presentation-layer dependency injection (composition root).

Everything is built from the AccessContext stored on app.state by the
lifespan (tests assign their own). Routes depend only on these dependencies.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, HTTPException, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from controlplus.application.dtos.access import ResolvedIdentity
from controlplus.application.services.account_service import AccountService
from controlplus.application.services.dashboard_service import DashboardService
from controlplus.application.services.permission_gate import PageAccessGuard, PageGuardRegistry
from controlplus.application.services.technician_service import TechnicianService
from controlplus.application.services.tenant_records_service import TenantRecordsService
from controlplus.core.context import AccessContext
from controlplus.domain.entities.identity import AuthIdentity
from controlplus.domain.exceptions import AuthenticationException, TenantScopeUnavailableException

_http_bearer = HTTPBearer(auto_error=False)


def get_access_context(request: Request) -> AccessContext:
    """Return the AccessContext; 503 while the app has none (startup failed or not run)."""
    ctx = getattr(request.app.state, "access_context", None)
    if ctx is None:
        raise HTTPException(status_code=503, detail="Service not initialized")
    return ctx


AccessContextDep = Annotated[AccessContext, Depends(get_access_context)]


async def get_id_token(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(_http_bearer)],
) -> str:
    """Return the bearer ID token; 401 when missing."""
    if not credentials or not credentials.credentials:
        raise AuthenticationException("Not authenticated")
    return credentials.credentials


async def get_auth_identity(
    token: Annotated[str, Depends(get_id_token)],
    ctx: AccessContextDep,
) -> AuthIdentity:
    """Verify the ID token with the auth provider."""
    return await ctx.auth.verify_id_token(token)


async def get_resolved_identity(
    identity: Annotated[AuthIdentity, Depends(get_auth_identity)],
    ctx: AccessContextDep,
) -> ResolvedIdentity:
    """Run role resolution; 403 when the account has no resolvable profile."""
    resolved = await ctx.role_resolver().resolve(identity)
    if resolved is None:
        raise TenantScopeUnavailableException(identity.uid)
    return resolved


def get_page_guard(
    request: Request,
    identity: Annotated[AuthIdentity, Depends(get_auth_identity)],
    ctx: AccessContextDep,
) -> PageAccessGuard:
    """Per-account guard kept on app.state so warning dedup spans requests."""
    guards: PageGuardRegistry = request.app.state.page_guards
    return guards.get(identity.uid)


def get_account_service(ctx: AccessContextDep) -> AccountService:
    return ctx.account_service()


def get_technician_service(ctx: AccessContextDep) -> TechnicianService:
    return ctx.technician_service()


def get_tenant_records_service(ctx: AccessContextDep) -> TenantRecordsService:
    return ctx.tenant_records_service()


def get_dashboard_service(ctx: AccessContextDep) -> DashboardService:
    return ctx.dashboard_service()
