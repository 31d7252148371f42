"""Auth API: owner sign-up, sign-in, sign-out and password changes.

Thin routes over AccountService. Provider failures surface as
AuthenticationException with the localized message (handled globally).
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Request, Response

from controlplus.api.v1.dependencies import (
    get_account_service,
    get_auth_identity,
    get_id_token,
    get_resolved_identity,
)
from controlplus.api.v1.presenters import token_response
from controlplus.application.dtos.access import ResolvedIdentity
from controlplus.application.dtos.account import OwnerRegistration
from controlplus.application.services.account_service import AccountService
from controlplus.core.limiter import limit_login, limit_password, limit_register
from controlplus.domain.entities.identity import AuthIdentity
from controlplus.schemas.auth import (
    ChangePasswordRequest,
    FirstPasswordRequest,
    LoginRequest,
    RegisterRequest,
    TokenResponse,
)
from controlplus.shared.telemetry.logging import get_logger

logger = get_logger(__name__)

router = APIRouter()


@router.post("/register", response_model=TokenResponse, status_code=201)
@limit_register
async def register(
    request: Request,
    body: RegisterRequest,
    account: AccountService = Depends(get_account_service),
):
    """Create an owner account with a trial subscription and return its tokens."""
    session = await account.register_owner(
        OwnerRegistration(
            full_name=body.full_name,
            email=body.email,
            password=body.password,
            confirm_password=body.confirm_password,
            birth_date=body.birth_date,
            cpf_cnpj=body.cpf_cnpj,
            phone=body.phone,
        )
    )
    return token_response(session)


@router.post("/login", response_model=TokenResponse)
@limit_login
async def login(
    request: Request,
    body: LoginRequest,
    account: AccountService = Depends(get_account_service),
):
    """Sign in with email and password. must_change_password flags a technician's first login."""
    return token_response(await account.sign_in(body.email, body.password))


@router.post("/logout", status_code=204)
async def logout(
    request: Request,
    identity: Annotated[AuthIdentity, Depends(get_auth_identity)],
):
    """Close every realtime session of the caller and forget its page warnings."""
    manager = getattr(request.app.state, "ws_manager", None)
    closed = await manager.close_user(identity.uid) if manager is not None else 0
    request.app.state.page_guards.discard(identity.uid)
    logger.info("Signed out %s (%d realtime sessions closed)", identity.uid, closed)
    return Response(status_code=204)


@router.post("/change-password", response_model=TokenResponse)
@limit_password
async def change_password(
    request: Request,
    body: ChangePasswordRequest,
    identity: Annotated[AuthIdentity, Depends(get_auth_identity)],
    account: AccountService = Depends(get_account_service),
):
    """Re-authenticate with the current password, then set the new one."""
    session = await account.change_password(
        identity.email, body.current_password, body.new_password, body.confirm_password
    )
    return token_response(session)


@router.post("/first-password", response_model=TokenResponse)
@limit_password
async def first_password(
    request: Request,
    body: FirstPasswordRequest,
    token: Annotated[str, Depends(get_id_token)],
    resolved: Annotated[ResolvedIdentity, Depends(get_resolved_identity)],
    account: AccountService = Depends(get_account_service),
):
    """Forced first-login password change for technicians."""
    session = await account.complete_first_password(
        resolved, token, body.new_password, body.confirm_password
    )
    return token_response(session)
