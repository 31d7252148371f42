"""Session API: resolved role, navigation, page-access checks and personal data."""

from typing import Annotated, Any

from fastapi import APIRouter, Depends

from controlplus.api.v1.dependencies import (
    get_account_service,
    get_id_token,
    get_page_guard,
    get_resolved_identity,
)
from controlplus.api.v1.presenters import gated_page_response, session_response
from controlplus.application.dtos.access import ResolvedIdentity
from controlplus.application.dtos.account import PersonalDataUpdate
from controlplus.application.services.account_service import AccountService
from controlplus.application.services.permission_gate import PageAccessGuard
from controlplus.schemas.session import PageAccessResponse, PersonalDataRequest, SessionResponse

router = APIRouter()


@router.get("", response_model=SessionResponse)
async def get_session(
    resolved: Annotated[ResolvedIdentity, Depends(get_resolved_identity)],
):
    """Return the resolved role, owner scope, navigation and subscription state."""
    return session_response(resolved)


@router.get("/pages/{page_id}", response_model=PageAccessResponse)
async def check_page(
    page_id: str,
    resolved: Annotated[ResolvedIdentity, Depends(get_resolved_identity)],
    guard: Annotated[PageAccessGuard, Depends(get_page_guard)],
):
    """Check whether the actor may open page_id; denied pages redirect to the default page."""
    return gated_page_response(guard.check(resolved, page_id), resolved)


@router.put("/profile")
async def update_profile(
    body: PersonalDataRequest,
    token: Annotated[str, Depends(get_id_token)],
    resolved: Annotated[ResolvedIdentity, Depends(get_resolved_identity)],
    account: AccountService = Depends(get_account_service),
) -> dict[str, Any]:
    """Merge personal data into the profile (and the owner's copy for technicians)."""
    update = PersonalDataUpdate(**body.model_dump())
    changed = await account.update_personal_data(resolved, token, update)
    return {"updated": sorted(k for k in changed if k != "updatedAt")}
