"""Session API schemas: resolved role, navigation, subscription, page checks."""

from datetime import date

from pydantic import BaseModel, Field


class NavItemResponse(BaseModel):
    id: str
    label: str
    permission: str | None = None


class SubscriptionResponse(BaseModel):
    status: str
    plan: str
    is_active: bool
    is_trialing: bool
    trial_days_left: int | None = None


class SessionResponse(BaseModel):
    """Resolved access for the signed-in actor."""

    uid: str
    role: str
    owner_uid: str | None
    source: str
    must_change_password: bool = False
    permissions: dict[str, bool] = Field(default_factory=dict)
    navigation: list[NavItemResponse] = Field(default_factory=list)
    subscription: SubscriptionResponse


class PageAccessResponse(BaseModel):
    """Result of GET /session/pages/{page_id}."""

    requested: str
    page: str
    allowed: bool
    redirected: bool
    blocked_by_subscription: bool = False
    permission: str | None = None
    warning: str | None = None


class PersonalDataRequest(BaseModel):
    """Fields the actor may change on their own profile; omitted fields are kept."""

    full_name: str | None = Field(default=None, max_length=200)
    email: str | None = Field(default=None, max_length=320)
    phone: str | None = Field(default=None, max_length=32)
    cpf_cnpj: str | None = Field(default=None, max_length=32)
    birth_date: date | None = None
    avatar_url: str | None = None
