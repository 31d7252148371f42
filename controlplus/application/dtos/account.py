"""DTOs for account and technician use cases."""

from dataclasses import dataclass, field
from datetime import date


@dataclass(frozen=True)
class AuthSession:
    """Tokens returned to the caller after sign-up, sign-in or password change."""

    uid: str
    email: str
    id_token: str
    refresh_token: str
    expires_in: int
    must_change_password: bool = False


@dataclass(frozen=True)
class OwnerRegistration:
    """Owner sign-up form."""

    full_name: str
    email: str
    password: str
    confirm_password: str
    birth_date: date | None = None
    cpf_cnpj: str = ""
    phone: str = ""


@dataclass(frozen=True)
class PersonalDataUpdate:
    """Fields an actor may change on their own profile; None means unchanged."""

    full_name: str | None = None
    email: str | None = None
    phone: str | None = None
    birth_date: date | None = None
    cpf_cnpj: str | None = None
    avatar_url: str | None = None


@dataclass(frozen=True)
class TechnicianProvisioning:
    """Owner's request to create a technician account."""

    name: str
    email: str
    password: str
    specialty: str = ""
    permissions: dict[str, bool] = field(default_factory=dict)
