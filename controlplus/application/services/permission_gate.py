"""Permission gate: navigation and page access for owners and technicians."""

from __future__ import annotations

from collections import OrderedDict
from collections.abc import Callable

from controlplus.application.dtos.access import NavItem, PageAccessDecision, ResolvedIdentity
from controlplus.core.constants import PAGE_ACCOUNT, PAGE_DASHBOARD, PAGE_SETTINGS
from controlplus.domain.entities.permissions import (
    PERMISSION_CATALOG,
    EmployeePermissions,
    get_catalog_entry,
)
from controlplus.shared.telemetry.logging import get_logger

logger = get_logger(__name__)

OWNER_NAV: tuple[NavItem, ...] = (
    NavItem(PAGE_DASHBOARD, "Painel"),
    NavItem("agenda", "Agenda da oficina", "agenda"),
    NavItem("clientes", "Clientes e veículos", "clientes"),
    NavItem("profissionais", "Equipe técnica"),
    NavItem("servicos", "Serviços da oficina"),
    NavItem("orcamentos", "Orçamentos"),
    NavItem("estoque", "Estoque"),
    NavItem("patio", "Controle de pátio", "patio"),
    NavItem("financeiro", "Financeiro", "financeiro"),
    NavItem(PAGE_SETTINGS, "Configurações"),
)

ACCOUNT_NAV = NavItem(PAGE_ACCOUNT, "Minha conta")

# page id -> permission key required by technicians
PAGE_PERMISSIONS: dict[str, str] = {
    entry.nav_id: entry.key for entry in PERMISSION_CATALOG if entry.nav_id
}

# Pages every signed-in actor may open
COMMON_PAGES: frozenset[str] = frozenset({PAGE_DASHBOARD, PAGE_ACCOUNT})

OWNER_ONLY_PAGES: frozenset[str] = frozenset(
    item.id for item in OWNER_NAV if item.id not in PAGE_PERMISSIONS and item.id not in COMMON_PAGES
)

KNOWN_PAGES: frozenset[str] = frozenset(item.id for item in OWNER_NAV) | COMMON_PAGES

OWNER_ONLY_WARNING = "Esta área é exclusiva do administrador da oficina."


def permission_warning(permission: str) -> str:
    entry = get_catalog_entry(permission)
    label = entry.label if entry else permission
    return f"Você não tem permissão para acessar {label}. Solicite acesso ao administrador."


def employee_nav_items(permissions: EmployeePermissions) -> list[NavItem]:
    """Dashboard, every catalog page shown in nav whose permission is granted, then account."""
    items = [NavItem(PAGE_DASHBOARD, "Painel")]
    items.extend(
        NavItem(entry.nav_id, entry.label, entry.key)
        for entry in PERMISSION_CATALOG
        if entry.show_in_nav and entry.nav_id and permissions.allows(entry.key)
    )
    items.append(ACCOUNT_NAV)
    return items


def nav_items_for(identity: ResolvedIdentity) -> list[NavItem]:
    if identity.is_employee:
        employee = identity.employee
        return employee_nav_items(employee.permissions if employee else EmployeePermissions())
    return list(OWNER_NAV)


def toggle_permission(
    permissions: EmployeePermissions, key: str, enabled: bool
) -> EmployeePermissions:
    """Apply one toggle with dependency rules (patio off forces patio_edit off)."""
    return permissions.with_toggle(key, enabled)


class PageAccessGuard:
    """Stateful page-access check for one session.

    A denial warns once per permission key (owner-only pages: once per page).
    Keys are re-armed when the permission is granted again, so a later
    revocation warns again.
    """

    def __init__(
        self,
        default_page: str = PAGE_DASHBOARD,
        on_warning: Callable[[str], None] | None = None,
    ) -> None:
        self._default_page = default_page
        self._on_warning = on_warning
        self._warned: set[str] = set()

    @property
    def warned_keys(self) -> frozenset[str]:
        return frozenset(self._warned)

    def reset(self) -> None:
        self._warned.clear()

    def check(self, identity: ResolvedIdentity, page_id: str) -> PageAccessDecision:
        if page_id not in KNOWN_PAGES:
            return PageAccessDecision(page_id, self._default_page, allowed=False)
        if not identity.is_employee:
            return PageAccessDecision(page_id, page_id, allowed=True)

        employee = identity.employee
        permissions = employee.permissions if employee else EmployeePermissions()
        self._warned.difference_update(permissions.granted_keys())

        if page_id in COMMON_PAGES:
            return PageAccessDecision(page_id, page_id, allowed=True)
        if page_id in OWNER_ONLY_PAGES:
            return self._deny(page_id, None, f"page:{page_id}", OWNER_ONLY_WARNING)

        permission = PAGE_PERMISSIONS[page_id]
        if permissions.allows(permission):
            return PageAccessDecision(page_id, page_id, allowed=True, permission=permission)
        return self._deny(page_id, permission, permission, permission_warning(permission))

    def _deny(
        self, page_id: str, permission: str | None, dedup_key: str, message: str
    ) -> PageAccessDecision:
        warning = None
        if dedup_key not in self._warned:
            self._warned.add(dedup_key)
            warning = message
            logger.info("Page '%s' denied (%s); redirecting", page_id, dedup_key)
            if self._on_warning is not None:
                self._on_warning(message)
        return PageAccessDecision(
            page_id, self._default_page, allowed=False, permission=permission, warning=warning
        )


class PageGuardRegistry:
    """Per-account PageAccessGuards shared across HTTP requests.

    Holds at most max_accounts guards; the least recently used one is dropped
    first (its account simply gets a fresh guard on the next check).
    """

    def __init__(self, default_page: str = PAGE_DASHBOARD, max_accounts: int = 1000) -> None:
        if max_accounts <= 0:
            raise ValueError("max_accounts must be positive")
        self._default_page = default_page
        self._max_accounts = max_accounts
        self._guards: OrderedDict[str, PageAccessGuard] = OrderedDict()

    def __contains__(self, uid: object) -> bool:
        return uid in self._guards

    def __len__(self) -> int:
        return len(self._guards)

    def get(self, uid: str) -> PageAccessGuard:
        guard = self._guards.get(uid)
        if guard is None:
            guard = self._guards[uid] = PageAccessGuard(self._default_page)
            while len(self._guards) > self._max_accounts:
                self._guards.popitem(last=False)
        else:
            self._guards.move_to_end(uid)
        return guard

    def discard(self, uid: str) -> None:
        self._guards.pop(uid, None)
