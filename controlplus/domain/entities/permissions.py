"""Employee permission catalog and the normalized permission set.

The catalog is fixed; stored permission maps may be missing keys (older
records) or carry keys that no longer exist (newer clients). Everything that
reads a stored map goes through EmployeePermissions.from_untrusted so the rest
of the code always sees exactly the catalog's keys.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, replace
from typing import Any


@dataclass(frozen=True)
class PermissionCatalogEntry:
    """One named capability an owner can grant to a technician."""

    key: str
    label: str
    description: str
    nav_id: str | None = None
    show_in_nav: bool = False
    depends_on: str | None = None


PERMISSION_CATALOG: tuple[PermissionCatalogEntry, ...] = (
    PermissionCatalogEntry(
        key="agenda",
        label="Agenda da oficina",
        description="Permite visualizar e gerenciar os agendamentos do dia.",
        nav_id="agenda",
        show_in_nav=True,
    ),
    PermissionCatalogEntry(
        key="clientes",
        label="Clientes e veículos",
        description="Autoriza o acesso ao cadastro e consulta de clientes.",
        nav_id="clientes",
        show_in_nav=True,
    ),
    PermissionCatalogEntry(
        key="patio",
        label="Controle de pátio",
        description="Permite visualizar os veículos que estão na oficina.",
        nav_id="patio",
        show_in_nav=True,
    ),
    PermissionCatalogEntry(
        key="patio_edit",
        label="Editar pátio",
        description="Libera registrar entradas, editar e liberar veículos.",
        depends_on="patio",
    ),
    PermissionCatalogEntry(
        key="financeiro",
        label="Financeiro",
        description="Disponibiliza a aba Financeiro com receitas e despesas.",
        nav_id="financeiro",
        show_in_nav=True,
    ),
)

PERMISSION_KEYS: tuple[str, ...] = tuple(entry.key for entry in PERMISSION_CATALOG)

_CATALOG_BY_KEY: dict[str, PermissionCatalogEntry] = {
    entry.key: entry for entry in PERMISSION_CATALOG
}


def get_catalog_entry(key: str) -> PermissionCatalogEntry | None:
    """Return the catalog entry for key, or None if the key is unknown."""
    return _CATALOG_BY_KEY.get(key)


@dataclass(frozen=True)
class EmployeePermissions:
    """Normalized permission set: one bool per catalog key, nothing else.

    Field names are the persisted map keys.
    """

    agenda: bool = False
    clientes: bool = False
    patio: bool = False
    patio_edit: bool = False
    financeiro: bool = False

    @classmethod
    def from_untrusted(cls, raw: Mapping[str, Any] | None) -> EmployeePermissions:
        """Build from an arbitrary stored map.

        Missing keys default to False, unknown keys are dropped and every value
        is reduced to its truthiness.
        """
        if not isinstance(raw, Mapping):
            raw = {}
        return cls(**{key: bool(raw.get(key)) for key in PERMISSION_KEYS})

    def to_dict(self) -> dict[str, bool]:
        """Return the persisted shape (catalog order)."""
        return {key: getattr(self, key) for key in PERMISSION_KEYS}

    def allows(self, key: str) -> bool:
        """Return True when key is a catalog key and it is granted."""
        if key not in PERMISSION_KEYS:
            return False
        return bool(getattr(self, key))

    def any_granted(self) -> bool:
        return any(self.to_dict().values())

    def granted_keys(self) -> list[str]:
        return [key for key, value in self.to_dict().items() if value]

    def with_toggle(self, key: str, enabled: bool) -> EmployeePermissions:
        """Return a copy with key set, applying dependency rules.

        Turning a base capability off also turns off every capability that
        depends on it. Turning a dependent capability on while its base is off
        is ignored.
        """
        entry = get_catalog_entry(key)
        if entry is None:
            raise KeyError(f"Unknown permission: {key}")
        if enabled and entry.depends_on and not self.allows(entry.depends_on):
            return self
        changes = {key: bool(enabled)}
        if not enabled:
            for other in PERMISSION_CATALOG:
                if other.depends_on == key:
                    changes[other.key] = False
        return replace(self, **changes)

    def enforce_dependencies(self) -> EmployeePermissions:
        """Return a copy where no dependent capability is granted without its base."""
        changes = {
            entry.key: False
            for entry in PERMISSION_CATALOG
            if entry.depends_on and not self.allows(entry.depends_on)
        }
        return replace(self, **changes) if changes else self

