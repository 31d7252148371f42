"""DTOs for the legacy collection migration."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class MigrationReport:
    """Outcome of one migration run.

    copied maps legacy source collection -> documents written. When the marker
    already existed, already_completed is True and nothing was copied.
    """

    migration_id: str
    owner_uid: str
    already_completed: bool
    copied: dict[str, int] = field(default_factory=dict)
