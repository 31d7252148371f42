"""Copy the legacy demo_* collections into one owner's namespace.

Usage:
    python -m scripts.migrate_legacy_collections <owner_uid> [--force]
Runs once per owner: a marker under users/{owner_uid}/migrations makes later
runs a no-op unless --force is given.
"""

import asyncio
import sys

from controlplus.application.services.legacy_migration_service import LegacyMigrationService
from controlplus.core.config import get_settings
from controlplus.infrastructure.firebase.client import (
    close_firebase,
    get_firestore_client,
    init_firebase,
)
from controlplus.infrastructure.firebase.repositories import (
    FirestoreMigrationStore,
    FirestoreTenantRecordRepository,
)
from controlplus.shared.telemetry.logging import setup_logging


async def main() -> None:
    """Migrate legacy collections for the owner given on the command line."""
    args = [a for a in sys.argv[1:] if not a.startswith("--")]
    if len(args) != 1:
        print(
            "Usage: python -m scripts.migrate_legacy_collections <owner_uid> [--force]",
            file=sys.stderr,
        )
        sys.exit(1)
    owner_uid = args[0]
    force = "--force" in sys.argv[1:]

    settings = get_settings()
    setup_logging()
    if not init_firebase(settings):
        print("Firestore client could not be initialized", file=sys.stderr)
        sys.exit(1)
    store = get_firestore_client()
    try:
        service = LegacyMigrationService(
            FirestoreMigrationStore(store),
            FirestoreTenantRecordRepository(store),
            settings.legacy_migration_id,
        )
        report = await service.migrate(owner_uid, force=force)
    finally:
        await close_firebase()

    if report.already_completed:
        print(f"Migration {report.migration_id} already completed for {owner_uid}")
    for source, count in report.copied.items():
        print(f"{source}: {count} document(s)")
    print("Done.")


if __name__ == "__main__":
    asyncio.run(main())
