"""Core constants: stored collection names and navigation page ids.

Single source of truth for the persisted layout shared with the web client.
Infrastructure path builders live in infrastructure/firebase/collections.py.
"""

COLLECTION_USERS = "users"
COLLECTION_EMPLOYEES = "employees"
COLLECTION_MIGRATIONS = "migrations"

# Tenant-scoped business collections (under users/{ownerUid}/)
COLLECTION_CLIENTS = "clients"
COLLECTION_PROFESSIONALS = "professionals"
COLLECTION_SERVICES = "services"
COLLECTION_APPOINTMENTS = "appointments"
COLLECTION_TRANSACTIONS = "transactions"
COLLECTION_BUDGETS = "budgets"
COLLECTION_YARD = "yard"
COLLECTION_STOCK = "estoque"
COLLECTION_WORK_ORDERS = "ordens-de-servico"

TENANT_COLLECTIONS: tuple[str, ...] = (
    COLLECTION_CLIENTS,
    COLLECTION_PROFESSIONALS,
    COLLECTION_SERVICES,
    COLLECTION_APPOINTMENTS,
    COLLECTION_TRANSACTIONS,
    COLLECTION_BUDGETS,
    COLLECTION_YARD,
    COLLECTION_STOCK,
    COLLECTION_WORK_ORDERS,
)

# Legacy flat collections from the demo era -> current tenant collection
LEGACY_COLLECTION_PAIRS: tuple[tuple[str, str], ...] = (
    ("demo_clients", COLLECTION_CLIENTS),
    ("demo_professionals", COLLECTION_PROFESSIONALS),
    ("demo_services", COLLECTION_SERVICES),
    ("demo_appointments", COLLECTION_APPOINTMENTS),
    ("demo_transactions", COLLECTION_TRANSACTIONS),
    ("demo_yard", COLLECTION_YARD),
)

# Navigation page ids
PAGE_DASHBOARD = "dashboard"
PAGE_ACCOUNT = "conta"
PAGE_SETTINGS = "configuracoes"
