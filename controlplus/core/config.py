"""Application configuration (settings and environment).

Single source of truth for all configuration. Uses pydantic-settings
with .env support. Firebase credentials are validated at load time.
"""

from functools import lru_cache

from pydantic import SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment and .env.

    All settings are optional with defaults except the Firebase credentials
    validated in validate_firebase.
    """

    # App
    app_name: str = "controlplus-oficina"
    app_version: str = "1.0.0"
    debug: bool = False

    # Firebase / Firestore: service account by key (env JSON) or path (file).
    firebase_service_account_key: SecretStr | None = None
    firebase_service_account_path: str | None = None
    # Web API key used by the Identity Toolkit REST endpoints (sign-up / sign-in).
    firebase_web_api_key: SecretStr = SecretStr("")
    # Optional override; defaults to the service account's project_id.
    firebase_project_id: str | None = None
    firestore_timeout_seconds: float = 30.0

    # CORS
    allowed_origins: str = "http://localhost:3000"

    # Request / middleware
    request_id_header: str = "X-Request-ID"

    # Realtime listeners (Firestore REST has no push channel; listeners poll).
    realtime_poll_interval_seconds: float = 2.0

    # Accounts and navigation
    trial_duration_days: int = 14
    default_page: str = "dashboard"
    # Accounts whose page-warning state is kept between requests.
    page_guard_max_accounts: int = 1000
    # Calendar days (today, this month, 7-day revenue) are computed in this zone.
    dashboard_timezone: str = "America/Sao_Paulo"

    # One-time copy of the legacy demo_* collections into an owner's namespace.
    # The legacy data belongs to one shop; only that owner's sign-in migrates it.
    legacy_migration_id: str = "legacy-demo-collections-v1"
    legacy_migration_on_login: bool = False
    legacy_migration_owner_uid: str | None = None

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    @model_validator(mode="after")
    def validate_firebase(self) -> "Settings":
        """Require a service account (key or path) and the web API key."""
        has_key = (
            self.firebase_service_account_key
            and self.firebase_service_account_key.get_secret_value()
        )
        if not has_key and not self.firebase_service_account_path:
            raise ValueError(
                "Set FIREBASE_SERVICE_ACCOUNT_KEY (full JSON string) "
                "or FIREBASE_SERVICE_ACCOUNT_PATH (path to JSON file)."
            )
        if not self.firebase_web_api_key.get_secret_value():
            raise ValueError(
                "FIREBASE_WEB_API_KEY is required for sign-up and sign-in. "
                "Copy it from Firebase console → Project settings → General."
            )
        if self.realtime_poll_interval_seconds <= 0:
            raise ValueError("REALTIME_POLL_INTERVAL_SECONDS must be positive")
        if self.legacy_migration_on_login and not self.legacy_migration_owner_uid:
            raise ValueError(
                "LEGACY_MIGRATION_OWNER_UID is required when LEGACY_MIGRATION_ON_LOGIN is set."
            )
        return self


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings (single instance per process).

    Validation runs on first call, not at import time. In tests, call
    get_settings.cache_clear() before overriding env vars so the next
    get_settings() uses the new values.
    """
    return Settings()
