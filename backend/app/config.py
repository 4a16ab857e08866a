"""
Gym Roster — Application Configuration
All config from environment variables / .env file.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # --- App ---
    app_env: str = "development"
    app_debug: bool = True
    app_host: str = "0.0.0.0"
    app_port: int = 8000
    log_level: str = "INFO"

    # --- Store ---
    store_backend: str = "auto"      # auto | memory | supabase
    clients_table: str = "clients"

    # --- Supabase ---
    supabase_url: str = ""
    supabase_anon_key: str = ""
    supabase_service_role_key: str = ""

    # --- Web ---
    cors_origins_csv: str = "*"

    # --- Roster ---
    roster_timezone: str = "Asia/Kolkata"
    whatsapp_country_code: str = "91"

    # --- API client (retry/backoff) ---
    api_base_url: str = "http://localhost:8000"
    client_max_retries: int = 3
    client_timeout_seconds: float = 15.0
    client_backoff_seconds: float = 0.5

    # --- Derived ---
    @property
    def has_supabase_config(self) -> bool:
        return bool(self.supabase_url and (self.supabase_service_role_key or self.supabase_anon_key))

    @property
    def resolved_store_backend(self) -> str:
        """'auto' picks Supabase when credentials are present, memory otherwise."""
        backend = self.store_backend.strip().lower()
        if backend == "auto":
            return "supabase" if self.has_supabase_config else "memory"
        return backend

    @property
    def cors_origins(self) -> list[str]:
        return [o.strip() for o in self.cors_origins_csv.split(",") if o.strip()]


@lru_cache()
def get_settings() -> Settings:
    """Cached singleton for application settings."""
    return Settings()
