from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional, List


class Settings(BaseSettings):
    # Supabase
    supabase_url: str = ""
    supabase_key: str = ""
    supabase_service_role_key: Optional[str] = None  # Required for admin reads across clients

    # Storage
    assets_bucket: str = "assets"
    signed_url_ttl_seconds: int = 3600

    # Focus/visibility refresh
    refresh_min_interval_seconds: float = 30.0
    refresh_timeout_seconds: float = 15.0  # 0 disables the bound
    session_expired_notice_seconds: float = 5.0
    session_idle_ttl_seconds: float = 3600.0
    view_max_age_seconds: float = 60.0  # never more than signed_url_ttl_seconds; 0 leaves only that cap

    # App
    app_name: str = "design-hub-backend"
    debug: bool = False
    environment: str = "development"  # development | staging | production
    log_level: str = "INFO"
    cors_origins: str = "http://localhost:3000,http://localhost:5173,http://127.0.0.1:3000,http://127.0.0.1:5173"
    rate_limit: str = "100/minute"  # slowapi format, e.g. "100/minute"

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def refresh_timeout(self) -> Optional[float]:
        return self.refresh_timeout_seconds if self.refresh_timeout_seconds > 0 else None

    @property
    def view_max_age(self) -> float:
        """Cached views never outlive the signed URLs they carry"""
        if self.view_max_age_seconds <= 0:
            return float(self.signed_url_ttl_seconds)
        return min(self.view_max_age_seconds, float(self.signed_url_ttl_seconds))

    def get_cors_origins_list(self) -> List[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        env_prefix="",  # No prefix needed
        extra="ignore"
    )


settings = Settings()
