# application settings, overridable through STOREFRONT_* env vars or a .env file
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="STOREFRONT_",
        env_file=".env",
        extra="ignore",
    )

    # simulated round trip for every store access
    latency_ms: int = 300

    # login throttle
    login_max_failures: int = 5
    login_lockout_minutes: int = 5

    # password recovery
    recovery_code_length: int = 6
    recovery_ttl_minutes: int = 10

    # admin dashboard
    recent_orders: int = 10

    # sale alerts go here, not to any user record
    admin_alert_phone: str = "5511986628325"
    admin_alert_email: str = "gbrestilos@hotmail.com"

    # session tokens
    secret_key: str = "change-me-in-production"
    token_algorithm: str = "HS256"
    token_ttl_minutes: int = 60 * 12

    log_level: str = "INFO"
    debug: bool = False
    seed_demo_data: bool = True

    @property
    def latency(self) -> float:
        """Latency in seconds, as expected by asyncio.sleep."""
        return max(self.latency_ms, 0) / 1000


@lru_cache
def get_settings() -> Settings:
    return Settings()
