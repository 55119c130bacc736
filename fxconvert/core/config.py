from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import AnyHttpUrl
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment with defaults.

    Environment variable mapping follows pydantic's rules (e.g., APP_NAME, DEBUG, DATA_DIR, DB_FILENAME, FETCH_MAX_RETRIES).
    """

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Basic app metadata
    app_name: str = "Currency Converter"
    debug: bool = True
    version: str = "0.1.0"
    app_id: str = "default-app-id"

    # Data & persistence
    data_dir: Path = Path("data")
    db_filename: str = "app.sqlite3"
    db_path: Optional[Path] = None  # derived if not provided
    # Disabled -> API-only mode: in-memory rate cache, no favorites
    persistence_enabled: bool = True

    # Quote service
    exchange_api_base_url: AnyHttpUrl = "https://api.frankfurter.app"
    base_currency: str = "USD"
    http_timeout_seconds: float = 5.0
    fetch_max_retries: int = 3
    backoff_base_seconds: float = 1.0
    trend_days: int = 7

    # Identity: custom sign-in token; anonymous sign-in when unset
    auth_token: Optional[str] = None

    alerts_max: int = 50

    def init_post_load(self) -> None:
        """Finalize derived fields and ensure directories exist."""
        if self.db_path is None:
            self.db_path = self.data_dir / self.db_filename
        if self.persistence_enabled:
            Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
        self.base_currency = self.base_currency.upper()
        if self.fetch_max_retries < 1:
            raise ValueError("fetch_max_retries must be at least 1")
        if self.trend_days < 1:
            raise ValueError("trend_days must be at least 1")

    @property
    def api_base(self) -> str:
        return str(self.exchange_api_base_url).rstrip("/")


@lru_cache
def get_settings() -> Settings:
    settings = Settings()
    settings.init_post_load()
    return settings
