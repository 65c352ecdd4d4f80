from typing import List, Optional
from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    # Core
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    app_version: str = "2.0.0"
    log_level: str = "INFO"
    cors_origins: str = "*"

    # Defaults used when the caller leaves them out
    default_country: str = "us"
    default_lang: Optional[str] = None

    # Upstream (Google Play)
    review_count: int = 200
    review_pages: int = 1
    retry_attempts: int = 3
    retry_base_delay: float = 1.0
    retry_max_delay: float = 10.0
    fanout_concurrency: int = 5
    request_timeout: float = 60.0
    search_limit_max: int = 250
    suggest_url: str = "https://market.android.com/suggest/SuggRequest"
    http_timeout: float = 10.0

    # Ignore extra env vars so `.env` can have more keys
    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
        case_sensitive=False,
    )

    @property
    def cors_origins_list(self) -> List[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

settings = Settings()
