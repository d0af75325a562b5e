from decimal import Decimal
from typing import List

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    # Application Settings
    PROJECT_NAME: str = "Paper Trading Ledger"
    DEBUG: bool = True

    # Database Configuration
    DATABASE_URL: str = "sqlite:///./papertrade.db"

    # JWT Settings (tokens are issued by the auth service; we only verify them)
    SECRET_KEY: str = "your-super-secret-key-change-this-in-production"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 30

    # API Settings
    API_V1_STR: str = "/api/v1"
    CORS_ORIGINS: List[str] = [
        "http://localhost:3000",
        "http://localhost:5173",
        "http://127.0.0.1:3000",
        "http://127.0.0.1:5173",
    ]

    # Logging
    LOG_LEVEL: str = "INFO"
    # Empty string disables the rotating file handler (stdout only)
    LOG_FILE: str = "logs/app.log"
    LOG_MAX_DAYS: int = 7

    # Ledger
    STARTING_CASH: Decimal = Decimal("1000000")
    # Upper bound for lock waits, pool checkout and DB lock/statement waits
    STORE_TIMEOUT_SECONDS: float = 5.0
    STORE_RETRY_ATTEMPTS: int = 3
    STORE_RETRY_BACKOFF_SECONDS: float = 0.05

    # Quotes: "static" uses the built-in table, "http" calls QUOTE_API_URL
    QUOTE_SOURCE: str = "static"
    QUOTE_API_URL: str = "https://finnhub.io/api/v1/quote"
    QUOTE_API_KEY: str | None = None
    QUOTE_TIMEOUT_SECONDS: float = 8.0
    QUOTE_CACHE_TTL_SECONDS: int = 30

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    @field_validator("QUOTE_SOURCE")
    @classmethod
    def _quote_source_known(cls, v: str) -> str:
        v = v.strip().lower()
        if v not in {"static", "http"}:
            raise ValueError("QUOTE_SOURCE must be 'static' or 'http'")
        return v

    @field_validator("STORE_RETRY_ATTEMPTS")
    @classmethod
    def _at_least_one_attempt(cls, v: int) -> int:
        if v < 1:
            raise ValueError("STORE_RETRY_ATTEMPTS must be >= 1")
        return v

    def _post_init(self):
        # Refuse placeholder secrets outside debug
        if not self.DEBUG:
            if self.SECRET_KEY.lower() in {"change-me", "changeme", "default", "secret", "your-super-secret-key-change-this-in-production"}:
                raise ValueError("Insecure SECRET_KEY value detected; change it")
            if self.QUOTE_SOURCE == "http" and not self.QUOTE_API_KEY:
                raise ValueError("QUOTE_API_KEY must be set when QUOTE_SOURCE=http in non-debug mode")
        if self.STARTING_CASH < 0:
            raise ValueError("STARTING_CASH must be non-negative")

settings = Settings()
settings._post_init()
