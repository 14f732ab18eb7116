from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache
from typing import Optional

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore", populate_by_name=True)

    # MongoDB URI - must be provided via environment variables
    mongodb_url: Optional[str] = None
    mongodb_uri: Optional[str] = None  # Alternative environment variable name

    # Brevo transactional email
    brevo_api_key: Optional[str] = None
    from_email: str = "noreply@nextstopchina.com"
    admin_email: str = "admin@nextstopchina.com"
    sender_name: str = "Next Stop China"

    port: int = 5000
    environment: str = Field(
        default="development",
        validation_alias=AliasChoices("ENVIRONMENT", "NODE_ENV"),
    )

    # CORS settings
    frontend_url: str = "http://localhost:3000"

    # Fixed-window rate limiting for /api routes
    rate_limit_window_ms: int = 900000
    rate_limit_max_requests: int = 100
    # Honour X-Forwarded-For only when a reverse proxy sets it
    trust_proxy: bool = False

    @property
    def effective_mongo_uri(self) -> str:
        """Get the effective MongoDB URI from available sources"""
        uri = self.mongodb_url or self.mongodb_uri
        if not uri:
            raise ValueError("MongoDB URI not configured! Please set MONGODB_URL in your environment variables.")
        return uri

    @property
    def is_development(self) -> bool:
        return self.environment.lower() == "development"

    @property
    def allowed_origins(self) -> list[str]:
        return [origin.strip() for origin in self.frontend_url.split(",") if origin.strip()]

@lru_cache
def get_settings():
    return Settings()
