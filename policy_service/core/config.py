"""Application configuration"""

import logging

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings"""

    model_config = SettingsConfigDict(
        env_prefix="POLICY_SERVICE__",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Environment
    environment: str = "development"
    port: int = 8010

    # Database
    db_url: str = "sqlite:///data/policy_service.db"

    # LLM Proxy (AI translation skill)
    llm_proxy_url: str = "http://localhost:8002"
    llm_model: str = "fake-llm"
    internal_api_key: str = "change-me-internal-key"
    translation_timeout: float = 120.0

    # Search indexing (empty URL disables indexing)
    search_index_url: str = ""
    search_index_timeout: float = 10.0
    search_index_max_attempts: int = 3

    # Event bus: run subscribers inline instead of background tasks
    event_bus_await_handlers: bool = False

    # Logging
    log_level: str = "INFO"

    # Version
    version: str = "0.1.0"

    @property
    def is_production(self) -> bool:
        """Check if running in production"""
        return self.environment.lower() == "production"

    @property
    def is_development(self) -> bool:
        """Check if running in development"""
        return self.environment.lower() == "development"

    @property
    def search_indexing_enabled(self) -> bool:
        return bool(self.search_index_url)


# Create settings instance
settings = Settings()

# Configure logging
logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

logger = logging.getLogger("policy-service")
