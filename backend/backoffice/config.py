"""
Application configuration
Read from environment variables and .env
"""
from typing import Literal, Optional
from pydantic import ConfigDict
from pydantic_settings import BaseSettings

from core.search.client import SearchConfig


class Settings(BaseSettings):
    """Application settings"""

    APP_NAME: str = "Hotel Backoffice"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # Document store
    DATABASE_URL: str = "sqlite:///./backoffice.db"

    # JWT
    SECRET_KEY: str = "your-secret-key-change-in-production"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 480

    # Search engine (Meilisearch)
    MEILI_HOST: Optional[str] = None
    MEILI_API_KEY: Optional[str] = None
    MEILI_SEARCH_KEY: Optional[str] = None
    MEILI_INDEX: str = "catalogproducts"
    MEILI_SUPPLIER_INDEX: str = "supplierproducts"
    MEILI_TIMEOUT_SECONDS: float = 10.0

    # Sync triggers
    SEARCH_SYNC_ENABLED: bool = True
    TRIGGER_MAX_ATTEMPTS: int = 3

    # "flat" (per-user grants) or "roles" (role table)
    PERMISSION_MODEL: str = "flat"

    # Supplier form pricing: "default", "zero" or "null" fill for unused price fields
    SUPPLIER_PRICING_POLICY: Literal["default", "zero", "null"] = "default"

    model_config = ConfigDict(env_file=".env", case_sensitive=True, extra="ignore")

    @property
    def search_configured(self) -> bool:
        return bool((self.MEILI_HOST or "").strip() and (self.MEILI_API_KEY or "").strip())


def resolve_search_config(current: Optional[Settings] = None) -> SearchConfig:
    """
    Resolve search configuration for one invocation

    Raises:
        ConfigurationError: MEILI_HOST or MEILI_API_KEY missing
    """
    current = current or Settings()
    return SearchConfig.build(
        host=current.MEILI_HOST,
        api_key=current.MEILI_API_KEY,
        index_uid=current.MEILI_INDEX,
        supplier_index_uid=current.MEILI_SUPPLIER_INDEX,
        search_key=current.MEILI_SEARCH_KEY,
        timeout=current.MEILI_TIMEOUT_SECONDS,
    )


# Global settings instance
settings = Settings()
