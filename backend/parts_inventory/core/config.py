"""Application configuration using pydantic-settings.

All environment variables should be accessed through the settings object
rather than using os.getenv() directly. This ensures:
1. Type validation at startup
2. Centralized configuration
3. Documentation of available settings
4. Proper defaults
"""

from functools import lru_cache
from typing import List, Literal, Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # Ignore extra env vars
    )

    # Database - backs the local ledger fallback
    database_url: str = "sqlite:///./parts_inventory.db"

    # CORS - comma-separated origins or "*" for development only
    cors_origins: str = "http://localhost:3000,http://localhost:5173"

    # ==========================================================================
    # Ledger store (spreadsheet proxy). Empty spreadsheet_id = local mode.
    # ==========================================================================
    spreadsheet_id: str = ""
    ledger_proxy_url: str = "http://localhost:3000/api/inventory"
    ledger_timeout_seconds: float = 15.0

    # ==========================================================================
    # Advisory (language model) - optional, never on the ledger path
    # ==========================================================================
    openai_api_key: Optional[str] = None
    advisory_suggestion_model: str = "gpt-4o-mini"
    advisory_analysis_model: str = "gpt-4o"
    advisory_timeout_seconds: float = 30.0

    # ==========================================================================
    # Production policy
    # ==========================================================================
    require_terminal_stage_for_task_completion: bool = False
    task_overcompletion_policy: Literal["allow", "cap", "reject"] = "allow"
    track_glass_consumption: bool = False

    # Timezone used for record timestamps and ids
    timezone: str = "Asia/Taipei"

    # Server
    debug: bool = True
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    # API
    api_v1_prefix: str = "/api/v1"

    # Rate limiting
    rate_limit_enabled: bool = True

    @field_validator("spreadsheet_id")
    @classmethod
    def strip_spreadsheet_id(cls, v: str) -> str:
        return v.strip()

    @property
    def is_local_mode(self) -> bool:
        """True when no remote spreadsheet is configured."""
        return not self.spreadsheet_id

    @property
    def cors_origins_list(self) -> List[str]:
        """Parse CORS origins into a list."""
        if self.cors_origins == "*":
            return ["*"]
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
