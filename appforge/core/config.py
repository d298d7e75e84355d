from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import field_validator
from typing import Any
from pathlib import Path


STORAGE_BACKENDS = ("native", "flat")
FLAT_PERSISTENCE_MODES = ("file", "redis", "memory")


class Settings(BaseSettings):
    """Application settings - all configurable via environment variables"""

    # ==========================================
    # Application
    # ==========================================
    APP_NAME: str = "AppForge"
    ENVIRONMENT: str = "development"
    DEBUG: bool = False
    API_VERSION: str = "v1"

    # Server Configuration
    SERVER_HOST: str = "0.0.0.0"
    SERVER_PORT: int = 8000

    # ==========================================
    # Logging
    # ==========================================
    LOG_LEVEL: str = "INFO"
    LOG_FILE: str = ""

    # ==========================================
    # Claude AI
    # ==========================================
    ANTHROPIC_API_KEY: str = ""
    ANTHROPIC_BASE_URL: str = ""  # Empty means use default Anthropic URL
    CLAUDE_MODEL: str = "claude-sonnet-4-20250514"
    CLAUDE_MAX_TOKENS: int = 8192
    CLAUDE_TEMPERATURE: float = 0.7
    CLAUDE_REQUEST_TIMEOUT: int = 300  # 5 minutes for large files
    CLAUDE_CONNECT_TIMEOUT: int = 60  # seconds

    # ==========================================
    # Storage Configuration
    # ==========================================
    STORAGE_BACKEND: str = "native"  # "native" or "flat"
    STORAGE_BASE_DIR: str = str(Path.home() / ".appforge" / "projects")

    # Flat (key-value) backend
    FLAT_STORAGE_ROOT: str = "web-storage"
    FLAT_PERSISTENCE: str = "file"  # "file", "redis" or "memory"
    FLAT_STATE_FILE: str = str(Path.home() / ".appforge" / "web_file_system.json")
    FLAT_STORAGE_KEY: str = "webFileSystem"
    FLUSH_DEBOUNCE_SECONDS: float = 1.0

    # Redis (only used when FLAT_PERSISTENCE=redis)
    REDIS_URL: str = "redis://localhost:6379/0"

    # ==========================================
    # Generation
    # ==========================================
    GENERATION_MAX_ATTEMPTS: int = 3
    GENERATION_RETRY_BASE_DELAY: float = 1.0  # seconds, multiplied by attempt number
    GENERATION_FILE_DELAY: float = 0.1  # pause between files to avoid rate limiting

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    @field_validator("STORAGE_BACKEND", mode="before")
    @classmethod
    def validate_storage_backend(cls, v: Any) -> str:
        value = str(v).strip().lower()
        if value not in STORAGE_BACKENDS:
            raise ValueError(f"STORAGE_BACKEND must be one of {STORAGE_BACKENDS}, got '{v}'")
        return value

    @field_validator("FLAT_PERSISTENCE", mode="before")
    @classmethod
    def validate_flat_persistence(cls, v: Any) -> str:
        value = str(v).strip().lower()
        if value not in FLAT_PERSISTENCE_MODES:
            raise ValueError(f"FLAT_PERSISTENCE must be one of {FLAT_PERSISTENCE_MODES}, got '{v}'")
        return value

    @field_validator("GENERATION_MAX_ATTEMPTS")
    @classmethod
    def validate_max_attempts(cls, v: int) -> int:
        if v < 1:
            raise ValueError("GENERATION_MAX_ATTEMPTS must be at least 1")
        return v

    def is_dev_mode(self) -> bool:
        """Check if running in development mode"""
        return self.ENVIRONMENT == "development" or self.DEBUG

    @property
    def has_api_key(self) -> bool:
        return bool(self.ANTHROPIC_API_KEY and self.ANTHROPIC_API_KEY.strip())


# Create settings instance
settings = Settings()
