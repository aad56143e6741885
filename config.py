# config.py
from __future__ import annotations
from typing import List, Optional, Literal
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, AliasChoices, model_validator

class Settings(BaseSettings):
    # Read .env; ignore extra env vars to avoid crashes
    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
        env_nested_delimiter="__",
        env_prefix="",  # no automatic prefix
    )

    # --- Runtime env / debugging ---
    APP_ENV: Literal["development", "staging", "production"] = Field(
        default="development",
        validation_alias=AliasChoices("APP_ENV", "app_env"),
    )
    DEBUG: bool = Field(
        default=False,
        validation_alias=AliasChoices("DEBUG", "debug"),
    )

    # --- Text-generation service ---
    OPENAI_API_KEY: str = Field(
        default="",
        validation_alias=AliasChoices("OPENAI_API_KEY", "openai_api_key"),
    )
    OPENAI_MODEL: str = Field(
        default="gpt-4o",
        validation_alias=AliasChoices("OPENAI_MODEL", "openai_model"),
    )
    OPENAI_BASE_URL: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("OPENAI_BASE_URL", "openai_base_url"),
    )
    LLM_REQUEST_TIMEOUT: float = Field(
        default=30.0,
        gt=0,
        validation_alias=AliasChoices("LLM_REQUEST_TIMEOUT", "llm_request_timeout"),
    )
    CONTENT_TEMPERATURE: float = Field(
        default=0.7,
        validation_alias=AliasChoices("CONTENT_TEMPERATURE", "content_temperature"),
    )
    CONTENT_MAX_TOKENS: int = Field(
        default=1000,
        validation_alias=AliasChoices("CONTENT_MAX_TOKENS", "content_max_tokens"),
    )
    WAYPOINT_TEMPERATURE: float = Field(
        default=0.7,
        validation_alias=AliasChoices("WAYPOINT_TEMPERATURE", "waypoint_temperature"),
    )

    # --- Retry policy (1 initial call + retries) ---
    GENERATION_MAX_ATTEMPTS: int = Field(
        default=3,
        ge=1,
        validation_alias=AliasChoices("GENERATION_MAX_ATTEMPTS", "generation_max_attempts"),
    )
    GENERATION_BACKOFF_SECONDS: float = Field(
        default=1.0,
        ge=0,
        validation_alias=AliasChoices("GENERATION_BACKOFF_SECONDS", "generation_backoff_seconds"),
    )

    # --- Server Settings (for deployment) ---
    PORT: int = Field(
        default=8000,
        validation_alias=AliasChoices("PORT", "port"),
    )
    HOST: str = Field(
        default="0.0.0.0",
        validation_alias=AliasChoices("HOST", "host"),
    )
    MAX_REQUEST_BYTES: int = Field(
        default=1024 * 50,
        validation_alias=AliasChoices("MAX_REQUEST_BYTES", "max_request_bytes"),
    )
    JOB_RETENTION_SECONDS: int = Field(
        default=3600,
        validation_alias=AliasChoices("JOB_RETENTION_SECONDS", "job_retention_seconds"),
    )

    # --- Logging ---
    LOG_LEVEL: str = Field(
        default="INFO",
        validation_alias=AliasChoices("LOG_LEVEL", "log_level"),
    )

    # --- CORS (admin UI origins) ---
    CORS_ALLOW_ORIGINS: List[str] = Field(
        default_factory=lambda: ["http://localhost:3000", "http://127.0.0.1:3000"],
        validation_alias=AliasChoices("CORS_ALLOW_ORIGINS", "cors_allow_origins"),
    )
    # Optional comma-separated alternative that overrides the above
    FRONTEND_ORIGINS: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("FRONTEND_ORIGINS", "frontend_origins"),
    )
    CORS_ALLOW_METHODS: List[str] = Field(
        default_factory=lambda: ["GET", "POST", "OPTIONS"],
        validation_alias=AliasChoices("CORS_ALLOW_METHODS", "cors_allow_methods"),
    )
    CORS_ALLOW_HEADERS: List[str] = Field(
        default_factory=lambda: ["Accept", "Authorization", "Content-Type", "X-Request-Id"],
        validation_alias=AliasChoices("CORS_ALLOW_HEADERS", "cors_allow_headers"),
    )

    @model_validator(mode="after")
    def _merge_frontend_origins(self) -> "Settings":
        if self.FRONTEND_ORIGINS:
            parts = [p.strip() for p in self.FRONTEND_ORIGINS.split(",") if p.strip()]
            if parts:
                self.CORS_ALLOW_ORIGINS = parts
        return self

    @model_validator(mode="after")
    def _validate_production_settings(self) -> "Settings":
        """Refuse to boot a production process with a placeholder API key."""
        if self.APP_ENV == "production":
            if not self.OPENAI_API_KEY or self.OPENAI_API_KEY in [
                "",
                "your-openai-api-key-here",
                "sk-proj-YOUR_ACTUAL_OPENAI_API_KEY_HERE",
            ]:
                raise ValueError(
                    "OPENAI_API_KEY must be set to a valid key in production. "
                    "Get your key from https://platform.openai.com/api-keys"
                )
        return self

    @property
    def is_dev(self) -> bool:
        return self.APP_ENV == "development"

    @property
    def log_level(self) -> str:
        return "DEBUG" if self.DEBUG else self.LOG_LEVEL.upper()

settings = Settings()
