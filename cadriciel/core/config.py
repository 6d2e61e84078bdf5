"""
Core Configuration Module
Central management of environment variables and application settings
"""

from pathlib import Path
from typing import List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Repository root (the directory holding the `cadriciel` package)
PROJECT_ROOT = Path(__file__).resolve().parents[2]


class Settings(BaseSettings):
    """Application settings (Pydantic Settings v2)"""

    # ==================== Application ====================
    app_title: str = "Cadriciel Serveur"
    app_version: str = "1.0.0"
    app_env: str = Field(default="development")
    log_level: str = Field(default="INFO")
    log_json_format: bool = Field(default=False)

    # ==================== Server ====================
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=3000)

    # ==================== API Documentation ====================
    openapi_version: str = "3.0.0"
    docs_url: str = Field(default="/api/docs")
    docs_apis: str = Field(
        default="cadriciel/**/*.py",
        description="Glob of source files scanned for @openapi annotations",
    )
    docs_base_dir: str = Field(default=str(PROJECT_ROOT))

    @property
    def docs_openapi_url(self) -> str:
        """URL of the generated OpenAPI document"""
        return f"{self.docs_url.rstrip('/')}/openapi.json"

    # ==================== Routing ====================
    index_prefix: str = Field(default="/api/index")

    # ==================== Body Parsing ====================
    body_limit: int = Field(
        default=100 * 1024,
        description="Maximum JSON / urlencoded body size in bytes",
    )

    # ==================== Uploads ====================
    upload_dir: str = Field(default="./uploads")
    upload_field: str = Field(default="drawing")
    upload_limit: int = Field(
        default=10 * 1024 * 1024,
        description="Maximum multipart body size in bytes",
    )
    static_prefix: str = Field(default="/retrieve-images")

    # ==================== CORS ====================
    cors_origins_str: str = Field(default="*", alias="CORS_ORIGINS")

    @property
    def cors_origins(self) -> List[str]:
        """Split CORS origins on commas"""
        return [origin.strip() for origin in self.cors_origins_str.split(",")]

    cors_allow_credentials: bool = Field(default=False)
    cors_allow_methods: str = Field(default="GET,HEAD,PUT,PATCH,POST,DELETE")
    cors_allow_headers: str = Field(default="*")

    # ==================== Pydantic Config ====================
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    @property
    def is_development(self) -> bool:
        """Whether errors should carry their full detail"""
        return self.app_env == "development"

    # ==================== Validators ====================
    @field_validator("app_env")
    @classmethod
    def normalize_app_env(cls, v: str) -> str:
        """Any environment name is accepted; only `development` is special"""
        return v.strip().lower()

    @field_validator("body_limit", "upload_limit")
    @classmethod
    def validate_limit(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("size limits must be positive")
        return v


# Singleton instance
settings = Settings()
