"""Application configuration using Pydantic Settings."""

from functools import lru_cache
from typing import Literal

from pydantic import Field, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Application
    app_name: str = Field(default="QueCocino API")
    app_env: str = Field(default="development")
    debug: bool = Field(default=False)

    # Server
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8000)

    # Document store
    store_backend: Literal["firestore", "sql", "memory"] = Field(
        default="firestore",
        description="Profile document store backend: firestore, sql or memory",
    )
    users_collection: str = Field(
        default="users",
        description="Collection holding one profile document per user id",
    )
    store_timeout_seconds: float = Field(
        default=10.0,
        description="Deadline applied to every document store call",
    )

    # Firebase / Firestore
    firebase_project_id: str = Field(
        default="",
        description="Firebase project id (token audience and Firestore project)",
    )
    firestore_database: str = Field(default="(default)")
    firestore_base_url: str = Field(
        default="https://firestore.googleapis.com/v1",
        description="Firestore REST root; point at the emulator for local runs",
    )
    firebase_jwks_url: str = Field(
        default=(
            "https://www.googleapis.com/service_accounts/v1/jwk/"
            "securetoken@system.gserviceaccount.com"
        ),
        description="Public keys used to verify Firebase ID tokens",
    )

    # SQL document store
    database_url: str = Field(
        default="postgresql+asyncpg://localhost:5432/quecocino",
        description="PostgreSQL connection URL with asyncpg driver",
    )

    # Local JWT (tests and local development)
    jwt_secret_key: str = Field(
        default="CHANGE-ME-IN-PRODUCTION",
        description="Secret key for HS256 tokens issued outside Firebase",
    )
    jwt_algorithm: str = Field(default="HS256")
    jwt_expire_minutes: int = Field(default=30)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def firestore_documents_url(self) -> str:
        """Root URL of the documents resource for the configured database."""
        return (
            f"{self.firestore_base_url.rstrip('/')}/projects/{self.firebase_project_id}"
            f"/databases/{self.firestore_database}/documents"
        )

    @computed_field  # type: ignore[prop-decorator]
    @property
    def async_database_url(self) -> str:
        """Ensure the database URL uses the asyncpg driver scheme."""
        url = self.database_url
        if url.startswith("postgresql://"):
            url = url.replace("postgresql://", "postgresql+asyncpg://", 1)
        return url

    # Rate Limiting
    rate_limit_enabled: bool = Field(
        default=True,
        description="Enable/disable rate limiting (disable for tests)",
    )

    # CORS
    cors_origins: str = Field(
        default="http://localhost:3000,http://localhost:5173",
        description="Comma-separated list of allowed origins",
    )

    @computed_field  # type: ignore[prop-decorator]
    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.app_env == "production"

    @computed_field  # type: ignore[prop-decorator]
    @property
    def cors_origins_list(self) -> list[str]:
        """Parse CORS origins into a list."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
