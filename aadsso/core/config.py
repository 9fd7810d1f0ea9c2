"""
Service-level settings (database, HTTP, logging).

SSO defaults live separately in ``aadsso.core.sso.config`` under the
``AADSSO_`` prefix.
"""

from typing import List, Optional
from urllib.parse import urlsplit

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Passwords that ship in docker-compose examples and must not reach production
_INSECURE_DB_PASSWORDS = frozenset({"postgres", "password", "changeme", "aadsso"})


def _database_password(database_url: Optional[str]) -> Optional[str]:
    if not database_url:
        return None
    try:
        return urlsplit(database_url).password
    except ValueError:
        return None


class Settings(BaseSettings):
    # env_parse_delimiter lets ALLOWED_ORIGINS come in as "a,b,c"
    model_config = SettingsConfigDict(env_file=".env", env_parse_delimiter=",", extra="ignore")

    PROJECT_NAME: str = "AAD SSO Settings Service"
    API_V1_STR: str = "/api/v1"
    ENVIRONMENT: str = "development"
    DEBUG: bool = True

    # Logging (see aadsso.core.logging_config.setup_logging)
    LOG_LEVEL: Optional[str] = None
    JSON_LOGS: Optional[bool] = None

    # The status endpoint is read by the login page
    ALLOWED_ORIGINS: List[str] | str = Field(
        default_factory=lambda: ["http://localhost:3000"],
        validation_alias=AliasChoices("ALLOWED_ORIGINS", "BACKEND_CORS_ORIGINS"),
    )

    # Option store database
    POSTGRES_USER: str = "aadsso"
    POSTGRES_PASSWORD: str = "aadsso"
    POSTGRES_SERVER: str = Field(
        default="db",
        validation_alias=AliasChoices("POSTGRES_SERVER", "POSTGRES_HOST"),
    )
    POSTGRES_PORT: int = 5432
    POSTGRES_DB: str = "aadsso"
    DATABASE_URL: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("DATABASE_URL", "SQLALCHEMY_DATABASE_URI"),
    )
    DB_POOL_SIZE: int = Field(default=5, ge=1)
    DB_MAX_OVERFLOW: int = Field(default=10, ge=0)
    SQLALCHEMY_ECHO: bool = False

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT.lower() == "production"

    def model_post_init(self, __context):
        """Fill DATABASE_URL from POSTGRES_* and refuse insecure production settings."""
        if not self.DATABASE_URL:
            self.DATABASE_URL = (
                f"postgresql+asyncpg://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}"
                f"@{self.POSTGRES_SERVER}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"
            )

        if not self.is_production:
            return

        errors = self._production_errors()
        if errors:
            raise ValueError(
                "Production configuration errors:\n" + "\n".join(f"  - {e}" for e in errors)
            )

    def _production_errors(self) -> list[str]:
        errors = []
        if _database_password(self.DATABASE_URL) in _INSECURE_DB_PASSWORDS:
            errors.append(
                "Database password is insecure. Set POSTGRES_PASSWORD or DATABASE_URL "
                "with a strong password."
            )
        if self.DEBUG:
            errors.append("DEBUG must be False in production.")
        if "*" in self.ALLOWED_ORIGINS:
            errors.append("ALLOWED_ORIGINS must list explicit origins in production.")
        return errors

    @field_validator("ALLOWED_ORIGINS", mode="before")
    @classmethod
    def _split_origins(cls, value):
        if isinstance(value, str):
            return [origin.strip() for origin in value.split(",") if origin.strip()]
        return value


settings = Settings()
