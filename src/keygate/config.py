"""Service settings read from the environment and an optional .env file."""

from enum import StrEnum
from functools import lru_cache

from pydantic import SecretStr, computed_field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Environment(StrEnum):
    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"
    TESTING = "testing"


class Settings(BaseSettings):
    """keygate settings.

    The API key fields decide which request is treated as the login
    exchange and how presented keys are digested. Postgres fields follow
    the official image's variable names; the password is a SecretStr.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # --- App ---
    environment: Environment = Environment.DEVELOPMENT
    log_level: str = "DEBUG"
    # --- CORS ---
    cors_allowed_origins: list[str] = []
    cors_allow_credentials: bool = False
    cors_allowed_methods: list[str] = ["GET", "POST"]
    cors_allowed_headers: list[str] = ["Content-Type", "X-API-Key"]

    # --- API key authentication ---
    api_key_header: str = "X-API-Key"
    api_key_login_method: str = "POST"
    api_key_login_path: str = "/api/auth-by-api-key"
    api_key_hash_algorithm: str = "sha256"

    # --- PostgreSQL ---
    postgres_user: str = "keygate"
    postgres_password: SecretStr = SecretStr("secret")
    postgres_db: str = "keygate"
    postgres_host: str = "localhost"
    postgres_port: int = 5432

    @computed_field  # type: ignore[prop-decorator]
    @property
    def database_url(self) -> str:
        """psycopg v3 URL, usable by both the async app and sync scripts."""
        password = self.postgres_password.get_secret_value()
        return (
            f"postgresql+psycopg://{self.postgres_user}:{password}"
            f"@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"
        )

    @model_validator(mode="after")
    def validate_api_key_login(self) -> "Settings":
        """Normalize the login method and reject unusable login routes."""
        self.api_key_login_method = self.api_key_login_method.strip().upper()
        errors: list[str] = []
        if not self.api_key_header.strip():
            errors.append("api_key_header must not be blank")
        if not self.api_key_login_method:
            errors.append("api_key_login_method must not be blank")
        if not self.api_key_login_path.startswith("/"):
            errors.append(
                f"api_key_login_path must start with '/': "
                f"'{self.api_key_login_path}'"
            )
        if errors:
            raise ValueError("; ".join(errors))
        return self

    # --- Convenience properties ---
    @property
    def is_dev(self) -> bool:
        return self.environment == Environment.DEVELOPMENT

    @property
    def is_prod(self) -> bool:
        return self.environment == Environment.PRODUCTION

    @property
    def is_testing(self) -> bool:
        return self.environment == Environment.TESTING


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Settings are read once per process."""
    return Settings()


settings = get_settings()
