"""Application configuration loaded from environment variables."""

from datetime import timedelta
from functools import lru_cache
from typing import Literal

from pydantic import BaseModel, ConfigDict, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy.engine import URL, make_url

# Allowed URL schemes for DATABASE_URL (module-level so validators can use it).
VALID_DATABASE_URL_PREFIXES = (
    "postgresql://",
    "postgresql+psycopg2://",
    "postgres://",
    "postgres+psycopg2://",
    "sqlite://",
)

# Symmetric algorithms only; the signing secret is a shared key.
VALID_JWT_ALGORITHMS = ("HS256", "HS384", "HS512")


class TokenConfig(BaseModel):
    """Immutable signing configuration handed to the token issuer at construction."""

    model_config = ConfigDict(frozen=True)

    secret: SecretStr
    issuer: str
    algorithm: str = "HS256"
    access_ttl: timedelta = timedelta(minutes=60)
    refresh_ttl: timedelta = timedelta(days=30)


class Settings(BaseSettings):
    """Validated application settings from env and optional .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    APP_ENV: Literal["dev", "prod"] = "dev"
    DEBUG: bool = False
    API_V1_PREFIX: str = "/api/v1"

    # Required: the process refuses to start without a database.
    DATABASE_URL: str
    # Optional credentials; override whatever the URL carries.
    DATABASE_USER: str | None = None
    DATABASE_PASSWORD: SecretStr | None = None
    DATABASE_CONNECT_TIMEOUT_SEC: int = 10

    # JWT signing; JWT_SECRET has no default on purpose.
    JWT_SECRET: SecretStr
    JWT_ISSUER: str = "ReelTrackAPI"
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60
    REFRESH_TOKEN_EXPIRE_DAYS: int = 30

    # Bcrypt cost (rounds); 12 is a good default for security vs speed.
    BCRYPT_ROUNDS: int = 12

    # Purge revoked/expired sessions (run via cron or CLI)
    SESSION_PURGE_ENABLED: bool = True

    @field_validator("DATABASE_URL")
    @classmethod
    def validate_database_url(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("DATABASE_URL must be set and non-empty")
        if not any(v.strip().startswith(prefix) for prefix in VALID_DATABASE_URL_PREFIXES):
            raise ValueError(
                "DATABASE_URL must be a PostgreSQL or SQLite URL "
                "(e.g. postgresql+psycopg2:// or sqlite://)"
            )
        return v.strip()

    @field_validator("DATABASE_CONNECT_TIMEOUT_SEC")
    @classmethod
    def validate_connect_timeout(cls, v: int) -> int:
        if v < 1 or v > 120:
            raise ValueError("DATABASE_CONNECT_TIMEOUT_SEC must be between 1 and 120")
        return v

    @field_validator("JWT_SECRET")
    @classmethod
    def validate_jwt_secret(cls, v: SecretStr) -> SecretStr:
        if not v.get_secret_value() or not v.get_secret_value().strip():
            raise ValueError("JWT_SECRET must be set and non-empty")
        return v

    @field_validator("JWT_ISSUER")
    @classmethod
    def validate_jwt_issuer(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("JWT_ISSUER must be set and non-empty")
        return v.strip()

    @field_validator("JWT_ALGORITHM")
    @classmethod
    def validate_jwt_algorithm(cls, v: str) -> str:
        algorithm = (v or "").strip().upper()
        if algorithm not in VALID_JWT_ALGORITHMS:
            raise ValueError(
                f"JWT_ALGORITHM must be one of {', '.join(VALID_JWT_ALGORITHMS)}"
            )
        return algorithm

    @field_validator("ACCESS_TOKEN_EXPIRE_MINUTES")
    @classmethod
    def validate_access_expire_minutes(cls, v: int) -> int:
        if v < 1 or v > 1440:
            raise ValueError(
                "ACCESS_TOKEN_EXPIRE_MINUTES must be between 1 and 1440 (1 min to 1 day)"
            )
        return v

    @field_validator("REFRESH_TOKEN_EXPIRE_DAYS")
    @classmethod
    def validate_refresh_expire_days(cls, v: int) -> int:
        if v < 1 or v > 365:
            raise ValueError("REFRESH_TOKEN_EXPIRE_DAYS must be between 1 and 365")
        return v

    @field_validator("BCRYPT_ROUNDS")
    @classmethod
    def validate_bcrypt_rounds(cls, v: int) -> int:
        if v < 4 or v > 16:
            raise ValueError("BCRYPT_ROUNDS must be between 4 and 16")
        return v

    @property
    def sqlalchemy_url(self) -> URL:
        """DATABASE_URL with DATABASE_USER / DATABASE_PASSWORD applied when set."""
        url = make_url(self.DATABASE_URL)
        if url.drivername in ("postgres", "postgres+psycopg2"):
            url = url.set(drivername=url.drivername.replace("postgres", "postgresql", 1))
        if self.DATABASE_USER:
            url = url.set(username=self.DATABASE_USER)
        if self.DATABASE_PASSWORD is not None:
            url = url.set(password=self.DATABASE_PASSWORD.get_secret_value())
        return url

    def token_config(self) -> TokenConfig:
        """Freeze the JWT settings into the object the token issuer is built from."""
        return TokenConfig(
            secret=self.JWT_SECRET,
            issuer=self.JWT_ISSUER,
            algorithm=self.JWT_ALGORITHM,
            access_ttl=timedelta(minutes=self.ACCESS_TOKEN_EXPIRE_MINUTES),
            refresh_ttl=timedelta(days=self.REFRESH_TOKEN_EXPIRE_DAYS),
        )


@lru_cache
def get_settings() -> Settings:
    """Return cached settings instance (safe to call from dependencies)."""
    return Settings()


settings = get_settings()
