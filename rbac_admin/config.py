import os
import threading
from urllib.parse import urlparse

from dotenv import load_dotenv
from pydantic import BaseModel, Field


load_dotenv()

SUPPORTED_DATABASE_SCHEMES = ("postgresql+asyncpg", "sqlite+aiosqlite")


def _parse_bool(name: str, raw: str) -> bool:
    value = raw.strip().lower()
    if value in {"1", "true", "yes", "on"}:
        return True
    if value in {"0", "false", "no", "off"}:
        return False
    raise ValueError(f"{name} must be a boolean value")


class Settings(BaseModel):
    app_name: str = Field(default="RBAC Admin")
    debug: bool = Field(default=False)
    database_url: str = Field(default="")
    db_pool_size: int = Field(default=5)
    db_max_overflow: int = Field(default=10)
    db_pool_recycle: int = Field(default=1800)
    db_pool_pre_ping: bool = Field(default=True)
    bcrypt_rounds: int = Field(default=12)
    principal_header: str = Field(default="X-Principal-Id")
    seed_admin_email: str | None = Field(default=None)
    seed_admin_password: str | None = Field(default=None)

    @property
    def is_sqlite(self) -> bool:
        return urlparse(self.database_url).scheme.startswith("sqlite")

    @classmethod
    def from_env(cls) -> "Settings":
        database_url = os.getenv("DATABASE_URL", "").strip()
        if not database_url:
            raise ValueError("DATABASE_URL environment variable must be set")

        parsed_db = urlparse(database_url)
        if parsed_db.scheme not in SUPPORTED_DATABASE_SCHEMES:
            raise ValueError(
                "DATABASE_URL must start with one of: "
                + ", ".join(f"'{scheme}://'" for scheme in SUPPORTED_DATABASE_SCHEMES)
            )
        if parsed_db.scheme == "postgresql+asyncpg" and not parsed_db.hostname:
            raise ValueError("DATABASE_URL must include hostname")

        db_pool_size = int(os.getenv("DB_POOL_SIZE", cls.model_fields["db_pool_size"].default))
        if db_pool_size <= 0:
            raise ValueError("DB_POOL_SIZE must be greater than 0")

        db_max_overflow = int(
            os.getenv("DB_MAX_OVERFLOW", cls.model_fields["db_max_overflow"].default)
        )
        if db_max_overflow < 0:
            raise ValueError("DB_MAX_OVERFLOW must be greater than or equal to 0")

        db_pool_recycle = int(
            os.getenv("DB_POOL_RECYCLE", cls.model_fields["db_pool_recycle"].default)
        )
        if db_pool_recycle <= 0:
            raise ValueError("DB_POOL_RECYCLE must be greater than 0")

        db_pool_pre_ping = _parse_bool(
            "DB_POOL_PRE_PING",
            os.getenv("DB_POOL_PRE_PING", str(cls.model_fields["db_pool_pre_ping"].default)),
        )

        # bcrypt accepts cost factors 4..31
        bcrypt_rounds = int(os.getenv("BCRYPT_ROUNDS", cls.model_fields["bcrypt_rounds"].default))
        if not 4 <= bcrypt_rounds <= 31:
            raise ValueError("BCRYPT_ROUNDS must be between 4 and 31")

        principal_header = os.getenv(
            "PRINCIPAL_HEADER", cls.model_fields["principal_header"].default
        ).strip()
        if not principal_header:
            raise ValueError("PRINCIPAL_HEADER must not be empty")

        seed_admin_email = os.getenv("SEED_ADMIN_EMAIL", "").strip() or None
        seed_admin_password = os.getenv("SEED_ADMIN_PASSWORD") or None
        if (seed_admin_email is None) != (seed_admin_password is None):
            raise ValueError(
                "SEED_ADMIN_EMAIL and SEED_ADMIN_PASSWORD must be set together"
            )

        return cls(
            app_name=os.getenv("APP_NAME", cls.model_fields["app_name"].default),
            debug=_parse_bool("DEBUG", os.getenv("DEBUG", "false")),
            database_url=database_url,
            db_pool_size=db_pool_size,
            db_max_overflow=db_max_overflow,
            db_pool_recycle=db_pool_recycle,
            db_pool_pre_ping=db_pool_pre_ping,
            bcrypt_rounds=bcrypt_rounds,
            principal_header=principal_header,
            seed_admin_email=seed_admin_email,
            seed_admin_password=seed_admin_password,
        )


# Settings are built on first access so importing never validates the environment.
_settings_instance: Settings | None = None
_settings_lock = threading.Lock()


def get_settings() -> Settings:
    """Get settings instance, creating it on first access.

    Uses double-checked locking so concurrent first accesses build the
    instance exactly once.

    Raises:
        ValueError: If required environment variables are missing or invalid
    """
    global _settings_instance

    if _settings_instance is not None:
        return _settings_instance

    with _settings_lock:
        if _settings_instance is None:
            _settings_instance = Settings.from_env()

    return _settings_instance


def reset_settings() -> None:
    """Drop the cached instance so the next access re-reads the environment."""
    global _settings_instance
    with _settings_lock:
        _settings_instance = None


class _SettingsProxy:
    """Proxy to defer settings creation until first attribute access."""

    def __getattr__(self, name: str):
        return getattr(get_settings(), name)


settings = _SettingsProxy()  # type: ignore[assignment]
