import os
from dataclasses import dataclass, field
from typing import List, Optional
from dotenv import load_dotenv

from exceptions import ConfigurationError
from schema import FieldSchema, MOOD_SCHEMA, get_schema


DEFAULT_FRONTEND_URLS = ["http://localhost:5500", "http://127.0.0.1:5500"]


@dataclass
class Settings:
    database_url: str
    schema: FieldSchema = MOOD_SCHEMA
    local_cache_dir: str = ".mood_cache"
    remote_timeout: float = 10.0
    duplicate_window_seconds: float = 30.0
    retrieval_cap: int = 100
    operator_password: Optional[str] = None
    jwt_secret: str = "devsecret"
    allowed_origins: List[str] = field(default_factory=lambda: list(DEFAULT_FRONTEND_URLS))
    port: int = 5000
    environment: str = "development"

    @property
    def auth_enabled(self) -> bool:
        return bool(self.operator_password)


def _database_url() -> str:
    url = os.getenv("DATABASE_URL")
    if url:
        return url

    # fallback for local development, only when a host is given explicitly
    host = os.getenv("DB_HOST")
    if not host:
        raise ConfigurationError(
            "Backend connection is not configured: set DATABASE_URL "
            "(or DB_HOST with DB_USER/DB_PASSWORD/DB_PORT/DB_NAME)."
        )
    user = os.getenv("DB_USER", "postgres")
    password = os.getenv("DB_PASSWORD", "")
    port = os.getenv("DB_PORT", "5432")
    name = os.getenv("DB_NAME", "mood_db")
    return f"postgresql://{user}:{password}@{host}:{port}/{name}"


def _allowed_origins() -> List[str]:
    # Support multiple URLs: comma-separated in FRONTEND_URL env var
    raw = os.getenv("FRONTEND_URL", "")
    urls = [url.strip() for url in raw.split(",") if url.strip()]
    seen = set()
    return [x for x in [*urls, *DEFAULT_FRONTEND_URLS] if not (x in seen or seen.add(x))]


def _number(name: str, default, cast):
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return cast(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be a number, got '{raw}'") from None


def load_settings() -> Settings:
    """Read settings from the environment (and .env). Raises ConfigurationError."""
    load_dotenv()

    return Settings(
        database_url=_database_url(),
        schema=get_schema(os.getenv("MOOD_SCHEMA", "mood")),
        local_cache_dir=os.getenv("LOCAL_CACHE_DIR", ".mood_cache"),
        remote_timeout=_number("REMOTE_TIMEOUT", 10.0, float),
        duplicate_window_seconds=_number("DUPLICATE_WINDOW_SECONDS", 30.0, float),
        retrieval_cap=_number("RETRIEVAL_CAP", 100, int),
        operator_password=os.getenv("OPERATOR_PASSWORD") or None,
        jwt_secret=os.getenv("JWT_SECRET", "devsecret"),
        allowed_origins=_allowed_origins(),
        port=_number("PORT", 5000, int),
        environment=os.getenv("FLASK_ENV", "development"),
    )
