"""Application settings using Pydantic.

DB selection (deterministic, ONE place):
  - DATABASE_URL set and non-empty → that URL (any SQLAlchemy dialect).
  - DATABASE_URL absent/empty → SQLite (DB_SQLITE_PATH, default data/repokit.db).
.env is loaded from the project root deterministically (not cwd-dependent).
"""

import re
from functools import lru_cache
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

MEMORY_SQLITE = ":memory:"


def _project_root() -> Path:
    """Project root. settings.py is in src/repokit/config/."""
    return Path(__file__).resolve().parent.parent.parent.parent


def _ensure_env_loaded() -> None:
    """Load .env from project root before any settings. Idempotent."""
    candidate = _project_root() / ".env"
    if candidate.exists():
        load_dotenv(candidate, override=False)


_ensure_env_loaded()


class DatabaseSettings(BaseSettings):
    """Database connection settings. Source of truth: DATABASE_URL or DB_SQLITE_PATH."""

    model_config = SettingsConfigDict(
        env_prefix="DB_",
        env_file=(str(_project_root() / ".env"), ".env"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    database_url: Optional[str] = Field(
        default=None,
        description="SQLAlchemy URL; when absent, uses SQLite.",
        validation_alias="DATABASE_URL",
    )

    # SQLite: path relative to project root, or ":memory:".
    sqlite_path: Optional[str] = Field(
        default="data/repokit.db",
        description="SQLite path (relative to project root); used when DATABASE_URL is not set",
    )

    echo: bool = Field(default=False, description="Log emitted SQL")
    pool_size: int = Field(default=5, description="Connection pool size")
    pool_timeout: int = Field(default=30, description="Pool timeout in seconds")
    pool_recycle: int = Field(default=1800, description="Connection recycle time in seconds")

    def _use_external(self) -> bool:
        """True iff DATABASE_URL is explicitly set."""
        return bool((self.database_url or "").strip())

    def _is_sqlite(self) -> bool:
        return self.url.startswith("sqlite")

    def _resolved_sqlite_path(self) -> Path | None:
        """Absolute path to SQLite file, None for an in-memory database."""
        raw = (self.sqlite_path or "data/repokit.db").strip()
        if raw == MEMORY_SQLITE:
            return None
        path = Path(raw)
        if not path.is_absolute():
            path = (_project_root() / path).resolve()
        return path

    def _redacted_dsn(self) -> str:
        url = (self.database_url or "").strip()
        return re.sub(r":([^:@/]+)@", r":***@", url) if url else ""

    @property
    def url(self) -> str:
        """Build database URL. Single source of truth for engine creation."""
        if self._use_external():
            return (self.database_url or "").strip()
        path = self._resolved_sqlite_path()
        if path is None:
            return f"sqlite:///{MEMORY_SQLITE}"
        path.parent.mkdir(parents=True, exist_ok=True)
        return f"sqlite:///{path.as_posix()}"

    def db_info_for_logging(self) -> str:
        """Single line for startup log: redacted DSN or SQLite location."""
        if self._use_external():
            return self._redacted_dsn()
        path = self._resolved_sqlite_path()
        return f"SQLite @ {path.as_posix() if path else MEMORY_SQLITE}"


class RepositorySettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="REPOKIT_REPO_")

    batch_size: int = Field(default=500, gt=0, description="Rows per chunk for bulk inserts")


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="REPOKIT_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    debug: bool = Field(default=False, description="Debug mode")

    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    repository: RepositorySettings = Field(default_factory=RepositorySettings)


@lru_cache
def get_settings() -> Settings:
    """Cached settings instance."""
    return Settings()
