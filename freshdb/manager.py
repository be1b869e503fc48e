from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Mapping, Optional

from dotenv import load_dotenv
from sqlalchemy import create_engine, text
from sqlalchemy.engine import URL, Engine

# Ensure project root .env is loaded once when this module is imported
PROJECT_ROOT = Path(__file__).resolve().parents[1]
load_dotenv(PROJECT_ROOT / ".env")


class BaseDBManager:
    def __init__(self, engine: Engine, config: Optional[Mapping[str, Any]] = None):
        self.engine = engine
        self.config: dict[str, Any] = {"database": engine.url.database}
        self.config.update(config or {})

    @property
    def dialect(self) -> str:
        return self.engine.dialect.name

    def get_config(self, name: str, default: Any = None) -> Any:
        return self.config.get(name, default)

    # ---- Query helpers ----
    def select(
        self,
        sql: str,
        params: Optional[dict[str, Any]] = None,
        column: str = "object_name",
    ) -> list[str]:
        """Run a read query and return the values of ``column`` in row order."""
        with self.engine.begin() as conn:
            result = conn.execute(text(sql), params or {})
            return [row._mapping[column] for row in result]

    def statement(self, sql: str) -> None:
        # DDL goes to the driver as-is, so "%" must already be escaped
        with self.engine.begin() as conn:
            conn.exec_driver_sql(sql)

    def quote_identifier(self, name: str) -> str:
        return self.engine.dialect.identifier_preparer.quote_identifier(name)

    def escape_percents(self, fragment: str) -> str:
        """Escape ``%`` for pyformat drivers, as quote_identifier already does."""
        if self.engine.dialect.identifier_preparer._double_percents:
            return fragment.replace("%", "%%")
        return fragment

    def dispose(self) -> None:
        self.engine.dispose()


class PostgresManager(BaseDBManager):
    @staticmethod
    def from_env() -> "PostgresManager":
        user = os.getenv("POSTGRES_USER", "postgres")
        password = os.getenv("POSTGRES_PASSWORD", "password")
        host = os.getenv("POSTGRES_HOST", "localhost")
        port = int(os.getenv("POSTGRES_PORT", "5432"))
        db = os.getenv("POSTGRES_DB", "postgres_db")
        schema = os.getenv("POSTGRES_SCHEMA", "public")
        url = URL.create(
            drivername="postgresql+psycopg",
            username=user,
            password=password,
            host=host,
            port=port,
            database=db,
        ).render_as_string(hide_password=False)
        engine = create_engine(url, pool_pre_ping=True)
        return PostgresManager(engine, {"schema": schema})


class SqliteManager(BaseDBManager):
    @staticmethod
    def from_env() -> "SqliteManager":
        path = os.getenv("SQLITE_DATABASE", "database.sqlite")
        url = URL.create(drivername="sqlite", database=path)
        return SqliteManager(create_engine(url), {"database": path})


MANAGERS: dict[str, type[BaseDBManager]] = {
    "pgsql": PostgresManager,
    "postgres": PostgresManager,
    "postgresql": PostgresManager,
    "sqlite": SqliteManager,
}


def manager_from_env(connection: Optional[str] = None) -> BaseDBManager:
    """Build the manager named by ``connection`` or ``DB_CONNECTION``."""
    name = (connection or os.getenv("DB_CONNECTION", "pgsql")).lower()
    try:
        manager_cls = MANAGERS[name]
    except KeyError:
        raise ValueError(
            f"Unsupported DB_CONNECTION {name!r} (expected one of {sorted(MANAGERS)})"
        ) from None
    return manager_cls.from_env()


__all__ = [
    "BaseDBManager",
    "PostgresManager",
    "SqliteManager",
    "manager_from_env",
]
