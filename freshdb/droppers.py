"""Backend-specific "drop everything" implementations.

Each dropper wraps a :class:`~freshdb.manager.BaseDBManager` and empties the
configured schema (PostgreSQL) or database file (SQLite) so migrations can run
against a clean slate.  Droppers are looked up by SQLAlchemy dialect name.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Iterable, Optional, Protocol

from .manager import BaseDBManager

logger = logging.getLogger(__name__)


class TableDropper(Protocol):
    def drop_all_tables(self) -> None: ...


DROPPERS: dict[str, type] = {}


def register_dropper(dialect: str) -> Callable[[type], type]:
    def decorator(cls: type) -> type:
        DROPPERS[dialect] = cls
        return cls

    return decorator


def get_dropper(manager: BaseDBManager) -> TableDropper:
    """Return the dropper matching the manager's backend."""
    try:
        dropper_cls = DROPPERS[manager.dialect]
    except KeyError:
        raise ValueError(f"No table dropper for backend {manager.dialect!r}") from None
    return dropper_cls(manager)


def build_drop_statement(kind: str, names: Iterable[str]) -> Optional[str]:
    """Build ``DROP <kind> IF EXISTS a,b,... CASCADE`` from quoted identifiers.

    Returns ``None`` when there is nothing to drop.
    """
    names = list(names)
    if not names:
        return None
    if any(not name for name in names):
        raise ValueError(f"Empty identifier in DROP {kind} list")
    return f"DROP {kind} IF EXISTS {','.join(names)} CASCADE"


@register_dropper("postgresql")
class PostgresDropper:
    def __init__(self, manager: BaseDBManager):
        self.manager = manager

    def drop_all_tables(self) -> None:
        schema = self.get_schema()
        logger.info("Dropping all objects in schema %s", schema)

        self.drop_views(self.get_views(schema))
        self.drop_tables(self.get_tables(schema))
        self.drop_aggregates(self.get_aggregates(schema))
        self.drop_functions(self.get_functions(schema))
        self.drop_procedures(self.get_procedures(schema))
        self.drop_sequences(self.get_sequences(schema))
        self.drop_domains(self.get_domains(schema))
        self.drop_custom_types(self.get_custom_types(schema))

    def get_schema(self) -> str:
        return self.manager.get_config("schema", "public")

    # ---- Catalog queries ----
    def get_views(self, schema: str) -> list[str]:
        return self.manager.select(
            """
            SELECT table_name AS object_name
              FROM information_schema.views
             WHERE table_schema = :schema
            """,
            {"schema": schema},
        )

    def get_tables(self, schema: str) -> list[str]:
        return self.manager.select(
            """
            SELECT tablename AS object_name
              FROM pg_catalog.pg_tables
             WHERE schemaname = :schema
            """,
            {"schema": schema},
        )

    def _get_routines(self, schema: str, kinds: tuple[str, ...]) -> list[str]:
        kind_list = ", ".join(f"'{kind}'" for kind in kinds)
        return self.manager.select(
            f"""
            SELECT format('%I(%s)', p.proname, oidvectortypes(p.proargtypes)) AS object_name
              FROM pg_catalog.pg_proc p
              JOIN pg_catalog.pg_namespace ns ON p.pronamespace = ns.oid
             WHERE ns.nspname = :schema
               AND p.prokind IN ({kind_list})
             ORDER BY p.proname
            """,
            {"schema": schema},
        )

    def get_aggregates(self, schema: str) -> list[str]:
        return self._get_routines(schema, ("a",))

    def get_functions(self, schema: str) -> list[str]:
        """Return one ``name(argtypes)`` signature per overload, name quoted.

        Plain and window functions only; aggregates and procedures need their
        own DROP keyword. prokind requires PostgreSQL 11 or later.
        """
        return self._get_routines(schema, ("f", "w"))

    def get_procedures(self, schema: str) -> list[str]:
        return self._get_routines(schema, ("p",))

    def get_sequences(self, schema: str) -> list[str]:
        return self.manager.select(
            """
            SELECT sequence_name AS object_name
              FROM information_schema.sequences
             WHERE sequence_schema = :schema
            """,
            {"schema": schema},
        )

    def get_domains(self, schema: str) -> list[str]:
        return self.manager.select(
            """
            SELECT domain_name AS object_name
              FROM information_schema.domains
             WHERE domain_schema = :schema
            """,
            {"schema": schema},
        )

    def get_custom_types(self, schema: str) -> list[str]:
        """Composite, enum, range and base types defined in ``schema``.

        information_schema.user_defined_types misses most of these, so the
        query reads pg_type directly. Row types of ordinary tables, implicit
        array types and domains are filtered out.
        """
        return self.manager.select(
            """
            SELECT t.typname AS object_name
              FROM pg_catalog.pg_type t
              LEFT JOIN pg_catalog.pg_namespace n ON n.oid = t.typnamespace
             WHERE (t.typrelid = 0
                    OR (SELECT c.relkind = 'c' FROM pg_catalog.pg_class c WHERE c.oid = t.typrelid))
               AND NOT EXISTS (SELECT 1 FROM pg_catalog.pg_type el
                                WHERE el.oid = t.typelem AND el.typarray = t.oid)
               AND t.typtype <> 'd'
               AND n.nspname = :schema
            """,
            {"schema": schema},
        )

    # ---- Drops ----
    def _qualify(self, name: str) -> str:
        quote = self.manager.quote_identifier
        return f"{quote(self.get_schema())}.{quote(name)}"

    def _drop(self, kind: str, names: list[str]) -> None:
        sql = build_drop_statement(kind, [self._qualify(name) for name in names])
        if sql is None:
            logger.debug("No %s objects to drop", kind.lower())
            return
        logger.info("Dropping %d %s object(s)", len(names), kind.lower())
        self.manager.statement(sql)

    def drop_views(self, views: list[str]) -> None:
        self._drop("VIEW", views)

    def drop_tables(self, tables: list[str]) -> None:
        self._drop("TABLE", tables)

    def _drop_each(self, kind: str, signatures: list[str]) -> None:
        # Overloads are told apart by signature, so one statement each
        if not signatures:
            logger.debug("No %s objects to drop", kind.lower())
            return
        logger.info("Dropping %d %s object(s)", len(signatures), kind.lower())
        schema = self.manager.quote_identifier(self.get_schema())
        for signature in signatures:
            # Already quoted by format('%I'), only the driver escaping is missing
            signature = self.manager.escape_percents(signature)
            self.manager.statement(f"DROP {kind} IF EXISTS {schema}.{signature} CASCADE")

    def drop_aggregates(self, aggregates: list[str]) -> None:
        self._drop_each("AGGREGATE", aggregates)

    def drop_functions(self, functions: list[str]) -> None:
        self._drop_each("FUNCTION", functions)

    def drop_procedures(self, procedures: list[str]) -> None:
        self._drop_each("PROCEDURE", procedures)

    def drop_sequences(self, sequences: list[str]) -> None:
        self._drop("SEQUENCE", sequences)

    def drop_domains(self, domains: list[str]) -> None:
        self._drop("DOMAIN", domains)

    def drop_custom_types(self, types: list[str]) -> None:
        self._drop("TYPE", types)


@register_dropper("sqlite")
class SqliteDropper:
    SIDECAR_SUFFIXES = ("-wal", "-shm", "-journal")

    def __init__(self, manager: BaseDBManager):
        self.manager = manager

    def drop_all_tables(self) -> None:
        database = self.manager.get_config("database")
        if not database or database == ":memory:":
            raise ValueError("In-memory SQLite databases have no file to recreate")

        path = Path(database)
        # Pooled connections would keep the unlinked file alive
        self.manager.dispose()
        for candidate in [path, *(Path(f"{path}{s}") for s in self.SIDECAR_SUFFIXES)]:
            if candidate.exists():
                candidate.unlink()
        path.touch()
        logger.info("Recreated empty SQLite database at %s", path)
