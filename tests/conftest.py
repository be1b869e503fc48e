from __future__ import annotations

import re

import pytest
from sqlalchemy.dialects.postgresql.base import PGDialect

# Catalog marker found in each enumeration query -> object kind
CATALOG_MARKERS = {
    "information_schema.views": "VIEW",
    "pg_catalog.pg_tables": "TABLE",
    "p.prokind IN ('a')": "AGGREGATE",
    "p.prokind IN ('f', 'w')": "FUNCTION",
    "p.prokind IN ('p')": "PROCEDURE",
    "information_schema.sequences": "SEQUENCE",
    "information_schema.domains": "DOMAIN",
    "pg_catalog.pg_type": "TYPE",
}

DROP_RE = re.compile(r"^DROP (\w+) IF EXISTS (.+) CASCADE$")


class FakePostgresManager:
    """Serves catalog rows from a dict and records executed statements.

    A DROP of a kind empties that kind in the fake catalog, so enumeration
    after ``drop_all_tables()`` reflects the post-condition.
    """

    dialect = "postgresql"

    def __init__(self, objects=None, schema="public"):
        self.objects = {kind: list(names) for kind, names in (objects or {}).items()}
        self.config = {"schema": schema}
        self.queries: list[tuple[str, dict]] = []
        self.statements: list[str] = []
        self._preparer = PGDialect().identifier_preparer

    def get_config(self, name, default=None):
        return self.config.get(name, default)

    def select(self, sql, params=None, column="object_name"):
        self.queries.append((sql, params or {}))
        for marker, kind in CATALOG_MARKERS.items():
            if marker in sql:
                return list(self.objects.get(kind, []))
        raise AssertionError(f"Unexpected catalog query: {sql}")

    def statement(self, sql):
        self.statements.append(sql)
        match = DROP_RE.match(sql)
        if match:
            self.objects[match.group(1)] = []

    def quote_identifier(self, name):
        return self._preparer.quote_identifier(name)

    def escape_percents(self, fragment):
        return fragment.replace("%", "%%") if self._preparer._double_percents else fragment

    def dispose(self):
        pass


@pytest.fixture
def fake_pg():
    return FakePostgresManager
