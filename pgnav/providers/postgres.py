"""PostgreSQL catalog queries.

Every query runs under a ``statement_timeout`` derived from the call's
deadline and is wired to the shared cancellation context, so a stuck query
can never keep the process from exiting.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, TypeVar

import psycopg
from psycopg import errors as pg_errors
from psycopg.rows import class_row

from ..context import Context
from ..errors import CancelError, ProviderError, ProviderTimeoutError

log = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_TIMEOUT = 5.0


@dataclass
class Schema:
    name: str
    owner: str = ""
    catalog_name: str = ""
    table_count: int = 0


@dataclass
class Table:
    schema: str
    name: str
    catalog: str = ""
    table_type: str = ""
    size: str = ""
    data_size: str = ""
    external_size: str = ""
    rows: float | None = None
    # Pretty-printed relation sizes, filled by the Tables listing only.
    table_size: str = ""
    indexes_size: str = ""
    total_size: str = ""


@dataclass
class View:
    schema: str
    name: str
    definition: str = ""
    owner: str = ""
    is_populated: bool | None = None
    referenced_schema: str = ""
    referenced_name: str = ""


@dataclass
class SchemaTableCount:
    schema: str
    table_count: int


@dataclass
class RowBucket:
    row_count: str
    table_count: int


@dataclass
class ColumnFrequency:
    name: str
    tables: int
    percent_tables: Decimal


@dataclass
class ServerVersion:
    version: str

    def __str__(self) -> str:
        return self.version


_SYSTEM_SCHEMAS = "('information_schema', 'pg_catalog')"

_TABLE_COUNTS = """
    WITH table_counts AS (
        SELECT table_schema, count(*) AS table_count
        FROM information_schema.tables
        WHERE table_type = 'BASE TABLE'
        GROUP BY table_schema
    )"""

SCHEMAS = _TABLE_COUNTS + """
    SELECT s.schema_name AS name, s.schema_owner AS owner, s.catalog_name,
           COALESCE(tc.table_count, 0) AS table_count
    FROM information_schema.schemata s
    LEFT JOIN table_counts tc ON tc.table_schema = s.schema_name
    ORDER BY s.schema_owner, s.schema_name"""

SCHEMAS_USER_CREATED = _TABLE_COUNTS + """
    SELECT s.nspname AS name, u.usename AS owner,
           COALESCE(sch.catalog_name, '') AS catalog_name,
           COALESCE(tc.table_count, 0) AS table_count
    FROM pg_catalog.pg_namespace s
    JOIN pg_catalog.pg_user u ON u.usesysid = s.nspowner
    LEFT JOIN information_schema.schemata sch ON sch.schema_name = s.nspname
    LEFT JOIN table_counts tc ON tc.table_schema = s.nspname
    WHERE s.nspname NOT IN ('information_schema', 'pg_catalog', 'public')
      AND s.nspname NOT LIKE 'pg_toast%'
      AND s.nspname NOT LIKE 'pg_temp_%'
    ORDER BY name"""

TABLES = """
    WITH rels AS (
        SELECT table_schema, table_name, table_catalog, table_type,
               (quote_ident(table_schema) || '.' || quote_ident(table_name))::regclass AS rel
        FROM information_schema.tables
    )
    SELECT table_schema AS schema, table_name AS name,
           table_catalog AS catalog, table_type,
           COALESCE(pg_size_pretty(pg_table_size(rel)), '') AS table_size,
           COALESCE(pg_size_pretty(pg_indexes_size(rel)), '') AS indexes_size,
           COALESCE(pg_size_pretty(pg_total_relation_size(rel)), '') AS total_size
    FROM rels
    ORDER BY table_schema, table_name"""

VIEWS = f"""
    SELECT u.view_schema AS schema, u.view_name AS name,
           u.table_schema AS referenced_schema, u.table_name AS referenced_name,
           v.view_definition AS definition
    FROM information_schema.view_table_usage u
    JOIN information_schema.views v
      ON u.view_schema = v.table_schema AND u.view_name = v.table_name
    WHERE u.table_schema NOT IN {_SYSTEM_SCHEMAS}
    ORDER BY u.view_schema, u.view_name"""

# The first relation a materialized view's rewrite rule depends on.
MATERIALIZED_VIEWS = """
    SELECT m.schemaname AS schema, m.matviewname AS name, m.matviewowner AS owner,
           m.ispopulated AS is_populated, m.definition,
           COALESCE(ref.referenced_schema, '') AS referenced_schema,
           COALESCE(ref.referenced_name, '') AS referenced_name
    FROM pg_matviews m
    LEFT JOIN LATERAL (
        SELECT rn.nspname AS referenced_schema, rc.relname AS referenced_name
        FROM pg_rewrite r
        JOIN pg_depend d
          ON d.objid = r.oid
         AND d.classid = 'pg_rewrite'::regclass
         AND d.refclassid = 'pg_class'::regclass
        JOIN pg_class rc ON rc.oid = d.refobjid
        JOIN pg_namespace rn ON rn.oid = rc.relnamespace
        WHERE r.ev_class = (quote_ident(m.schemaname) || '.' || quote_ident(m.matviewname))::regclass
          AND rc.oid <> r.ev_class
        ORDER BY rn.nspname, rc.relname
        LIMIT 1
    ) ref ON true
    ORDER BY m.schemaname, m.matviewname"""

TABLE_COUNT_PER_SCHEMA = """
    SELECT table_schema AS schema, count(*) AS table_count
    FROM information_schema.tables
    WHERE table_type = 'BASE TABLE'
    GROUP BY table_schema
    ORDER BY table_schema"""

TABLES_BY_SIZE = """
    SELECT schemaname AS schema, relname AS name,
           pg_size_pretty(pg_relation_size(relid)) AS size
    FROM pg_catalog.pg_statio_user_tables
    ORDER BY pg_relation_size(relid) DESC"""

TABLES_BY_SIZE_WITH_INDEXES = """
    SELECT schemaname AS schema, relname AS name,
           pg_size_pretty(pg_total_relation_size(relid)) AS size,
           pg_size_pretty(pg_relation_size(relid)) AS data_size,
           pg_size_pretty(pg_total_relation_size(relid) - pg_relation_size(relid)) AS external_size
    FROM pg_catalog.pg_statio_user_tables
    ORDER BY pg_total_relation_size(relid) DESC, pg_relation_size(relid) DESC"""

TABLE_ROW_COUNTS = f"""
    SELECT n.nspname AS schema, c.relname AS name, c.reltuples AS rows
    FROM pg_class c JOIN pg_namespace n ON n.oid = c.relnamespace
    WHERE c.relkind = 'r' AND n.nspname NOT IN {_SYSTEM_SCHEMAS}
    ORDER BY c.reltuples DESC"""

EMPTY_TABLES = f"""
    SELECT n.nspname AS schema, c.relname AS name
    FROM pg_class c JOIN pg_namespace n ON n.oid = c.relnamespace
    WHERE c.relkind = 'r' AND n.nspname NOT IN {_SYSTEM_SCHEMAS} AND c.reltuples = 0
    ORDER BY n.nspname, c.relname"""

TABLES_GROUPED_BY_ROWS = f"""
    SELECT row_count, count(*) AS table_count
    FROM (
        SELECT CASE WHEN c.reltuples > 1000000000 THEN '1b rows and more'
                    WHEN c.reltuples > 1000000 THEN '1m - 1b rows'
                    WHEN c.reltuples > 1000 THEN '1k - 1m rows'
                    WHEN c.reltuples > 100 THEN '100 - 1k rows'
                    WHEN c.reltuples > 10 THEN '10 - 100 rows'
                    ELSE '0 - 10 rows' END AS row_count,
               c.reltuples AS rows
        FROM pg_class c JOIN pg_namespace n ON n.oid = c.relnamespace
        WHERE c.relkind = 'r' AND n.nspname NOT IN {_SYSTEM_SCHEMAS}
    ) buckets
    GROUP BY row_count
    ORDER BY max(rows)"""

COLUMN_NAME_FREQUENCIES = f"""
    SELECT c.column_name AS name, count(*) AS tables,
           round(100.0 * count(*)::decimal / (
               SELECT count(*)
               FROM information_schema.tables
               WHERE table_type = 'BASE TABLE' AND table_schema NOT IN {_SYSTEM_SCHEMAS}
           ), 2) AS percent_tables
    FROM information_schema.columns c
    JOIN information_schema.tables t
      ON t.table_schema = c.table_schema AND t.table_name = c.table_name
    WHERE t.table_type = 'BASE TABLE' AND t.table_schema NOT IN {_SYSTEM_SCHEMAS}
    GROUP BY c.column_name
    HAVING count(*) > 1
    ORDER BY count(*) DESC"""

SERVER_VERSION = "SELECT version() AS version"


class PostgresClient:
    """Catalog queries over one psycopg connection (autocommit expected)."""

    def __init__(self, conn: psycopg.Connection, timeout: float = DEFAULT_TIMEOUT):
        self.conn = conn
        self.timeout = timeout

    def _cancel(self) -> None:
        cancel = getattr(self.conn, "cancel_safe", None) or self.conn.cancel
        cancel()

    def _select(self, ctx: Context, row_type: type[T], query: str, params: Any = None) -> list[T]:
        ctx.raise_if_cancelled()
        call = ctx.child(self.timeout)
        remaining = call.remaining()
        timeout_ms = max(1, int(remaining * 1000)) if remaining is not None else 0
        unregister = call.on_cancel(self._cancel)
        try:
            self.conn.execute(
                "SELECT set_config('statement_timeout', %s, false)", (str(timeout_ms),)
            )
            with self.conn.cursor(row_factory=class_row(row_type)) as cur:
                cur.execute(query, params)
                rows = cur.fetchall()
        except pg_errors.QueryCanceled as e:
            if ctx.cancelled:
                raise CancelError() from e
            raise ProviderTimeoutError(f"query timed out after {self.timeout:g}s", e) from e
        except psycopg.Error as e:
            if ctx.cancelled:
                raise CancelError() from e
            raise ProviderError(f"query failed: {e}", e) from e
        finally:
            unregister()
        log.debug("%s: %d rows", row_type.__name__, len(rows))
        return rows

    def schemas(self, ctx: Context) -> list[Schema]:
        return self._select(ctx, Schema, SCHEMAS)

    def schemas_user_created(self, ctx: Context) -> list[Schema]:
        return self._select(ctx, Schema, SCHEMAS_USER_CREATED)

    def tables(self, ctx: Context) -> list[Table]:
        return self._select(ctx, Table, TABLES)

    def views(self, ctx: Context) -> list[View]:
        return self._select(ctx, View, VIEWS)

    def materialized_views(self, ctx: Context) -> list[View]:
        return self._select(ctx, View, MATERIALIZED_VIEWS)

    def table_count_per_schema(self, ctx: Context) -> list[SchemaTableCount]:
        return self._select(ctx, SchemaTableCount, TABLE_COUNT_PER_SCHEMA)

    def tables_by_size(self, ctx: Context) -> list[Table]:
        return self._select(ctx, Table, TABLES_BY_SIZE)

    def tables_by_size_with_indexes(self, ctx: Context) -> list[Table]:
        return self._select(ctx, Table, TABLES_BY_SIZE_WITH_INDEXES)

    def table_row_counts(self, ctx: Context) -> list[Table]:
        return self._select(ctx, Table, TABLE_ROW_COUNTS)

    def empty_tables(self, ctx: Context) -> list[Table]:
        return self._select(ctx, Table, EMPTY_TABLES)

    def tables_grouped_by_rows(self, ctx: Context) -> list[RowBucket]:
        return self._select(ctx, RowBucket, TABLES_GROUPED_BY_ROWS)

    def column_name_frequencies(self, ctx: Context) -> list[ColumnFrequency]:
        return self._select(ctx, ColumnFrequency, COLUMN_NAME_FREQUENCIES)

    def server_version(self, ctx: Context) -> list[ServerVersion]:
        return self._select(ctx, ServerVersion, SERVER_VERSION)
