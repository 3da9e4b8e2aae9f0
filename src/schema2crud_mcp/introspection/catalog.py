"""Catalog access backends.

A catalog backend answers read-only metadata questions about one table at
a time. `CatalogReader` calls these synchronously from worker threads, so
every method opens its own pooled connection.

Classes:
- CatalogSource: Protocol implemented by all backends
- PostgresCatalog: information_schema / pg_catalog queries for PostgreSQL
- InspectorCatalog: Dialect-portable backend on the SQLAlchemy Inspector
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import TYPE_CHECKING, Any, Protocol

from fastmcp.utilities.logging import get_logger
import sqlalchemy as sa

from .facts import (
    CheckClause,
    EnumDeclaration,
    ForeignKeyRef,
    InboundReference,
    RawColumn,
    TableListing,
)
from .utils import leading_identifier, normalize_type_name

if TYPE_CHECKING:
    from collections.abc import Iterator

    from sqlalchemy.engine import Connection, Engine
    from sqlalchemy.engine.reflection import Inspector

_logger = get_logger("schema_introspection.catalog")


class CatalogSource(Protocol):
    """Read-only catalog questions scoped to one table name."""

    def table_exists(self, table_name: str) -> bool: ...

    def list_tables(self) -> list[TableListing]: ...

    def list_columns(self, table_name: str) -> list[RawColumn]: ...

    def list_primary_keys(self, table_name: str) -> list[str]: ...

    def list_foreign_keys(self, table_name: str) -> list[ForeignKeyRef]: ...

    def list_enum_columns(self, table_name: str) -> list[EnumDeclaration]: ...

    def list_check_clauses(self, table_name: str) -> list[CheckClause]: ...

    def list_unique_constraints(self, table_name: str) -> list[list[str]]: ...

    def list_inbound_references(self, table_name: str) -> list[InboundReference]: ...


# ---------------------------------------------------------------------------
# PostgreSQL
# ---------------------------------------------------------------------------

_PG_LIST_TABLES = sa.text(
    """
    SELECT
      t.table_name,
      (SELECT COUNT(*) FROM information_schema.columns c
        WHERE c.table_schema = t.table_schema AND c.table_name = t.table_name) AS column_count
    FROM information_schema.tables t
    WHERE t.table_schema = :schema
      AND t.table_type = 'BASE TABLE'
    ORDER BY t.table_name
    """
)

_PG_COLUMNS = sa.text(
    """
    SELECT
      column_name,
      data_type,
      is_nullable,
      column_default,
      character_maximum_length,
      numeric_precision,
      numeric_scale,
      udt_name
    FROM information_schema.columns
    WHERE table_schema = :schema AND table_name = :table
    ORDER BY ordinal_position
    """
)

_PG_PRIMARY_KEYS = sa.text(
    """
    SELECT kcu.column_name
    FROM information_schema.key_column_usage kcu
    JOIN information_schema.table_constraints tc
      ON kcu.constraint_name = tc.constraint_name
     AND kcu.constraint_schema = tc.constraint_schema
    WHERE tc.table_schema = :schema
      AND tc.table_name = :table
      AND tc.constraint_type = 'PRIMARY KEY'
    ORDER BY kcu.ordinal_position
    """
)

_PG_FOREIGN_KEYS = sa.text(
    """
    SELECT
      kcu.column_name,
      ccu.table_name AS foreign_table_name,
      ccu.column_name AS foreign_column_name,
      tc.constraint_name
    FROM information_schema.key_column_usage kcu
    JOIN information_schema.constraint_column_usage ccu
      ON kcu.constraint_name = ccu.constraint_name
     AND kcu.constraint_schema = ccu.constraint_schema
    JOIN information_schema.table_constraints tc
      ON kcu.constraint_name = tc.constraint_name
     AND kcu.constraint_schema = tc.constraint_schema
    WHERE kcu.table_schema = :schema
      AND kcu.table_name = :table
      AND tc.constraint_type = 'FOREIGN KEY'
    ORDER BY kcu.ordinal_position
    """
)

_PG_ENUMS = sa.text(
    """
    SELECT
      c.column_name,
      t.typname AS enum_name,
      array_agg(e.enumlabel ORDER BY e.enumsortorder) AS enum_values
    FROM information_schema.columns c
    JOIN pg_type t ON c.udt_name = t.typname
    JOIN pg_enum e ON t.oid = e.enumtypid
    WHERE c.table_schema = :schema
      AND c.table_name = :table
      AND t.typtype = 'e'
    GROUP BY c.column_name, t.typname
    """
)

_PG_CHECK_CLAUSES = sa.text(
    """
    SELECT
      ccu.column_name,
      cc.check_clause
    FROM information_schema.check_constraints cc
    JOIN information_schema.constraint_column_usage ccu
      ON cc.constraint_name = ccu.constraint_name
     AND cc.constraint_schema = ccu.constraint_schema
    WHERE ccu.table_schema = :schema
      AND ccu.table_name = :table
      AND (cc.check_clause LIKE '%IN (%' OR cc.check_clause LIKE '%ANY%ARRAY%')
    """
)

_PG_UNIQUE_CONSTRAINTS = sa.text(
    """
    SELECT
      tc.constraint_name,
      kcu.column_name
    FROM information_schema.table_constraints tc
    JOIN information_schema.key_column_usage kcu
      ON kcu.constraint_name = tc.constraint_name
     AND kcu.constraint_schema = tc.constraint_schema
    WHERE tc.table_schema = :schema
      AND tc.table_name = :table
      AND tc.constraint_type = 'UNIQUE'
    ORDER BY tc.constraint_name, kcu.ordinal_position
    """
)

_PG_INBOUND_REFERENCES = sa.text(
    """
    SELECT
      kcu.table_name AS referencing_table,
      kcu.column_name AS referencing_column,
      rc.delete_rule
    FROM information_schema.referential_constraints rc
    JOIN information_schema.key_column_usage kcu
      ON kcu.constraint_name = rc.constraint_name
     AND kcu.constraint_schema = rc.constraint_schema
    JOIN information_schema.constraint_column_usage ccu
      ON ccu.constraint_name = rc.constraint_name
     AND ccu.constraint_schema = rc.constraint_schema
    WHERE ccu.table_schema = :schema
      AND ccu.table_name = :table
    ORDER BY kcu.table_name, kcu.column_name
    """
)


class PostgresCatalog:
    """Catalog backend issuing information_schema queries against PostgreSQL.

    Attributes:
        engine: SQLAlchemy engine (connection-pooled)
        schema: Schema the inspected tables live in
    """

    def __init__(
        self,
        engine: Engine,
        schema: str = "public",
        *,
        statement_timeout_sec: int | None = None,
    ) -> None:
        self.engine = engine
        self.schema = schema
        self._statement_timeout_sec = statement_timeout_sec

    @contextmanager
    def _connect(self) -> Iterator[Connection]:
        with self.engine.connect() as conn:
            self._apply_statement_timeout(conn)
            yield conn

    def _rows(self, query: sa.TextClause, **params: Any) -> list[sa.RowMapping]:
        with self._connect() as conn:
            result = conn.execute(query, {"schema": self.schema, **params})
            return list(result.mappings())

    def table_exists(self, table_name: str) -> bool:
        with self._connect() as conn:
            return sa.inspect(conn).has_table(table_name, schema=self.schema)

    def list_tables(self) -> list[TableListing]:
        return [
            TableListing(name=row["table_name"], column_count=int(row["column_count"]))
            for row in self._rows(_PG_LIST_TABLES)
        ]

    def list_columns(self, table_name: str) -> list[RawColumn]:
        return [
            RawColumn(
                name=row["column_name"],
                data_type=(row["data_type"] or "").lower(),
                udt_name=(row["udt_name"] or "").lower(),
                nullable=row["is_nullable"] == "YES",
                default=row["column_default"],
                max_length=row["character_maximum_length"],
                precision=row["numeric_precision"],
                scale=row["numeric_scale"],
            )
            for row in self._rows(_PG_COLUMNS, table=table_name)
        ]

    def list_primary_keys(self, table_name: str) -> list[str]:
        return [row["column_name"] for row in self._rows(_PG_PRIMARY_KEYS, table=table_name)]

    def list_foreign_keys(self, table_name: str) -> list[ForeignKeyRef]:
        return [
            ForeignKeyRef(
                column=row["column_name"],
                referenced_table=row["foreign_table_name"],
                referenced_column=row["foreign_column_name"],
                constraint_name=row["constraint_name"],
            )
            for row in self._rows(_PG_FOREIGN_KEYS, table=table_name)
        ]

    def list_enum_columns(self, table_name: str) -> list[EnumDeclaration]:
        return [
            EnumDeclaration(
                column=row["column_name"],
                type_name=row["enum_name"],
                values=tuple(row["enum_values"] or ()),
            )
            for row in self._rows(_PG_ENUMS, table=table_name)
        ]

    def list_check_clauses(self, table_name: str) -> list[CheckClause]:
        return [
            CheckClause(column=row["column_name"], clause=row["check_clause"])
            for row in self._rows(_PG_CHECK_CLAUSES, table=table_name)
        ]

    def list_unique_constraints(self, table_name: str) -> list[list[str]]:
        grouped: dict[str, list[str]] = {}
        for row in self._rows(_PG_UNIQUE_CONSTRAINTS, table=table_name):
            grouped.setdefault(row["constraint_name"], []).append(row["column_name"])
        return list(grouped.values())

    def list_inbound_references(self, table_name: str) -> list[InboundReference]:
        return [
            InboundReference(
                table=row["referencing_table"],
                field=row["referencing_column"],
                delete_rule=row["delete_rule"] or "NO ACTION",
            )
            for row in self._rows(_PG_INBOUND_REFERENCES, table=table_name)
        ]

    def _apply_statement_timeout(self, conn: Connection) -> None:
        """Apply a session-local statement timeout for catalog queries (best-effort)."""
        timeout_sec = self._statement_timeout_sec
        if not timeout_sec or timeout_sec <= 0:
            return
        try:
            ms = max(1, int(timeout_sec * 1000))
            conn.execute(sa.text(f"SET statement_timeout = {ms}"))
        except Exception as e:  # noqa: BLE001 - best-effort guard
            _logger.debug("Could not apply catalog statement timeout: %s", e)


# ---------------------------------------------------------------------------
# Portable (SQLAlchemy Inspector)
# ---------------------------------------------------------------------------


def _describe_type(col_type: Any) -> tuple[str, str]:
    """Return (data_type, udt_name) for a reflected SQLAlchemy type."""
    if isinstance(col_type, sa.ARRAY):
        item_type = normalize_type_name(str(col_type.item_type))
        return "array", f"_{item_type}"
    if isinstance(col_type, sa.Enum):
        return "user-defined", (col_type.name or "enum").lower()
    try:
        type_name = normalize_type_name(str(col_type))
    except Exception:  # noqa: BLE001 - some dialect types cannot render without a dialect
        type_name = normalize_type_name(type(col_type).__name__)
    return type_name, type_name


class InspectorCatalog:
    """Catalog backend built on the SQLAlchemy Inspector.

    Works on any dialect SQLAlchemy can reflect. Check clauses are
    attributed to the column they start with.

    Attributes:
        engine: SQLAlchemy engine (connection-pooled)
        schema: Optional schema name; None uses the dialect default
    """

    def __init__(self, engine: Engine, schema: str | None = None) -> None:
        self.engine = engine
        self.schema = schema

    @contextmanager
    def _inspector(self) -> Iterator[Inspector]:
        with self.engine.connect() as conn:
            yield sa.inspect(conn)

    def table_exists(self, table_name: str) -> bool:
        with self._inspector() as insp:
            return insp.has_table(table_name, schema=self.schema)

    def list_tables(self) -> list[TableListing]:
        with self._inspector() as insp:
            return [
                TableListing(
                    name=table,
                    column_count=len(insp.get_columns(table, schema=self.schema)),
                )
                for table in sorted(insp.get_table_names(schema=self.schema))
            ]

    def list_columns(self, table_name: str) -> list[RawColumn]:
        with self._inspector() as insp:
            columns_metadata = insp.get_columns(table_name, schema=self.schema)

        raw_columns: list[RawColumn] = []
        for col in columns_metadata:
            col_type = col["type"]
            data_type, udt_name = _describe_type(col_type)
            default = col.get("default")
            raw_columns.append(
                RawColumn(
                    name=col["name"],
                    data_type=data_type,
                    udt_name=udt_name,
                    nullable=col.get("nullable", True),
                    default=str(default) if default is not None else None,
                    max_length=getattr(col_type, "length", None),
                    precision=getattr(col_type, "precision", None),
                    scale=getattr(col_type, "scale", None),
                )
            )
        return raw_columns

    def list_primary_keys(self, table_name: str) -> list[str]:
        with self._inspector() as insp:
            pk_constraint = insp.get_pk_constraint(table_name, schema=self.schema)
        return list(pk_constraint.get("constrained_columns") or [])

    def list_foreign_keys(self, table_name: str) -> list[ForeignKeyRef]:
        with self._inspector() as insp:
            fk_constraints = insp.get_foreign_keys(table_name, schema=self.schema)

        fks: list[ForeignKeyRef] = []
        for fk in fk_constraints:
            constrained_cols = fk.get("constrained_columns", [])
            referred_cols = fk.get("referred_columns", [])
            for local_col, ref_col in zip(constrained_cols, referred_cols, strict=False):
                fks.append(
                    ForeignKeyRef(
                        column=local_col,
                        referenced_table=fk["referred_table"],
                        referenced_column=ref_col,
                        constraint_name=fk.get("name"),
                    )
                )
        return fks

    def list_enum_columns(self, table_name: str) -> list[EnumDeclaration]:
        with self._inspector() as insp:
            columns_metadata = insp.get_columns(table_name, schema=self.schema)
        return [
            EnumDeclaration(
                column=col["name"],
                type_name=col["type"].name or col["name"],
                values=tuple(col["type"].enums),
            )
            for col in columns_metadata
            if isinstance(col["type"], sa.Enum) and col["type"].enums
        ]

    def list_check_clauses(self, table_name: str) -> list[CheckClause]:
        with self._inspector() as insp:
            try:
                checks = insp.get_check_constraints(table_name, schema=self.schema)
            except NotImplementedError:
                _logger.debug("Dialect %s cannot reflect check constraints", insp.dialect.name)
                return []

        clauses: list[CheckClause] = []
        for check in checks:
            sqltext = str(check.get("sqltext") or "")
            column = leading_identifier(sqltext)
            if column:
                clauses.append(CheckClause(column=column, clause=sqltext))
        return clauses

    def list_unique_constraints(self, table_name: str) -> list[list[str]]:
        with self._inspector() as insp:
            uniques = insp.get_unique_constraints(table_name, schema=self.schema)
            indexes = insp.get_indexes(table_name, schema=self.schema)

        seen: list[list[str]] = []
        for cols in [u.get("column_names") or [] for u in uniques] + [
            ix.get("column_names") or [] for ix in indexes if ix.get("unique")
        ]:
            column_list = [c for c in cols if c]
            if column_list and column_list not in seen:
                seen.append(column_list)
        return seen

    def list_inbound_references(self, table_name: str) -> list[InboundReference]:
        refs: list[InboundReference] = []
        with self._inspector() as insp:
            for other in sorted(insp.get_table_names(schema=self.schema)):
                for fk in insp.get_foreign_keys(other, schema=self.schema):
                    if fk.get("referred_table") != table_name:
                        continue
                    delete_rule = (fk.get("options") or {}).get("ondelete") or "NO ACTION"
                    refs.extend(
                        InboundReference(table=other, field=col, delete_rule=delete_rule.upper())
                        for col in fk.get("constrained_columns", [])
                    )
        return refs
