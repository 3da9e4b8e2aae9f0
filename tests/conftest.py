from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field

import pytest

from schema2crud_mcp.introspection.facts import (
    CheckClause,
    EnumDeclaration,
    ForeignKeyRef,
    InboundReference,
    RawColumn,
    TableListing,
)


@dataclass
class FakeTable:
    columns: list[RawColumn]
    primary_keys: list[str] = field(default_factory=lambda: ["id"])
    foreign_keys: list[ForeignKeyRef] = field(default_factory=list)
    enums: list[EnumDeclaration] = field(default_factory=list)
    checks: list[CheckClause] = field(default_factory=list)
    uniques: list[list[str]] = field(default_factory=list)
    inbound: list[InboundReference] = field(default_factory=list)


class FakeCatalog:
    """In-memory catalog backend; tables in `failing` raise on every read."""

    def __init__(self, tables: dict[str, FakeTable], failing: set[str] | None = None) -> None:
        self.tables = tables
        self.failing = failing or set()
        self.column_reads: Counter[str] = Counter()

    def _table(self, table_name: str) -> FakeTable:
        if table_name in self.failing:
            msg = f"connection reset while reading {table_name}"
            raise RuntimeError(msg)
        return self.tables[table_name]

    def table_exists(self, table_name: str) -> bool:
        return table_name in self.tables or table_name in self.failing

    def list_tables(self) -> list[TableListing]:
        return [
            TableListing(name=name, column_count=len(table.columns))
            for name, table in sorted(self.tables.items())
        ]

    def list_columns(self, table_name: str) -> list[RawColumn]:
        self.column_reads[table_name] += 1
        return list(self._table(table_name).columns)

    def list_primary_keys(self, table_name: str) -> list[str]:
        return list(self._table(table_name).primary_keys)

    def list_foreign_keys(self, table_name: str) -> list[ForeignKeyRef]:
        return list(self._table(table_name).foreign_keys)

    def list_enum_columns(self, table_name: str) -> list[EnumDeclaration]:
        return list(self._table(table_name).enums)

    def list_check_clauses(self, table_name: str) -> list[CheckClause]:
        return list(self._table(table_name).checks)

    def list_unique_constraints(self, table_name: str) -> list[list[str]]:
        return [list(cols) for cols in self._table(table_name).uniques]

    def list_inbound_references(self, table_name: str) -> list[InboundReference]:
        return list(self._table(table_name).inbound)


def _uuid(name: str, *, nullable: bool = False) -> RawColumn:
    return RawColumn(name, "uuid", "uuid", nullable=nullable)


def _varchar(name: str, length: int = 255, *, nullable: bool = True) -> RawColumn:
    return RawColumn(name, "character varying", "varchar", nullable=nullable, max_length=length)


def _fk(column: str, table: str) -> ForeignKeyRef:
    return ForeignKeyRef(column, table, "id", f"{column}_fkey")


def bookstore_tables() -> dict[str, FakeTable]:
    """authors <- books <- orders, plus self-referencing and dangling references."""
    return {
        "authors": FakeTable(
            columns=[
                _uuid("id"),
                _varchar("name", nullable=False),
                _varchar("email"),
                RawColumn("bio", "text", "text"),
                RawColumn("created_at", "timestamp without time zone", "timestamp"),
            ],
            uniques=[["email"]],
            inbound=[
                InboundReference("books", "author_id", "CASCADE"),
                InboundReference("transfers", "from_author_id"),
                InboundReference("transfers", "to_author_id"),
            ],
        ),
        "books": FakeTable(
            columns=[
                _uuid("id"),
                _uuid("author_id"),
                _varchar("title", 200, nullable=False),
                RawColumn("price", "numeric", "numeric", precision=10, scale=2),
                _varchar("status", 20),
                RawColumn("genre", "USER-DEFINED", "book_genre"),
                RawColumn("is_published", "boolean", "bool", nullable=False, default="false"),
            ],
            foreign_keys=[_fk("author_id", "authors")],
            enums=[EnumDeclaration("genre", "book_genre", ("fiction", "non_fiction", "poetry"))],
            checks=[
                CheckClause("status", "char_length((status)::text) > 0"),
                CheckClause(
                    "status",
                    "((status)::text = ANY ((ARRAY['draft'::character varying, "
                    "'published'::character varying])::text[]))",
                ),
            ],
            inbound=[InboundReference("orders", "book_id")],
        ),
        "orders": FakeTable(
            columns=[
                _uuid("id"),
                _uuid("book_id"),
                RawColumn("quantity", "integer", "int4", nullable=False),
                _varchar("customer_email"),
                RawColumn("placed_at", "timestamp with time zone", "timestamptz"),
            ],
            foreign_keys=[_fk("book_id", "books")],
            uniques=[["book_id", "customer_email"]],
        ),
        "categories": FakeTable(
            columns=[
                RawColumn("id", "integer", "int4", nullable=False),
                RawColumn("parent_id", "integer", "int4"),
                _varchar("label", 100),
            ],
            foreign_keys=[ForeignKeyRef("parent_id", "categories", "id", "parent_id_fkey")],
            inbound=[InboundReference("categories", "parent_id", "SET NULL")],
        ),
        "transfers": FakeTable(
            columns=[
                _uuid("id"),
                _uuid("from_author_id"),
                _uuid("to_author_id"),
                RawColumn("amount", "numeric", "numeric", precision=12, scale=2),
            ],
            foreign_keys=[_fk("from_author_id", "authors"), _fk("to_author_id", "authors")],
        ),
        "reviews": FakeTable(
            columns=[
                _uuid("id"),
                _uuid("book_id"),
                _uuid("ghost_id", nullable=True),
                _uuid("ledger_id", nullable=True),
                RawColumn("rating", "smallint", "int2"),
            ],
            foreign_keys=[
                _fk("book_id", "books"),
                _fk("ghost_id", "ghosts"),
                _fk("ledger_id", "ledgers"),
            ],
        ),
        "tags": FakeTable(
            columns=[
                RawColumn("id", "integer", "int4", nullable=False),
                RawColumn("code", "integer", "int4"),
            ],
        ),
        "badges": FakeTable(
            columns=[
                RawColumn("id", "integer", "int4", nullable=False),
                RawColumn("tag_id", "integer", "int4", nullable=False),
            ],
            foreign_keys=[_fk("tag_id", "tags")],
        ),
        "shipments": FakeTable(
            columns=[
                _uuid("id"),
                _uuid("from_address_id"),
                _uuid("to_address_id"),
            ],
            foreign_keys=[
                _fk("from_address_id", "addresses"),
                _fk("to_address_id", "addresses"),
            ],
        ),
        "addresses": FakeTable(
            columns=[_uuid("id"), _varchar("street"), _uuid("city_id")],
            foreign_keys=[_fk("city_id", "cities")],
        ),
        "cities": FakeTable(columns=[_uuid("id"), _varchar("name")]),
    }


@pytest.fixture
def catalog() -> FakeCatalog:
    return FakeCatalog(bookstore_tables(), failing={"ledgers"})
