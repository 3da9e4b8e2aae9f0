from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

import pytest
import sqlalchemy as sa
from sqlalchemy import text
from sqlalchemy.dialects import mysql

from schema2crud_mcp.introspection.catalog import InspectorCatalog, _describe_type
from schema2crud_mcp.introspection.constants import FieldKind
from schema2crud_mcp.introspection.constraints import extract_domain
from schema2crud_mcp.introspection.models import IntrospectionConfig
from schema2crud_mcp.introspection.utils import normalize_type_name
from schema2crud_mcp.services.introspection_service import IntrospectionService, create_catalog

if TYPE_CHECKING:
    from collections.abc import Iterator
    from pathlib import Path


def _setup_sqlite(engine: sa.Engine) -> None:
    with engine.begin() as conn:
        conn.execute(
            text(
                """
                CREATE TABLE authors (
                    id INTEGER PRIMARY KEY,
                    name VARCHAR(255) NOT NULL,
                    email VARCHAR(255),
                    bio TEXT,
                    created_at TIMESTAMP,
                    CONSTRAINT uq_authors_email UNIQUE (email)
                )
                """
            )
        )
        conn.execute(
            text(
                """
                CREATE TABLE books (
                    id INTEGER PRIMARY KEY,
                    author_id INTEGER NOT NULL REFERENCES authors(id) ON DELETE CASCADE,
                    title VARCHAR(200),
                    price NUMERIC(10, 2),
                    status VARCHAR(20),
                    CONSTRAINT ck_status CHECK (status IN ('draft', 'published'))
                )
                """
            )
        )


@pytest.fixture
def engine(tmp_path: Path) -> Iterator[sa.Engine]:
    # File-backed so worker threads share one database
    eng = sa.create_engine(f"sqlite+pysqlite:///{tmp_path / 'bookstore.db'}")
    _setup_sqlite(eng)
    yield eng
    eng.dispose()


def test_inspector_columns_and_keys(engine: sa.Engine) -> None:
    catalog = InspectorCatalog(engine)

    assert catalog.table_exists("authors") is True
    assert catalog.table_exists("missing") is False

    columns = catalog.list_columns("authors")
    assert [col.name for col in columns] == ["id", "name", "email", "bio", "created_at"]
    name = columns[1]
    assert name.data_type == "varchar"
    assert name.max_length == 255
    assert name.nullable is False

    assert catalog.list_primary_keys("authors") == ["id"]

    fks = catalog.list_foreign_keys("books")
    assert [(fk.column, fk.referenced_table, fk.referenced_column) for fk in fks] == [
        ("author_id", "authors", "id")
    ]


def test_inspector_constraints(engine: sa.Engine) -> None:
    catalog = InspectorCatalog(engine)

    checks = catalog.list_check_clauses("books")
    assert [check.column for check in checks] == ["status"]
    assert extract_domain(checks[0].clause) == ["draft", "published"]

    assert catalog.list_unique_constraints("authors") == [["email"]]

    inbound = catalog.list_inbound_references("authors")
    assert [(ref.table, ref.field) for ref in inbound] == [("books", "author_id")]

    # SQLite has no declared enumerations
    assert catalog.list_enum_columns("books") == []


def test_inspector_list_tables(engine: sa.Engine) -> None:
    tables = InspectorCatalog(engine).list_tables()
    assert [(t.name, t.column_count) for t in tables] == [("authors", 5), ("books", 5)]


def test_sqlite_uses_inspector_backend(engine: sa.Engine) -> None:
    catalog = create_catalog(engine, IntrospectionConfig())
    assert isinstance(catalog, InspectorCatalog)
    assert catalog.schema is None


def test_service_end_to_end_on_sqlite(engine: sa.Engine) -> None:
    service = IntrospectionService(engine, IntrospectionConfig())

    books = asyncio.run(service.get_enhanced_schema("books"))
    assert books is not None
    author_id = books.column("author_id")
    assert author_id is not None
    assert author_id.dropdown_info is not None
    assert author_id.dropdown_info.display_fields == ["name", "email", "id"]
    assert author_id.dropdown_info.has_endpoint is True

    status = books.column("status")
    assert status is not None
    assert status.field_kind is FieldKind.ENUM_SELECT
    assert status.constraint_values == ["draft", "published"]

    price = books.column("price")
    assert price is not None
    assert price.field_kind is FieldKind.DECIMAL
    assert "MUST_BE_POSITIVE_PRICE" in books.error_codes

    authors = asyncio.run(service.get_enhanced_schema("authors"))
    assert authors is not None
    assert "DUPLICATE_EMAIL" in authors.error_codes
    assert "CANNOT_DELETE_HAS_BOOKS" in authors.error_codes
    bio = authors.column("bio")
    assert bio is not None
    assert bio.field_kind is FieldKind.TEXTAREA

    assert asyncio.run(service.get_enhanced_schema("missing")) is None

    validation = asyncio.run(service.validate_dropdown_endpoints("books"))
    assert validation is not None
    assert validation.valid is True

    listed = asyncio.run(service.list_tables())
    assert [item.name for item in listed] == ["authors", "books"]


def test_describe_reflected_types() -> None:
    assert _describe_type(sa.ARRAY(sa.Integer())) == ("array", "_integer")
    assert _describe_type(sa.Enum("happy", "sad", name="Mood")) == ("user-defined", "mood")
    assert _describe_type(sa.Numeric(10, 2)) == ("numeric", "numeric")


def test_describe_collated_string_types() -> None:
    assert _describe_type(sa.VARCHAR(255, collation="utf8mb4_bin")) == ("varchar", "varchar")
    collated = mysql.VARCHAR(255, charset="utf8mb4", collation="utf8mb4_bin")
    assert _describe_type(collated) == ("varchar", "varchar")
    assert _describe_type(sa.Text(collation="C")) == ("text", "text")


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("VARCHAR(64) CHARACTER SET utf8mb4", "varchar"),
        ("character varying", "character varying"),
        ("NUMERIC(10, 2)", "numeric"),
        ("TIMESTAMP WITH TIME ZONE", "timestamp with time zone"),
    ],
)
def test_normalize_type_name(raw: str, expected: str) -> None:
    assert normalize_type_name(raw) == expected
