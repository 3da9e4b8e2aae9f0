from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

import pytest

from schema2crud_mcp.introspection.constants import (
    ConstraintKind,
    ConstraintSource,
    Constants,
    FieldKind,
    Predicate,
)
from schema2crud_mcp.introspection.exceptions import CatalogAccessError
from schema2crud_mcp.introspection.facts import ColumnDescriptor
from schema2crud_mcp.introspection.reader import (
    CatalogReader,
    classify_column,
    split_unique_constraints,
)

if TYPE_CHECKING:
    from conftest import FakeCatalog


def test_read_missing_table_returns_none(catalog: FakeCatalog) -> None:
    assert asyncio.run(CatalogReader(catalog).read_table("nope")) is None


def test_catalog_failure_is_tagged_with_table(catalog: FakeCatalog) -> None:
    with pytest.raises(CatalogAccessError, match="ledgers") as exc_info:
        asyncio.run(CatalogReader(catalog).read_table("ledgers"))
    assert exc_info.value.table_name == "ledgers"
    assert isinstance(exc_info.value.__cause__, RuntimeError)


def test_authors_classification(catalog: FakeCatalog) -> None:
    schema = asyncio.run(CatalogReader(catalog).read_table("authors"))
    assert schema is not None

    kinds = {col.name: col.field_kind for col in schema.columns}
    assert kinds == {
        "id": FieldKind.PRIMARY_KEY,
        "name": FieldKind.VARCHAR,
        "email": FieldKind.EMAIL,
        "bio": FieldKind.TEXTAREA,
        "created_at": FieldKind.AUDIT_TIMESTAMP,
    }
    assert schema.primary_key == ["id"]
    assert [col.name for col in schema.columns] == ["id", "name", "email", "bio", "created_at"]

    bio = schema.column("bio")
    assert bio is not None
    assert set(bio.filtering_strategy.allowed_predicates) == {
        Predicate.CONTAINS,
        Predicate.FULLTEXT,
    }

    name = schema.column("name")
    assert name is not None
    assert name.is_nullable is False
    assert name.form_config.required is True
    assert name.dropdown_info is None

    assert schema.unique_constraints.single_field == ["email"]
    assert [rule.rule_type for rule in schema.business_rules] == ["email_format"]
    assert schema.error_codes["DUPLICATE_EMAIL"] == "AUTHORS_DUPLICATE_EMAIL"
    assert schema.error_codes["INVALID_EMAIL_EMAIL"] == "AUTHORS_INVALID_EMAIL_EMAIL"
    assert "CANNOT_DELETE_HAS_BOOKS" in schema.error_codes
    assert "CANNOT_DELETE_HAS_TRANSFERS" in schema.error_codes

    books_ref = schema.foreign_key_references[0]
    assert (books_ref.table, books_ref.field, books_ref.cascade) == ("books", "author_id", True)
    assert schema.foreign_key_references[1].cascade is False

    assert schema.capabilities.has_audit_fields is True
    assert schema.capabilities.has_date_field is True
    assert schema.capabilities.has_foreign_keys is False
    assert schema.capabilities.has_unique_constraints is True
    assert schema.capabilities.has_foreign_key_references is True


def test_books_domains_and_capabilities(catalog: FakeCatalog) -> None:
    schema = asyncio.run(CatalogReader(catalog).read_table("books"))
    assert schema is not None

    status = schema.column("status")
    assert status is not None
    assert status.field_kind is FieldKind.ENUM_SELECT
    assert status.constraint_values == ["draft", "published"]
    assert status.constraint_metadata.kind is ConstraintKind.CHECK_CONSTRAINT
    assert status.constraint_metadata.confidence_score == 95
    assert status.constraint_metadata.candidate_default == "draft"

    genre = schema.column("genre")
    assert genre is not None
    assert genre.field_kind is FieldKind.ENUM_SELECT
    assert genre.enum_info is not None
    assert genre.enum_info.values == ["fiction", "non_fiction", "poetry"]
    assert genre.constraint_metadata.provenance is ConstraintSource.POSTGRES_ENUM
    assert genre.constraint_metadata.confidence_score == 100

    published = schema.column("is_published")
    assert published is not None
    assert published.field_kind is FieldKind.BOOLEAN
    assert published.constraint_metadata.values == ["true", "false"]

    author_id = schema.column("author_id")
    assert author_id is not None
    assert author_id.field_kind is FieldKind.FOREIGN_KEY_DROPDOWN
    assert author_id.foreign_key_info is not None
    assert author_id.foreign_key_info.referenced_table == "authors"
    # Reader output is not enriched
    assert author_id.dropdown_info is None

    price = schema.column("price")
    assert price is not None
    assert price.field_kind is FieldKind.DECIMAL
    assert price.filtering_strategy.allows(Predicate.RANGE)
    assert price.form_config.step == pytest.approx(0.01)

    caps = schema.capabilities
    assert caps.foreign_key_count == 1
    assert caps.enum_count == 2
    assert caps.dropdown_fields == ["author_id"]
    assert caps.select_fields == ["status", "genre"]
    assert caps.has_status_field is True
    assert caps.has_business_rules is True

    assert schema.error_codes["MUST_BE_POSITIVE_PRICE"] == "BOOKS_MUST_BE_POSITIVE_PRICE"
    assert schema.error_codes["CANNOT_DELETE_HAS_ORDERS"] == "BOOKS_CANNOT_DELETE_HAS_ORDERS"


def test_composite_unique_constraint(catalog: FakeCatalog) -> None:
    schema = asyncio.run(CatalogReader(catalog).read_table("orders"))
    assert schema is not None
    assert schema.unique_constraints.composite == [["book_id", "customer_email"]]
    assert "DUPLICATE_BOOK_ID_CUSTOMER_EMAIL" in schema.error_codes
    assert [rule.field for rule in schema.business_rules] == ["quantity", "customer_email"]


def test_read_is_deterministic(catalog: FakeCatalog) -> None:
    reader = CatalogReader(catalog)
    first = asyncio.run(reader.read_table("books"))
    second = asyncio.run(reader.read_table("books"))
    assert first is not None
    assert second is not None
    assert first.columns == second.columns
    assert first.error_codes == second.error_codes


def test_list_tables(catalog: FakeCatalog) -> None:
    tables = asyncio.run(CatalogReader(catalog).list_tables())
    names = [table.name for table in tables]
    assert names == sorted(names)
    assert next(t for t in tables if t.name == "authors").column_count == 5


def test_split_unique_constraints_dedupes() -> None:
    result = split_unique_constraints([["email"], ["email"], ["a", "b"], ["a", "b"], []])
    assert result.single_field == ["email"]
    assert result.composite == [["a", "b"]]


def test_columns_carry_generated_code_types(catalog: FakeCatalog) -> None:
    schema = asyncio.run(CatalogReader(catalog).read_table("books"))
    assert schema is not None

    price = schema.column("price")
    assert price is not None
    assert price.ts_type == "number"
    assert price.typebox_type == "Type.Optional(Type.Number())"

    published = schema.column("is_published")
    assert published is not None
    assert published.ts_type == "boolean"
    assert published.typebox_type == "Type.Boolean()"

    genre = schema.column("genre")
    assert genre is not None
    assert genre.ts_type == "any"


def test_classify_column_key_defaults_to_configured_name() -> None:
    key = ColumnDescriptor(Constants.PRIMARY_KEY_NAME, "integer", "int4", nullable=False)
    assert classify_column(key).field_kind is FieldKind.PRIMARY_KEY

    code = ColumnDescriptor("code", "integer", "int4", nullable=False)
    assert classify_column(code).field_kind is FieldKind.NUMBER
    assert classify_column(code, key_column="code").field_kind is FieldKind.PRIMARY_KEY
