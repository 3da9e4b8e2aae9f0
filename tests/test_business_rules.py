from __future__ import annotations

from schema2crud_mcp.introspection.facts import ColumnDescriptor
from schema2crud_mcp.introspection.models import (
    BusinessRule,
    EnrichedColumn,
    ForeignKeyReference,
    UniqueConstraints,
)
from schema2crud_mcp.introspection.reader import classify_column
from schema2crud_mcp.introspection.rules import derive_rules, generate_error_codes


def _column(name: str, data_type: str, udt_name: str) -> EnrichedColumn:
    return classify_column(ColumnDescriptor(name=name, data_type=data_type, udt_name=udt_name))


def _reference(table: str, field: str, delete_rule: str = "NO ACTION") -> ForeignKeyReference:
    return ForeignKeyReference(
        table=table, field=field, cascade=delete_rule == "CASCADE", delete_rule=delete_rule
    )


def test_rules_follow_column_order() -> None:
    columns = [
        _column("id", "uuid", "uuid"),
        _column("email", "character varying", "varchar"),
        _column("date_of_birth", "date", "date"),
        _column("salary", "numeric", "numeric"),
        _column("website", "character varying", "varchar"),
        _column("phone", "character varying", "varchar"),
        _column("nickname", "character varying", "varchar"),
    ]
    rules = derive_rules(columns)
    assert [(rule.field, rule.rule_type) for rule in rules] == [
        ("email", "email_format"),
        ("date_of_birth", "not_future_date"),
        ("salary", "positive_number"),
        ("website", "url_format"),
        ("phone", "phone_format"),
    ]
    assert rules[0].error_code == "INVALID_EMAIL"
    assert rules[0].message == "email must be a valid email address"


def test_textual_birthplace_gets_no_date_rule() -> None:
    assert derive_rules([_column("birthplace", "character varying", "varchar")]) == []


def test_positive_number_requires_numeric_kind() -> None:
    rules = derive_rules(
        [
            _column("quantity", "integer", "int4"),
            _column("qty_note", "character varying", "varchar"),
        ]
    )
    assert [(rule.field, rule.error_code) for rule in rules] == [("quantity", "MUST_BE_POSITIVE")]


def test_error_codes_have_unique_keys() -> None:
    codes = generate_error_codes(
        "users",
        unique_constraints=UniqueConstraints(single_field=["email", "username"]),
        foreign_key_references=[_reference("orders", "user_id")],
        business_rules=[],
    )
    assert codes == {
        "NOT_FOUND": "USERS_NOT_FOUND",
        "VALIDATION_ERROR": "USERS_VALIDATION_ERROR",
        "DUPLICATE_EMAIL": "USERS_DUPLICATE_EMAIL",
        "DUPLICATE_USERNAME": "USERS_DUPLICATE_USERNAME",
        "CANNOT_DELETE_HAS_REFERENCES": "USERS_CANNOT_DELETE_HAS_REFERENCES",
        "CANNOT_DELETE_HAS_ORDERS": "USERS_CANNOT_DELETE_HAS_ORDERS",
    }


def test_error_codes_composite_and_rules() -> None:
    codes = generate_error_codes(
        "order-items",
        unique_constraints=UniqueConstraints(composite=[["order_id", "product_id"]]),
        foreign_key_references=[],
        business_rules=[
            BusinessRule(
                field="unit_price",
                rule_type="positive_number",
                message="unit_price must be a positive number",
                error_code="MUST_BE_POSITIVE",
            )
        ],
    )
    assert codes["DUPLICATE_ORDER_ID_PRODUCT_ID"] == "ORDER_ITEMS_DUPLICATE_ORDER_ID_PRODUCT_ID"
    assert codes["MUST_BE_POSITIVE_UNIT_PRICE"] == "ORDER_ITEMS_MUST_BE_POSITIVE_UNIT_PRICE"
    assert "CANNOT_DELETE_HAS_REFERENCES" not in codes


def test_composite_key_collision_is_disambiguated() -> None:
    # ["a_b"] and ["a", "b"] would both produce DUPLICATE_A_B
    codes = generate_error_codes(
        "t",
        unique_constraints=UniqueConstraints(single_field=["a_b"], composite=[["a", "b"]]),
        foreign_key_references=[],
        business_rules=[],
    )
    assert codes["DUPLICATE_A_B"] == "T_DUPLICATE_A_B"
    assert codes["DUPLICATE_A_AND_B"] == "T_DUPLICATE_A_AND_B"


def test_inbound_references_from_one_table_share_one_code() -> None:
    codes = generate_error_codes(
        "accounts",
        unique_constraints=UniqueConstraints(),
        foreign_key_references=[
            _reference("transfers", "from_account_id"),
            _reference("transfers", "to_account_id", "CASCADE"),
        ],
        business_rules=[],
    )
    assert [key for key in codes if key.startswith("CANNOT_DELETE")] == [
        "CANNOT_DELETE_HAS_REFERENCES",
        "CANNOT_DELETE_HAS_TRANSFERS",
    ]
