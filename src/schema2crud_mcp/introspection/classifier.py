"""Semantic field classification.

Maps a physical column to one `FieldKind`. Resolution order, first match
wins:

1. column named like the key identifier -> primary-key
2. audit column names -> audit-timestamp / audit-user
3. declared foreign key -> foreign-key-dropdown
4. enumeration or check-constraint domain -> enum-select
5. array-shaped catalog type -> array
6. static catalog type table (textual kinds refined by column name)
7. column-name keyword sets
8. generic text

Structural facts always outrank naming; names only refine textual types.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from .constants import TEXTUAL_KINDS, Constants, FieldKind
from .models import FormFieldConfig

if TYPE_CHECKING:
    from .facts import ColumnDescriptor


def field_kind_from_name(column_name: str) -> FieldKind | None:
    """Match a column name against the keyword sets.

    Example:
        >>> field_kind_from_name("contact_email")
        <FieldKind.EMAIL: 'email'>
    """
    col_name = column_name.lower()
    for kind, patterns in Constants.FIELD_NAME_PATTERNS.items():
        if any(pattern in col_name for pattern in patterns):
            return kind
    return None


def is_array_column(column: ColumnDescriptor) -> bool:
    """Array types report `ARRAY` / `type[]` and an underscore-prefixed udt name."""
    data_type = column.data_type.lower()
    return data_type == "array" or data_type.endswith("[]") or column.udt_name.startswith("_")


def catalog_kind(column: ColumnDescriptor) -> FieldKind | None:
    """Look up the base kind of a column's catalog type (data type, then udt name)."""
    data_type = column.data_type.lower()
    udt_name = column.udt_name.lower()
    return Constants.TYPE_MAPPING.get(data_type) or Constants.TYPE_MAPPING.get(udt_name)


def classify_field(
    column: ColumnDescriptor,
    *,
    is_foreign_key: bool,
    is_enum: bool,
    key_column: str = Constants.PRIMARY_KEY_NAME,
) -> FieldKind:
    """Classify a column into a semantic field kind.

    Args:
        column: Physical column descriptor
        is_foreign_key: True if the column is declared as a foreign key
        is_enum: True if an enumeration or check-constraint domain was found
        key_column: Column name that always classifies as the primary key

    Returns:
        The semantic FieldKind
    """
    col_name = column.name.lower()

    if col_name == key_column:
        return FieldKind.PRIMARY_KEY

    if col_name in Constants.AUDIT_TIMESTAMP_COLUMNS:
        return FieldKind.AUDIT_TIMESTAMP
    if col_name in Constants.AUDIT_USER_COLUMNS:
        return FieldKind.AUDIT_USER

    if is_foreign_key:
        return FieldKind.FOREIGN_KEY_DROPDOWN

    if is_enum:
        return FieldKind.ENUM_SELECT

    if is_array_column(column):
        return FieldKind.ARRAY

    base_kind = catalog_kind(column)
    if base_kind is not None:
        if base_kind in TEXTUAL_KINDS:
            name_kind = field_kind_from_name(col_name)
            if name_kind is not None:
                return name_kind
        return base_kind

    return field_kind_from_name(col_name) or FieldKind.TEXT


def array_element_kind(column: ColumnDescriptor) -> FieldKind:
    """Kind of the elements of an array column (defaults to text)."""
    if column.udt_name.startswith("_"):
        return Constants.TYPE_MAPPING.get(column.udt_name[1:].lower(), FieldKind.TEXT)
    return FieldKind.TEXT


def field_configuration(column: ColumnDescriptor) -> FormFieldConfig:
    """Build input configuration from the physical type, ignoring keys and domains."""
    kind = classify_field(column, is_foreign_key=False, is_enum=False)
    step: float | str | None = None
    pattern: str | None = None
    element_type: FieldKind | None = None

    if kind is FieldKind.BIGINT:
        step = 1
        pattern = "[0-9]*"
    elif kind is FieldKind.DECIMAL:
        if column.scale:
            step = 1 / 10**column.scale
    elif kind is FieldKind.FLOAT:
        step = "any"
    elif kind is FieldKind.ARRAY:
        element_type = array_element_kind(column)
    elif kind in {FieldKind.VARCHAR, FieldKind.CHAR}:
        if (column.max_length or 0) > Constants.LONG_VARCHAR_THRESHOLD:
            kind = FieldKind.TEXTAREA

    return FormFieldConfig(
        kind=kind,
        required=not column.nullable,
        default_value=column.default,
        max_length=column.max_length,
        precision=column.precision,
        scale=column.scale,
        step=step,
        pattern=pattern,
        element_type=element_type,
    )


def is_sensitive_field(column_name: str) -> bool:
    """Check if a column likely holds data that must not be exposed in listings."""
    lower_name = column_name.lower()
    return (
        any(pattern in lower_name for pattern in Constants.SENSITIVE_NAME_PATTERNS)
        or lower_name.endswith(("_hash", "_secret"))
        or lower_name.startswith("private_")
    )


def _lookup_type(table: dict[str, str], column: ColumnDescriptor, unknown: str) -> str:
    if column.udt_name.startswith("_"):
        return table.get(column.udt_name[1:].lower(), unknown)
    return table.get(column.data_type.lower()) or table.get(column.udt_name.lower(), unknown)


def typescript_type(column: ColumnDescriptor) -> str:
    """TypeScript type for generated code; arrays become `<element>[]`.

    Example:
        udt `_int4` -> "number[]", `jsonb` -> "Record<string, any>"
    """
    unknown = Constants.UNKNOWN_TYPESCRIPT_TYPE
    ts_type = _lookup_type(Constants.TYPESCRIPT_TYPES, column, unknown)
    return f"{ts_type}[]" if column.udt_name.startswith("_") else ts_type


def typebox_type(column: ColumnDescriptor) -> str:
    """TypeBox schema expression for a column.

    Arrays wrap in `Type.Array(...)`; nullable columns in `Type.Optional(...)`.
    """
    unknown = Constants.UNKNOWN_TYPEBOX_TYPE
    schema_type = _lookup_type(Constants.TYPEBOX_TYPES, column, unknown)
    if column.udt_name.startswith("_"):
        schema_type = f"Type.Array({schema_type})"
    if column.nullable:
        schema_type = f"Type.Optional({schema_type})"
    return schema_type
