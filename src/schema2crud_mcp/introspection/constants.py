"""Constants and enums for schema introspection.

This module contains the closed set of semantic field kinds, the query
predicates used by filtering strategies, and the static lookup tables that
drive field classification (catalog type -> field kind, column-name keyword
sets).
"""

from __future__ import annotations

from enum import Enum
from typing import Final


class FieldKind(str, Enum):
    """Semantic classification tag for a database column."""

    # Structural kinds
    PRIMARY_KEY = "primary-key"
    AUDIT_TIMESTAMP = "audit-timestamp"
    AUDIT_USER = "audit-user"
    FOREIGN_KEY_DROPDOWN = "foreign-key-dropdown"
    ENUM_SELECT = "enum-select"
    ARRAY = "array"

    # Numeric
    NUMBER = "number"
    BIGINT = "bigint"
    DECIMAL = "decimal"
    FLOAT = "float"
    SERIAL = "serial"

    # Character
    VARCHAR = "varchar"
    CHAR = "char"
    TEXTAREA = "textarea"
    TEXT = "text"

    # Date/time
    TIMESTAMP = "timestamp"
    TIMESTAMPTZ = "timestamptz"
    DATE = "date"
    TIME = "time"
    TIMETZ = "timetz"
    INTERVAL = "interval"

    BOOLEAN = "boolean"
    BINARY = "binary"
    JSON = "json"
    JSONB = "jsonb"
    UUID = "uuid"
    XML = "xml"
    ENUM = "enum"  # user-defined type without a readable value list

    # Network
    INET = "inet"
    CIDR = "cidr"
    MACADDR = "macaddr"

    # Bit strings
    BIT = "bit"
    VARBIT = "varbit"

    # Geometric
    POINT = "point"
    LINE = "line"
    LSEG = "lseg"
    BOX = "box"
    PATH = "path"
    POLYGON = "polygon"
    CIRCLE = "circle"

    # Name-pattern refinements
    EMAIL = "email"
    PASSWORD = "password"
    URL = "url"
    PHONE = "phone"
    COLOR = "color"
    SLUG = "slug"
    SEARCH = "search"
    FILE = "file"
    IMAGE = "image"
    CURRENCY = "currency"
    PERCENTAGE = "percentage"


class Predicate(str, Enum):
    """Query predicates a filtering strategy may allow."""

    EQUALS = "equals"
    RANGE = "range"
    CONTAINS = "contains"
    STARTS_WITH = "starts_with"
    ENDS_WITH = "ends_with"
    IN_ARRAY = "in_array"
    NOT_IN_ARRAY = "not_in_array"
    NULL_CHECK = "null_check"
    FULLTEXT = "fulltext"


class ConstraintKind(str, Enum):
    """Kind of value domain recovered for a column."""

    ENUM = "enum"
    CHECK_CONSTRAINT = "check_constraint"
    BOOLEAN = "boolean"
    UNKNOWN = "unknown"


class ConstraintSource(str, Enum):
    """Where a value domain came from."""

    POSTGRES_ENUM = "postgres_enum"
    CHECK_CONSTRAINT = "check_constraint"
    INFERENCE = "inference"


TEXTUAL_KINDS: Final[frozenset[FieldKind]] = frozenset(
    {FieldKind.VARCHAR, FieldKind.CHAR, FieldKind.TEXTAREA}
)
NUMERIC_KINDS: Final[frozenset[FieldKind]] = frozenset(
    {
        FieldKind.NUMBER,
        FieldKind.BIGINT,
        FieldKind.DECIMAL,
        FieldKind.FLOAT,
        FieldKind.SERIAL,
        FieldKind.CURRENCY,
    }
)
TEMPORAL_KINDS: Final[frozenset[FieldKind]] = frozenset(
    {
        FieldKind.TIMESTAMP,
        FieldKind.TIMESTAMPTZ,
        FieldKind.DATE,
    }
)


class Constants:
    """Configuration constants for introspection."""

    PRIMARY_KEY_NAME: Final[str] = "id"
    DEFAULT_SCHEMA: Final[str] = "public"
    DEFAULT_FK_MAX_DEPTH: Final[int] = 1
    DEFAULT_TIMEOUT_SEC: Final[int] = 5
    MAX_DISPLAY_FIELDS: Final[int] = 3
    LONG_VARCHAR_THRESHOLD: Final[int] = 500
    LOW_CONFIDENCE_THRESHOLD: Final[int] = 50

    AUDIT_TIMESTAMP_COLUMNS: Final[frozenset[str]] = frozenset(
        {"created_at", "updated_at", "deleted_at"}
    )
    AUDIT_USER_COLUMNS: Final[frozenset[str]] = frozenset(
        {"created_by", "updated_by", "deleted_by"}
    )

    # Catalog type -> base field kind. Keys are lower-case `data_type` or
    # `udt_name` values as reported by the catalog.
    TYPE_MAPPING: Final[dict[str, FieldKind]] = {
        # Numeric
        "smallint": FieldKind.NUMBER,
        "integer": FieldKind.NUMBER,
        "int": FieldKind.NUMBER,
        "int2": FieldKind.NUMBER,
        "int4": FieldKind.NUMBER,
        "tinyint": FieldKind.NUMBER,
        "mediumint": FieldKind.NUMBER,
        "bigint": FieldKind.BIGINT,
        "int8": FieldKind.BIGINT,
        "decimal": FieldKind.DECIMAL,
        "numeric": FieldKind.DECIMAL,
        "real": FieldKind.FLOAT,
        "float": FieldKind.FLOAT,
        "float4": FieldKind.FLOAT,
        "float8": FieldKind.FLOAT,
        "double": FieldKind.FLOAT,
        "double precision": FieldKind.FLOAT,
        "serial": FieldKind.SERIAL,
        "bigserial": FieldKind.SERIAL,
        "smallserial": FieldKind.SERIAL,
        # Character
        "character varying": FieldKind.VARCHAR,
        "varchar": FieldKind.VARCHAR,
        "nvarchar": FieldKind.VARCHAR,
        "character": FieldKind.CHAR,
        "char": FieldKind.CHAR,
        "bpchar": FieldKind.CHAR,
        "nchar": FieldKind.CHAR,
        "text": FieldKind.TEXTAREA,
        "clob": FieldKind.TEXTAREA,
        "mediumtext": FieldKind.TEXTAREA,
        "longtext": FieldKind.TEXTAREA,
        # Date/time
        "timestamp without time zone": FieldKind.TIMESTAMP,
        "timestamp with time zone": FieldKind.TIMESTAMPTZ,
        "timestamp": FieldKind.TIMESTAMP,
        "timestamptz": FieldKind.TIMESTAMPTZ,
        "datetime": FieldKind.TIMESTAMP,
        "date": FieldKind.DATE,
        "time without time zone": FieldKind.TIME,
        "time with time zone": FieldKind.TIMETZ,
        "time": FieldKind.TIME,
        "timetz": FieldKind.TIMETZ,
        "interval": FieldKind.INTERVAL,
        # Boolean
        "boolean": FieldKind.BOOLEAN,
        "bool": FieldKind.BOOLEAN,
        # Binary
        "bytea": FieldKind.BINARY,
        "blob": FieldKind.BINARY,
        "binary": FieldKind.BINARY,
        "varbinary": FieldKind.BINARY,
        # JSON
        "json": FieldKind.JSON,
        "jsonb": FieldKind.JSONB,
        # UUID
        "uuid": FieldKind.UUID,
        # Network
        "inet": FieldKind.INET,
        "cidr": FieldKind.CIDR,
        "macaddr": FieldKind.MACADDR,
        "macaddr8": FieldKind.MACADDR,
        # Bit strings
        "bit": FieldKind.BIT,
        "bit varying": FieldKind.VARBIT,
        "varbit": FieldKind.VARBIT,
        # Geometric
        "point": FieldKind.POINT,
        "line": FieldKind.LINE,
        "lseg": FieldKind.LSEG,
        "box": FieldKind.BOX,
        "path": FieldKind.PATH,
        "polygon": FieldKind.POLYGON,
        "circle": FieldKind.CIRCLE,
        # XML
        "xml": FieldKind.XML,
        # Custom types (enums whose labels could not be read)
        "user-defined": FieldKind.ENUM,
    }

    # Column-name keyword sets, checked in insertion order (first match wins).
    # Heuristic: e.g. "rate" lands in percentage even for currency rates.
    FIELD_NAME_PATTERNS: Final[dict[FieldKind, tuple[str, ...]]] = {
        FieldKind.EMAIL: ("email", "e_mail", "mail"),
        FieldKind.PASSWORD: ("password", "passwd", "pwd", "pass"),
        FieldKind.URL: ("url", "link", "website", "homepage"),
        FieldKind.PHONE: ("phone", "tel", "telephone", "mobile", "cell"),
        FieldKind.COLOR: ("color", "colour"),
        FieldKind.TEXTAREA: (
            "description",
            "content",
            "body",
            "message",
            "notes",
            "comment",
            "text",
            "bio",
        ),
        FieldKind.SLUG: ("slug", "handle"),
        FieldKind.SEARCH: ("search", "query"),
        FieldKind.FILE: ("file", "attachment", "upload"),
        FieldKind.IMAGE: ("image", "img", "photo", "picture", "avatar"),
        FieldKind.CURRENCY: ("price", "cost", "amount", "fee", "salary"),
        FieldKind.PERCENTAGE: ("percent", "rate", "ratio"),
    }

    SENSITIVE_NAME_PATTERNS: Final[tuple[str, ...]] = (
        "password",
        "pass",
        "pwd",
        "secret",
        "api_key",
        "token",
        "private_key",
        "hash",
        "salt",
        "social_security",
        "ssn",
        "tax_id",
        "credit_card",
        "bank_account",
        "internal_notes",
        "admin_notes",
        "deleted_at",
        "deleted_by",
    )

    # Foreign-key display fields, in priority order
    DISPLAY_FIELD_PRIORITY: Final[tuple[str, ...]] = (
        "name",
        "title",
        "first_name",
        "username",
        "email",
        "description",
        "label",
        "display_name",
    )
    # Columns whose presence means a lookup endpoint already exists
    ENDPOINT_DISPLAY_COLUMNS: Final[frozenset[str]] = frozenset(
        {"name", "title", "first_name", "username", "email"}
    )
    DISPLAY_TEXT_TYPES: Final[frozenset[str]] = frozenset(
        {"character varying", "varchar", "text"}
    )

    # Catalog type -> TypeScript / TypeBox type used by generated code. Keys are
    # looked up by `data_type`, then `udt_name`; array element types by the
    # udt name without its leading underscore.
    TYPESCRIPT_TYPES: Final[dict[str, str]] = {
        "integer": "number",
        "int2": "number",
        "int4": "number",
        "int8": "number",
        "bigint": "number",
        "smallint": "number",
        "decimal": "number",
        "numeric": "number",
        "real": "number",
        "float4": "number",
        "float8": "number",
        "double precision": "number",
        "serial": "number",
        "bigserial": "number",
        "character varying": "string",
        "varchar": "string",
        "character": "string",
        "char": "string",
        "bpchar": "string",
        "text": "string",
        "boolean": "boolean",
        "bool": "boolean",
        "timestamp without time zone": "Date",
        "timestamp with time zone": "Date",
        "timestamp": "Date",
        "timestamptz": "Date",
        "date": "Date",
        "time": "string",
        "json": "Record<string, any>",
        "jsonb": "Record<string, any>",
        "uuid": "string",
        "bytea": "Buffer",
        "array": "any[]",
    }
    TYPEBOX_TYPES: Final[dict[str, str]] = {
        "integer": "Type.Integer()",
        "int2": "Type.Integer()",
        "int4": "Type.Integer()",
        "int8": "Type.Number()",
        "bigint": "Type.Number()",
        "smallint": "Type.Integer()",
        "decimal": "Type.Number()",
        "numeric": "Type.Number()",
        "real": "Type.Number()",
        "float4": "Type.Number()",
        "float8": "Type.Number()",
        "double precision": "Type.Number()",
        "serial": "Type.Integer()",
        "bigserial": "Type.Number()",
        "character varying": "Type.String()",
        "varchar": "Type.String()",
        "character": "Type.String()",
        "char": "Type.String()",
        "bpchar": "Type.String()",
        "text": "Type.String()",
        "boolean": "Type.Boolean()",
        "bool": "Type.Boolean()",
        "timestamp without time zone": 'Type.String({ format: "date-time" })',
        "timestamp with time zone": 'Type.String({ format: "date-time" })',
        "timestamp": 'Type.String({ format: "date-time" })',
        "timestamptz": 'Type.String({ format: "date-time" })',
        "date": 'Type.String({ format: "date" })',
        "time": "Type.String()",
        "json": "Type.Record(Type.String(), Type.Any())",
        "jsonb": "Type.Record(Type.String(), Type.Any())",
        "uuid": 'Type.String({ format: "uuid" })',
        "bytea": "Type.String()",
        "array": "Type.Array(Type.Any())",
    }
    UNKNOWN_TYPESCRIPT_TYPE: Final[str] = "any"
    UNKNOWN_TYPEBOX_TYPE: Final[str] = "Type.Any()"

    STATUS_COLUMNS: Final[frozenset[str]] = frozenset(
        {"is_active", "enabled", "is_published", "is_verified"}
    )
    DATE_COLUMNS: Final[frozenset[str]] = frozenset(
        {"created_at", "updated_at", "published_at", "deleted_at"}
    )


__all__ = [
    "NUMERIC_KINDS",
    "TEMPORAL_KINDS",
    "TEXTUAL_KINDS",
    "ConstraintKind",
    "ConstraintSource",
    "Constants",
    "FieldKind",
    "Predicate",
]
