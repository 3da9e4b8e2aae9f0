"""Raw catalog facts.

These frozen dataclasses are what a catalog backend returns for one table.
They are built once per catalog read and never mutated; the classified,
consumer-facing models live in `models`.

Models:
- RawColumn: One row of the column listing
- ForeignKeyRef: Outbound foreign-key reference of a column
- ColumnDescriptor: Physical column joined with its key facts
- EnumDeclaration: Declared enumeration values for a column
- CheckClause: A check-constraint expression attributed to a column
- InboundReference: A foreign key in another table pointing at this one
- TableListing: Table name with its column count
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class RawColumn:
    """Column listing row as reported by the catalog.

    Attributes:
        name: Column name
        data_type: Declared type (lower-case, e.g. 'character varying', 'array')
        udt_name: Underlying type-descriptor name (e.g. 'varchar', '_int4')
        nullable: Whether NULL is allowed
        default: Default expression, if any
        max_length: Character maximum length
        precision: Numeric precision
        scale: Numeric scale
    """

    name: str
    data_type: str
    udt_name: str = ""
    nullable: bool = True
    default: str | None = None
    max_length: int | None = None
    precision: int | None = None
    scale: int | None = None


@dataclass(frozen=True, slots=True)
class ForeignKeyRef:
    """Foreign-key reference from `column` to `referenced_table.referenced_column`."""

    column: str
    referenced_table: str
    referenced_column: str
    constraint_name: str | None = None


@dataclass(frozen=True, slots=True)
class ColumnDescriptor:
    """Physical column with primary/foreign key facts joined in."""

    name: str
    data_type: str
    udt_name: str = ""
    nullable: bool = True
    default: str | None = None
    max_length: int | None = None
    precision: int | None = None
    scale: int | None = None
    is_primary_key: bool = False
    foreign_key: ForeignKeyRef | None = None

    @property
    def is_foreign_key(self) -> bool:
        return self.foreign_key is not None

    @classmethod
    def from_raw(
        cls,
        raw: RawColumn,
        *,
        is_primary_key: bool = False,
        foreign_key: ForeignKeyRef | None = None,
    ) -> ColumnDescriptor:
        return cls(
            name=raw.name,
            data_type=raw.data_type,
            udt_name=raw.udt_name,
            nullable=raw.nullable,
            default=raw.default,
            max_length=raw.max_length,
            precision=raw.precision,
            scale=raw.scale,
            is_primary_key=is_primary_key,
            foreign_key=foreign_key,
        )


@dataclass(frozen=True, slots=True)
class EnumDeclaration:
    """Declared enumeration type and its ordered labels."""

    column: str
    type_name: str
    values: tuple[str, ...]


@dataclass(frozen=True, slots=True)
class CheckClause:
    """Check-constraint expression referencing `column`."""

    column: str
    clause: str


@dataclass(frozen=True, slots=True)
class InboundReference:
    """Foreign key in `table.field` that references the inspected table."""

    table: str
    field: str
    delete_rule: str = "NO ACTION"


@dataclass(frozen=True, slots=True)
class TableListing:
    name: str
    column_count: int

