"""Data models for the enriched table schema.

`TableSchema` is the engine's single externally consumed artifact: code
generators render it, the dependency validator reads its dropdown info, and
the import analyzer reads field kinds, filtering strategies and constraint
values per column. All models are frozen; enrichment produces new copies.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime

from pydantic import BaseModel, ConfigDict, Field

from .constants import (
    Constants,
    ConstraintKind,
    ConstraintSource,
    FieldKind,
    Predicate,
)

# -----------------------
# Per-column models
# -----------------------


class ForeignKeyInfo(BaseModel):
    """Outbound foreign-key reference of a column."""

    model_config = ConfigDict(frozen=True)

    referenced_table: str = Field(description="Table the column points at")
    referenced_column: str = Field(description="Key column in the referenced table")
    constraint_name: str | None = Field(default=None, description="Catalog constraint name")


class EnumInfo(BaseModel):
    """Declared enumeration backing a column."""

    model_config = ConfigDict(frozen=True)

    type_name: str = Field(description="Enumeration type name")
    values: list[str] = Field(description="Labels in declaration order")


class ConstraintMetadata(BaseModel):
    """Value domain recovered for a column with its provenance.

    Confidence follows provenance reliability: declared enumeration 100,
    parsed check constraint 95, boolean type 100, otherwise 0.
    """

    model_config = ConfigDict(frozen=True)

    kind: ConstraintKind = Field(description="enum, check_constraint, boolean or unknown")
    confidence_score: int = Field(ge=0, le=100, description="Reliability estimate (0-100)")
    candidate_default: str | None = Field(
        default=None, description="Safe default value taken from the domain"
    )
    provenance: ConstraintSource = Field(description="Where the domain came from")
    values: list[str] = Field(
        default_factory=list, description="Allowed values; empty only for unknown"
    )
    nullable: bool = Field(default=True, description="Whether NULL is allowed")


class FilteringStrategy(BaseModel):
    """Query predicates a field legitimately supports."""

    model_config = ConfigDict(frozen=True)

    category: str = Field(description="Filter category, e.g. 'string', 'numeric', 'unknown'")
    allowed_predicates: tuple[Predicate, ...] = Field(description="Supported predicates")
    format: str | None = Field(default=None, description="Optional format tag, e.g. 'date-time'")

    def allows(self, predicate: Predicate) -> bool:
        return predicate in self.allowed_predicates


class FormFieldConfig(BaseModel):
    """Input configuration derived from the physical type alone."""

    model_config = ConfigDict(frozen=True)

    kind: FieldKind
    required: bool
    default_value: str | None = None
    max_length: int | None = None
    precision: int | None = None
    scale: int | None = None
    step: float | str | None = Field(default=None, description="Numeric input step")
    pattern: str | None = Field(default=None, description="Input pattern for integer text")
    element_type: FieldKind | None = Field(default=None, description="Array element kind")


class DropdownInfo(BaseModel):
    """Lookup information for a foreign-key dropdown."""

    model_config = ConfigDict(frozen=True)

    endpoint: str = Field(description="Conventional lookup endpoint, e.g. '/authors/dropdown'")
    has_endpoint: bool = Field(description="Whether the referenced table supports a lookup")
    display_fields: list[str] = Field(
        min_length=1, description="1-3 display fields; always includes the key"
    )
    referenced_schema: TableSchema | None = Field(
        default=None, description="Schema of the referenced table when it could be read"
    )
    truncated: bool = Field(
        default=False,
        description="True when nested enrichment of the referenced schema was cut off",
    )


class EnrichedColumn(BaseModel):
    """Column with its full semantic classification."""

    model_config = ConfigDict(frozen=True)

    name: str
    data_type: str = Field(description="Declared catalog type")
    udt_name: str = Field(default="", description="Underlying type-descriptor name")
    is_nullable: bool = True
    default_value: str | None = None
    max_length: int | None = None
    precision: int | None = None
    scale: int | None = None
    is_primary_key: bool = False
    is_foreign_key: bool = False
    foreign_key_info: ForeignKeyInfo | None = None
    is_enum: bool = False
    enum_info: EnumInfo | None = None
    constraint_values: list[str] | None = Field(
        default=None, description="Values parsed from a check constraint"
    )
    constraint_metadata: ConstraintMetadata
    field_kind: FieldKind
    filtering_strategy: FilteringStrategy
    form_config: FormFieldConfig
    is_sensitive: bool = Field(default=False, description="Should be hidden from listings")
    ts_type: str = Field(default="any", description="TypeScript type for generated code")
    typebox_type: str = Field(default="Type.Any()", description="TypeBox schema expression")
    dropdown_info: DropdownInfo | None = None


# -----------------------
# Table-level models
# -----------------------


class ForeignKeySummary(BaseModel):
    model_config = ConfigDict(frozen=True)

    column: str
    referenced_table: str
    referenced_column: str


class UniqueConstraints(BaseModel):
    model_config = ConfigDict(frozen=True)

    single_field: list[str] = Field(default_factory=list)
    composite: list[list[str]] = Field(default_factory=list)


class ForeignKeyReference(BaseModel):
    """Inbound foreign key from another table."""

    model_config = ConfigDict(frozen=True)

    table: str = Field(description="Referencing table")
    field: str = Field(description="Referencing column")
    cascade: bool = Field(description="Whether deletes cascade to the referencing rows")
    delete_rule: str = Field(description="Catalog delete rule, e.g. 'CASCADE', 'NO ACTION'")


class BusinessRule(BaseModel):
    model_config = ConfigDict(frozen=True)

    field: str
    rule_type: str
    message: str
    error_code: str


class TableCapabilities(BaseModel):
    """Counts and flags consumers use to decide which artifacts to emit."""

    model_config = ConfigDict(frozen=True)

    has_audit_fields: bool = False
    has_user_audit_fields: bool = False
    has_foreign_keys: bool = False
    has_enums: bool = False
    foreign_key_count: int = 0
    enum_count: int = 0
    dropdown_fields: list[str] = Field(default_factory=list)
    select_fields: list[str] = Field(default_factory=list)
    has_unique_constraints: bool = False
    has_foreign_key_references: bool = False
    has_business_rules: bool = False
    has_status_field: bool = False
    has_date_field: bool = False

    @classmethod
    def summarize(
        cls,
        columns: list[EnrichedColumn],
        unique_constraints: UniqueConstraints,
        foreign_key_references: list[ForeignKeyReference],
        business_rules: list[BusinessRule],
    ) -> TableCapabilities:
        """Derive the capability summary from a classified column list."""
        fk_columns = [col for col in columns if col.is_foreign_key]
        enum_columns = [col for col in columns if col.is_enum]
        return cls(
            has_audit_fields=any(c.field_kind is FieldKind.AUDIT_TIMESTAMP for c in columns),
            has_user_audit_fields=any(c.field_kind is FieldKind.AUDIT_USER for c in columns),
            has_foreign_keys=bool(fk_columns),
            has_enums=bool(enum_columns),
            foreign_key_count=len(fk_columns),
            enum_count=len(enum_columns),
            dropdown_fields=[
                c.name for c in columns if c.field_kind is FieldKind.FOREIGN_KEY_DROPDOWN
            ],
            select_fields=[c.name for c in columns if c.field_kind is FieldKind.ENUM_SELECT],
            has_unique_constraints=bool(
                unique_constraints.single_field or unique_constraints.composite
            ),
            has_foreign_key_references=bool(foreign_key_references),
            has_business_rules=bool(business_rules),
            has_status_field=any(c.name in Constants.STATUS_COLUMNS for c in columns),
            has_date_field=any(c.name in Constants.DATE_COLUMNS for c in columns),
        )


class TableSchema(BaseModel):
    """Enriched schema of one table."""

    model_config = ConfigDict(frozen=True)

    table_name: str
    columns: list[EnrichedColumn]
    primary_key: list[str] = Field(default_factory=list)
    foreign_keys: list[ForeignKeySummary] = Field(default_factory=list)
    unique_constraints: UniqueConstraints = Field(default_factory=UniqueConstraints)
    foreign_key_references: list[ForeignKeyReference] = Field(default_factory=list)
    business_rules: list[BusinessRule] = Field(default_factory=list)
    error_codes: dict[str, str] = Field(
        default_factory=dict, description="Symbolic reason -> table-namespaced identifier"
    )
    capabilities: TableCapabilities = Field(default_factory=TableCapabilities)
    analyzed_at: str = Field(
        default_factory=lambda: datetime.now(UTC).isoformat(),
        description="UTC ISO8601 timestamp of the analysis",
    )

    def column(self, name: str) -> EnrichedColumn | None:
        """Return the column named `name`, if present."""
        return next((col for col in self.columns if col.name == name), None)


# -----------------------
# Reports
# -----------------------


class MissingEndpoint(BaseModel):
    field: str
    referenced_table: str
    suggested_endpoint: str


class DropdownWarning(BaseModel):
    field: str
    referenced_table: str
    issue: str


class DropdownValidation(BaseModel):
    """Dropdown endpoint validation result for one table."""

    valid: bool = True
    missing: list[MissingEndpoint] = Field(default_factory=list)
    warnings: list[DropdownWarning] = Field(default_factory=list)


class ConstraintField(BaseModel):
    name: str
    kind: ConstraintKind
    values: list[str]
    confidence_score: int
    provenance: ConstraintSource


class ReviewNote(BaseModel):
    name: str
    reason: str


class ConstraintAudit(BaseModel):
    """Constraint usage report: what is safe to generate and what needs review."""

    warnings: list[str] = Field(default_factory=list)
    constraint_fields: list[ConstraintField] = Field(default_factory=list)
    fallback_fields: list[ReviewNote] = Field(default_factory=list)
    unsafe_fields: list[ReviewNote] = Field(default_factory=list)


class TableListItem(BaseModel):
    name: str = Field(description="Table name")
    columns: int = Field(description="Number of columns")


DropdownInfo.model_rebuild()
EnrichedColumn.model_rebuild()
TableSchema.model_rebuild()


@dataclass
class IntrospectionConfig:
    """Configuration for catalog readers and foreign-key enrichment.

    Attributes:
        schema: Database schema (namespace) to read; None uses the dialect default
        key_column: Column name that always classifies as the primary key
        max_fk_depth: Levels of nested foreign-key enrichment; 1 reads referenced
            tables but does not enrich their own foreign keys
        max_display_fields: Maximum dropdown display fields (key included)
        catalog_timeout_sec: Session-local statement timeout for catalog queries
    """

    schema: str | None = Constants.DEFAULT_SCHEMA
    key_column: str = Constants.PRIMARY_KEY_NAME
    max_fk_depth: int = Constants.DEFAULT_FK_MAX_DEPTH
    max_display_fields: int = Constants.MAX_DISPLAY_FIELDS
    catalog_timeout_sec: int | None = Constants.DEFAULT_TIMEOUT_SEC
