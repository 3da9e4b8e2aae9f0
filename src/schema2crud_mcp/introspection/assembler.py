"""Schema assembly entry points.

`get_enhanced_schema` reads and classifies one table, then runs bounded
foreign-key enrichment. `audit_constraints` reports which generated value
domains are trustworthy and which need manual review.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastmcp.utilities.logging import get_logger

from .constants import ConstraintKind, Constants, FieldKind
from .constraints import BOOLEAN_TYPES
from .enrichment import ForeignKeyEnricher
from .models import ConstraintAudit, ConstraintField, IntrospectionConfig, ReviewNote
from .reader import CatalogReader

if TYPE_CHECKING:
    from .catalog import CatalogSource
    from .models import TableSchema

_logger = get_logger("schema_introspection.assembler")


async def get_enhanced_schema(
    table_name: str,
    catalog: CatalogSource,
    config: IntrospectionConfig | None = None,
) -> TableSchema | None:
    """Build the enriched schema of one table.

    Args:
        table_name: Table to analyze
        catalog: Catalog backend to read from
        config: Introspection tunables (defaults apply when None)

    Returns:
        Enriched TableSchema, or None if the table does not exist

    Raises:
        CatalogAccessError: If reading the requested table fails. Failures on
            referenced tables degrade the affected column instead.
    """
    config = config or IntrospectionConfig()
    _logger.info("Analyzing table: %s", table_name)

    reader = CatalogReader(catalog, config)
    schema = await reader.read_table(table_name)
    if schema is None:
        _logger.info("Table %s not found", table_name)
        return None

    schema = await ForeignKeyEnricher(reader, config).enrich(schema)

    capabilities = schema.capabilities
    _logger.info(
        "Enhanced analysis complete for %s: %d foreign keys, %d enums, "
        "dropdown fields %s, select fields %s",
        table_name,
        capabilities.foreign_key_count,
        capabilities.enum_count,
        capabilities.dropdown_fields or "none",
        capabilities.select_fields or "none",
    )
    return schema


def audit_constraints(schema: TableSchema) -> ConstraintAudit:
    """Classify each column's value domain as constraint-backed, fallback or unsafe.

    Warnings are produced for select fields without a recovered domain, boolean
    columns that also carry parsed check values, and domains whose confidence
    is below the review threshold.
    """
    warnings: list[str] = []
    constraint_fields: list[ConstraintField] = []
    fallback_fields: list[ReviewNote] = []
    unsafe_fields: list[ReviewNote] = []

    for column in schema.columns:
        metadata = column.constraint_metadata
        is_boolean = (
            metadata.kind is ConstraintKind.BOOLEAN
            or column.data_type.lower() in BOOLEAN_TYPES
            or column.udt_name.lower() in BOOLEAN_TYPES
        )
        has_domain = bool(column.constraint_values) or column.enum_info is not None

        if column.field_kind is FieldKind.ENUM_SELECT and not has_domain:
            warnings.append(
                f"Field {column.name} appears to be enum but no constraints detected"
            )
        if is_boolean and column.constraint_values:
            warnings.append(
                f"Field {column.name} is boolean but has constraint values - using boolean logic"
            )
        if has_domain and metadata.confidence_score < Constants.LOW_CONFIDENCE_THRESHOLD:
            warnings.append(
                f"Field {column.name} has low constraint confidence "
                f"({metadata.confidence_score}%)"
            )

        if has_domain:
            constraint_fields.append(
                ConstraintField(
                    name=column.name,
                    kind=metadata.kind,
                    values=list(metadata.values),
                    confidence_score=metadata.confidence_score,
                    provenance=metadata.provenance,
                )
            )
        elif is_boolean:
            fallback_fields.append(
                ReviewNote(name=column.name, reason="Boolean type - safe fallback")
            )
        elif column.field_kind in {FieldKind.ENUM_SELECT, FieldKind.ENUM}:
            unsafe_fields.append(
                ReviewNote(
                    name=column.name, reason="No constraints detected - manual review required"
                )
            )

    if unsafe_fields:
        _logger.warning(
            "%s: %d field(s) need manual constraint review", schema.table_name, len(unsafe_fields)
        )

    return ConstraintAudit(
        warnings=warnings,
        constraint_fields=constraint_fields,
        fallback_fields=fallback_fields,
        unsafe_fields=unsafe_fields,
    )
