"""Catalog reader: one table's catalog facts -> classified TableSchema.

The reader issues the metadata queries for a table concurrently (each in a
worker thread against the pooled engine), joins them per column, and runs
the per-column classification stages. Foreign-key enrichment is not done
here; see `enrichment`.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Any, TypeVar

from fastmcp.utilities.logging import get_logger

from .classifier import (
    classify_field,
    field_configuration,
    is_sensitive_field,
    typebox_type,
    typescript_type,
)
from .constants import Constants
from .constraints import create_constraint_metadata, extract_domain
from .exceptions import CatalogAccessError
from .facts import CheckClause, ColumnDescriptor, EnumDeclaration, ForeignKeyRef
from .filtering import resolve_strategy
from .models import (
    EnrichedColumn,
    EnumInfo,
    ForeignKeyInfo,
    ForeignKeyReference,
    ForeignKeySummary,
    IntrospectionConfig,
    TableCapabilities,
    TableSchema,
    UniqueConstraints,
)
from .rules import derive_rules, generate_error_codes

if TYPE_CHECKING:
    from collections.abc import Callable

    from .catalog import CatalogSource
    from .facts import InboundReference, RawColumn, TableListing

_logger = get_logger("schema_introspection.reader")

T = TypeVar("T")


def classify_column(
    descriptor: ColumnDescriptor,
    *,
    enum_declaration: EnumDeclaration | None = None,
    check_clauses: list[CheckClause] | None = None,
    key_column: str = Constants.PRIMARY_KEY_NAME,
) -> EnrichedColumn:
    """Run the per-column stages: domain extraction, kind, filtering strategy.

    Pure: the same inputs always produce an equal EnrichedColumn.
    """
    constraint_values: list[str] | None = None
    for check in check_clauses or []:
        constraint_values = extract_domain(check.clause)
        if constraint_values is not None:
            break

    enum_values = list(enum_declaration.values) if enum_declaration else None
    metadata = create_constraint_metadata(
        descriptor, check_values=constraint_values, enum_values=enum_values
    )
    is_enum = enum_declaration is not None or constraint_values is not None
    field_kind = classify_field(
        descriptor,
        is_foreign_key=descriptor.is_foreign_key,
        is_enum=is_enum,
        key_column=key_column,
    )
    fk = descriptor.foreign_key

    return EnrichedColumn(
        name=descriptor.name,
        data_type=descriptor.data_type,
        udt_name=descriptor.udt_name,
        is_nullable=descriptor.nullable,
        default_value=descriptor.default,
        max_length=descriptor.max_length,
        precision=descriptor.precision,
        scale=descriptor.scale,
        is_primary_key=descriptor.is_primary_key,
        is_foreign_key=descriptor.is_foreign_key,
        foreign_key_info=(
            ForeignKeyInfo(
                referenced_table=fk.referenced_table,
                referenced_column=fk.referenced_column,
                constraint_name=fk.constraint_name,
            )
            if fk
            else None
        ),
        is_enum=is_enum,
        enum_info=(
            EnumInfo(type_name=enum_declaration.type_name, values=list(enum_declaration.values))
            if enum_declaration
            else None
        ),
        constraint_values=constraint_values,
        constraint_metadata=metadata,
        field_kind=field_kind,
        filtering_strategy=resolve_strategy(descriptor, field_kind),
        form_config=field_configuration(descriptor),
        is_sensitive=is_sensitive_field(descriptor.name),
        ts_type=typescript_type(descriptor),
        typebox_type=typebox_type(descriptor),
    )


def split_unique_constraints(constraints: list[list[str]]) -> UniqueConstraints:
    single_field: list[str] = []
    composite: list[list[str]] = []
    for columns in constraints:
        if len(columns) == 1:
            if columns[0] not in single_field:
                single_field.append(columns[0])
        elif columns and columns not in composite:
            composite.append(list(columns))
    return UniqueConstraints(single_field=single_field, composite=composite)


def build_table_schema(
    table_name: str,
    columns: list[EnrichedColumn],
    *,
    primary_key: list[str],
    foreign_keys: list[ForeignKeyRef],
    unique_constraints: UniqueConstraints,
    references: list[ForeignKeyReference],
) -> TableSchema:
    """Assemble a TableSchema, deriving business rules, error codes and capabilities."""
    business_rules = derive_rules(columns)
    error_codes = generate_error_codes(
        table_name,
        unique_constraints=unique_constraints,
        foreign_key_references=references,
        business_rules=business_rules,
    )
    return TableSchema(
        table_name=table_name,
        columns=columns,
        primary_key=primary_key,
        foreign_keys=[
            ForeignKeySummary(
                column=fk.column,
                referenced_table=fk.referenced_table,
                referenced_column=fk.referenced_column,
            )
            for fk in foreign_keys
        ],
        unique_constraints=unique_constraints,
        foreign_key_references=references,
        business_rules=business_rules,
        error_codes=error_codes,
        capabilities=TableCapabilities.summarize(
            columns, unique_constraints, references, business_rules
        ),
    )


class CatalogReader:
    """Reads and classifies one table at a time from a catalog backend.

    Attributes:
        catalog: Backend answering the metadata questions
        config: Introspection tunables
    """

    def __init__(self, catalog: CatalogSource, config: IntrospectionConfig | None = None) -> None:
        self.catalog = catalog
        self.config = config or IntrospectionConfig()

    async def _query(self, func: Callable[..., T], *args: Any) -> T:
        return await asyncio.to_thread(func, *args)

    async def list_tables(self) -> list[TableListing]:
        try:
            return await self._query(self.catalog.list_tables)
        except Exception as e:
            error_msg = f"Failed to list tables: {e}"
            raise CatalogAccessError("*", error_msg) from e

    async def read_table(self, table_name: str) -> TableSchema | None:
        """Read and classify one table.

        Args:
            table_name: Table to read

        Returns:
            Classified TableSchema without dropdown enrichment, or None if the
            table does not exist

        Raises:
            CatalogAccessError: If any catalog query fails
        """
        catalog = self.catalog
        try:
            if not await self._query(catalog.table_exists, table_name):
                return None

            (
                raw_columns,
                primary_keys,
                foreign_keys,
                enums,
                checks,
                uniques,
                inbound,
            ) = await asyncio.gather(
                self._query(catalog.list_columns, table_name),
                self._query(catalog.list_primary_keys, table_name),
                self._query(catalog.list_foreign_keys, table_name),
                self._query(catalog.list_enum_columns, table_name),
                self._query(catalog.list_check_clauses, table_name),
                self._query(catalog.list_unique_constraints, table_name),
                self._query(catalog.list_inbound_references, table_name),
            )
        except Exception as e:
            _logger.debug("Catalog read failed for %s", table_name, exc_info=True)
            raise CatalogAccessError(table_name, str(e)) from e

        return self._assemble(
            table_name,
            raw_columns,
            primary_keys=primary_keys,
            foreign_keys=foreign_keys,
            enums=enums,
            checks=checks,
            uniques=uniques,
            inbound=inbound,
        )

    def _assemble(
        self,
        table_name: str,
        raw_columns: list[RawColumn],
        *,
        primary_keys: list[str],
        foreign_keys: list[ForeignKeyRef],
        enums: list[EnumDeclaration],
        checks: list[CheckClause],
        uniques: list[list[str]],
        inbound: list[InboundReference],
    ) -> TableSchema:
        fk_by_column: dict[str, ForeignKeyRef] = {}
        for fk in foreign_keys:
            fk_by_column.setdefault(fk.column, fk)
        enum_by_column = {enum.column: enum for enum in enums}
        checks_by_column: dict[str, list[CheckClause]] = {}
        for check in checks:
            checks_by_column.setdefault(check.column, []).append(check)
        pk_set = set(primary_keys)

        columns = [
            classify_column(
                ColumnDescriptor.from_raw(
                    raw,
                    is_primary_key=raw.name in pk_set,
                    foreign_key=fk_by_column.get(raw.name),
                ),
                enum_declaration=enum_by_column.get(raw.name),
                check_clauses=checks_by_column.get(raw.name),
                key_column=self.config.key_column,
            )
            for raw in raw_columns
        ]

        references = [
            ForeignKeyReference(
                table=ref.table,
                field=ref.field,
                cascade=ref.delete_rule.upper() == "CASCADE",
                delete_rule=ref.delete_rule.upper(),
            )
            for ref in inbound
        ]

        return build_table_schema(
            table_name,
            columns,
            primary_key=list(primary_keys),
            foreign_keys=foreign_keys,
            unique_constraints=split_unique_constraints(uniques),
            references=references,
        )
