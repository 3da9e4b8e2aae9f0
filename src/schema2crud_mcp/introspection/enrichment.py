"""Foreign-key dropdown enrichment.

For each foreign-key column the referenced table is read (through the same
CatalogReader) to pick display fields and to detect whether a lookup
endpoint exists. Traversal is bounded: a table is never enriched again below itself on the
current path, each run reads a table once, and nested enrichment stops at
`max_fk_depth`. A referenced schema whose own foreign keys were not enriched
is marked `truncated`.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

from fastmcp.utilities.logging import get_logger

from .constants import Constants, FieldKind
from .models import (
    DropdownInfo,
    DropdownValidation,
    DropdownWarning,
    IntrospectionConfig,
    MissingEndpoint,
)

if TYPE_CHECKING:
    from .models import EnrichedColumn, TableSchema
    from .reader import CatalogReader

_logger = get_logger("schema_introspection.enrichment")


def dropdown_endpoint(referenced_table: str) -> str:
    return f"/{referenced_table}/dropdown"


def has_lookup_columns(referenced_schema: TableSchema) -> bool:
    """A lookup endpoint is assumed to exist when the table has a display-capable column."""
    return any(col.name in Constants.ENDPOINT_DISPLAY_COLUMNS for col in referenced_schema.columns)


def select_display_fields(
    referenced_schema: TableSchema | None,
    key_column: str,
    limit: int = Constants.MAX_DISPLAY_FIELDS,
) -> list[str]:
    """Pick up to `limit` display fields, always ending with the key column.

    Args:
        referenced_schema: Schema of the referenced table, None if unreadable
        key_column: Referenced key column, used as the guaranteed fallback
        limit: Maximum number of fields including the key

    Returns:
        Non-empty ordered list of column names

    Example:
        authors(id, name, email, bio) -> ["name", "email", "id"]
    """
    if referenced_schema is None:
        return [key_column]

    column_names = {col.name for col in referenced_schema.columns}
    fields = [name for name in Constants.DISPLAY_FIELD_PRIORITY if name in column_names]

    if not fields:
        first_text = next(
            (
                col.name
                for col in referenced_schema.columns
                if col.name != key_column
                and not col.is_primary_key
                and col.data_type.lower() in Constants.DISPLAY_TEXT_TYPES
            ),
            None,
        )
        if first_text:
            fields = [first_text]

    fields = [name for name in fields if name != key_column][: max(limit - 1, 0)]
    fields.append(key_column)
    return fields


class ForeignKeyEnricher:
    """One bounded enrichment run.

    Create a new enricher per top-level request; the read and enrichment
    caches are not shared across requests. Enriched schemas are memoized by
    (table, depth, ancestors), so sibling columns referencing the same table
    get identical dropdown info.
    """

    def __init__(self, reader: CatalogReader, config: IntrospectionConfig | None = None) -> None:
        self.reader = reader
        self.config = config or IntrospectionConfig()
        self._reads: dict[str, asyncio.Future[TableSchema | None]] = {}
        self._enriched: dict[tuple[str, int, frozenset[str]], asyncio.Future[TableSchema]] = {}

    def _read(self, table_name: str) -> asyncio.Future[TableSchema | None]:
        """Read a table at most once per run; concurrent callers share the task."""
        task = self._reads.get(table_name)
        if task is None:
            task = asyncio.ensure_future(self.reader.read_table(table_name))
            self._reads[table_name] = task
        return task

    def _enrich_once(
        self, schema: TableSchema, depth: int, ancestors: frozenset[str]
    ) -> asyncio.Future[TableSchema]:
        key = (schema.table_name, depth, ancestors)
        task = self._enriched.get(key)
        if task is None:
            task = asyncio.ensure_future(self.enrich(schema, depth, ancestors))
            self._enriched[key] = task
        return task

    def _seed(self, schema: TableSchema) -> None:
        if schema.table_name not in self._reads:
            future: asyncio.Future[TableSchema | None] = (
                asyncio.get_running_loop().create_future()
            )
            future.set_result(schema)
            self._reads[schema.table_name] = future

    async def enrich(
        self,
        schema: TableSchema,
        depth: int = 0,
        ancestors: frozenset[str] = frozenset(),
    ) -> TableSchema:
        """Attach dropdown info to every foreign-key column of `schema`.

        Args:
            schema: Classified table schema
            depth: Nesting level of `schema` in this run (0 for the requested table)
            ancestors: Tables above `schema` on the path from the requested table

        Returns:
            A new TableSchema; `schema` is not modified
        """
        self._seed(schema)
        path = ancestors | {schema.table_name}

        fk_indexes = [
            index
            for index, column in enumerate(schema.columns)
            if column.field_kind is FieldKind.FOREIGN_KEY_DROPDOWN and column.foreign_key_info
        ]
        if not fk_indexes:
            return schema

        infos = await asyncio.gather(
            *(self._dropdown_for(schema.columns[index], depth, path) for index in fk_indexes)
        )

        columns = list(schema.columns)
        for index, info in zip(fk_indexes, infos, strict=True):
            columns[index] = columns[index].model_copy(update={"dropdown_info": info})
        return schema.model_copy(update={"columns": columns})

    async def _dropdown_for(
        self, column: EnrichedColumn, depth: int, path: frozenset[str]
    ) -> DropdownInfo:
        fk = column.foreign_key_info
        if fk is None:
            raise ValueError(f"Column {column.name} has no foreign key")
        endpoint = dropdown_endpoint(fk.referenced_table)

        try:
            referenced = await self._read(fk.referenced_table)
        except Exception as e:  # noqa: BLE001 - enrichment degrades per column
            _logger.warning(
                "Could not analyze FK table %s for %s: %s", fk.referenced_table, column.name, e
            )
            return self._fallback(endpoint, fk.referenced_column)

        if referenced is None:
            _logger.warning(
                "Referenced table %s for %s does not exist", fk.referenced_table, column.name
            )
            return self._fallback(endpoint, fk.referenced_column)

        truncated = False
        if referenced.foreign_keys:
            nested_depth = depth + 1
            can_nest = nested_depth < self.config.max_fk_depth
            if can_nest and referenced.table_name not in path:
                referenced = await self._enrich_once(referenced, nested_depth, path)
            else:
                truncated = True

        return DropdownInfo(
            endpoint=endpoint,
            has_endpoint=has_lookup_columns(referenced),
            display_fields=select_display_fields(
                referenced, fk.referenced_column, self.config.max_display_fields
            ),
            referenced_schema=referenced,
            truncated=truncated,
        )

    @staticmethod
    def _fallback(endpoint: str, key_column: str) -> DropdownInfo:
        return DropdownInfo(endpoint=endpoint, has_endpoint=False, display_fields=[key_column])


def validate_dropdown_endpoints(schema: TableSchema) -> DropdownValidation:
    """Report foreign-key dropdowns without a lookup endpoint or display field.

    Returns:
        DropdownValidation; `valid` is False when any endpoint is missing
    """
    missing: list[MissingEndpoint] = []
    warnings: list[DropdownWarning] = []

    for column in schema.columns:
        info = column.dropdown_info
        fk = column.foreign_key_info
        if column.field_kind is not FieldKind.FOREIGN_KEY_DROPDOWN or info is None or fk is None:
            continue

        if not info.has_endpoint:
            missing.append(
                MissingEndpoint(
                    field=column.name,
                    referenced_table=fk.referenced_table,
                    suggested_endpoint=info.endpoint,
                )
            )
        if info.display_fields == [fk.referenced_column]:
            warnings.append(
                DropdownWarning(
                    field=column.name,
                    referenced_table=fk.referenced_table,
                    issue="Only the key field is available for dropdown display",
                )
            )

    return DropdownValidation(valid=not missing, missing=missing, warnings=warnings)
