"""Introspection service for schema2crud-mcp.

Wraps the introspection engine behind a small facade bound to one engine
and configuration, selecting the catalog backend from the SQL dialect.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastmcp.utilities.logging import get_logger

from schema2crud_mcp.introspection.assembler import audit_constraints, get_enhanced_schema
from schema2crud_mcp.introspection.catalog import InspectorCatalog, PostgresCatalog
from schema2crud_mcp.introspection.enrichment import validate_dropdown_endpoints
from schema2crud_mcp.introspection.models import IntrospectionConfig, TableListItem
from schema2crud_mcp.introspection.reader import CatalogReader

if TYPE_CHECKING:
    import sqlalchemy as sa

    from schema2crud_mcp.introspection.catalog import CatalogSource
    from schema2crud_mcp.introspection.models import (
        ConstraintAudit,
        DropdownValidation,
        TableSchema,
    )

_logger = get_logger(__name__)


def create_catalog(engine: sa.Engine, config: IntrospectionConfig) -> CatalogSource:
    """Pick the catalog backend for the engine's dialect.

    PostgreSQL gets the information_schema backend (declared enums, check
    clauses, delete rules); other dialects use the SQLAlchemy Inspector.
    """
    if engine.dialect.name == "postgresql":
        return PostgresCatalog(
            engine,
            config.schema or "public",
            statement_timeout_sec=config.catalog_timeout_sec,
        )
    # The dialect default schema is used when none is configured
    schema = None if config.schema == "public" else config.schema
    return InspectorCatalog(engine, schema)


class IntrospectionService:
    """Service for table introspection requests.

    Attributes:
        engine: SQLAlchemy engine for catalog access
        config: Introspection tunables
        catalog: Catalog backend selected for the engine's dialect
    """

    def __init__(self, engine: sa.Engine, config: IntrospectionConfig | None = None) -> None:
        self.engine = engine
        self.config = config or IntrospectionConfig()
        self.catalog = create_catalog(engine, self.config)
        _logger.info(
            "Introspection service ready (dialect=%s, backend=%s)",
            engine.dialect.name,
            type(self.catalog).__name__,
        )

    async def list_tables(self) -> list[TableListItem]:
        listings = await CatalogReader(self.catalog, self.config).list_tables()
        return [TableListItem(name=item.name, columns=item.column_count) for item in listings]

    async def get_enhanced_schema(self, table_name: str) -> TableSchema | None:
        return await get_enhanced_schema(table_name, self.catalog, self.config)

    async def validate_dropdown_endpoints(self, table_name: str) -> DropdownValidation | None:
        schema = await self.get_enhanced_schema(table_name)
        if schema is None:
            return None
        return validate_dropdown_endpoints(schema)

    async def audit_table_constraints(self, table_name: str) -> ConstraintAudit | None:
        schema = await self.get_enhanced_schema(table_name)
        if schema is None:
            return None
        return audit_constraints(schema)
