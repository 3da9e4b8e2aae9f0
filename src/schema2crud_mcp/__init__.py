"""schema2crud-mcp package for database schema introspection.

Provides Model Context Protocol (FastMCP) server capabilities for reading a
relational catalog and classifying each table's columns into the semantic
model CRUD code generators render from.
"""

from schema2crud_mcp.introspection import (
    CatalogReader,
    EnrichedColumn,
    FieldKind,
    IntrospectionConfig,
    TableSchema,
    get_enhanced_schema,
)
from schema2crud_mcp.services import ConfigService, IntrospectionService

__all__ = [  # noqa: RUF022
    # Core models
    "EnrichedColumn",
    "FieldKind",
    "IntrospectionConfig",
    "TableSchema",
    # Engine
    "CatalogReader",
    "get_enhanced_schema",
    # Services
    "ConfigService",
    "IntrospectionService",
]
