"""Custom exception hierarchy for schema introspection.

Exception Categories:
- Base exception for general introspection errors
- Catalog access errors for failed metadata queries
- Configuration errors for missing or invalid settings

A missing table is not an exception: readers return ``None`` for it.
Per-column enrichment failures are not exceptions either: the affected
column degrades to a conservative fallback.
"""

from __future__ import annotations


class SchemaIntrospectionError(Exception):
    """Base exception for schema introspection operations."""


class CatalogAccessError(SchemaIntrospectionError):
    """Raised when a catalog metadata query fails for a table.

    Fatal for that table's classification; callers do not retry.

    Attributes:
        table_name: Table whose catalog read failed
    """

    def __init__(self, table_name: str, message: str) -> None:
        super().__init__(f"Failed to get schema for table {table_name}: {message}")
        self.table_name = table_name


class ConfigurationError(SchemaIntrospectionError):
    """Raised when required configuration is missing or invalid."""
