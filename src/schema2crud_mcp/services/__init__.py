"""Services package for schema2crud-mcp.

This package contains service classes that handle configuration and
orchestration for the schema2crud-mcp application. Services coordinate
between the introspection engine and the MCP tool layer.

Main Components:
- ConfigService: Configuration and database connection management
- IntrospectionService: Table introspection requests against one engine
- IntrospectionServiceManager: Process-wide lazily created service
"""

from .config_service import ConfigService
from .introspection_service import IntrospectionService
from .introspection_service_manager import IntrospectionServiceManager

__all__ = [
    "ConfigService",
    "IntrospectionService",
    "IntrospectionServiceManager",
]
