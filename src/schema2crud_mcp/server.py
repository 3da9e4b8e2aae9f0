"""FastMCP server implementation for schema2crud-mcp."""

from __future__ import annotations

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import dotenv
from fastmcp import FastMCP
from fastmcp.utilities.logging import get_logger
from starlette.requests import Request
from starlette.responses import JSONResponse

from schema2crud_mcp.introspection.mcp_tools import register_introspection_tools
from schema2crud_mcp.services.introspection_service_manager import IntrospectionServiceManager

# Load environment variables
dotenv.load_dotenv()

# Configure a module-level logger for local server logs.
_logger = get_logger(__name__)


# -- Context Manager for engine cleanup -------------------------------------
@asynccontextmanager
async def lifespan(_mcp_instance: FastMCP) -> AsyncGenerator[None]:
    """FastMCP lifespan context manager; disposes the catalog engine on shutdown."""
    manager = IntrospectionServiceManager.get_instance()
    try:
        yield
    finally:
        _logger.info("Shutting down IntrospectionService during lifespan shutdown")
        await manager.shutdown()


# Create the main MCP server instance with lifespan
mcp = FastMCP(
    instructions=(
        "This provides a database schema introspection Model Context Protocol "
        "server that classifies table columns for CRUD code generation: field "
        "kinds, filtering strategies, foreign-key dropdowns, business rules "
        "and error codes."
    ),
    lifespan=lifespan,
)

# -- Tool Registration -------------------------------------------------------
register_introspection_tools(mcp)


# -- Health Check ----------------------------------------------------------
@mcp.custom_route("/health", methods=["GET"])
async def health_check(_request: Request) -> JSONResponse:
    return JSONResponse({"status": "healthy", "service": "schema2crud-mcp"})
