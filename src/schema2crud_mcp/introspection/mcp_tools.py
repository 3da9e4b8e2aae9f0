"""MCP tool registration for schema introspection.

Exposes a `register_introspection_tools` function that attaches tools to a
FastMCP instance while delegating the actual work to the service obtained
via `IntrospectionServiceManager`.
"""

from __future__ import annotations

from typing import Annotated

from fastmcp import Context, FastMCP
from fastmcp.utilities.logging import get_logger
from pydantic import Field

from schema2crud_mcp.introspection.exceptions import CatalogAccessError
from schema2crud_mcp.introspection.models import (
    ConstraintAudit,
    DropdownValidation,
    TableListItem,
    TableSchema,
)
from schema2crud_mcp.services.introspection_service import IntrospectionService
from schema2crud_mcp.services.introspection_service_manager import IntrospectionServiceManager

_logger = get_logger(__name__)

TableNameArg = Annotated[
    str, Field(description="Exact table name as returned by list_tables (case-sensitive)")
]


def register_introspection_tools(
    mcp: FastMCP, manager: IntrospectionServiceManager | None = None
) -> None:
    """Register schema introspection tools.

    Tools return the enriched table model consumed by CRUD code generators
    plus two review reports derived from it.
    """

    mgr = manager or IntrospectionServiceManager.get_instance()

    async def _service(ctx: Context) -> IntrospectionService:
        try:
            return await mgr.get_service()
        except RuntimeError as exc:
            await ctx.error(f"Introspection service not ready: {exc}")
            raise

    async def _table_not_found(ctx: Context, table_name: str) -> ValueError:
        msg = f"Table '{table_name}' not found"
        await ctx.error(msg)
        return ValueError(msg)

    @mcp.tool
    async def list_tables(  # pyright: ignore[reportUnusedFunction]
        ctx: Context,
    ) -> list[TableListItem]:
        """List base tables in the configured schema with their column counts."""
        service = await _service(ctx)
        try:
            tables = await service.list_tables()
        except CatalogAccessError as exc:
            _logger.exception("Listing tables failed")
            await ctx.error(str(exc))
            raise
        _logger.info("Listed %d tables", len(tables))
        return tables

    @mcp.tool
    async def get_enhanced_schema(  # pyright: ignore[reportUnusedFunction]
        ctx: Context, table_name: TableNameArg
    ) -> TableSchema:
        """Return the enriched schema of one table.

        Each column carries its semantic field kind, filtering strategy, value
        domain with confidence, form configuration and, for foreign keys,
        dropdown display fields and lookup endpoint. The table carries unique
        constraints, inbound references, business rules, error codes and a
        capabilities summary.
        """
        service = await _service(ctx)
        try:
            schema = await service.get_enhanced_schema(table_name)
        except CatalogAccessError as exc:
            _logger.exception("Schema analysis failed for %s", table_name)
            await ctx.error(str(exc))
            raise
        if schema is None:
            raise await _table_not_found(ctx, table_name)
        return schema

    @mcp.tool
    async def validate_dropdown_endpoints(  # pyright: ignore[reportUnusedFunction]
        ctx: Context, table_name: TableNameArg
    ) -> DropdownValidation:
        """Check that every foreign-key dropdown of a table has a lookup endpoint.

        Reports missing endpoints with a suggested path, and warns when only
        the key column is available for display.
        """
        service = await _service(ctx)
        try:
            result = await service.validate_dropdown_endpoints(table_name)
        except CatalogAccessError as exc:
            _logger.exception("Dropdown validation failed for %s", table_name)
            await ctx.error(str(exc))
            raise
        if result is None:
            raise await _table_not_found(ctx, table_name)
        return result

    @mcp.tool
    async def audit_table_constraints(  # pyright: ignore[reportUnusedFunction]
        ctx: Context, table_name: TableNameArg
    ) -> ConstraintAudit:
        """Report which value domains are constraint-backed and which need manual review."""
        service = await _service(ctx)
        try:
            audit = await service.audit_table_constraints(table_name)
        except CatalogAccessError as exc:
            _logger.exception("Constraint audit failed for %s", table_name)
            await ctx.error(str(exc))
            raise
        if audit is None:
            raise await _table_not_found(ctx, table_name)
        if audit.warnings:
            await ctx.warning(f"{len(audit.warnings)} constraint warning(s) for {table_name}")
        return audit
