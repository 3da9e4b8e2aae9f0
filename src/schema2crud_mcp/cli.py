"""Console entry point: `schema2crud-mcp` starts the introspection server."""

from __future__ import annotations

import traceback

from fastmcp.utilities.logging import get_logger

from schema2crud_mcp.server import mcp
from schema2crud_mcp.services.config_service import ConfigService

_logger = get_logger(__name__)


def main() -> None:
    """Start the schema2crud-mcp FastMCP server via CLI."""
    config = ConfigService.get_introspection_config()
    _logger.info(
        "Starting schema2crud-mcp (schema=%s, fk depth=%d)",
        config.schema,
        config.max_fk_depth,
    )
    try:
        mcp.run()
    except KeyboardInterrupt:
        _logger.info("Interrupted by user. Exiting cleanly.")
    except Exception:  # noqa: BLE001
        traceback.print_exc(limit=1)


if __name__ == "__main__":
    main()
