"""Configuration service for schema2crud-mcp.

This module provides configuration management and database connection utilities
for the schema2crud-mcp application. It centralizes environment variable handling
and database engine creation.
"""

from __future__ import annotations

import os

import sqlalchemy as sa

from schema2crud_mcp.introspection.constants import Constants
from schema2crud_mcp.introspection.exceptions import ConfigurationError
from schema2crud_mcp.introspection.models import IntrospectionConfig

POOL_SIZE = 2
POOL_MAX_OVERFLOW = 8  # 10 connections in total


def _first_env(*names: str, default: str | None = None) -> str | None:
    for name in names:
        value = os.getenv(name)
        if value:
            return value
    return default


def _int_env(name: str, default: int, minimum: int) -> int:
    val = os.getenv(name, str(default))
    try:
        n = int(val)
    except ValueError:
        n = default
    return max(minimum, n)


class ConfigService:
    """Service for managing configuration and database connections."""

    @staticmethod
    def get_database_url() -> str:
        """Get database URL from the environment.

        `SCHEMA2CRUD_DATABASE_URL` wins; otherwise a PostgreSQL URL is built
        from the POSTGRES_* / DATABASE_* connection variables.

        Returns:
            Database URL string

        Raises:
            ConfigurationError: If neither a URL nor a database name is configured
        """
        database_url = os.getenv("SCHEMA2CRUD_DATABASE_URL")
        if database_url:
            return database_url

        database = _first_env("POSTGRES_DATABASE", "DATABASE_NAME")
        if not database:
            error_msg = (
                "SCHEMA2CRUD_DATABASE_URL environment variable not set "
                "and no POSTGRES_DATABASE/DATABASE_NAME configured"
            )
            raise ConfigurationError(error_msg)

        url = sa.URL.create(
            "postgresql+psycopg",
            username=_first_env("POSTGRES_USER", "DATABASE_USER"),
            password=_first_env("POSTGRES_PASSWORD", "DATABASE_PASSWORD"),
            host=_first_env("POSTGRES_HOST", "DATABASE_HOST", default="localhost"),
            port=int(_first_env("POSTGRES_PORT", "DATABASE_PORT", default="5432") or 5432),
            database=database,
        )
        return url.render_as_string(hide_password=False)

    @staticmethod
    def create_database_engine(url: str) -> sa.Engine:
        """Create SQLAlchemy database engine.

        Args:
            url: Database connection URL

        Returns:
            SQLAlchemy Engine instance
        """
        create_kwargs: dict[str, object] = {"pool_pre_ping": True}
        if not url.startswith("sqlite"):
            create_kwargs["pool_size"] = POOL_SIZE
            create_kwargs["max_overflow"] = POOL_MAX_OVERFLOW
        return sa.create_engine(url, **create_kwargs)

    @staticmethod
    def get_introspection_config() -> IntrospectionConfig:
        """Get the introspection tunables from the environment.

        Returns:
            IntrospectionConfig with schema, FK depth and catalog timeout applied
        """
        return IntrospectionConfig(
            schema=os.getenv("SCHEMA2CRUD_SCHEMA", Constants.DEFAULT_SCHEMA),
            max_fk_depth=_int_env("SCHEMA2CRUD_FK_MAX_DEPTH", Constants.DEFAULT_FK_MAX_DEPTH, 1),
            catalog_timeout_sec=_int_env(
                "SCHEMA2CRUD_CATALOG_TIMEOUT_SEC", Constants.DEFAULT_TIMEOUT_SEC, 0
            )
            or None,
        )
