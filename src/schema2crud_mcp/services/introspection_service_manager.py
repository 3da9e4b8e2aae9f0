"""Introspection service manager for schema2crud-mcp.

Provides a process-wide `IntrospectionService` created lazily on first use
from the environment configuration, and disposes its engine on shutdown.
"""

from __future__ import annotations

import asyncio
import threading
from typing import ClassVar

from fastmcp.utilities.logging import get_logger
from sqlalchemy.exc import SQLAlchemyError

from schema2crud_mcp.introspection.exceptions import ConfigurationError
from schema2crud_mcp.services.config_service import ConfigService
from schema2crud_mcp.services.introspection_service import IntrospectionService


class IntrospectionServiceManager:
    """Singleton manager for IntrospectionService instances.

    The service holds a pooled engine shared by all requests; each request
    still builds its own schema objects, so no classification state is
    shared between requests.
    """

    _instance: ClassVar[IntrospectionServiceManager | None] = None
    _lock: ClassVar[threading.Lock] = threading.Lock()

    def __init__(self, service: IntrospectionService | None = None) -> None:
        """Initialize the manager, optionally with a prebuilt service."""
        self._service = service
        self._initialization_lock = asyncio.Lock()
        self._logger = get_logger(__name__)

    @classmethod
    def get_instance(cls) -> IntrospectionServiceManager:
        """Get the singleton instance of IntrospectionServiceManager.

        Returns:
            IntrospectionServiceManager: The singleton instance
        """
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = cls()
        return cls._instance

    @classmethod
    def reset_instance(cls) -> None:
        """Reset the singleton instance (primarily for testing)."""
        with cls._lock:
            cls._instance = None

    async def get_service(self) -> IntrospectionService:
        """Get the IntrospectionService, creating it on first use.

        Returns:
            IntrospectionService: The shared service instance

        Raises:
            RuntimeError: If the database is not configured or the engine
                cannot be created
        """
        if self._service is not None:
            return self._service

        async with self._initialization_lock:
            if self._service is None:
                try:
                    url = ConfigService.get_database_url()
                    engine = ConfigService.create_database_engine(url)
                    config = ConfigService.get_introspection_config()
                    self._service = IntrospectionService(engine, config)
                except (ConfigurationError, ImportError, SQLAlchemyError) as exc:
                    self._logger.exception("IntrospectionService initialization failed")
                    msg = f"Introspection service is not available: {exc}"
                    raise RuntimeError(msg) from exc
        return self._service

    @property
    def is_initialized(self) -> bool:
        return self._service is not None

    async def shutdown(self) -> None:
        """Dispose of the service's database engine."""
        async with self._initialization_lock:
            if self._service is None:
                return
            try:
                self._logger.info("Shutting down IntrospectionService…")
                self._service.engine.dispose()
                self._logger.debug("Database engine disposed")
            except (AttributeError, OSError, RuntimeError, SQLAlchemyError) as exc:
                self._logger.warning("Error during IntrospectionService shutdown: %s", exc)
            finally:
                self._service = None
