"""
JoeCoin: Database Connection Management

This module provides connection pooling and a context manager for the
runtime PostgreSQL database that stores the ledger event audit trail.
It uses psycopg2's ``SimpleConnectionPool`` with a thin wrapper.

Key responsibilities:
- Maintain the connection pool for runtime_db
- Provide a context manager to acquire/release connections safely
- Encapsulate connection string construction from configuration

External dependencies:
- psycopg2-binary: PostgreSQL client and connection pooling

Database tables accessed:
- None directly (this module is infrastructure only)

Thread safety: Thread-safe under normal psycopg2 pool usage. The
DatabaseManager should be treated as a process-wide singleton.

Author: JoeCoin Team
Created: 2026-10-19
Last Modified: 2026-10-19
Status: Development
Version: v0.1.0
"""

# ============================================================================
# Imports
# ============================================================================

from __future__ import annotations

from contextlib import contextmanager
from typing import Generator, Optional

from psycopg2 import pool
from psycopg2.extensions import connection as PsycopgConnection

from joecoin.core.config import DatabaseConfig, JoeCoinConfig, get_config
from joecoin.core.logging import get_logger

# ============================================================================
# Module Setup
# ============================================================================

logger = get_logger(__name__)


class DatabaseError(Exception):
    """Raised when a database connection or operation fails."""


class DatabaseManager:
    """Manage the connection pool for the JoeCoin runtime database.

    Typical usage::

        from joecoin.core.database import get_db_manager

        db = get_db_manager()
        with db.get_runtime_connection() as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT 1")
            cursor.close()

    Attributes:
        config: Global JoeCoin configuration instance.
        _runtime_pool: Connection pool for the runtime DB.
    """

    def __init__(self, config: JoeCoinConfig) -> None:
        self.config = config
        self._runtime_pool: Optional[pool.SimpleConnectionPool] = None
        logger.info("DatabaseManager initialised")

    # ======================================================================
    # Internal helpers
    # ======================================================================

    @staticmethod
    def _create_connection_string(db_config: DatabaseConfig) -> str:
        """Build a PostgreSQL connection string from configuration."""

        return (
            f"host={db_config.host} "
            f"port={db_config.port} "
            f"dbname={db_config.name} "
            f"user={db_config.user} "
            f"password={db_config.password}"
        )

    def _get_or_create_pool(self) -> pool.SimpleConnectionPool:
        """Return the existing runtime pool or create a new one.

        Raises:
            DatabaseError: If the pool cannot be created.
        """

        if self._runtime_pool is not None:
            return self._runtime_pool

        db_config = self.config.runtime_db
        dsn = self._create_connection_string(db_config)
        try:
            new_pool = pool.SimpleConnectionPool(
                minconn=1,
                maxconn=db_config.pool_size,
                dsn=dsn,
            )
        except Exception as exc:  # pragma: no cover - connection errors
            logger.error("Failed to create connection pool: %s", exc)
            raise DatabaseError("Failed to create database connection pool") from exc

        self._runtime_pool = new_pool
        logger.info("Created connection pool for database '%s'", db_config.name)
        return new_pool

    # ======================================================================
    # Public context managers
    # ======================================================================

    @contextmanager
    def get_runtime_connection(self) -> Generator[PsycopgConnection, None, None]:
        """Yield a connection to the runtime database.

        Yields:
            A psycopg2 connection object. The connection is returned to the
            pool when the context manager exits.

        Raises:
            DatabaseError: If a connection cannot be acquired.
        """

        pool_obj = self._get_or_create_pool()
        try:
            conn = pool_obj.getconn()
        except Exception as exc:  # pragma: no cover - connection errors
            logger.error("Failed to acquire runtime_db connection: %s", exc)
            raise DatabaseError("Failed to acquire runtime_db connection") from exc

        try:
            yield conn
        finally:
            pool_obj.putconn(conn)

    # ======================================================================
    # Lifecycle
    # ======================================================================

    def close_all(self) -> None:
        """Close the connection pool during graceful shutdown."""

        if self._runtime_pool is not None:
            self._runtime_pool.closeall()
            self._runtime_pool = None
            logger.info("Closed runtime_db connection pool")


# ============================================================================
# Global Accessor
# ============================================================================

_db_manager: Optional[DatabaseManager] = None


def get_db_manager() -> DatabaseManager:
    """Return the global :class:`DatabaseManager` singleton."""

    global _db_manager
    if _db_manager is None:
        _db_manager = DatabaseManager(get_config())
    return _db_manager
