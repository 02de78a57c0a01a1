"""
Persistence gateway.

Wraps a SQLAlchemy engine with a bounded connection pool and hands out
scoped connections. Constructed once at startup and injected, so tests
can build one over SQLite instead of PostgreSQL.
"""

import logging
from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy import create_engine
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import SQLAlchemyError, TimeoutError as PoolTimeoutError

from app.core.config import Settings
from app.domain.accounts.errors import PersistenceError
from app.infrastructure.schema import metadata

logger = logging.getLogger(__name__)


class Database:
    """Connection-pooled access point to the relational database.

    Args:
        engine: A configured SQLAlchemy engine. Its pool bounds how many
            requests can hold a connection at the same time.
    """

    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    @classmethod
    def from_settings(cls, settings: Settings) -> "Database":
        """Build a gateway with the pool size and timeout from settings."""
        engine = create_engine(
            settings.get_database_url(),
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_timeout=settings.db_pool_timeout,
            pool_pre_ping=True,
        )
        return cls(engine)

    @property
    def engine(self) -> Engine:
        return self._engine

    def create_schema(self) -> None:
        """Create any missing tables."""
        metadata.create_all(self._engine)
        logger.info("Database schema ensured.")

    def dispose(self) -> None:
        """Close every pooled connection."""
        self._engine.dispose()

    @contextmanager
    def connect(self) -> Iterator[Connection]:
        """Yield a pooled connection for reads; always released."""
        conn = self._checkout()
        try:
            yield conn
        except SQLAlchemyError as exc:
            raise PersistenceError(type(exc).__name__) from exc
        finally:
            conn.close()

    @contextmanager
    def transaction(self) -> Iterator[Connection]:
        """Yield a connection inside a transaction.

        Commits when the block exits normally. On any exception the
        transaction is rolled back before the error propagates; a failing
        rollback is logged and never replaces the original error. The
        connection is released on every exit path.
        """
        conn = self._checkout()
        try:
            trans = conn.begin()
        except SQLAlchemyError as exc:
            conn.close()
            logger.error("Could not begin transaction: %s", type(exc).__name__)
            raise PersistenceError(type(exc).__name__) from exc
        try:
            yield conn
            trans.commit()
        except Exception as exc:
            try:
                trans.rollback()
            except SQLAlchemyError:
                logger.exception("Rollback failed after %s.", type(exc).__name__)
            if isinstance(exc, SQLAlchemyError):
                raise PersistenceError(type(exc).__name__) from exc
            raise
        finally:
            conn.close()

    def _checkout(self) -> Connection:
        try:
            return self._engine.connect()
        except PoolTimeoutError as exc:
            logger.error("Connection pool exhausted.")
            raise PersistenceError("connection pool timeout") from exc
        except SQLAlchemyError as exc:
            logger.error("Database connection failed: %s", type(exc).__name__)
            raise PersistenceError("connection failed") from exc
