from __future__ import annotations

from collections.abc import Generator
from contextlib import contextmanager

from fastapi import HTTPException, Request
from loguru import logger
from sqlalchemy import Engine, create_engine, event, text
from sqlalchemy.orm import Session, sessionmaker

from estimator.db.models import Base


def _is_postgresql(url: str) -> bool:
    lowered = url.lower()
    return "postgresql" in lowered or "postgres" in lowered


def _validate_postgresql_driver() -> None:
    """Validate PostgreSQL driver is installed when using PostgreSQL.

    Must actually import psycopg2 (not just find it) because SQLAlchemy
    will try to import it when creating the engine.
    """
    try:
        import psycopg2  # noqa: F401

        logger.info("PostgreSQL driver (psycopg2) is available")
    except ImportError as e:
        logger.error("PostgreSQL driver (psycopg2) is not installed. Install it with: pip install psycopg2-binary")
        raise ImportError("PostgreSQL driver required. Install with: pip install psycopg2-binary") from e


def _enable_sqlite_foreign_keys(dbapi_connection, _connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class Database:
    """Engine and session factory for one application instance.

    Created once by the application factory and handed to everything that
    needs storage. Nothing in the codebase keeps its own engine.
    """

    def __init__(self, url: str, *, echo: bool = False) -> None:
        self.url = url
        connect_args: dict = {}
        if "sqlite" in url.lower():
            logger.warning("Using SQLite database (local development only)")
            connect_args = {"check_same_thread": False, "timeout": 30}
        elif _is_postgresql(url):
            _validate_postgresql_driver()
            connect_args = {
                "connect_timeout": 10,
                "application_name": "project-estimator",
            }

        self.engine: Engine = create_engine(
            url,
            connect_args=connect_args,
            echo=echo,
            pool_pre_ping=True,
            pool_recycle=3600,
        )
        if self.engine.dialect.name == "sqlite":
            event.listen(self.engine, "connect", _enable_sqlite_foreign_keys)

        self.session_factory = sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=self.engine)
        logger.info(f"Database engine initialized (dialect={self.engine.dialect.name})")

    def create_all(self) -> None:
        """Create any missing tables."""
        Base.metadata.create_all(bind=self.engine)
        logger.info("Database tables verified")

    def ping(self) -> None:
        """Run a trivial query; raises if the database is unreachable."""
        with self.engine.connect() as conn:
            conn.execute(text("SELECT 1"))

    def dispose(self) -> None:
        self.engine.dispose()
        logger.info("Database engine disposed")

    @contextmanager
    def session(self) -> Generator[Session, None, None]:
        """Session context manager that commits on success and rolls back on error.

        HTTPException is re-raised without logging (expected API responses).
        Other exceptions are logged as database errors and rolled back.
        """
        session = self.session_factory()
        try:
            yield session
            # Always commit: flushed-but-uncommitted work no longer shows up in session.new/dirty
            session.commit()
        except HTTPException:
            logger.debug("HTTPException in session, rolling back")
            session.rollback()
            raise
        except Exception as e:
            logger.error(f"Database session error, rolling back: {type(e).__name__}: {e}")
            session.rollback()
            raise
        finally:
            session.close()


def get_database(request: Request) -> Database:
    """FastAPI dependency returning the application's Database."""
    return request.app.state.database


def get_db(request: Request) -> Generator[Session, None, None]:
    """Get database session for FastAPI dependencies.

    This is a plain generator function (NOT a context manager) that FastAPI
    can use directly with Depends(). Handlers commit explicitly.

    Yields:
        Session: SQLAlchemy database session
    """
    session = get_database(request).session_factory()
    try:
        yield session
    finally:
        session.close()
