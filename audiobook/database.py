"""Database handle, session dependency and natural-key inserts."""

import logging
from collections.abc import Generator, Iterable
from typing import Any

from fastapi import Request
from sqlalchemy import create_engine
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

logger = logging.getLogger(__name__)

Base: Any = declarative_base()


class Database:
    """Owns the engine and session factory for one application instance.

    Nothing is opened at construction time; ``connect`` builds the engine and
    ``close`` disposes its pool. The FastAPI lifespan keeps one instance on
    ``app.state.database``.
    """

    def __init__(self, url: str) -> None:
        self.url = url
        self.engine: Engine | None = None
        self._session_factory: sessionmaker | None = None

    @property
    def is_sqlite(self) -> bool:
        return self.url.startswith("sqlite")

    def connect(self) -> None:
        """Create the engine and session factory."""
        if self.engine is not None:
            return
        if self.is_sqlite:
            self.engine = create_engine(self.url, connect_args={"check_same_thread": False})
        else:
            self.engine = create_engine(
                self.url,
                pool_pre_ping=True,
                pool_size=5,
                max_overflow=10,
            )
        self._session_factory = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)
        logger.info(f"Database engine created for {self.engine.url.render_as_string()}")

    def session(self) -> Session:
        """Open a new session. ``connect`` must have been called."""
        if self._session_factory is None:
            raise RuntimeError("Database is not connected")
        return self._session_factory()

    def create_all(self) -> None:
        """Create all tables (tests and local seeding; production uses Alembic)."""
        from audiobook import models  # noqa: F401

        if self.engine is None:
            raise RuntimeError("Database is not connected")
        Base.metadata.create_all(bind=self.engine)

    def close(self) -> None:
        """Dispose the connection pool."""
        if self.engine is not None:
            self.engine.dispose()
            logger.info("Database engine disposed")
        self.engine = None
        self._session_factory = None


def get_db(request: Request) -> Generator[Session, None, None]:
    """Dependency that provides a database session."""
    db = request.app.state.database.session()
    try:
        yield db
    finally:
        db.close()


def insert_if_absent(
    db: Session,
    model: Any,
    values: dict[str, Any],
    conflict_columns: Iterable[str],
) -> bool:
    """Insert a row unless one with the same natural key exists.

    Runs a single ``INSERT ... ON CONFLICT DO NOTHING`` so two concurrent
    callers never both insert. Returns True when this call inserted the row.
    """
    dialect = db.get_bind().dialect.name
    if dialect == "postgresql":
        stmt = postgresql.insert(model)
    elif dialect == "sqlite":
        stmt = sqlite.insert(model)
    else:
        raise NotImplementedError(f"insert_if_absent is not supported for {dialect}")

    stmt = stmt.values(**values).on_conflict_do_nothing(index_elements=list(conflict_columns))
    result = db.execute(stmt)
    return result.rowcount == 1
