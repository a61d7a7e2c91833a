import logging
from contextlib import contextmanager

from fastapi import Request
from sqlmodel import SQLModel, Session, create_engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import NullPool

from .exceptions import StoreError

# Import all models to ensure they are registered with SQLModel metadata
from .models import Task, User  # noqa: F401

logger = logging.getLogger(__name__)


def _create_engine(database_url: str):
    if database_url.startswith("sqlite"):
        return create_engine(
            database_url,
            echo=False,
            connect_args={"check_same_thread": False},
        )

    # Postgres and friends: disable pooling for serverless and enable pre-ping
    return create_engine(
        database_url,
        echo=False,
        pool_pre_ping=True,
        poolclass=NullPool,
    )


class Database:
    """Owns the engine and session factory for one configured store."""

    def __init__(self, database_url: str):
        self.url = database_url
        self.engine = _create_engine(database_url)
        self.session_factory = sessionmaker(
            autocommit=False,
            autoflush=False,
            bind=self.engine,
            class_=Session,
        )

    def create_tables(self) -> None:
        """Create all database tables."""
        SQLModel.metadata.create_all(bind=self.engine)

    @contextmanager
    def session(self):
        """Get a database session (context manager style).

        Usage:
            with database.session() as session:
                # do something with session
        """
        session = self.session_factory()
        try:
            yield session
        finally:
            session.close()

    def dispose(self) -> None:
        self.engine.dispose()


def get_db(request: Request):
    """Dependency to get database session."""
    with request.app.state.database.session() as db:
        yield db


@contextmanager
def store_operation(db: Session, action: str):
    """Roll back and convert unexpected store failures into a StoreError.

    Errors the caller wants to map itself (unique violations, for one)
    must be caught inside the block.
    """
    try:
        yield
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception(f"Store failure while {action}: {e.__class__.__name__}")
        raise StoreError() from e
