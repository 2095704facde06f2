# chatrelay/core/database.py

from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, create_engine

from chatrelay.core.config import settings


def build_engine(database_url: str) -> Engine:
    """Create an engine, applying the SQLite specific connection options."""
    if not database_url.startswith("sqlite"):
        return create_engine(database_url, echo=False)

    kwargs = {"connect_args": {"check_same_thread": False}}  # Needed for SQLite
    if database_url in ("sqlite://", "sqlite:///:memory:"):
        # Share one connection so every session sees the same in-memory db
        kwargs["poolclass"] = StaticPool
    return create_engine(database_url, echo=False, **kwargs)


# Create database engine
engine = build_engine(settings.DATABASE_URL)


def init_db(bind: Engine = engine) -> None:
    """Initialize the database, creating all tables."""
    # Register the table models on the metadata before create_all
    import chatrelay.data_schemas  # noqa: F401

    SQLModel.metadata.create_all(bind)
