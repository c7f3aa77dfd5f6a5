"""Database engine and session management."""

from sqlalchemy.engine import Engine
from sqlmodel import SQLModel, create_engine

from nolook.config import settings


def build_engine(database_url: str | None = None, echo: bool = False) -> Engine:
    """Create an engine for the note ledger."""
    url = database_url or settings.database_url
    connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
    return create_engine(url, echo=echo, connect_args=connect_args)


engine = build_engine()


def create_db_and_tables(target: Engine | None = None):
    """Create all database tables."""
    SQLModel.metadata.create_all(target or engine)
