"""
Database session management and configuration.

Sessions are stored locally (SQLite by default); the engine never talks to a
server.
"""
from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from cookplan.config import settings


def _connect_args(database_url: str) -> dict:
    # SQLite connections are shared with the timer thread
    if database_url.startswith("sqlite"):
        return {"check_same_thread": False}
    return {}


# Create database engine
engine = create_engine(
    settings.database_url,
    pool_pre_ping=True,
    connect_args=_connect_args(settings.database_url),
)

# Create session factory
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Base class for ORM models
Base = declarative_base()


def create_tables():
    """Create all tables in the database."""
    Base.metadata.create_all(bind=engine)
