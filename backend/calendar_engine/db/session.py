from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, DeclarativeBase
import logging
import os
import threading

"""Database engine / session configuration for the events store.

NOTE: In-memory SQLite (":memory:") creates a new database per connection, so
the default is a file-based SQLite database. Set DATABASE_URL (e.g. a
PostgreSQL URL) in deployments.
"""

logger = logging.getLogger(__name__)

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite+pysqlite:///./local.db")

# FastAPI runs sync endpoints in a threadpool; SQLite connections must be shareable
connect_args = {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(
    DATABASE_URL,
    echo=os.getenv("SQL_ECHO") == "1",
    future=True,
    connect_args=connect_args,
)

SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)


class Base(DeclarativeBase):
    pass


# Register the ORM model on Base.metadata before create_all runs
from . import models  # noqa: E402,F401

_init_lock = threading.Lock()
_tables_created = False


def _ensure_tables():
    """Create the schema once per process when no migration has been run."""
    global _tables_created
    if _tables_created:
        return
    with _init_lock:
        if not _tables_created:
            Base.metadata.create_all(bind=engine)
            logger.debug("Ensured events schema on %s", engine.url.render_as_string(hide_password=True))
            _tables_created = True


# Dependency
def get_db():
    _ensure_tables()
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
