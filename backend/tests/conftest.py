import os, sys
import pytest
from fastapi.testclient import TestClient
import tempfile
import uuid

# Ensure package import path: put backend/ first so the local calendar_engine wins
backend_root = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
if backend_root not in sys.path:
    sys.path.insert(0, backend_root)

# Throwaway SQLite file per test run (must be set before the engine is created)
os.environ.setdefault(
    "DATABASE_URL",
    f"sqlite+pysqlite:///{os.path.join(tempfile.gettempdir(), f'calendar_engine_{uuid.uuid4().hex}.db')}",
)

from calendar_engine.main import app  # noqa: E402
from calendar_engine.db.session import engine, Base  # noqa: E402
from calendar_engine.api.calendar import get_now  # noqa: E402


@pytest.fixture(scope="function")  # fresh DB per test
def client():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    app.dependency_overrides.clear()
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def pin_now():
    """Pin the calendar API clock: ``pin_now(datetime(...))``."""
    def _pin(moment):
        app.dependency_overrides[get_now] = lambda: moment
        return moment
    return _pin
