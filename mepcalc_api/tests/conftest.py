"""Shared fixtures for API tests. Environment is set before the app is imported."""

import os
import sys
import tempfile

import pytest

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.dirname(__file__))))

_TMP_DIR = tempfile.mkdtemp(prefix="mepcalc-tests-")
os.environ.setdefault("MEPCALC_DATABASE_URL", f"sqlite:///{os.path.join(_TMP_DIR, 'app.db')}")
os.environ.setdefault("MEPCALC_RATE_LIMIT", "10000")

from fastapi.testclient import TestClient  # noqa: E402

from mepcalc_api.database import make_session_factory  # noqa: E402
from mepcalc_api.history import CalculationHistoryStore  # noqa: E402
from mepcalc_api.main import app  # noqa: E402


@pytest.fixture
def history_store(tmp_path):
    """Empty history on its own SQLite file."""
    factory = make_session_factory(f"sqlite:///{tmp_path / 'history.db'}")
    return CalculationHistoryStore(session_factory=factory, limit=100)


@pytest.fixture
def client(history_store):
    with TestClient(app) as c:
        app.state.history_store = history_store
        yield c
