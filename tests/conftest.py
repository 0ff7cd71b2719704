"""Configuration pytest / Pytest configuration.

Base SQLite temporaire et instant de reference fixe pour les tests API.
Temporary SQLite database and a fixed reference instant for API tests.
"""

import os
import tempfile
from datetime import datetime

_DB_PATH = os.path.join(tempfile.gettempdir(), f"fleetdesk_test_{os.getpid()}.db")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_DB_PATH}"
os.environ["RATE_LIMIT_ENABLED"] = "false"

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from fleetdesk.api.deps import get_now  # noqa: E402
from fleetdesk.database import drop_db, init_db  # noqa: E402
from fleetdesk.main import app  # noqa: E402

FIXED_NOW = datetime(2024, 6, 1, 12, 0)


@pytest.fixture
async def client():
    await drop_db()
    await init_db()
    app.dependency_overrides[get_now] = lambda: FIXED_NOW
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def vehicle_payload():
    return {"code": "AUTO-01", "plate": "AB123CD", "model": "Iveco Daily"}


def pytest_sessionfinish(session, exitstatus):
    if os.path.exists(_DB_PATH):
        os.remove(_DB_PATH)
