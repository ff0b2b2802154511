"""Shared fixtures for the dashboard API tests.

Every test gets its own in-memory store and application instance, so no state
leaks between tests through the process-wide default app.
"""

import asyncio
import io

import pytest
from fastapi.testclient import TestClient
from openpyxl import Workbook

from proceed_dashboard.core.config import Settings
from proceed_dashboard.main import create_app
from proceed_dashboard.store.memory import InMemoryVersionStore

API = "/api/v1"
XLSX = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def run(coro):
    """Drive a store coroutine from a synchronous test."""
    return asyncio.run(coro)


def make_workbook(sheets):
    """Build .xlsx bytes from ``{sheet name: [row, ...]}``."""
    wb = Workbook()
    wb.remove(wb.active)
    for title, rows in sheets.items():
        ws = wb.create_sheet(title=title)
        for row in rows:
            ws.append(row)
    buffer = io.BytesIO()
    wb.save(buffer)
    return buffer.getvalue()


@pytest.fixture
def settings():
    return Settings(
        ENVIRONMENT="test",
        DATABASE_URL="",
        MAX_UPLOAD_BYTES=64 * 1024,
        VERSION_HISTORY_LIMIT=10,
    )


@pytest.fixture
def store(settings):
    return InMemoryVersionStore(history_limit=settings.VERSION_HISTORY_LIMIT)


@pytest.fixture
def app(settings, store):
    return create_app(settings=settings, store=store)


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def upload_json(client):
    """POST a JSON envelope to /upload and return the response."""
    def _upload(data, filename="portfolio.json", commit=None, **extra):
        body = {"filename": filename, "data": data}
        body.update(extra)
        params = {} if commit is None else {"commit": str(commit).lower()}
        return client.post(f"{API}/upload", json=body, params=params)
    return _upload
