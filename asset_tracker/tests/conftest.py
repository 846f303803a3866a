"""
Фикстуры pytest: отдельная SQLite-база на каждый тест.
"""
import io
import os
import shutil
import tempfile
from pathlib import Path

# База по умолчанию для asset_tracker.main.app — во временной директории,
# чтобы импорт модуля не создавал файл в корне репозитория.
_SESSION_DIR = Path(tempfile.mkdtemp(prefix="asset_tracker_pytest_"))
os.environ.setdefault("DATABASE_URL", f"sqlite:///{_SESSION_DIR / 'default.db'}")

import pytest
from fastapi.testclient import TestClient
from openpyxl import Workbook

from asset_tracker.core.config import Settings
from asset_tracker.core.database import Database
from asset_tracker.main import create_app
from asset_tracker.modules.assets.services.storage import AssetStorage


def pytest_sessionfinish(session, exitstatus):
    """Удаляем временные файлы после прогона."""
    shutil.rmtree(_SESSION_DIR, ignore_errors=True)


@pytest.fixture
def settings(tmp_path):
    return Settings(database_url=f"sqlite:///{tmp_path / 'test.db'}")


@pytest.fixture
def app(settings):
    application = create_app(settings)
    yield application
    application.state.db.dispose()


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


@pytest.fixture
def db_session(tmp_path):
    database = Database(f"sqlite:///{tmp_path / 'storage.db'}")
    database.create_all()
    session = database.SessionLocal()
    yield session
    session.close()
    database.dispose()


@pytest.fixture
def storage(db_session):
    return AssetStorage(db_session)


@pytest.fixture
def make_workbook():
    """Фабрика .xlsx в памяти: make_workbook(headers, rows) -> bytes."""

    def _make(headers, rows):
        wb = Workbook()
        ws = wb.active
        ws.append(list(headers))
        for row in rows:
            ws.append(list(row))
        buf = io.BytesIO()
        wb.save(buf)
        return buf.getvalue()

    return _make


@pytest.fixture
def laptop():
    return {
        "name": "Dell XPS",
        "type": "laptop",
        "tag": "LP-001",
        "serialNumber": "SN-123",
        "cost": "1200.00",
        "acquisitionDate": "2024-01-15",
    }
