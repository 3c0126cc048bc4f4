"""
Test configuration and fixtures for the hit collector.
This centralizes all test setup, making individual tests clean.
"""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import func, select

from collector_app.config import load_settings
from collector_app.models.hit import Hit
from collector_app.server import create_app
from collector_app.storage.factory import HitStorageFactory


@pytest.fixture(scope="function")
def settings(tmp_path):
    """
    Settings pointing at a fresh SQLite file per test.
    The .env file is ignored so the developer's environment can't leak in.
    """
    return load_settings(
        _env_file=None,
        database_url=f"sqlite:///{tmp_path / 'test.db'}",
    )


@pytest.fixture(scope="function")
def storage(settings):
    """Initialized storage client (engine, ping, schema)"""
    storage = HitStorageFactory.create(settings)
    try:
        yield storage
    finally:
        storage.close()


@pytest.fixture(scope="function")
def client(settings, storage):
    """
    Create a test client around an app that owns the test storage.
    This is the main fixture that tests will use.
    """
    app = create_app(settings, storage)
    with TestClient(app) as test_client:
        yield test_client


def count_hits(storage) -> int:
    with storage.engine.connect() as conn:
        return conn.execute(select(func.count()).select_from(Hit.__table__)).scalar_one()


def fetch_hits(storage) -> list:
    with storage.engine.connect() as conn:
        return conn.execute(select(Hit.__table__).order_by(Hit.__table__.c.ID)).mappings().all()
