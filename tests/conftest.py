"""
Shared fixtures: a fresh SQLite database per test and an app bound to it.
"""

import asyncio
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from app.core.config import Settings
from app.db.session import create_db_engine, create_schema, create_session_factory
from app.main import create_app
from app.services.bulk import BulkOperationExecutor
from app.services.review_aggregator import ReviewAggregator
from app.services.submission_store import SubmissionStore
from app.services.taxonomy import default_taxonomy


def db_url(tmp_path: Path) -> str:
    return f"sqlite+aiosqlite:///{tmp_path / 'test.db'}"


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(DATABASE_URL=db_url(tmp_path), LOG_LEVEL="WARNING", BULK_MAX_IDS=10)


@pytest.fixture
def client(settings):
    app = create_app(settings)
    with TestClient(app) as c:
        yield c


@pytest.fixture
def taxonomy():
    return default_taxonomy()


@pytest.fixture
def run_services(tmp_path):
    """
    Run `scenario(store, reviews, bulk)` on a fresh database inside one event loop.

    The engine is created and disposed in the same loop it is used from.
    """

    def runner(scenario, timeout_seconds: float = 10.0, max_ids: int = 10):
        async def main():
            engine = create_db_engine(db_url(tmp_path))
            await create_schema(engine)
            factory = create_session_factory(engine)
            store = SubmissionStore(factory, timeout_seconds)
            reviews = ReviewAggregator(factory, timeout_seconds)
            bulk = BulkOperationExecutor(store, max_ids=max_ids)
            try:
                return await scenario(store, reviews, bulk)
            finally:
                await engine.dispose()

        return asyncio.run(main())

    return runner
