"""
Pytest configuration for the Artisan Network Store.

Provides fixtures for:
- Settings pointed at a per-test temporary directory
- An opened sqlite-backed record store
- Record factories with valid defaults
- PostgreSQL availability checks for integration tests
"""

from __future__ import annotations

import os
from datetime import date
from pathlib import Path
from typing import Any, AsyncGenerator, Callable, Iterator

import psycopg
import pytest
import pytest_asyncio

from artisan_store.config import Settings, get_settings
from artisan_store.domain.models import Artisan, Leader, Order
from artisan_store.infrastructure.db_factory import build_store
from artisan_store.store import RecordStore


@pytest.fixture(autouse=True)
def _fresh_settings_cache() -> Iterator[None]:
    """Each test sees environment overrides it sets."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def test_settings(tmp_path: Path) -> Settings:
    """
    Settings fixture with a private store and export directory.
    """
    return Settings(
        store_backend="sqlite",
        store_path=tmp_path / "data",
        export_dir=tmp_path / "exports",
        store_timeout_seconds=2.0,
        log_level="DEBUG",
    )


@pytest_asyncio.fixture
async def store(test_settings: Settings) -> AsyncGenerator[RecordStore, None]:
    """
    An opened sqlite-backed store, closed after the test.
    """
    record_store = build_store(test_settings)
    await record_store.open()
    try:
        yield record_store
    finally:
        await record_store.close()


@pytest.fixture
def make_artisan() -> Callable[..., Artisan]:
    def _make(**overrides: Any) -> Artisan:
        fields = {
            "id": "a-1",
            "name": "Rahul Sharma",
            "leader_id": "1",
            "performance_metric": "great",
            "products_created": 45,
            "quality_check": 5,
            "amount_to_pay": 2250,
            "skills_added": ["Toy Painting", "Quality Control"],
        }
        fields.update(overrides)
        return Artisan.validated(fields)

    return _make


@pytest.fixture
def make_order() -> Callable[..., Order]:
    def _make(**overrides: Any) -> Order:
        fields = {
            "id": "ORD-2024-001",
            "type": "toys",
            "number_of_products": 50,
            "deadline": date(2024, 12, 31),
            "leader_id": "1",
            "status": "active",
            "created_at": date(2024, 1, 15),
        }
        fields.update(overrides)
        return Order.validated(fields)

    return _make


@pytest.fixture
def make_leader() -> Callable[..., Leader]:
    def _make(**overrides: Any) -> Leader:
        fields = {
            "id": "1",
            "name": "Priya Sharma",
            "phone": "+91 98765 43210",
            "number_of_artisans": 15,
            "orders_received": 8,
            "current_order_id": "ORD-2024-001",
            "performance_score": 95,
            "location": "Jodhpur Village",
            "order_type": "toys",
        }
        fields.update(overrides)
        return Leader.validated(fields)

    return _make


@pytest.fixture(scope="session")
def test_dsn() -> str:
    """
    Database connection string for PostgreSQL integration tests.
    """
    return (
        f"postgresql://{os.getenv('DB_USER', 'postgres')}:{os.getenv('DB_PASSWORD', 'postgres')}"
        f"@{os.getenv('DB_HOST', 'localhost')}:{os.getenv('DB_PORT', '5432')}"
        f"/{os.getenv('DB_NAME', 'artisan_management')}"
    )


@pytest.fixture(scope="session")
def db_connection_available(test_dsn: str) -> bool:
    """
    Check if database is reachable.

    Used to skip integration tests when PostgreSQL is not available.
    """
    try:
        with psycopg.connect(test_dsn, connect_timeout=5) as conn:
            with conn.cursor() as cur:
                cur.execute("SELECT 1;")
                cur.fetchone()
        return True
    except psycopg.Error:
        return False
