from __future__ import annotations

from pathlib import Path

import pytest

from artisan_store import config
from artisan_store.infrastructure.db_factory import (
    available_backends,
    build_dsn,
    build_store,
    create_backend,
    sqlite_path,
)
from artisan_store.storage.postgres_backend import PostgresBackend
from artisan_store.storage.sqlite_backend import SqliteBackend
from artisan_store.store import StoreState

CONFIG_ENV_VARS = (
    "STORE_BACKEND",
    "STORE_NAME",
    "STORE_PATH",
    "STORE_TIMEOUT_SECONDS",
    "DB_HOST",
    "DB_PORT",
    "DB_USER",
    "DB_PASSWORD",
    "DB_NAME",
    "EXPORT_DIR",
    "PAY_RATE_PER_PRODUCT",
)


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    for name in CONFIG_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    # keep a developer's .env out of the picture
    monkeypatch.chdir(tmp_path)


def test_get_settings_defaults(clean_env) -> None:
    settings = config.get_settings()
    assert settings.store_backend == "sqlite"
    assert settings.store_name == "ArtisanManagementDB"
    assert settings.store_timeout_seconds > 0
    assert settings.db_host == "localhost"
    assert settings.db_port == 5432
    assert settings.db_name == "artisan_management"
    assert settings.pay_rate_per_product == 50


def test_settings_read_environment(clean_env, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("STORE_NAME", "TestDB")
    monkeypatch.setenv("STORE_TIMEOUT_SECONDS", "0.5")
    monkeypatch.setenv("PAY_RATE_PER_PRODUCT", "60")

    settings = config.get_settings()

    assert settings.store_name == "TestDB"
    assert settings.store_timeout_seconds == 0.5
    assert settings.pay_rate_per_product == 60


def test_settings_reject_non_positive_timeout(clean_env, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("STORE_TIMEOUT_SECONDS", "0")
    with pytest.raises(ValueError):
        config.Settings()


def test_sqlite_path_joins_location_and_name(test_settings) -> None:
    assert sqlite_path(test_settings) == test_settings.store_path / "ArtisanManagementDB.sqlite3"


def test_build_dsn(test_settings) -> None:
    settings = test_settings.model_copy(
        update={
            "db_user": "app",
            "db_password": "secret",
            "db_host": "db",
            "db_port": 6543,
            "db_name": "crafts",
        }
    )
    assert build_dsn(settings) == "postgresql://app:secret@db:6543/crafts"


def test_available_backends_contains_known_entries(clean_env) -> None:
    assert available_backends() == ["postgres", "sqlite"]


def test_create_backend_by_name(test_settings) -> None:
    assert isinstance(create_backend(test_settings), SqliteBackend)

    postgres = test_settings.model_copy(update={"store_backend": "postgres"})
    assert isinstance(create_backend(postgres), PostgresBackend)


def test_create_backend_rejects_unknown_name(test_settings) -> None:
    bogus = test_settings.model_copy(update={"store_backend": "indexeddb"})
    with pytest.raises(ValueError, match="Unknown store backend"):
        create_backend(bogus)


def test_build_store_is_not_opened(test_settings) -> None:
    store = build_store(test_settings)

    assert store.state is StoreState.UNINITIALIZED
    assert store.timeout_seconds == test_settings.store_timeout_seconds
    assert not sqlite_path(test_settings).exists()


def test_store_backend_is_normalized(clean_env, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("STORE_BACKEND", " Postgres ")

    assert config.get_settings().store_backend == "postgres"
