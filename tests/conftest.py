"""Shared fixtures: a throwaway SQLite store and a matching config file."""

from decimal import Decimal

import pytest

from storefront.config import Settings
from storefront.seed_db import seed


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    """Keep DB_* variables from the developer's shell out of the tests."""
    for key in ("DB_URL", "DB_USER", "DB_PASSWORD", "DB_TIMEOUT"):
        monkeypatch.delenv(key, raising=False)


@pytest.fixture
def db_path(tmp_path):
    return tmp_path / "store.db"


@pytest.fixture
def settings(db_path):
    return Settings(
        db_url=f"sqlite:///{db_path}",
        db_user="shop",
        db_password="secret",
        db_timeout=1.0,
    )


@pytest.fixture
def config_file(tmp_path, settings):
    path = tmp_path / "config.properties"
    path.write_text(
        f"DB_URL={settings.db_url}\n"
        f"DB_USER={settings.db_user}\n"
        f"DB_PASSWORD={settings.db_password}\n",
        encoding="utf-8",
    )
    return path


@pytest.fixture
def pen_store(settings):
    """Catalog with a single Pen (Rs. 10.0, stock 5)."""
    seed(settings, [(1, "Pen", Decimal("10.0"), 5)])
    return settings


@pytest.fixture
def mixed_store(settings):
    seed(
        settings,
        [
            (1, "Pen", Decimal("10.0"), 5),
            (2, "Mug", Decimal("50.0"), 0),
            (3, "Notebook", Decimal("25.5"), 2),
        ],
    )
    return settings
