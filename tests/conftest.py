from datetime import UTC, datetime
from pathlib import Path

import pytest

from src.adapters.clock import FixedClock
from src.app_shell.config import AppConfig, Settings, build_app_config
from src.app_shell.context import ServiceContext
from src.rules.loader import load_rules

PROJECT_ROOT = Path(__file__).resolve().parents[1]
RULES_PATH = PROJECT_ROOT / "rules.yaml"
TEST_SECRET = "test-secret-0123456789"


@pytest.fixture
def rules():
    return load_rules(RULES_PATH)


@pytest.fixture
def settings(tmp_path, monkeypatch):
    """Settings read from a controlled environment rooted at tmp_path."""
    for var in (
        "CLINIC_ENV",
        "CLINIC_STORAGE_BACKEND",
        "CLINIC_JWT_EXPIRE_MINUTES",
        "CLOUDINARY_CLOUD_NAME",
        "CLOUDINARY_API_KEY",
        "CLOUDINARY_API_SECRET",
    ):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setenv("CLINIC_DATA_DIR", str(tmp_path))
    monkeypatch.setenv("CLINIC_RULES_PATH", str(RULES_PATH))
    monkeypatch.setenv("CLINIC_JWT_SECRET", TEST_SECRET)
    return Settings()


@pytest.fixture
def app_config(settings, rules) -> AppConfig:
    return build_app_config(settings, rules)


@pytest.fixture
def clock():
    return FixedClock(datetime(2025, 1, 1, 12, 0, tzinfo=UTC))


@pytest.fixture
def test_ctx(app_config, clock):
    """
    Creates a full ServiceContext backed by a temporary SQLite DB and local media store.
    """
    return ServiceContext.create(app_config, clock=clock)
