from __future__ import annotations

import pytest
from pydantic import ValidationError

from youthbook.settings import Settings, get_settings


def test_defaults_for_local_dev(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("DATABASE_URL", "DEFAULT_PAGE_SIZE", "MAX_PAGE_SIZE", "LOG_JSON"):
        monkeypatch.delenv(f"YOUTHBOOK_{name}", raising=False)

    settings = Settings(_env_file=None)

    assert settings.database_url == "sqlite+aiosqlite:///./youthbook.db"
    assert settings.default_page_size == 20
    assert settings.max_page_size == 100
    assert settings.log_json is False


def test_environment_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("YOUTHBOOK_DATABASE_URL", "postgresql+asyncpg://db/youthbook")
    monkeypatch.setenv("YOUTHBOOK_MAX_PAGE_SIZE", "50")
    monkeypatch.setenv("YOUTHBOOK_LOG_JSON", "true")
    monkeypatch.setenv("YOUTHBOOK_SQLITE_BUSY_TIMEOUT_SECONDS", "2.5")

    settings = get_settings()

    assert settings.database_url == "postgresql+asyncpg://db/youthbook"
    assert settings.max_page_size == 50
    assert settings.log_json is True
    assert settings.sqlite_busy_timeout_seconds == 2.5


@pytest.mark.parametrize(
    ("name", "value"),
    [
        ("MAX_PAGE_SIZE", "500"),
        ("MAX_PAGE_SIZE", "0"),
        ("DEFAULT_PAGE_SIZE", "0"),
        ("DEFAULT_PAGE_SIZE", "101"),
    ],
)
def test_page_size_bounds_are_enforced(
    monkeypatch: pytest.MonkeyPatch, name: str, value: str
) -> None:
    monkeypatch.setenv(f"YOUTHBOOK_{name}", value)

    with pytest.raises(ValidationError):
        Settings(_env_file=None)
