from pathlib import Path

import pytest

from expense_categorizer.core import settings


def test_read_config_file_flat_values(tmp_path: Path) -> None:
    path = tmp_path / "config.yaml"
    path.write_text(
        "# comment\n"
        "OPENAI_MODEL: gpt-4.1-mini  # inline\n"
        "DATABASE_URL: \"sqlite+aiosqlite:///data/app.db\"\n"
        "LOG_LEVEL: 'DEBUG'\n"
        "EMPTY:\n"
        "not a pair\n",
        encoding="utf-8",
    )

    values = settings.read_config_file(str(path))

    assert values == {
        "OPENAI_MODEL": "gpt-4.1-mini",
        "DATABASE_URL": "sqlite+aiosqlite:///data/app.db",
        "LOG_LEVEL": "DEBUG",
    }


def test_read_config_file_missing(tmp_path: Path) -> None:
    assert settings.read_config_file(str(tmp_path / "absent.yaml")) == {}
    assert settings.read_config_file(None) == {}


@pytest.mark.parametrize(
    ("name", "value", "expected"),
    [
        ("OPENAI_API_KEY", "sk-abcdef123456", "sk...56"),
        ("OPENAI_MODEL", "gpt-4o-mini", "gpt-4o-mini"),
        ("SOME_TOKEN", "abc", "****"),
        ("DATABASE_URL", "postgresql+asyncpg://app:hunter2@db:5432/money", "postgresql+asyncpg://app:****@db:5432/money"),
        ("DATABASE_URL", "sqlite+aiosqlite:///./local.db", "sqlite+aiosqlite:///./local.db"),
    ],
)
def test_mask_env_value(name: str, value: str, expected: str) -> None:
    assert settings.mask_env_value(name, value) == expected


@pytest.mark.parametrize(
    ("raw", "expected"),
    [("true", True), ("YES", True), ("0", False), ("off", False), ("maybe", True), ("", True)],
)
def test_get_env_bool(monkeypatch: pytest.MonkeyPatch, raw: str, expected: bool) -> None:
    monkeypatch.setenv("SEED_CATEGORIES", raw)

    assert settings.seed_categories_enabled() is expected


def test_env_int_respects_minimum(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("RECONCILE_CONCURRENCY", "0")
    assert settings.reconcile_concurrency() == settings.DEFAULT_RECONCILE_CONCURRENCY

    monkeypatch.setenv("RECONCILE_CONCURRENCY", "4")
    assert settings.reconcile_concurrency() == 4


def test_database_url_default(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("DATABASE_URL", raising=False)

    assert settings.database_url() == settings.DEFAULT_DATABASE_URL
