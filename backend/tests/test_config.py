import pytest

from lesson_service.config import DEFAULT_DB_URL, Settings


def test_defaults(monkeypatch):
    for name in ("ENV", "DATABASE_URL", "SQL_ECHO", "LOG_LEVEL", "ALLOW_DEV_CORS", "MAX_SEARCH_LENGTH"):
        monkeypatch.delenv(name, raising=False)
    s = Settings()
    assert s.ENV == "dev"
    assert s.DATABASE_URL == DEFAULT_DB_URL
    assert s.SQL_ECHO is False
    assert s.LOG_LEVEL == "INFO"
    assert s.ALLOW_DEV_CORS is True
    assert s.MAX_SEARCH_LENGTH == 200


def test_env_overrides(monkeypatch):
    monkeypatch.setenv("DATABASE_URL", "sqlite:///tmp.db")
    monkeypatch.setenv("LOG_LEVEL", "debug")
    monkeypatch.setenv("SQL_ECHO", "TRUE")
    s = Settings()
    assert s.DATABASE_URL == "sqlite:///tmp.db"
    assert s.LOG_LEVEL == "DEBUG"
    assert s.SQL_ECHO is True


@pytest.mark.parametrize("name,value", [
    ("LOG_LEVEL", "CHATTY"),
    ("DATABASE_URL", "  "),
    ("MAX_SEARCH_LENGTH", "0"),
])
def test_invalid_settings_rejected(monkeypatch, name, value):
    monkeypatch.setenv(name, value)
    with pytest.raises(RuntimeError):
        Settings()
