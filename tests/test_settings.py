import logging

from dashlist.logging_utils import configure_logging
from dashlist.settings import get_settings


def test_defaults(monkeypatch):
    for name in ("PERSISTENCE_BACKEND", "SQLITE_DB_PATH", "CORS_ALLOW_ORIGINS", "LOG_LEVEL", "HOST", "PORT"):
        monkeypatch.delenv(name, raising=False)
    settings = get_settings()
    assert settings.persistence_backend == "memory"
    assert settings.sqlite_db_path == "./data/todos.db"
    assert settings.cors_allow_origins == ["*"]
    assert settings.log_level == "INFO"
    assert (settings.host, settings.port) == ("127.0.0.1", 8000)


def test_overrides(monkeypatch):
    monkeypatch.setenv("PERSISTENCE_BACKEND", "SQLite")
    monkeypatch.setenv("CORS_ALLOW_ORIGINS", "http://a.test, http://b.test,")
    monkeypatch.setenv("LOG_LEVEL", "debug")
    monkeypatch.setenv("PORT", "not-a-port")
    settings = get_settings()
    assert settings.persistence_backend == "sqlite"
    assert settings.cors_allow_origins == ["http://a.test", "http://b.test"]
    assert settings.log_level == "DEBUG"
    assert settings.port == 8000


def test_unknown_backend_falls_back_to_memory(monkeypatch):
    monkeypatch.setenv("PERSISTENCE_BACKEND", "postgres")
    assert get_settings().persistence_backend == "memory"


def test_configure_logging_accepts_level_names():
    logger = configure_logging("WARNING")
    assert logger.level == logging.WARNING
    assert logging.getLogger("httpx").level == logging.WARNING
    configure_logging(logging.INFO)
