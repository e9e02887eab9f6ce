import logging

from shorty.config import SQLITE_FALLBACK_URL, Config
from shorty.database import normalize_database_url


def test_normalize_database_url():
    assert normalize_database_url("postgres://u:p@db/app") == "postgresql://u:p@db/app"
    assert normalize_database_url("postgresql+psycopg2://u@db/app") == "postgresql://u@db/app"
    assert normalize_database_url("sqlite:///x.db") == "sqlite:///x.db"


def test_base_url_defaults_to_port():
    assert Config(port=9000).base_url == "http://localhost:9000"
    assert Config(base_url="https://short.io/").base_url == "https://short.io"


def test_from_env(monkeypatch):
    monkeypatch.setenv("PORT", "9090")
    monkeypatch.setenv("BASE_URL", "https://short.io/")
    monkeypatch.setenv("DATABASE_URL", "postgres://u@db/app")
    monkeypatch.setenv("TESTING", "false")
    monkeypatch.setenv("PROXY_HOPS", "2")
    monkeypatch.setenv("LOG_LEVEL", "debug")

    config = Config.from_env()

    assert config.port == 9090
    assert config.base_url == "https://short.io"
    assert config.database_url == "postgres://u@db/app"
    assert config.testing is False
    assert config.proxy_hops == 2
    assert config.log_level == "DEBUG"


def test_from_env_falls_back_to_sqlite(monkeypatch):
    monkeypatch.setenv("DATABASE_URL", "")
    monkeypatch.setenv("TESTING", "false")

    assert Config.from_env().database_url == SQLITE_FALLBACK_URL


def test_unknown_log_level_falls_back_to_info():
    assert Config(log_level="verbose").log_level == "INFO"
    assert Config(log_level="warning").log_level == "WARNING"


def test_app_starts_with_unknown_log_level():
    from shorty.main import create_app

    app = create_app(Config(testing=True, log_level="verbose"))
    assert app.logger.level == logging.INFO


def test_sentry_enabled_only_with_dsn(monkeypatch):
    from shorty import main

    calls = []
    monkeypatch.setattr(main.sentry_sdk, "init", lambda **kwargs: calls.append(kwargs))

    main.create_app(Config(testing=True))
    assert calls == []

    main.create_app(Config(testing=True, sentry_dsn="https://key@sentry.example/1"))
    assert calls[0]["dsn"] == "https://key@sentry.example/1"
