import logging
import os

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

DEFAULT_PORT = 8080
SQLITE_FALLBACK_URL = "sqlite:///database.db"


def parse_log_level(value):
    level = (value or "").upper()
    if not isinstance(logging.getLevelName(level), int):
        logger.warning("Unknown LOG_LEVEL %r, using INFO", value)
        return "INFO"
    return level


class Config:
    def __init__(
        self,
        port=DEFAULT_PORT,
        database_url=None,
        base_url=None,
        testing=False,
        log_level="INFO",
        proxy_hops=0,
        sentry_dsn=None,
    ):
        self.port = int(port)
        self.database_url = database_url
        self.base_url = (base_url or f"http://localhost:{self.port}").rstrip("/")
        self.testing = testing
        self.log_level = parse_log_level(log_level)
        self.proxy_hops = int(proxy_hops)
        self.sentry_dsn = sentry_dsn

    @classmethod
    def from_env(cls):
        """Читает настройки из окружения (и из .env, если он есть)"""
        load_dotenv()

        testing = os.getenv("TESTING", "").lower() == "true"
        database_url = os.getenv("DATABASE_URL", "")
        if not database_url and not testing:
            logger.warning("DATABASE_URL is empty, falling back to %s", SQLITE_FALLBACK_URL)
            database_url = SQLITE_FALLBACK_URL

        return cls(
            port=os.getenv("PORT") or DEFAULT_PORT,
            database_url=database_url or None,
            base_url=os.getenv("BASE_URL") or None,
            testing=testing,
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            proxy_hops=os.getenv("PROXY_HOPS") or 0,
            sentry_dsn=os.getenv("SENTRY_DSN") or None,
        )
