import re

from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, create_engine

# Импорт нужен, чтобы таблицы попали в metadata
from shorty import models  # noqa: F401


def normalize_database_url(url):
    # Heroku/Render отдают postgres://, SQLAlchemy его не понимает
    if url.startswith("postgres://"):
        url = url.replace("postgres://", "postgresql://", 1)
    return re.sub(r"^postgresql\+psycopg2://", "postgresql://", url)


def make_engine(config):
    if config.testing:
        return create_engine(
            "sqlite:///:memory:",
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )

    database_url = normalize_database_url(config.database_url)
    if database_url.startswith("sqlite"):
        return create_engine(database_url, connect_args={"check_same_thread": False})
    return create_engine(database_url, echo=False, pool_pre_ping=True)


def create_db_and_tables(engine):
    """Создает таблицы в базе данных"""
    SQLModel.metadata.create_all(engine)
