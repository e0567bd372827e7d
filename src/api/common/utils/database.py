import os
from fastapi.logger import logger
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool
from sqlmodel import Session


def _get_database_url_from_env_vars():
    DB_SCHEME = os.getenv("DB_SCHEME", "postgresql")
    DB_USER = os.getenv("DB_USER", "postgres")
    DB_PASSWORD = os.getenv("DB_PASSWORD", "postgres")
    DB_HOST = os.getenv("DB_HOST", "db")
    DB_PORT = os.getenv("DB_PORT", "5432")
    DB_NAME = os.getenv("DB_NAME", "claimspro")
    return f"{DB_SCHEME}://{DB_USER}:{DB_PASSWORD}@{DB_HOST}:{DB_PORT}/{DB_NAME}"


def get_database_url():
    url = os.getenv("DATABASE_URL", _get_database_url_from_env_vars())
    logger.info(f"Using database at {url.split('@')[-1]}")
    return url


IN_MEMORY_SQLITE_URLS = ("sqlite://", "sqlite:///:memory:")


def build_engine(url: str, echo: bool = False):
    if url in IN_MEMORY_SQLITE_URLS:
        # One shared connection so an in-memory database is visible to every session
        return create_engine(
            url,
            echo=echo,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    if url.startswith("sqlite"):
        return create_engine(url, echo=echo, connect_args={"check_same_thread": False})
    return create_engine(url, echo=echo)


DATABASE_URL = get_database_url()

engine = build_engine(
    DATABASE_URL,
    echo=os.getenv("ENV") not in ("production", "test"),
)


def get_db():
    with Session(engine) as session:
        yield session
