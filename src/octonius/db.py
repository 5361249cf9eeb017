"""Engine and session management."""

from __future__ import annotations

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from .config import Settings
from .models import Base

__all__ = ["Database", "init_engine", "normalize_database_url"]


def normalize_database_url(database_url: str) -> str:
    # SQLAlchemy 1.4+ requires 'postgresql://' not 'postgres://'
    # and psycopg3 is the only PostgreSQL driver we ship.
    if database_url.startswith("postgres://"):
        return database_url.replace("postgres://", "postgresql+psycopg://", 1)
    if database_url.startswith("postgresql://"):
        return database_url.replace("postgresql://", "postgresql+psycopg://", 1)
    return database_url


def init_engine(settings: Settings) -> Engine:
    """SQLAlchemy 엔진 초기화."""
    database_url = normalize_database_url(settings.database_url)

    engine_kwargs: dict = {"pool_pre_ping": True}
    if database_url.startswith("sqlite"):
        from sqlalchemy.pool import StaticPool

        engine_kwargs["poolclass"] = StaticPool
        engine_kwargs["connect_args"] = {"check_same_thread": False}
    else:
        engine_kwargs["pool_size"] = 10
        engine_kwargs["max_overflow"] = 20

    return create_engine(database_url, echo=False, **engine_kwargs)


class Database:
    """데이터베이스 세션 관리."""

    def __init__(self, engine: Engine):
        self.engine = engine
        self._session_factory = sessionmaker(bind=engine, expire_on_commit=False)

    def session(self) -> Session:
        return self._session_factory()

    def create_all(self) -> None:
        Base.metadata.create_all(self.engine)

    def drop_all(self) -> None:
        Base.metadata.drop_all(self.engine)
