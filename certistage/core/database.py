"""Database engine and base model configuration."""
from __future__ import annotations

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, sessionmaker

from .settings import get_settings


class Base(DeclarativeBase):
    """Base declarative class for all ORM models."""


settings = get_settings()

connect_args = {"check_same_thread": False} if settings.resolved_database_url.startswith("sqlite") else {}

_engine = create_engine(
    settings.resolved_database_url,
    echo=False,
    pool_pre_ping=True,
    connect_args=connect_args,
)
SessionLocal = sessionmaker(bind=_engine, autoflush=False, autocommit=False, expire_on_commit=False)


def init_database(engine: Engine | None = None) -> None:
    """Create database tables for the current metadata."""
    import certistage.core.models  # noqa: F401 ensures models are registered

    Base.metadata.create_all(bind=engine or _engine)


def get_engine() -> Engine:
    return _engine


__all__ = ["Base", "SessionLocal", "init_database", "get_engine"]
