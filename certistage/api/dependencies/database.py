"""Per-request SQLAlchemy session."""
from __future__ import annotations

from typing import Iterator

from sqlalchemy.orm import Session

from certistage.core.database import SessionLocal


def get_db() -> Iterator[Session]:
    """Yield a session; roll back whatever the request left uncommitted if it failed."""
    db = SessionLocal()
    try:
        yield db
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


__all__ = ["get_db"]
