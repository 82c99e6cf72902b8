"""Shared fixtures: isolated settings, SQLite database and a pinned clock."""
from __future__ import annotations

import os
import tempfile
import uuid
from datetime import datetime, timezone
from typing import Callable

import pytest

# Settings are read at import time by the database and router modules.
_DATA_DIR = tempfile.mkdtemp(prefix="certistage-tests-")
os.environ["CERTISTAGE_DATA_DIR"] = _DATA_DIR
os.environ.setdefault("CERTISTAGE_ENABLE_PROMETHEUS", "false")
os.environ.setdefault("CERTISTAGE_RATE_LIMIT_REQUESTS", "10000")
os.environ.setdefault("CERTISTAGE_PAYMENT_RATE_LIMIT", "1000/minute")

from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import Session, sessionmaker  # noqa: E402

from certistage.api.dependencies.billing import get_clock  # noqa: E402
from certistage.api.dependencies.database import get_db  # noqa: E402
from certistage.api.main import create_app  # noqa: E402
from certistage.core import models  # noqa: E402
from certistage.core.database import init_database  # noqa: E402

FIXED_NOW = datetime(2024, 7, 1, tzinfo=timezone.utc)


@pytest.fixture(scope="session")
def session_factory(tmp_path_factory: pytest.TempPathFactory) -> sessionmaker:
    db_path = tmp_path_factory.mktemp("db") / "billing.db"
    engine = create_engine(f"sqlite:///{db_path}", connect_args={"check_same_thread": False})
    init_database(engine)
    return sessionmaker(bind=engine, autoflush=False, autocommit=False, expire_on_commit=False)


@pytest.fixture(scope="session")
def app(session_factory: sessionmaker):
    app = create_app()

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_clock] = lambda: FIXED_NOW
    yield app
    app.dependency_overrides.clear()


@pytest.fixture(scope="session")
def client(app) -> TestClient:
    return TestClient(app)


@pytest.fixture()
def db(session_factory: sessionmaker):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def make_user(db: Session) -> Callable[..., models.User]:
    def _make_user(
        plan: str = "free",
        plan_start_date: datetime | None = None,
        plan_expires_at: datetime | None = None,
        is_active: bool = True,
    ) -> models.User:
        user = models.User(
            email=f"user-{uuid.uuid4().hex}@example.com",
            name="Test Organiser",
            plan=plan,
            plan_start_date=plan_start_date,
            plan_expires_at=plan_expires_at,
            is_active=is_active,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make_user
