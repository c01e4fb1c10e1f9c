from pathlib import Path
import os
import sys
import tempfile

sys.path.append(str(Path(__file__).resolve().parents[1]))

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("GOOGLE_CLIENT_ID", "test-client-id.apps.googleusercontent.com")
os.environ.setdefault("GEMINI_API_KEY", "test-gemini-key")
os.environ.setdefault("LOCAL_UPLOAD_DIR", tempfile.mkdtemp(prefix="career-advisor-uploads-"))
os.environ.setdefault("AUTO_CREATE_TABLES", "false")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from career_advisor.api.deps import get_db
from career_advisor.core.config import settings
from career_advisor.core.database import Base
from career_advisor.main import app
from career_advisor.models.entities import UserProfile


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(session_factory, monkeypatch, tmp_path):
    monkeypatch.setattr(settings, "local_upload_dir", str(tmp_path))

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.pop(get_db, None)


@pytest.fixture
def make_profile(db):
    def _make(email="ada@example.com", **fields):
        values = {
            "name": "Ada",
            "picture": "",
            "locale": "en",
            "field": "",
            "points": 0,
            "badges": [],
            "skills": [],
            "learning_coins": 0,
        }
        values.update(fields)
        profile = UserProfile(email=email, **values)
        db.add(profile)
        db.commit()
        return profile

    return _make
