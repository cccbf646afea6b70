import os
import pytest

# Ensure settings are in place before achievement_tracker imports
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("LOG_JSON", "false")
os.environ.setdefault("BOOTSTRAP_ADMIN", "false")
os.environ.setdefault("TOKEN_LENGTH", "25")


@pytest.fixture
def db_session(tmp_path, monkeypatch):
    db_path = tmp_path / "test.db"
    monkeypatch.setenv("DATABASE_URL", f"sqlite+pysqlite:///{db_path}")

    from achievement_tracker.config import get_settings
    from achievement_tracker.database import reset_engine, get_engine, get_sessionmaker
    from achievement_tracker.models.base import Base

    get_settings.cache_clear()
    reset_engine()
    engine = get_engine()
    Base.metadata.create_all(bind=engine)

    SessionLocal = get_sessionmaker()
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
        reset_engine()


@pytest.fixture
def client(db_session):
    from fastapi.testclient import TestClient
    from achievement_tracker.main import create_app

    with TestClient(create_app()) as test_client:
        yield test_client


@pytest.fixture
def make_achievement(db_session):
    from achievement_tracker.models.achievement import Achievement

    def _make(name="First Steps", image="data:image/png;base64,AAAA"):
        achievement = Achievement(name=name, image=image)
        db_session.add(achievement)
        db_session.commit()
        return achievement

    return _make
