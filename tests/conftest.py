"""Shared fixtures: an in-memory database and a TestClient wired to it."""
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from crmgen.core.config import settings
from crmgen.db import models  # noqa: F401
from crmgen.db.session import Base, get_db
from crmgen.main import app


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


@pytest.fixture
def db(session_factory):
    with session_factory() as session:
        yield session


@pytest.fixture
def output_dirs(tmp_path, monkeypatch):
    """Point both generator output directories at a temporary location."""
    generator_dir = tmp_path / "generator"
    api_dir = tmp_path / "api"
    monkeypatch.setattr(settings, "generator_output_dir", str(generator_dir))
    monkeypatch.setattr(settings, "api_output_dir", str(api_dir))
    return {"generator": generator_dir, "api": api_dir}


@pytest.fixture
def client(session_factory, output_dirs, monkeypatch):
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    monkeypatch.setattr(settings, "auth_required", True)
    app.dependency_overrides[get_db] = override_get_db
    # no context manager: the lifespan would migrate and seed the configured database
    yield TestClient(app, headers={"X-User-Id": "tester"})
    app.dependency_overrides.clear()
