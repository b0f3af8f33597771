"""Shared fixtures: an in-memory SQLite store, the service, and an API client."""

import os

# Settings are read at import time
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("STORE_BACKEND", "sqlalchemy")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from kinship.database import Base
from kinship.models import person as person_model  # noqa: F401
from kinship.models import connection as connection_model  # noqa: F401
from kinship.models import family_tree_member  # noqa: F401
from kinship.models.family_tree_member import FamilyTreeMember
from kinship.models.person import Person as PersonRow
from kinship.services.connection_service import ConnectionService
from kinship.stores.sqlalchemy_store import SqlAlchemyConnectionStore


# ============================================================================
# Database
# ============================================================================

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
def db(engine):
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def seed_people(db):
    """Insert persons (and optional tree memberships) into the test database."""

    def _seed(names, tree_id=None, **fields_by_id):
        for person_id, name in names.items():
            db.add(PersonRow(id=person_id, name=name, **fields_by_id.get(person_id, {})))
            if tree_id:
                db.add(FamilyTreeMember(family_tree_id=tree_id, person_id=person_id))
        db.commit()

    return _seed


# ============================================================================
# Service / store
# ============================================================================

@pytest.fixture
def store(db):
    return SqlAlchemyConnectionStore(db)


@pytest.fixture
def service(store):
    return ConnectionService(store)


# ============================================================================
# API
# ============================================================================

@pytest.fixture
def client(store):
    from kinship.core.service_access import get_connection_store
    from kinship.main import app

    app.dependency_overrides[get_connection_store] = lambda: store
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
