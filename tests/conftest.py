"""
Fixtures compartidas.

Cada test usa una base SQLite en memoria nueva (StaticPool: una sola
conexión compartida entre la sesión del test y la del TestClient).
"""
import os

# Antes de importar app: la app crea las tablas al importarse
os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.database import Base, get_db
from app.main import app
from app.init_db import seed
from app.crud import clients as crud_clients
from app.crud.agencies import get_agency_by_name
from app.schemas.clients import ClientCreate
from app.services.storage import LocalStorage, get_storage
from app.services.ai_validation import SimulatedValidationProvider, get_validation_provider

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def seeded(db):
    seed(db)
    return db


@pytest.fixture
def storage(tmp_path):
    return LocalStorage(str(tmp_path), "/uploads")


@pytest.fixture
def provider():
    return SimulatedValidationProvider(delay=0, seed=7)


@pytest.fixture
def client(seeded, storage, provider):
    def override_get_db():
        yield seeded

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_storage] = lambda: storage
    app.dependency_overrides[get_validation_provider] = lambda: provider
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def alimentos(seeded):
    return crud_clients.create_client(
        seeded, ClientCreate(name="Alimentos SA", email="compras@alimentos.com", tax_id="30-11111111-1")
    )


@pytest.fixture
def anmat(seeded):
    return get_agency_by_name(seeded, "ANMAT")
