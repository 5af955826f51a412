import os

# La app se importa con un almacén SQL en memoria
os.environ["STORE_BACKEND"] = "sql"
os.environ["SQLALCHEMY_DATABASE_URL"] = "sqlite://"
os.environ["POLITICA_APROBACION"] = "libre"

import pytest
from httpx import AsyncClient, ASGITransport

from approyect.core.database import get_db
from approyect.core.store import CacheLecturas, SqlDocumentStore
from approyect.main import app
from tests.test_db import TestingSessionLocal, init_test_db, override_get_db

app.dependency_overrides[get_db] = override_get_db


@pytest.fixture
def session():
    init_test_db()
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def store(session):
    return SqlDocumentStore(session)


@pytest.fixture
def cache(store):
    return CacheLecturas(store)


@pytest.fixture
async def client(session):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
