import os
import tempfile

_DB_DIR = tempfile.mkdtemp(prefix="storefront-tests-")

os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_DB_DIR}/storefront.db"
os.environ["SESSION_SECRET"] = "test-session-secret-0123456789abcdef-0123"
os.environ["IDENTITY_VERIFY_KEY"] = "identity-test-key-0123456789abcdef0123"
os.environ["IDENTITY_ALGORITHMS"] = "HS256"
os.environ["ENV"] = "dev"
os.environ["ENABLE_ADMIN"] = "true"

import pytest
from asgi_lifespan import LifespanManager
from httpx import ASGITransport, AsyncClient
from storefront.db.connection import async_session
from storefront.db.schema import create_all_tables, drop_all_tables
from storefront.image_uploads.dependency import get_blob_storage
from storefront.main import app
from tests.helpers import InMemoryBlobStorage


@pytest.fixture
async def fresh_db():
    await drop_all_tables()
    await create_all_tables()
    yield
    await drop_all_tables()


@pytest.fixture
async def db_session(fresh_db):
    async with async_session() as session:
        yield session


@pytest.fixture
def blob_storage():
    storage = InMemoryBlobStorage()
    app.dependency_overrides[get_blob_storage] = lambda: storage
    yield storage
    app.dependency_overrides.pop(get_blob_storage, None)


@pytest.fixture
async def ac_client(fresh_db, blob_storage):
    async with LifespanManager(app):
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
            yield ac


@pytest.fixture
async def other_client(ac_client):
    """Second browser against the same running app, with its own cookie jar."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
