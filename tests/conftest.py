import pytest
from fastapi.testclient import TestClient

from formsapi.config import get_config
from formsapi.database import Store
from formsapi.main import create_app
from formsapi.repositories.client import ClientRepository
from formsapi.repositories.field import FieldRepository
from formsapi.repositories.form import FormRepository
from formsapi.repositories.response import ResponseRepository
from formsapi.submission import SubmissionService


@pytest.fixture
def database_url(tmp_path):
    """A fresh SQLite file per test."""
    return f"sqlite:///{tmp_path / 'forms.db'}"


@pytest.fixture
async def store(database_url):
    store = Store(database_url, wal=False)
    store.init_schema()
    await store.connect()
    yield store
    await store.disconnect()


@pytest.fixture
def forms(store):
    return FormRepository(store)


@pytest.fixture
def fields(store):
    return FieldRepository(store)


@pytest.fixture
def clients(store):
    return ClientRepository(store)


@pytest.fixture
def responses(store):
    return ResponseRepository(store)


@pytest.fixture
def service(store):
    return SubmissionService(store)


@pytest.fixture
def client(database_url):
    """TestClient bound to an app with its own database file."""
    config = get_config("test").model_copy(
        update={"DATABASE_URL": database_url, "DB_FORCE_ROLL_BACK": False}
    )
    app = create_app(config)
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
