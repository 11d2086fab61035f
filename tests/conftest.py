import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool

from inventory.config import Settings
from inventory.database import make_engine
from inventory.main import create_app
from inventory.repositories.memory import MemoryStorage
from inventory.repositories.sql import SqlStorage


def _sqlite_storage() -> SqlStorage:
    engine = make_engine("sqlite://", poolclass=StaticPool)
    return SqlStorage(engine=engine)


def _make_storage(backend: str):
    if backend == "memory":
        return MemoryStorage()
    return _sqlite_storage()


@pytest.fixture(params=["memory", "sql"])
def storage(request):
    storage = _make_storage(request.param)
    storage.init()
    yield storage
    storage.close()


@pytest.fixture
def repo(storage):
    with storage.open() as repo:
        yield repo


@pytest.fixture
def settings():
    return Settings(STORAGE_BACKEND="memory", ENVIRONMENT="production", _env_file=None)


@pytest.fixture(params=["memory", "sql"])
def client(request, settings):
    app = create_app(settings, storage=_make_storage(request.param))
    with TestClient(app) as client:
        yield client


@pytest.fixture
def monitor():
    return {"name": "Monitor", "sku": "mon-27", "price": 199.99, "stock": 10, "minStock": 3}
