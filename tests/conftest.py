import os

# Ensure we default to memory backend for tests to avoid filesystem dependencies
os.environ.setdefault("PERSISTENCE_BACKEND", "memory")

import httpx  # noqa: E402
import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from dashlist.client import TodoClient  # noqa: E402
from dashlist.errors import StorageError  # noqa: E402
from dashlist.main import app  # noqa: E402
from dashlist.repositories import InMemoryRepository, get_repository  # noqa: E402


class UnavailableRepository(InMemoryRepository):
    """Repository whose backing store is unreachable."""

    def list_all(self):
        raise StorageError("Todo storage is unavailable")

    def create(self, task, due_date, todo_id=None):
        raise StorageError("Todo storage is unavailable")


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def unavailable_repo():
    return UnavailableRepository()


@pytest.fixture
def repo():
    return InMemoryRepository()


@pytest.fixture
def use_repo():
    """Route the app's repository dependency to the given repository."""

    def _use(repository):
        app.dependency_overrides[get_repository] = lambda: repository
        return repository

    yield _use
    app.dependency_overrides.clear()


@pytest.fixture
def client(repo, use_repo):
    use_repo(repo)
    with TestClient(app) as c:
        yield c


@pytest.fixture
async def todo_client(repo, use_repo):
    use_repo(repo)
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as http:
        yield TodoClient(http=http)
