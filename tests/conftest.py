import pytest
from fastapi.testclient import TestClient

from database import get_session
from main import app


class FakeSession:
    """In-memory stand-in for AsyncSession covering what the routers call."""

    def __init__(self):
        self.rows = {}
        self.commits = 0

    async def get(self, orm_cls, key):
        return self.rows.get((orm_cls, key))

    def add(self, row):
        self.rows[(type(row), row.id)] = row

    async def delete(self, row):
        self.rows.pop((type(row), row.id), None)

    async def commit(self):
        self.commits += 1


@pytest.fixture
def session():
    return FakeSession()


@pytest.fixture
def client(session):
    async def override_session():
        yield session

    app.dependency_overrides[get_session] = override_session
    yield TestClient(app)
    app.dependency_overrides.clear()
