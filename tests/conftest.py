"""Shared pytest fixtures for nestedset tests."""

import pytest
from httpx import ASGITransport, AsyncClient

from nestedset.api.router import get_tree_service
from nestedset.db.connection import Database
from nestedset.main import app
from nestedset.tree import NestedSetTree
from tests.fixtures import FOREST_CONFIG


@pytest.fixture
async def db():
    """In-memory database for tests."""
    database = await Database.connect(":memory:")
    yield database
    await database.close()


@pytest.fixture
async def tree(db):
    """Single-tree NestedSetTree with default config."""
    return NestedSetTree(db)


@pytest.fixture
async def forest_db():
    """In-memory database whose node table has a tree_key group column."""
    database = await Database.connect(":memory:", FOREST_CONFIG)
    yield database
    await database.close()


@pytest.fixture
async def forest(forest_db):
    """NestedSetTree bound to tree 'alpha' of a partitioned table."""
    return NestedSetTree(forest_db, FOREST_CONFIG)


@pytest.fixture
async def client(tree):
    """Async test client with an in-memory tree wired into the app."""
    app.dependency_overrides[get_tree_service] = lambda: tree
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client
    app.dependency_overrides.clear()
