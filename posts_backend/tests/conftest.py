import os
from typing import List, Optional

import pytest
from fastapi.testclient import TestClient

# Ensure we default to memory backend for tests to avoid filesystem dependencies
os.environ.setdefault("PERSISTENCE_BACKEND", "memory")

from src.api.db import SQLiteRepository  # noqa: E402
from src.api.main import create_app  # noqa: E402
from src.api.models import PostEntity  # noqa: E402
from src.api.repositories import InMemoryRepository  # noqa: E402
from src.api.schemas import PostCreate, PostUpdate  # noqa: E402


class _Recording:
    """Mixin that records which data operations reached the store."""

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.calls: List[str] = []

    async def create(self, data: PostCreate) -> PostEntity:
        self.calls.append("create")
        return await super().create(data)

    async def find_page(self, limit: int, offset: int) -> List[PostEntity]:
        self.calls.append("find_page")
        return await super().find_page(limit, offset)

    async def count(self) -> int:
        self.calls.append("count")
        return await super().count()

    async def find_by_id(self, post_id: str) -> Optional[PostEntity]:
        self.calls.append("find_by_id")
        return await super().find_by_id(post_id)

    async def update_by_id(self, post_id: str, patch: PostUpdate) -> Optional[PostEntity]:
        self.calls.append("update_by_id")
        return await super().update_by_id(post_id, patch)

    async def delete_by_id(self, post_id: str) -> None:
        self.calls.append("delete_by_id")
        await super().delete_by_id(post_id)


class RecordingRepository(_Recording, InMemoryRepository):
    """In-memory store that records which operations reached it."""


class RecordingSQLiteRepository(_Recording, SQLiteRepository):
    """SQLite store that records which operations reached it."""


class BrokenRepository(InMemoryRepository):
    """Store whose every data call fails, as if the backend were unreachable."""

    async def _fail(self, *args, **kwargs):
        raise ConnectionError("store unreachable")

    create = _fail
    find_page = _fail
    count = _fail
    find_by_id = _fail
    update_by_id = _fail
    delete_by_id = _fail


@pytest.fixture(params=["memory", "sqlite"])
def repo(request, tmp_path):
    if request.param == "sqlite":
        return RecordingSQLiteRepository(str(tmp_path / "posts.db"))
    return RecordingRepository()


@pytest.fixture
def client(repo):
    with TestClient(create_app(repository=repo)) as c:
        yield c


@pytest.fixture
def broken_client():
    with TestClient(create_app(repository=BrokenRepository())) as c:
        yield c
