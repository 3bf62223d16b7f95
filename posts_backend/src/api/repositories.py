from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime, timezone
from threading import RLock
from typing import Dict, List, Optional

from .identifiers import generate_identifier
from .models import PostEntity
from .schemas import PostCreate, PostUpdate
from .settings import Settings, get_settings


def _recency_key(post: PostEntity):
    return post["created_at"], post["id"]


# PUBLIC_INTERFACE
class Repository(ABC):
    """
    Abstract async contract for post storage backends.

    The composing application owns the lifecycle: `connect()` before the first
    request, `disconnect()` on shutdown.
    """

    async def connect(self) -> None:
        """Acquire backend resources. No-op by default."""

    async def disconnect(self) -> None:
        """Release backend resources. No-op by default."""

    @abstractmethod
    async def create(self, data: PostCreate) -> PostEntity:
        """Persist a new post and return it with its assigned id."""

    @abstractmethod
    async def find_page(self, limit: int, offset: int) -> List[PostEntity]:
        """Return up to `limit` posts after skipping `offset`, most recent first."""

    @abstractmethod
    async def count(self) -> int:
        """Return the total number of stored posts."""

    @abstractmethod
    async def find_by_id(self, post_id: str) -> Optional[PostEntity]:
        """Return a post by id, or None if not found."""

    @abstractmethod
    async def update_by_id(self, post_id: str, patch: PostUpdate) -> Optional[PostEntity]:
        """Merge the explicitly supplied fields of `patch`. Return the updated post or None if not found."""

    @abstractmethod
    async def delete_by_id(self, post_id: str) -> None:
        """Delete a post by id. Deleting an unknown id is a no-op."""


class InMemoryRepository(Repository):
    """
    Thread-safe in-memory repository suitable for testing and default runtime.
    """

    def __init__(self) -> None:
        self._lock = RLock()
        self._items: Dict[str, PostEntity] = {}

    def _now(self) -> datetime:
        return datetime.now(timezone.utc)

    async def create(self, data: PostCreate) -> PostEntity:
        entity: PostEntity = {
            "id": generate_identifier(),
            "title": data.title,
            "body": data.body,
            "tags": list(data.tags),
            "created_at": self._now(),
        }
        with self._lock:
            self._items[entity["id"]] = entity
        return _copy(entity)

    async def find_page(self, limit: int, offset: int) -> List[PostEntity]:
        with self._lock:
            ordered = sorted(self._items.values(), key=_recency_key, reverse=True)
            start = max(offset, 0)
            page = ordered[start:start + max(limit, 0)]
            # Return copies to avoid external mutation
            return [_copy(p) for p in page]

    async def count(self) -> int:
        with self._lock:
            return len(self._items)

    async def find_by_id(self, post_id: str) -> Optional[PostEntity]:
        with self._lock:
            item = self._items.get(post_id)
            return None if item is None else _copy(item)

    async def update_by_id(self, post_id: str, patch: PostUpdate) -> Optional[PostEntity]:
        with self._lock:
            existing = self._items.get(post_id)
            if existing is None:
                return None

            # Update only provided fields
            updated = _copy(existing)
            changes = patch.changes()
            if "tags" in changes:
                changes["tags"] = list(changes["tags"])
            updated.update(changes)  # type: ignore[typeddict-item]

            self._items[post_id] = updated
            return _copy(updated)

    async def delete_by_id(self, post_id: str) -> None:
        with self._lock:
            self._items.pop(post_id, None)


def _copy(post: PostEntity) -> PostEntity:
    copied = post.copy()
    copied["tags"] = list(post["tags"])
    return copied


# PUBLIC_INTERFACE
def get_repository(settings: Optional[Settings] = None) -> Repository:
    """
    Factory to return the configured repository based on settings.
    - memory: InMemoryRepository
    - sqlite: SQLiteRepository (stdlib sqlite3)
    """
    settings = settings or get_settings()
    if settings.persistence_backend == "sqlite":
        from .db import SQLiteRepository

        return SQLiteRepository(settings.sqlite_db_path)
    return InMemoryRepository()
