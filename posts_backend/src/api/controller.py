from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Awaitable, List, Optional, TypeVar

from .errors import NotFoundError, StoreError
from .identifiers import check_identifier
from .log import EVENT_POST_CREATED, EVENT_POST_DELETED, EVENT_POST_UPDATED, log_event
from .models import PostEntity
from .pagination import last_page, page_window, preview, resolve_page
from .repositories import Repository
from .validation import validate_create, validate_update

logger = logging.getLogger(__name__)

_T = TypeVar("_T")


@dataclass(frozen=True)
class PostPage:
    """One page of the list view plus the last-page number reported out of band."""

    items: List[PostEntity]
    last_page: int


# PUBLIC_INTERFACE
class PostController:
    """
    Orchestrates the five post operations against an injected repository.

    Holds no per-request state. Validation errors, bad identifiers and bad pages
    are raised before any store call; store failures surface as StoreError.
    """

    def __init__(self, repository: Repository) -> None:
        self._repository = repository

    async def _store(self, operation: str, call: Awaitable[_T]) -> _T:
        try:
            return await call
        except StoreError:
            raise
        except Exception as e:
            raise StoreError(operation, e) from e

    async def write(self, payload: Any) -> PostEntity:
        data = validate_create(payload)
        post = await self._store("create", self._repository.create(data))
        log_event(logger, "info", EVENT_POST_CREATED, id=post["id"], tags=len(post["tags"]))
        return post

    async def list(self, raw_page: Optional[str] = None) -> PostPage:
        page = resolve_page(raw_page)
        limit, offset = page_window(page)
        posts = await self._store("find_page", self._repository.find_page(limit, offset))
        total = await self._store("count", self._repository.count())
        return PostPage(items=[preview(p) for p in posts], last_page=last_page(total))

    async def read(self, post_id: str) -> PostEntity:
        post_id = check_identifier(post_id)
        post = await self._store("find_by_id", self._repository.find_by_id(post_id))
        if post is None:
            raise NotFoundError(post_id)
        return post

    async def update(self, post_id: str, payload: Any) -> PostEntity:
        post_id = check_identifier(post_id)
        patch = validate_update(payload)
        post = await self._store("update_by_id", self._repository.update_by_id(post_id, patch))
        if post is None:
            raise NotFoundError(post_id)
        log_event(
            logger, "info", EVENT_POST_UPDATED,
            id=post_id, fields=",".join(sorted(patch.model_fields_set)) or "-",
        )
        return post

    async def remove(self, post_id: str) -> None:
        post_id = check_identifier(post_id)
        await self._store("delete_by_id", self._repository.delete_by_id(post_id))
        log_event(logger, "info", EVENT_POST_DELETED, id=post_id)
