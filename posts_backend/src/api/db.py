from __future__ import annotations

import asyncio
import json
import os
import sqlite3
from dataclasses import dataclass
from datetime import datetime, timezone
from threading import Lock
from typing import Any, Callable, List, Optional, TypeVar

from .errors import StoreError
from .identifiers import generate_identifier
from .models import PostEntity
from .repositories import Repository
from .schemas import PostCreate, PostUpdate

_T = TypeVar("_T")

# Largest value sqlite3 can bind as INTEGER
_SQLITE_MAX_INT = 2**63 - 1


@dataclass(frozen=True)
class _Cols:
    table: str = "posts"
    id: str = "id"
    title: str = "title"
    body: str = "body"
    tags: str = "tags"
    created_at: str = "created_at"


_COLS = _Cols()


class SQLiteRepository(Repository):
    """
    SQLite-backed post store.

    One connection is opened by `connect()` and shared by all calls; access is
    serialized with a lock and every call runs in a worker thread so request
    handling never blocks the event loop. Tags are stored as JSON text.
    """

    def __init__(self, db_path: str) -> None:
        self._db_path = db_path
        self._conn: Optional[sqlite3.Connection] = None
        self._lock = Lock()

    async def connect(self) -> None:
        await self._run("connect", self._open)

    async def disconnect(self) -> None:
        await self._run("disconnect", self._close)

    def _open(self) -> None:
        if self._conn is not None:
            return
        os.makedirs(os.path.dirname(self._db_path) or ".", exist_ok=True)
        conn = sqlite3.connect(self._db_path, check_same_thread=False)
        conn.row_factory = sqlite3.Row
        conn.execute(
            f"""
            CREATE TABLE IF NOT EXISTS {_COLS.table} (
                {_COLS.id} TEXT PRIMARY KEY,
                {_COLS.title} TEXT NOT NULL,
                {_COLS.body} TEXT NOT NULL,
                {_COLS.tags} TEXT NOT NULL,
                {_COLS.created_at} TEXT NOT NULL
            )
            """
        )
        conn.execute(
            f"CREATE INDEX IF NOT EXISTS idx_{_COLS.table}_created_at ON {_COLS.table}({_COLS.created_at})"
        )
        conn.commit()
        self._conn = conn

    def _close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    async def _run(self, operation: str, fn: Callable[..., _T], *args: Any) -> _T:
        def locked() -> _T:
            with self._lock:
                return fn(*args)

        try:
            return await asyncio.to_thread(locked)
        except sqlite3.Error as e:
            raise StoreError(operation, e) from e

    def _db(self) -> sqlite3.Connection:
        if self._conn is None:
            raise StoreError("not connected")
        return self._conn

    def _row_to_entity(self, row: sqlite3.Row) -> PostEntity:
        return {
            "id": str(row[_COLS.id]),
            "title": str(row[_COLS.title]),
            "body": str(row[_COLS.body]),
            "tags": list(json.loads(row[_COLS.tags])),
            "created_at": datetime.fromisoformat(row[_COLS.created_at]),
        }

    def _select(self, conn: sqlite3.Connection, post_id: str) -> Optional[sqlite3.Row]:
        return conn.execute(
            f"SELECT * FROM {_COLS.table} WHERE {_COLS.id} = ?", (post_id,)
        ).fetchone()

    # Blocking bodies, executed under the lock in a worker thread

    def _create(self, data: PostCreate) -> PostEntity:
        conn = self._db()
        entity: PostEntity = {
            "id": generate_identifier(),
            "title": data.title,
            "body": data.body,
            "tags": list(data.tags),
            "created_at": datetime.now(timezone.utc),
        }
        with conn:
            conn.execute(
                f"""
                INSERT INTO {_COLS.table} ({_COLS.id}, {_COLS.title}, {_COLS.body},
                    {_COLS.tags}, {_COLS.created_at})
                VALUES (?, ?, ?, ?, ?)
                """,
                (
                    entity["id"],
                    entity["title"],
                    entity["body"],
                    json.dumps(entity["tags"]),
                    entity["created_at"].isoformat(timespec="microseconds"),
                ),
            )
        return entity

    def _find_page(self, limit: int, offset: int) -> List[PostEntity]:
        offset = max(offset, 0)
        if offset > _SQLITE_MAX_INT:
            return []
        rows = self._db().execute(
            f"""
            SELECT * FROM {_COLS.table}
            ORDER BY {_COLS.created_at} DESC, {_COLS.id} DESC
            LIMIT ? OFFSET ?
            """,
            (min(max(limit, 0), _SQLITE_MAX_INT), offset),
        ).fetchall()
        return [self._row_to_entity(r) for r in rows]

    def _count(self) -> int:
        row = self._db().execute(f"SELECT COUNT(*) AS cnt FROM {_COLS.table}").fetchone()
        return int(row["cnt"]) if row else 0

    def _find_by_id(self, post_id: str) -> Optional[PostEntity]:
        row = self._select(self._db(), post_id)
        return self._row_to_entity(row) if row else None

    def _update_by_id(self, post_id: str, patch: PostUpdate) -> Optional[PostEntity]:
        conn = self._db()
        row = self._select(conn, post_id)
        if not row:
            return None
        current = self._row_to_entity(row)
        current.update(patch.changes())  # type: ignore[typeddict-item]
        with conn:
            conn.execute(
                f"""
                UPDATE {_COLS.table}
                SET {_COLS.title} = ?, {_COLS.body} = ?, {_COLS.tags} = ?
                WHERE {_COLS.id} = ?
                """,
                (current["title"], current["body"], json.dumps(current["tags"]), post_id),
            )
        return current

    def _delete_by_id(self, post_id: str) -> None:
        conn = self._db()
        with conn:
            conn.execute(f"DELETE FROM {_COLS.table} WHERE {_COLS.id} = ?", (post_id,))

    # Repository interface

    async def create(self, data: PostCreate) -> PostEntity:
        return await self._run("create", self._create, data)

    async def find_page(self, limit: int, offset: int) -> List[PostEntity]:
        return await self._run("find_page", self._find_page, limit, offset)

    async def count(self) -> int:
        return await self._run("count", self._count)

    async def find_by_id(self, post_id: str) -> Optional[PostEntity]:
        return await self._run("find_by_id", self._find_by_id, post_id)

    async def update_by_id(self, post_id: str, patch: PostUpdate) -> Optional[PostEntity]:
        return await self._run("update_by_id", self._update_by_id, post_id, patch)

    async def delete_by_id(self, post_id: str) -> None:
        await self._run("delete_by_id", self._delete_by_id, post_id)
