from __future__ import annotations

from datetime import datetime
from typing import List, TypedDict


# PUBLIC_INTERFACE
class PostEntity(TypedDict):
    """
    Storage-level representation of a post, shared by all repository backends.

    Fields:
    - id: 24-char hex identifier assigned by the store at creation
    - title: Non-empty title
    - body: Non-empty body text (may be large)
    - tags: Ordered list of tags (may be empty)
    - created_at: UTC creation timestamp, used for most-recent-first ordering
    """

    id: str
    title: str
    body: str
    tags: List[str]
    created_at: datetime
