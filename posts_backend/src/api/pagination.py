from __future__ import annotations

import math
import re
from typing import Optional, Tuple

from .errors import PaginationError
from .models import PostEntity

PAGE_SIZE = 10
BODY_PREVIEW_LENGTH = 200
TRUNCATION_MARKER = "..."

_PAGE_RE = re.compile(r"[+-]?[0-9]+")


# PUBLIC_INTERFACE
def resolve_page(raw: Optional[str]) -> int:
    """
    Parse the `page` query parameter.

    - Missing or blank: page 1
    - Must be a base-10 integer >= 1, otherwise PaginationError
    """
    if raw is None or raw.strip() == "":
        return 1
    text = raw.strip()
    if _PAGE_RE.fullmatch(text) is None:
        raise PaginationError(raw)
    page = int(text, 10)
    if page < 1:
        raise PaginationError(raw)
    return page


# PUBLIC_INTERFACE
def page_window(page: int) -> Tuple[int, int]:
    """Return (limit, offset) for a 1-based page number."""
    return PAGE_SIZE, (page - 1) * PAGE_SIZE


# PUBLIC_INTERFACE
def last_page(total: int) -> int:
    """Number of the last page; 0 for an empty collection."""
    return math.ceil(max(total, 0) / PAGE_SIZE)


# PUBLIC_INTERFACE
def truncate_body(text: str) -> str:
    """Cut bodies longer than the preview length and append the truncation marker."""
    if len(text) > BODY_PREVIEW_LENGTH:
        return text[:BODY_PREVIEW_LENGTH] + TRUNCATION_MARKER
    return text


def preview(post: PostEntity) -> PostEntity:
    """List-view representation of a post. The stored entity is left untouched."""
    shown = post.copy()
    shown["body"] = truncate_body(post["body"])
    return shown
