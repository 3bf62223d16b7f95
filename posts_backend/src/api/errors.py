from __future__ import annotations

from typing import Any, Optional


class PostsError(Exception):
    """
    Base class for every error the post controller surfaces to clients.

    Subclasses set `status_code` and `error`; the application-level exception
    handler renders them as {"error", "message", "detail"}.
    """

    status_code: int = 500
    error: str = "PostsError"
    message: str = "Request failed"

    def __init__(self, detail: Any = None, message: Optional[str] = None) -> None:
        self.detail = detail
        if message is not None:
            self.message = message
        super().__init__(self.message if detail is None else f"{self.message}: {detail}")

    def to_content(self) -> dict:
        return {"error": self.error, "message": self.message, "detail": self.detail}


# PUBLIC_INTERFACE
class PayloadValidationError(PostsError):
    """Request payload failed its schema; detail lists the failing fields."""

    status_code = 400
    error = "ValidationError"
    message = "Request validation failed"


# PUBLIC_INTERFACE
class InvalidIdentifierError(PostsError):
    """Identifier is not a well-formed post id."""

    status_code = 400
    error = "InvalidIdentifierError"
    message = "Malformed post identifier"


# PUBLIC_INTERFACE
class PaginationError(PostsError):
    """Page parameter is not an integer >= 1."""

    status_code = 400
    error = "PaginationError"
    message = "page must be an integer greater than or equal to 1"


# PUBLIC_INTERFACE
class NotFoundError(PostsError):
    """Identifier is well-formed but no post exists for it. Rendered with an empty body."""

    status_code = 404
    error = "NotFoundError"
    message = "Post not found"


# PUBLIC_INTERFACE
class StoreError(PostsError):
    """
    Any failure raised by the post store. Never recovered locally.

    The underlying exception is kept on `cause` and summarized in `detail`.
    """

    status_code = 500
    error = "StoreError"
    message = "Post store operation failed"

    def __init__(self, operation: str, cause: Optional[BaseException] = None) -> None:
        self.operation = operation
        self.cause = cause
        if cause is None:
            detail = operation
        else:
            detail = f"{operation}: {type(cause).__name__}: {cause}"
        super().__init__(detail)
