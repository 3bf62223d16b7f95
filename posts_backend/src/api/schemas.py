from __future__ import annotations

from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic_core import PydanticCustomError


# PUBLIC_INTERFACE
class PostCreate(BaseModel):
    """
    Schema for creating a new post. All three fields are required; `tags` may be empty.
    Unknown keys are rejected.
    """

    model_config = ConfigDict(
        extra="forbid",
        json_schema_extra={
            "example": {
                "title": "Hello",
                "body": "First post on the board",
                "tags": ["intro", "meta"],
            }
        },
    )

    title: str = Field(..., description="Post title", min_length=1)
    body: str = Field(..., description="Post body text", min_length=1)
    tags: List[str] = Field(..., description="Ordered list of tags; may be empty")


# PUBLIC_INTERFACE
class PostUpdate(BaseModel):
    """
    Schema for partially updating a post.
    All fields are optional; only provided fields will be updated. A provided
    field must satisfy the same rule as on creation, so explicit nulls are rejected.
    """

    model_config = ConfigDict(
        extra="forbid",
        json_schema_extra={"example": {"title": "Hello, again"}},
    )

    title: Optional[str] = Field(default=None, description="Post title", min_length=1)
    body: Optional[str] = Field(default=None, description="Post body text", min_length=1)
    tags: Optional[List[str]] = Field(default=None, description="Ordered list of tags")

    @field_validator("title", "body", "tags", mode="before")
    @classmethod
    def reject_null(cls, v: Any) -> Any:
        """
        Defaults are not validated, so this only fires for values the client sent.
        """
        if v is None:
            raise PydanticCustomError("null_value", "Field may be omitted but not null")
        return v

    def changes(self) -> dict:
        """Fields explicitly supplied by the client, ready to merge into a stored post."""
        return self.model_dump(exclude_unset=True)


# PUBLIC_INTERFACE
class PostOut(BaseModel):
    """
    Schema returned by the API for a post.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "id": "66f1c2a9e13b4d0a5c000001",
                "title": "Hello",
                "body": "First post on the board",
                "tags": ["intro", "meta"],
                "created_at": "2026-01-25T10:15:30.123456Z",
            }
        }
    )

    id: str = Field(..., description="Unique 24-char hex identifier of the post")
    title: str = Field(..., description="Post title")
    body: str = Field(..., description="Post body; truncated to 200 chars plus '...' in list responses")
    tags: List[str] = Field(..., description="Ordered list of tags")
    created_at: datetime = Field(..., description="Creation timestamp")
