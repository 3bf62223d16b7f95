from __future__ import annotations

from typing import Any, List, Optional

from fastapi import APIRouter, Body, Depends, Path, Query, Request, Response, status

from ..controller import PostController
from ..identifiers import check_identifier
from ..schemas import PostCreate, PostOut, PostUpdate

LAST_PAGE_HEADER = "Last-Page"

router = APIRouter(
    prefix="/api/posts",
    tags=["posts"],
)

_ERROR_RESPONSES = {
    400: {"description": "Invalid payload, identifier or page"},
    500: {"description": "Post store failure"},
}


def _json_body(schema: type) -> dict:
    """OpenAPI request body for routes that validate the raw payload themselves."""
    return {
        "requestBody": {
            "required": True,
            "content": {"application/json": {"schema": schema.model_json_schema()}},
        }
    }


def get_controller(request: Request) -> PostController:
    """
    Controller built by the application lifespan around the connected store.
    """
    return request.app.state.controller


def valid_post_id(post_id: str = Path(..., description="24-char hex post identifier")) -> str:
    """
    Reject malformed identifiers before the store is consulted.
    """
    return check_identifier(post_id)


# PUBLIC_INTERFACE
@router.post(
    "",
    response_model=PostOut,
    status_code=status.HTTP_201_CREATED,
    summary="Create Post",
    description="Create a new post and return it, including its assigned id.",
    responses={201: {"description": "Post created"}, **_ERROR_RESPONSES},
    openapi_extra=_json_body(PostCreate),
)
async def write_post(
    payload: Any = Body(None),
    controller: PostController = Depends(get_controller),
) -> PostOut:
    """
    Create a post.
    """
    created = await controller.write(payload)
    return PostOut(**created)


# PUBLIC_INTERFACE
@router.get(
    "",
    response_model=List[PostOut],
    summary="List Posts",
    description=(
        "List posts, most recent first, 10 per page.\n\n"
        "Bodies longer than 200 characters are cut to 200 characters followed by '...'. "
        "The number of the last page is returned in the Last-Page response header."
    ),
    responses={200: {"description": "Page retrieved"}, **_ERROR_RESPONSES},
)
async def list_posts(
    response: Response,
    page: Optional[str] = Query(None, description="1-based page number (default 1)"),
    controller: PostController = Depends(get_controller),
) -> List[PostOut]:
    """
    List one page of posts.
    """
    result = await controller.list(page)
    response.headers[LAST_PAGE_HEADER] = str(result.last_page)
    return [PostOut(**p) for p in result.items]


# PUBLIC_INTERFACE
@router.get(
    "/{post_id}",
    response_model=PostOut,
    summary="Get Post",
    description="Get a single post by id.",
    responses={
        200: {"description": "Post found"},
        404: {"description": "Post not found (empty body)"},
        **_ERROR_RESPONSES,
    },
)
async def read_post(
    post_id: str = Depends(valid_post_id),
    controller: PostController = Depends(get_controller),
) -> PostOut:
    """
    Retrieve a single post by its id.
    """
    post = await controller.read(post_id)
    return PostOut(**post)


# PUBLIC_INTERFACE
@router.patch(
    "/{post_id}",
    response_model=PostOut,
    summary="Update Post",
    description="Partially update a post. Fields left out of the payload keep their stored values.",
    responses={
        200: {"description": "Post updated"},
        404: {"description": "Post not found (empty body)"},
        **_ERROR_RESPONSES,
    },
    openapi_extra=_json_body(PostUpdate),
)
async def update_post(
    post_id: str = Depends(valid_post_id),
    payload: Any = Body(None),
    controller: PostController = Depends(get_controller),
) -> PostOut:
    """
    Merge the supplied fields into an existing post.
    """
    updated = await controller.update(post_id, payload)
    return PostOut(**updated)


# PUBLIC_INTERFACE
@router.delete(
    "/{post_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete Post",
    description="Permanently delete a post. Deleting an id that does not exist also returns 204.",
    responses={204: {"description": "Post deleted"}, **_ERROR_RESPONSES},
)
async def remove_post(
    post_id: str = Depends(valid_post_id),
    controller: PostController = Depends(get_controller),
) -> Response:
    """
    Delete a post by id.
    """
    await controller.remove(post_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
