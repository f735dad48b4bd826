from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Request, Response
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError

from app.deps import get_user_store
from app.models import UserCreate, UserResponse
from app.user_store import InMemoryUserStore, InvalidUserError, User, UserNotFoundError

logger = logging.getLogger("user_cache_api")

router = APIRouter(prefix="/users", tags=["users"])

# Handlers are plain `def`: Starlette runs them on its worker thread pool,
# which is what the store's threading lock expects.


async def read_user_create(request: Request) -> UserCreate:
    """Decode the POST body as JSON, whatever the request's Content-Type.

    `Body(...)` only parses JSON for `application/json`, which breaks a plain
    `curl -d '{"name": "Alice"}'` (sent as form-urlencoded).
    """
    raw = await request.body()
    try:
        return UserCreate.model_validate_json(raw)
    except ValidationError as e:
        raise RequestValidationError(e.errors())


@router.post(
    "",
    status_code=204,
    response_class=Response,
    openapi_extra={
        "requestBody": {
            "required": True,
            "content": {"application/json": {"schema": UserCreate.model_json_schema()}},
        }
    },
)
def create_user(
    payload: UserCreate = Depends(read_user_create),
    store: InMemoryUserStore = Depends(get_user_store),
) -> Response:
    """Create a user.

    Accepts:
      {"name": "Alice"}

    Responds 204 with no body. The new resource is in the `Location` header.
    """
    try:
        user_id = store.insert(User(name=payload.name))
    except InvalidUserError as e:
        raise HTTPException(status_code=400, detail=str(e))

    logger.info("Created user %s", user_id)
    return Response(status_code=204, headers={"Location": f"{router.prefix}/{user_id}"})


@router.get("/{user_id}", response_model=UserResponse)
def get_user(user_id: int, store: InMemoryUserStore = Depends(get_user_store)) -> UserResponse:
    try:
        user = store.get(user_id)
    except UserNotFoundError as e:
        logger.debug("User %s not found", user_id)
        raise HTTPException(status_code=404, detail=str(e))
    return UserResponse(name=user.name)


@router.delete("/{user_id}", status_code=204, response_class=Response)
def delete_user(user_id: int, store: InMemoryUserStore = Depends(get_user_store)) -> Response:
    try:
        store.delete(user_id)
    except UserNotFoundError as e:
        logger.debug("User %s not found", user_id)
        raise HTTPException(status_code=404, detail=str(e))

    logger.info("Deleted user %s", user_id)
    return Response(status_code=204)
