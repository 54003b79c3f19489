"""
Todos API endpoints with bearer-token authentication.

Every route requires ``Authorization: Bearer <token>``. Routes addressed by
``todo_id`` are additionally guarded by ``resolve_todo``.
"""
import json
import logging
from typing import List

from django.core.exceptions import ValidationError
from django.db import DatabaseError
from django.http import HttpRequest
from ninja import Router
from ninja.errors import HttpError
from pydantic import ValidationError as PydanticValidationError

from apps.core.errors import ApiError, validation_message
from apps.core.ids import InvalidObjectId
from apps.identity.security import TokenAuth
from .decorators import resolve_todo
from .dtos import TodoIn, TodoOut, TodoUpdate
from . import services

logger = logging.getLogger(__name__)

router = Router(tags=["Todos"], auth=TokenAuth())


@router.post("", response={201: TodoOut})
def create_todo_api(request: HttpRequest, payload: TodoIn):
    """
    Create a new todo owned by the authenticated user.
    """
    if not payload.title:
        raise HttpError(400, "Title is required")

    try:
        todo = services.create_todo(
            owner_id=request.auth.id,
            title=payload.title,
            description=payload.description,
            status=payload.status,
        )
    except ValidationError as e:
        raise HttpError(400, validation_message(e))
    except DatabaseError as e:
        raise HttpError(400, str(e))

    return 201, todo


@router.get("", response=List[TodoOut])
def list_todos_api(request: HttpRequest):
    """
    List all todos.
    """
    try:
        return services.list_todos()
    except DatabaseError as e:
        logger.exception(f"Listing todos failed: {e}")
        raise HttpError(500, "Server Error")


@router.get("/{todo_id}", response=TodoOut)
@resolve_todo
def get_todo_api(request: HttpRequest, todo_id: str):
    """
    Get a single todo by id.
    """
    return request.todo


def read_update_body(request: HttpRequest) -> dict:
    """
    Parse an update body after the id guard has run.

    An empty body means no changes. Only fields the client sent are returned.
    """
    if not request.body.strip():
        return {}
    try:
        data = json.loads(request.body)
    except ValueError:
        raise HttpError(400, "Cannot parse request body")
    try:
        payload = TodoUpdate.model_validate(data)
    except PydanticValidationError as e:
        raise ApiError(400, "Invalid request data", errors=e.errors(include_url=False, include_context=False))
    return payload.dict(exclude_unset=True)


@router.put(
    "/{todo_id}",
    response=TodoOut,
    openapi_extra={
        "requestBody": {
            "content": {"application/json": {"schema": TodoUpdate.model_json_schema()}},
        },
    },
)
@resolve_todo
def update_todo_api(request: HttpRequest, todo_id: str):
    """
    Update the title, description and/or status of a todo.

    Fields that are omitted or null keep their current value. The body is
    read inside the view so a malformed id is rejected before the body is
    looked at.
    """
    changes = read_update_body(request)

    status = changes.get('status')
    if status is not None and not services.is_valid_status(status):
        raise HttpError(400, "Invalid status value")

    updated = services.apply_changes(request.todo, changes)
    try:
        return services.save_todo(updated)
    except ValidationError as e:
        raise HttpError(400, validation_message(e))
    except DatabaseError as e:
        raise HttpError(400, str(e))


@router.delete("/{todo_id}", response=TodoOut)
@resolve_todo
def delete_todo_api(request: HttpRequest, todo_id: str):
    """
    Delete a todo and return the deleted record.
    """
    try:
        deleted = services.delete_todo(todo_id)
    except InvalidObjectId:
        # store-level id rejection, mapped the same way as the guard
        raise HttpError(400, "Invalid Id")
    except Exception as e:
        logger.exception(f"Deleting todo {todo_id} failed: {e}")
        raise ApiError(400, "Internal Server Error", error=str(e))

    if deleted is None:
        logger.info(f"Todo {todo_id} vanished before it could be deleted")
        raise HttpError(404, "Todo Record Not Found")

    return deleted
