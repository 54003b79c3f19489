"""
Services for the Todos app.

All reads hand back immutable TodoDTO snapshots; writes validate the record
with ``full_clean`` before touching the database, so a stored Todo always has
a non-empty title and a status from TodoStatus.
"""
import dataclasses
import logging
from typing import List, Optional

from django.db import transaction

from apps.core.ids import normalize_object_id
from .dtos import TodoDTO
from .models import Todo, TodoStatus

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = ('title', 'description', 'status')


def is_valid_status(value: str) -> bool:
    return value in TodoStatus.values


def to_dto(todo: Todo) -> TodoDTO:
    return TodoDTO(
        id=todo.id,
        title=todo.title,
        description=todo.description,
        status=todo.status,
        owner_id=todo.owner_id,
        created_at=todo.created_at,
        updated_at=todo.updated_at,
    )


def list_todos() -> List[TodoDTO]:
    """All todos, oldest first. No owner filter, no pagination."""
    return [to_dto(todo) for todo in Todo.objects.all()]


def get_todo(todo_id: str) -> Optional[TodoDTO]:
    """
    Fetch a todo by id.

    Raises:
        InvalidObjectId: if ``todo_id`` is not a 24-character hex id.
    """
    todo = Todo.objects.filter(id=normalize_object_id(todo_id)).first()
    return to_dto(todo) if todo else None


def create_todo(
    owner_id: str,
    title: str,
    description: Optional[str] = None,
    status: Optional[str] = None,
) -> TodoDTO:
    """
    Insert a new todo. Empty description and status fall back to
    ``""`` and ``pending``.

    Raises:
        django.core.exceptions.ValidationError: on an invalid field value.
    """
    todo = Todo(
        owner_id=owner_id,
        title=title,
        description=description or '',
        status=status or TodoStatus.PENDING,
    )
    todo.full_clean()
    todo.save()
    logger.info(f"Created todo {todo.id} for user {owner_id}")
    return to_dto(todo)


def apply_changes(base: TodoDTO, changes: dict) -> TodoDTO:
    """
    Merge ``changes`` over ``base`` and return a new record.

    Only keys in UPDATABLE_FIELDS with a non-None value are applied; the
    base record is never modified.
    """
    present = {
        field: changes[field]
        for field in UPDATABLE_FIELDS
        if changes.get(field) is not None
    }
    return dataclasses.replace(base, **present)


def save_todo(record: TodoDTO) -> TodoDTO:
    """
    Persist an updated record over its existing row.

    Only the updatable fields are written. If the row no longer exists the
    database layer raises DatabaseError rather than re-inserting it.

    Raises:
        django.core.exceptions.ValidationError: on an invalid field value.
        django.db.DatabaseError: if the row is gone or the write fails.
    """
    todo = Todo(
        id=record.id,
        title=record.title,
        description=record.description,
        status=record.status,
        owner_id=record.owner_id,
        created_at=record.created_at,
        updated_at=record.updated_at,
    )
    todo._state.adding = False
    todo.full_clean(validate_unique=False)
    todo.save(update_fields=[*UPDATABLE_FIELDS, 'updated_at'])
    logger.info(f"Updated todo {todo.id}")
    return to_dto(todo)


def delete_todo(todo_id: str) -> Optional[TodoDTO]:
    """
    Fetch and delete a todo in one transaction.

    Returns:
        The deleted record, or None if no row matched.

    Raises:
        InvalidObjectId: if ``todo_id`` is not a 24-character hex id.
    """
    todo_id = normalize_object_id(todo_id)
    with transaction.atomic():
        todo = Todo.objects.select_for_update().filter(id=todo_id).first()
        if todo is None:
            return None
        deleted = to_dto(todo)
        todo.delete()
    logger.info(f"Deleted todo {todo_id}")
    return deleted
