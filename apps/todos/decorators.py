"""
Resource guard for id-addressed todo routes.

Two stages, each usable on its own:

    validate_todo_id  - 400 "Invalid Id" unless ``todo_id`` is 24 hex chars
    load_todo         - 404 "Cannot find todo" unless the record exists;
                        otherwise attaches it as ``request.todo``

``resolve_todo`` applies both in order:

    @router.get("/{todo_id}", response=TodoOut)
    @resolve_todo
    def get_todo_api(request, todo_id: str):
        return request.todo
"""
import logging
from functools import wraps
from typing import Callable

from django.db import DatabaseError
from django.http import HttpRequest
from ninja.errors import HttpError

from apps.core.ids import is_valid_object_id
from . import services

logger = logging.getLogger(__name__)


def validate_todo_id(view_func: Callable):
    @wraps(view_func)
    def wrapper(request: HttpRequest, *args, **kwargs):
        if not is_valid_object_id(kwargs.get('todo_id')):
            raise HttpError(400, "Invalid Id")
        return view_func(request, *args, **kwargs)
    return wrapper


def load_todo(view_func: Callable):
    @wraps(view_func)
    def wrapper(request: HttpRequest, *args, **kwargs):
        todo_id = kwargs.get('todo_id')
        try:
            todo = services.get_todo(todo_id)
        except DatabaseError as e:
            logger.exception(f"Lookup of todo {todo_id} failed: {e}")
            raise HttpError(500, str(e))

        if todo is None:
            raise HttpError(404, "Cannot find todo")

        request.todo = todo
        return view_func(request, *args, **kwargs)
    return wrapper


def resolve_todo(view_func: Callable):
    """Validate the id shape, then load the record."""
    return validate_todo_id(load_todo(view_func))
