"""DTOs and request/response schemas for the Todos app."""
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ninja import Schema


@dataclass(frozen=True)
class TodoDTO:
    """Immutable snapshot of a Todo row, passed between guard, handlers and services."""
    id: str
    title: str
    description: str
    status: str
    owner_id: str
    created_at: datetime
    updated_at: datetime


class TodoIn(Schema):
    title: Optional[str] = None
    description: Optional[str] = None
    status: Optional[str] = None


class TodoUpdate(Schema):
    title: Optional[str] = None
    description: Optional[str] = None
    status: Optional[str] = None


class TodoOut(Schema):
    id: str
    title: str
    description: str
    status: str
    owner_id: str
    created_at: datetime
    updated_at: datetime
