"""DTOs for Identity app."""
from dataclasses import dataclass
from typing import Optional

from ninja import Schema


@dataclass(frozen=True)
class AuthenticatedUser:
    """Identity attached to a request once its bearer token is verified."""
    id: str


@dataclass(frozen=True)
class UserDTO:
    id: str
    username: str


class CredentialsSchema(Schema):
    username: Optional[str] = None
    password: Optional[str] = None


class MessageResponse(Schema):
    message: str


class TokenResponse(Schema):
    token: str
