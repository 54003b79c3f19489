"""Services for Identity app."""
from typing import Optional

from django.contrib.auth import authenticate

from .models import User
from .dtos import UserDTO


def _to_dto(user: User) -> UserDTO:
    return UserDTO(id=user.id, username=user.username)


def username_taken(username: str) -> bool:
    return User.objects.filter(username=username).exists()


def register_user(username: str, password: str) -> UserDTO:
    """
    Create a user with a salted password hash.

    Uniqueness is also enforced by the database; a concurrent duplicate
    surfaces as IntegrityError.
    """
    user = User.objects.create_user(username=username, password=password)
    return _to_dto(user)


def verify_credentials(username: Optional[str], password: Optional[str]) -> Optional[UserDTO]:
    """
    Return the matching user, or None for an unknown username or a wrong
    password. Both cases are indistinguishable to the caller.
    """
    if not username or password is None:
        return None
    user = authenticate(username=username, password=password)
    if user is None:
        return None
    return _to_dto(user)
