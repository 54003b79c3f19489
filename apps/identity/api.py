"""
Identity API endpoints.

Provides account registration and login. Login returns a bearer token that
must be sent as ``Authorization: Bearer <token>`` on every to-do route.
"""
import logging

from django.db import DatabaseError
from django.http import HttpRequest
from ninja import Router
from ninja.errors import HttpError

from .dtos import CredentialsSchema, MessageResponse, TokenResponse
from .jwt_auth import create_access_token
from .services import register_user, username_taken, verify_credentials

logger = logging.getLogger(__name__)

router = Router(tags=["Auth"])


@router.post("/register", response={201: MessageResponse}, auth=None)
def register(request: HttpRequest, payload: CredentialsSchema):
    """
    Register a new user with a username and password.
    """
    if not payload.username or not payload.password:
        raise HttpError(400, "Username and password are required")

    try:
        if username_taken(payload.username):
            raise HttpError(400, "Username is already taken")
        user = register_user(payload.username, payload.password)
    except DatabaseError as e:
        raise HttpError(400, str(e))

    logger.info(f"Registered user {user.username} (id={user.id})")
    return 201, {"message": "User registered successfully"}


@router.post("/login", response=TokenResponse, auth=None)
def login(request: HttpRequest, payload: CredentialsSchema):
    """
    Authenticate a user and issue a one-hour access token.
    """
    try:
        user = verify_credentials(payload.username, payload.password)
        if user is None:
            raise HttpError(400, "Invalid username or password")
        token = create_access_token(user.id)
    except HttpError:
        raise
    except Exception as e:
        logger.exception(f"Login failed unexpectedly: {e}")
        raise HttpError(500, str(e))

    return {"token": token}
