"""
Bearer-token authentication for protected routes.

TokenAuth is the single authorization checkpoint of the API. It runs before
request parameters are parsed and either attaches the authenticated identity
to ``request.auth`` or short-circuits the request with an error.
"""
import logging
from typing import Optional

from django.http import HttpRequest
from ninja.errors import HttpError
from ninja.security import HttpBearer

from .dtos import AuthenticatedUser
from .jwt_auth import get_user_id_from_token

logger = logging.getLogger(__name__)


class TokenAuth(HttpBearer):
    """
    Verify the ``Authorization`` header.

    - Missing header: 401 "Unauthorized User"
    - Bad signature, expired or malformed token: 400 "Invalid Token"

    The scheme word before the token is not checked.
    """

    header = 'Authorization'

    def __call__(self, request: HttpRequest) -> Optional[AuthenticatedUser]:
        value = request.headers.get(self.header)
        if not value:
            raise HttpError(401, "Unauthorized User")

        parts = value.split()
        token = parts[1] if len(parts) > 1 else None
        return self.authenticate(request, token)

    def authenticate(self, request: HttpRequest, token: Optional[str]) -> AuthenticatedUser:
        user_id = get_user_id_from_token(token) if token else None
        if not user_id:
            logger.warning(f"Rejected token on {request.method} {request.path}")
            raise HttpError(400, "Invalid Token")
        return AuthenticatedUser(id=user_id)
