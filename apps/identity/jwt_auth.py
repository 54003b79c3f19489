"""
JWT utilities for the to-do API.

Tokens are stateless and self-verifying: the payload carries the user's id
under ``user.id`` and expires one hour after issuance.
"""
import jwt
from datetime import datetime, timedelta, timezone
from typing import Optional
from django.conf import settings


JWT_ALGORITHM = 'HS256'
ACCESS_TOKEN_EXPIRE_MINUTES = 60


def _secret() -> str:
    return settings.JWT_SECRET


def create_access_token(user_id: str) -> str:
    """
    Create a signed access token for ``user_id``.

    Expires in 60 minutes.
    """
    now = datetime.now(timezone.utc)
    payload = {
        'user': {'id': str(user_id)},
        'exp': now + timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES),
        'iat': now,
    }
    return jwt.encode(payload, _secret(), algorithm=JWT_ALGORITHM)


def decode_token(token: str) -> Optional[dict]:
    """
    Decode and validate a JWT token.

    Returns:
        Decoded payload if valid, None if invalid/expired.
    """
    try:
        return jwt.decode(token, _secret(), algorithms=[JWT_ALGORITHM])
    except jwt.ExpiredSignatureError:
        return None
    except jwt.InvalidTokenError:
        return None


def get_user_id_from_token(token: str) -> Optional[str]:
    """
    Extract the user id claim from a valid token.

    Returns:
        The id if the token is valid and carries ``user.id``, None otherwise.
    """
    payload = decode_token(token)
    if not payload:
        return None
    user = payload.get('user')
    if not isinstance(user, dict):
        return None
    user_id = user.get('id')
    if not user_id or not isinstance(user_id, str):
        return None
    return user_id
