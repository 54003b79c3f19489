"""
Record identifiers.

Every stored record is keyed by a 24-character hexadecimal string:
8 hex chars of big-endian seconds since the epoch followed by 16 random
hex chars. Ids sort roughly by creation time and are safe to expose in URLs.
"""
import re
import secrets
import time


OBJECT_ID_LENGTH = 24

_OBJECT_ID_RE = re.compile(r'[0-9a-fA-F]{24}')


class InvalidObjectId(ValueError):
    """Raised when a value does not have the shape of a record id."""

    def __init__(self, value):
        super().__init__(f"'{value}' is not a valid 24-character hex id")
        self.value = value


def generate_object_id() -> str:
    """Generate a new lowercase 24-character hex id."""
    return f"{int(time.time()) & 0xFFFFFFFF:08x}{secrets.token_hex(8)}"


def is_valid_object_id(value) -> bool:
    """Purely structural check; never touches the database."""
    return isinstance(value, str) and _OBJECT_ID_RE.fullmatch(value) is not None


def normalize_object_id(value) -> str:
    """
    Return the canonical (lowercase) form of an id.

    Raises:
        InvalidObjectId: if the value is not 24 hex characters.
    """
    if not is_valid_object_id(value):
        raise InvalidObjectId(value)
    return value.lower()
