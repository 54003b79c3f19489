"""
API error rendering.

Handlers and guards signal failures by raising ninja's HttpError. The
exception handlers installed here turn every failure into a JSON body with
at least a ``message`` field, so clients never see a traceback.

Usage:
    from apps.core.errors import register_exception_handlers

    api = NinjaAPI(...)
    register_exception_handlers(api)
"""
import logging

from django.core.exceptions import ValidationError as ModelValidationError
from ninja import NinjaAPI
from ninja.errors import AuthenticationError, HttpError, ValidationError

logger = logging.getLogger(__name__)


class ApiError(HttpError):
    """HttpError that carries additional fields for the response body."""

    def __init__(self, status_code: int, message: str, **extra):
        super().__init__(status_code, message)
        self.extra = extra


def validation_message(exc: ModelValidationError) -> str:
    """Flatten a Django ValidationError into a single readable line."""
    if hasattr(exc, 'error_dict'):
        return "; ".join(
            f"{field}: {' '.join(messages)}"
            for field, messages in exc.message_dict.items()
        )
    return " ".join(exc.messages)


def register_exception_handlers(api: NinjaAPI) -> None:
    """Install the JSON ``{message}`` exception handlers on ``api``."""

    @api.exception_handler(HttpError)
    def on_http_error(request, exc: HttpError):
        body = {"message": str(exc)}
        body.update(getattr(exc, 'extra', {}))
        return api.create_response(request, body, status=exc.status_code)

    @api.exception_handler(ValidationError)
    def on_validation_error(request, exc: ValidationError):
        return api.create_response(
            request,
            {"message": "Invalid request data", "errors": exc.errors},
            status=400,
        )

    @api.exception_handler(AuthenticationError)
    def on_authentication_error(request, exc: AuthenticationError):
        return api.create_response(request, {"message": "Unauthorized User"}, status=401)

    @api.exception_handler(Exception)
    def on_unhandled_error(request, exc: Exception):
        logger.exception(f"Unhandled error on {request.method} {request.path}: {exc}")
        return api.create_response(request, {"message": "Internal Server Error"}, status=500)
