from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from ribbon.platform.logger import get_logger
from ribbon.platform.response import api_response

logger = get_logger(__name__)


class RibbonError(Exception):
    """Base for every error a user can see. `message` is shown as-is."""

    status_code: int = status.HTTP_400_BAD_REQUEST
    default_message: str = "Something went wrong"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(RibbonError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid input"


class RateLimitError(RibbonError):
    status_code = status.HTTP_429_TOO_MANY_REQUESTS
    default_message = "Please wait a moment before creating another link"

    def __init__(self, message: str | None = None, retry_after: float = 0.0):
        super().__init__(message)
        self.retry_after = retry_after


class UploadError(RibbonError):
    status_code = status.HTTP_502_BAD_GATEWAY
    default_message = "Upload failed"


class PersistenceError(RibbonError):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_message = "Something went wrong. Please try again."


class NotFoundError(RibbonError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "This link doesn't exist or has expired"


def add_exception_handlers(app):
    @app.exception_handler(RibbonError)
    async def ribbon_error_handler(request: Request, exc: RibbonError):
        headers = None
        if isinstance(exc, RateLimitError):
            headers = {"Retry-After": str(max(1, round(exc.retry_after)))}
        return api_response(message=exc.message, status_code=exc.status_code, headers=headers)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return api_response(message=str(exc.detail) or "Error", status_code=exc.status_code)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        return api_response(
            message="Validation failed",
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            data={"errors": exc.errors()},
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled exception: {exc}")
        return api_response(
            message="Internal server error",
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )
