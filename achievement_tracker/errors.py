import logging

from fastapi import Request, status
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class AppError(Exception):
    """Base class for failures surfaced to API callers."""

    status_code = status.HTTP_400_BAD_REQUEST
    detail = "Bad request"
    headers: dict[str, str] | None = None

    def __init__(self, detail: str | None = None):
        if detail is not None:
            self.detail = detail
        super().__init__(self.detail)


class AuthError(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    headers = {"WWW-Authenticate": "Bearer"}


class MissingCredentials(AuthError):
    detail = "Missing authorization header"


class InvalidToken(AuthError):
    detail = "Invalid token in authorization header"


class InsufficientPrivilege(AuthError):
    status_code = status.HTTP_403_FORBIDDEN
    detail = "Insufficient privilege"
    headers = None


class InvalidCredentials(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    detail = "Invalid credentials"


class InvalidPassword(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    detail = "Password cannot be used"


class NotFoundError(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    detail = "Not found"


class AchievementNotFound(NotFoundError):
    detail = "That achievement does not exist"


class UserNotFound(NotFoundError):
    detail = "User does not exist"


class AlreadyExists(AppError):
    status_code = status.HTTP_409_CONFLICT
    detail = "Already exists"


class InternalError(AppError):
    """Store failure or broken data invariant.

    The detail passed in is kept for logs only; callers always see the
    generic message.
    """

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    public_detail = "Internal server error"

    def __init__(self, detail: str | None = None):
        super().__init__(detail or self.public_detail)


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    if isinstance(exc, InternalError):
        logger.error("Internal error on %s: %s", request.url.path, exc.detail, exc_info=exc.__cause__)
        detail = InternalError.public_detail
    else:
        logger.info("HTTP %s on %s: %s", exc.status_code, request.url.path, exc.detail)
        detail = exc.detail
    return JSONResponse(status_code=exc.status_code, content={"detail": detail}, headers=exc.headers)
