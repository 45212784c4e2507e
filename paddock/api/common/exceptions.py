import logging
from typing import Any

from fastapi import HTTPException, status

from paddock.services.exceptions import (
    BlockNotFoundError,
    BusinessRuleError,
    ConflictError,
    ConversationNotFoundError,
    DatabaseError,
    DriverProfileNotFoundError,
    MessageNotFoundError,
    NotAuthenticatedError,
    NotAuthorizedError,
    ReservationNotFoundError,
    ServiceError,
    TeamNotFoundError,
    UserNotFoundError,
    VehicleNotFoundError,
)

logger = logging.getLogger(__name__)


class APIException(HTTPException):
    """Base class for API specific exceptions."""

    def __init__(
        self, status_code: int, detail: Any = None, headers: dict | None = None
    ):
        super().__init__(status_code=status_code, detail=detail, headers=headers)


class NotFoundError(APIException):
    def __init__(self, detail: str = "Resource not found"):
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class BadRequestError(APIException):
    def __init__(self, detail: str = "Bad request"):
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class UnauthorizedError(APIException):
    def __init__(self, detail: str = "Unauthorized"):
        super().__init__(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail)


class ForbiddenError(APIException):
    def __init__(self, detail: str = "Forbidden"):
        super().__init__(status_code=status.HTTP_403_FORBIDDEN, detail=detail)


class InternalServerError(APIException):
    def __init__(self, detail: str = "Internal server error"):
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=detail
        )


NOT_FOUND_ERRORS = (
    ConversationNotFoundError,
    MessageNotFoundError,
    ReservationNotFoundError,
    BlockNotFoundError,
    UserNotFoundError,
    VehicleNotFoundError,
    TeamNotFoundError,
    DriverProfileNotFoundError,
)


def handle_service_error(e: ServiceError):
    """
    Maps ServiceError subclasses to the matching APIException. Always raises.
    """
    logger.warning(
        f"Handling service error: {e.__class__.__name__} - {getattr(e, 'message', str(e))}"
    )
    detail = getattr(e, "message", str(e))

    if isinstance(e, NOT_FOUND_ERRORS):
        raise NotFoundError(detail=detail)
    elif isinstance(e, NotAuthenticatedError):
        raise UnauthorizedError(detail=detail)
    elif isinstance(e, NotAuthorizedError):
        raise ForbiddenError(detail=detail)
    elif isinstance(e, BusinessRuleError):
        raise BadRequestError(detail=detail)
    elif isinstance(e, ConflictError):
        raise APIException(status_code=status.HTTP_409_CONFLICT, detail=detail)
    elif isinstance(e, DatabaseError):
        logger.error(f"Database error: {e}", exc_info=True)
        raise InternalServerError(detail="A database error occurred.")
    else:
        status_code = getattr(e, "status_code", status.HTTP_500_INTERNAL_SERVER_ERROR)
        raise APIException(
            status_code=status_code,
            detail=getattr(e, "message", "A service error occurred."),
        )
