from enum import Enum

from fastapi import status


class ErrorCode(str, Enum):
    VALIDATION_ERROR = "VALIDATION_ERROR"
    ACCESS_UNAUTHORIZED = "ACCESS_UNAUTHORIZED"
    ACCESS_FORBIDDEN = "ACCESS_FORBIDDEN"
    RESOURCE_NOT_FOUND = "RESOURCE_NOT_FOUND"
    RESOURCE_CONFLICT = "RESOURCE_CONFLICT"
    INTERNAL_SERVER_ERROR = "INTERNAL_SERVER_ERROR"
    PRODUCT_NOT_FOUND = "PRODUCT_NOT_FOUND"
    PET_NOT_FOUND = "PET_NOT_FOUND"
    INSUFFICIENT_STOCK = "INSUFFICIENT_STOCK"
    ITEM_UNAVAILABLE = "ITEM_UNAVAILABLE"
    INVALID_STATUS_TRANSITION = "INVALID_STATUS_TRANSITION"
    PAYMENT_GATEWAY_ERROR = "PAYMENT_GATEWAY_ERROR"

    # Authentication
    USER_ALREADY_EXISTS = "USER_ALREADY_EXISTS"
    INVALID_CREDENTIALS = "INVALID_CREDENTIALS"
    INVALID_TOKEN = "INVALID_TOKEN"
    ACCOUNT_DISABLED = "ACCOUNT_DISABLED"


class ApiError(Exception):
    """Base class for errors that are reported to the client verbatim."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Internal Server Error"
    default_code: ErrorCode = ErrorCode.INTERNAL_SERVER_ERROR

    def __init__(self, message: str | None = None, error_code: ErrorCode | None = None):
        self.message = message or self.default_message
        self.error_code = error_code or self.default_code
        super().__init__(self.message)


class InternalServerException(ApiError):
    pass


class BadRequestException(ApiError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Bad Request"
    default_code = ErrorCode.VALIDATION_ERROR


class UnauthorizedException(ApiError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Unauthorized Access"
    default_code = ErrorCode.ACCESS_UNAUTHORIZED


class ForbiddenException(ApiError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Access Forbidden"
    default_code = ErrorCode.ACCESS_FORBIDDEN


class NotFoundException(ApiError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Resource not found"
    default_code = ErrorCode.RESOURCE_NOT_FOUND


class ConflictException(ApiError):
    status_code = status.HTTP_409_CONFLICT
    default_message = "Resource already exists"
    default_code = ErrorCode.RESOURCE_CONFLICT
