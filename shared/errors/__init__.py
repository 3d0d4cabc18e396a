from .exceptions import (
    ApiError,
    BadRequestException,
    ConflictException,
    ErrorCode,
    ForbiddenException,
    InternalServerException,
    NotFoundException,
    UnauthorizedException,
)
from .handlers import register_exception_handlers

__all__ = [
    "ApiError",
    "BadRequestException",
    "ConflictException",
    "ErrorCode",
    "ForbiddenException",
    "InternalServerException",
    "NotFoundException",
    "UnauthorizedException",
    "register_exception_handlers",
]
