from dataclasses import dataclass

from fastapi import Depends, Request
from fastapi.security import OAuth2PasswordBearer

from shared.errors import ErrorCode, ForbiddenException, UnauthorizedException
from .jwt_handler import verify_access_token

# Defines the expected header format (Bearer <token>)
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="auth/login", auto_error=False)

ROLES = ("admin", "staff", "customer")


@dataclass(frozen=True)
class CurrentUser:
    id: int
    role: str

    @property
    def is_customer(self) -> bool:
        return self.role == "customer"


async def get_current_user(request: Request, token: str = Depends(oauth2_scheme)) -> CurrentUser:
    """Dependency to validate the JWT and return the authenticated principal."""
    if not token:
        raise UnauthorizedException("Could not validate credentials", ErrorCode.INVALID_TOKEN)

    payload = verify_access_token(token)
    if payload is None:
        raise UnauthorizedException("Could not validate credentials", ErrorCode.INVALID_TOKEN)

    user_id = payload.get("sub")
    role = payload.get("role")
    if user_id is None or role not in ROLES:
        raise UnauthorizedException("Could not validate credentials", ErrorCode.INVALID_TOKEN)

    # Store in request state for downstream use (like rate limiting)
    request.state.user_id = user_id
    return CurrentUser(id=int(user_id), role=role)


def require_roles(*roles: str):
    """Dependency factory restricting an endpoint to the given roles."""

    async def checker(user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
        if user.role not in roles:
            raise ForbiddenException("You do not have permission to perform this action")
        return user

    return checker
