from fastapi import Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from shared.config.settings import RATE_LIMIT_ENABLED
from .jwt_handler import bearer_token, verify_access_token


def user_id_or_ip(request: Request) -> str:
    """
    Key function for SlowAPI.
    Signed-in users share one bucket across devices; anonymous callers
    (login attempts included) are limited per client address.
    """
    token = bearer_token(request.headers.get("Authorization"))
    claims = verify_access_token(token) if token else None
    if claims and claims.get("sub"):
        return f"user:{claims['sub']}"
    return f"ip:{get_remote_address(request)}"


limiter = Limiter(key_func=user_id_or_ip, enabled=RATE_LIMIT_ENABLED)
