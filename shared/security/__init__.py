from .jwt_handler import create_access_token, verify_access_token
from .dependencies import CurrentUser, get_current_user, require_roles
from .rate_limiter import limiter, user_id_or_ip

__all__ = [
    "create_access_token",
    "verify_access_token",
    "CurrentUser",
    "get_current_user",
    "require_roles",
    "limiter",
    "user_id_or_ip"
]
