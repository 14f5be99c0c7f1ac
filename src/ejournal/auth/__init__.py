from .deps import (
    AuthError,
    StaleSessionError,
    get_current_user,
    require_admin,
    require_auth,
    require_roles,
)
from .passwords import hash_password, verify_password

__all__ = [
    "AuthError",
    "StaleSessionError",
    "get_current_user",
    "hash_password",
    "require_admin",
    "require_auth",
    "require_roles",
    "verify_password",
]
