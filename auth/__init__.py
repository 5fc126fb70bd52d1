"""Authentication and authorization module"""

from .models import AuthState, User
from .jwt import JWTError, JWTManager
from .session import AuthSession

__all__ = [
    "AuthState",
    "User",
    "JWTError",
    "JWTManager",
    "AuthSession",
]
