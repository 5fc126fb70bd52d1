"""JWT token management"""

import jwt
import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional

from config import settings
from core.exceptions import AuthError
from .models import User


class JWTError(AuthError):
    """JWT-related error"""
    pass


class JWTManager:
    """JWT token generation and validation"""

    def __init__(
        self,
        secret_key: str,
        algorithm: str = "HS256",
        access_token_expiry: timedelta = timedelta(hours=1)
    ):
        """
        Initialize JWT manager

        Args:
            secret_key: Secret key for signing tokens
            algorithm: JWT algorithm (HS256, RS256, etc.)
            access_token_expiry: Access token expiration time
        """
        self.secret_key = secret_key
        self.algorithm = algorithm
        self.access_token_expiry = access_token_expiry

    @classmethod
    def from_settings(cls) -> "JWTManager":
        """Build from settings, generating a process-local secret when none is configured"""
        return cls(
            secret_key=settings.JWT_SECRET_KEY or secrets.token_urlsafe(32),
            algorithm=settings.JWT_ALGORITHM,
            access_token_expiry=timedelta(hours=settings.JWT_ACCESS_TOKEN_EXPIRY_HOURS)
        )

    def generate_access_token(self, user: User, expiry: Optional[timedelta] = None) -> str:
        """
        Generate access token

        Args:
            user: User the token is issued for
            expiry: Override for the configured lifetime

        Returns:
            JWT access token
        """
        now = datetime.now(timezone.utc)
        payload = {
            "sub": user.id,
            "email": user.email,
            "name": user.full_name,
            "type": "access",
            "exp": now + (expiry or self.access_token_expiry),
            "iat": now
        }

        return jwt.encode(payload, self.secret_key, algorithm=self.algorithm)

    def verify_token(self, token: str) -> User:
        """
        Verify an access token and return its user

        Raises:
            JWTError: If token is invalid, expired or of the wrong type
        """
        try:
            payload = jwt.decode(
                token,
                self.secret_key,
                algorithms=[self.algorithm]
            )
        except jwt.ExpiredSignatureError:
            raise JWTError("Token has expired")
        except jwt.InvalidTokenError as e:
            raise JWTError(f"Invalid token: {e}")

        if payload.get("type") != "access":
            raise JWTError("Invalid token type. Expected access")

        return User(
            id=payload["sub"],
            email=payload["email"],
            full_name=payload.get("name")
        )
