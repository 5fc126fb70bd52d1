"""Authentication models"""

from pydantic import BaseModel, EmailStr
from typing import Optional


class User(BaseModel):
    """Signed-in user"""
    id: str
    email: EmailStr
    full_name: Optional[str] = None


class AuthState(BaseModel):
    """Current authentication status as reported by the auth provider"""
    user: Optional[User] = None
    is_loading: bool = True

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None and not self.is_loading
