from .base import Base
from .user import User, Token
from .achievement import Achievement, UserAchievement

__all__ = [
    "Base",
    "User",
    "Token",
    "Achievement",
    "UserAchievement",
]
