from sqlalchemy import Boolean, ForeignKey, Integer, String, false
from sqlalchemy.orm import mapped_column
from .base import Base, TimestampMixin


class User(Base, TimestampMixin):
    __tablename__ = "users"

    id = mapped_column(Integer, primary_key=True, autoincrement=True)
    username = mapped_column(String(64), unique=True, nullable=False)
    hashed_password = mapped_column(String(256), nullable=False)
    is_admin = mapped_column(Boolean, default=False, server_default=false(), nullable=False)


class Token(Base):
    """Bearer token for a user.

    Keyed by username so a user holds at most one token; issuing a new one
    overwrites the row and the previous value stops resolving.
    """

    __tablename__ = "tokens"

    username = mapped_column(String(64), ForeignKey("users.username"), primary_key=True)
    token = mapped_column(String(64), unique=True, index=True, nullable=False)
