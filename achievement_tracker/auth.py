import enum
import logging
from functools import lru_cache
from fastapi import Depends, Header
from passlib.context import CryptContext
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from .config import get_settings
from .database import get_db
from .errors import InsufficientPrivilege, InternalError, InvalidToken, MissingCredentials
from .models.user import Token, User

logger = logging.getLogger(__name__)


class AuthLevel(str, enum.Enum):
    USER = "user"
    ADMIN = "admin"


@lru_cache
def get_pwd_context() -> CryptContext:
    settings = get_settings()
    return CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=settings.BCRYPT_ROUNDS)


def hash_password(password: str) -> str:
    return get_pwd_context().hash(password)


def verify_password(password: str, hashed_password: str) -> bool:
    try:
        return get_pwd_context().verify(password, hashed_password)
    except ValueError as exc:
        # passlib rejects both unusable input (NUL bytes) and unrecognised hashes
        logger.warning("password verification rejected: %s", exc)
        return False


def ensure_default_admin(db: Session) -> None:
    settings = get_settings()
    if not settings.BOOTSTRAP_ADMIN:
        return
    existing = db.query(User).filter(User.username == settings.ADMIN_USERNAME).first()
    if existing:
        return
    user = User(
        username=settings.ADMIN_USERNAME,
        hashed_password=hash_password(settings.ADMIN_PASSWORD),
        is_admin=True,
    )
    db.add(user)
    db.commit()
    logger.info("Created bootstrap admin account %s", settings.ADMIN_USERNAME)


def _extract_token(authorization: str) -> str:
    value = authorization.strip()
    scheme, _, credentials = value.partition(" ")
    if credentials and scheme.lower() == "bearer":
        return credentials.strip()
    return value


def authenticate(db: Session, authorization: str | None, level: AuthLevel = AuthLevel.USER) -> User:
    """Resolve the user acting behind an Authorization header value.

    Accepts the raw token or ``Bearer <token>``. The token and the user are
    fetched with two separate lookups: an unknown token is the caller's
    fault (``InvalidToken``), while a token whose user row is gone means the
    store is inconsistent (``InternalError``).
    """
    if authorization is None or not authorization.strip():
        raise MissingCredentials()
    token = _extract_token(authorization)

    try:
        record = db.query(Token).filter(Token.token == token).first()
    except SQLAlchemyError as exc:
        raise InternalError("token lookup failed") from exc
    if record is None:
        logger.info("Rejected request with unknown token")
        raise InvalidToken()

    try:
        user = db.query(User).filter(User.username == record.username).first()
    except SQLAlchemyError as exc:
        raise InternalError("user lookup failed") from exc
    if user is None:
        raise InternalError(f"orphaned token for username {record.username!r}")

    if level == AuthLevel.ADMIN and not user.is_admin:
        logger.warning("User %s denied admin access", user.username)
        raise InsufficientPrivilege()
    return user


def require_level(level: AuthLevel):
    def dependency(
        authorization: str | None = Header(default=None),
        db: Session = Depends(get_db),
    ) -> User:
        return authenticate(db, authorization, level)

    return dependency


get_current_user = require_level(AuthLevel.USER)
require_admin = require_level(AuthLevel.ADMIN)
