from __future__ import annotations

import logging

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ..auth import hash_password, verify_password
from ..errors import AlreadyExists, InternalError, InvalidCredentials, InvalidPassword, UserNotFound
from ..models.user import User

logger = logging.getLogger(__name__)


def get_user_by_username(db: Session, username: str) -> User | None:
    try:
        return db.query(User).filter(User.username == username).first()
    except SQLAlchemyError as exc:
        raise InternalError(f"failed to load user {username!r}") from exc


def register_user(db: Session, username: str, password: str, is_admin: bool = False) -> User:
    if get_user_by_username(db, username) is not None:
        raise AlreadyExists("That username is already in use")
    try:
        hashed_password = hash_password(password)
    except ValueError as exc:
        # passlib refuses NUL bytes in bcrypt input
        raise InvalidPassword(str(exc)) from exc
    user = User(username=username, hashed_password=hashed_password, is_admin=is_admin)
    try:
        db.add(user)
        db.commit()
    except IntegrityError as exc:
        # lost a race with a concurrent registration of the same name
        db.rollback()
        raise AlreadyExists("That username is already in use") from exc
    except SQLAlchemyError as exc:
        db.rollback()
        raise InternalError(f"failed to create user {username!r}") from exc
    db.refresh(user)
    logger.info("Registered user %s", username)
    return user


def verify_credentials(db: Session, username: str, password: str) -> User:
    user = get_user_by_username(db, username)
    if user is None:
        raise UserNotFound()
    if not verify_password(password, user.hashed_password):
        logger.info("Failed login for %s", username)
        raise InvalidCredentials()
    return user
