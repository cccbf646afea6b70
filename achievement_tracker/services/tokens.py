from __future__ import annotations

import logging
import secrets
import string

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..config import get_settings
from ..database import upsert
from ..errors import InternalError
from ..models.user import Token

logger = logging.getLogger(__name__)

TOKEN_ALPHABET = string.ascii_letters + string.digits


def generate_token(length: int | None = None) -> str:
    if length is None:
        length = get_settings().TOKEN_LENGTH
    return "".join(secrets.choice(TOKEN_ALPHABET) for _ in range(length))


def issue_token(db: Session, username: str) -> str:
    """Mint a fresh token for ``username`` and make it the only valid one.

    The row is replaced on the username key, so whichever of two concurrent
    logins writes last wins and the other token is silently superseded.
    """
    token = generate_token()
    try:
        upsert(
            db,
            Token,
            {"username": username, "token": token},
            conflict_columns=["username"],
            update_columns=["token"],
        )
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        raise InternalError(f"failed to store token for {username!r}") from exc
    logger.info("Issued token for %s", username)
    return token
