from __future__ import annotations

import logging
import time
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..config import get_settings
from ..database import upsert
from ..errors import AchievementNotFound, InternalError
from ..models.achievement import Achievement, UserAchievement

logger = logging.getLogger(__name__)


def find_achievement_by_id(db: Session, achievement_id: int) -> Achievement:
    try:
        achievement = db.get(Achievement, achievement_id)
    except SQLAlchemyError as exc:
        raise InternalError(f"failed to load achievement {achievement_id}") from exc
    if achievement is None:
        logger.debug("Achievement %s not found", achievement_id)
        raise AchievementNotFound(f"Could not find achievement with id {achievement_id}")
    return achievement


def list_achievements(db: Session, limit: int | None = None) -> list[Achievement]:
    if limit is None:
        limit = get_settings().ACHIEVEMENT_LIST_LIMIT
    try:
        return db.query(Achievement).order_by(Achievement.id.asc()).limit(limit).all()
    except SQLAlchemyError as exc:
        raise InternalError("failed to list achievements") from exc


def create_achievement(db: Session, name: str, image: str) -> Achievement:
    achievement = Achievement(name=name, image=image)
    try:
        db.add(achievement)
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        raise InternalError(f"failed to create achievement {name!r}") from exc
    db.refresh(achievement)
    logger.info("Created achievement %s (%s)", achievement.id, name)
    return achievement


def unlock_achievement(
    db: Session,
    user_id: int,
    achievement_id: int,
    now: int | None = None,
) -> None:
    """Mark an achievement as unlocked for a user.

    Safe to repeat: the row keyed on (user_id, achievement_id) is written with
    one upsert, and a repeat overwrites ``time_unlocked`` with ``now``.
    """
    find_achievement_by_id(db, achievement_id)
    if now is None:
        now = int(time.time())
    try:
        upsert(
            db,
            UserAchievement,
            {
                "user_id": user_id,
                "achievement_id": achievement_id,
                "unlocked": True,
                "time_unlocked": now,
            },
            conflict_columns=["user_id", "achievement_id"],
            update_columns=["unlocked", "time_unlocked"],
        )
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        raise InternalError(
            f"failed to unlock achievement {achievement_id} for user {user_id}"
        ) from exc
    logger.info("User %s unlocked achievement %s", user_id, achievement_id)


def list_unlocked_achievements(db: Session, user_id: int) -> list[dict[str, Any]]:
    try:
        rows = (
            db.query(
                Achievement.id,
                Achievement.name,
                UserAchievement.unlocked,
                UserAchievement.time_unlocked,
                Achievement.image,
            )
            .join(UserAchievement, UserAchievement.achievement_id == Achievement.id)
            .filter(UserAchievement.user_id == user_id, UserAchievement.unlocked.is_(True))
            .order_by(UserAchievement.time_unlocked.asc(), Achievement.id.asc())
            .all()
        )
    except SQLAlchemyError as exc:
        raise InternalError(f"failed to list unlocked achievements for user {user_id}") from exc
    return [
        {
            "achievement_id": row.id,
            "name": row.name,
            "unlocked": row.unlocked,
            "time_unlocked": row.time_unlocked,
            "image": row.image,
        }
        for row in rows
    ]
