from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session
from ..auth import get_current_user, require_admin
from ..database import get_db
from ..models.user import User
from ..services.achievements import (
    create_achievement,
    find_achievement_by_id,
    list_achievements,
    list_unlocked_achievements,
    unlock_achievement,
)
from .schemas import AchievementIn, AchievementOut, UnlockedAchievementOut

router = APIRouter(prefix="/achievements", tags=["achievements"])


@router.get("", response_model=list[AchievementOut])
def show_achievements(db: Session = Depends(get_db)):
    return list_achievements(db)


@router.post("", response_model=AchievementOut, status_code=status.HTTP_201_CREATED)
def post_achievement(
    payload: AchievementIn,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    return create_achievement(db, payload.name, payload.image)


@router.get("/unlocked", response_model=list[UnlockedAchievementOut])
def get_unlocked_achievements(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return list_unlocked_achievements(db, current_user.id)


@router.get("/individual/{achievement_id}", response_model=AchievementOut)
def get_individual_achievement(achievement_id: int, db: Session = Depends(get_db)):
    return find_achievement_by_id(db, achievement_id)


@router.put("/unlock/{achievement_id}")
def put_unlock_achievement(
    achievement_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> Response:
    unlock_achievement(db, current_user.id, achievement_id)
    return Response(status_code=status.HTTP_200_OK)
