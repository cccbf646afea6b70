from sqlalchemy import BigInteger, Boolean, ForeignKey, Integer, String, Text
from sqlalchemy.orm import mapped_column
from .base import Base


class Achievement(Base):
    __tablename__ = "achievements"

    id = mapped_column(Integer, primary_key=True, autoincrement=True)
    name = mapped_column(String(128), nullable=False)
    # base64 blob or URL, stored as-is
    image = mapped_column(Text, nullable=False)


class UserAchievement(Base):
    __tablename__ = "user_achievements"

    user_id = mapped_column(ForeignKey("users.id"), primary_key=True)
    achievement_id = mapped_column(ForeignKey("achievements.id"), primary_key=True)
    unlocked = mapped_column(Boolean, nullable=False, default=False)
    time_unlocked = mapped_column(BigInteger, nullable=False)
