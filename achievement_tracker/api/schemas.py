from pydantic import BaseModel, ConfigDict, Field, field_validator


class StrictModel(BaseModel):
    model_config = ConfigDict(extra="forbid")


class Credentials(StrictModel):
    username: str = Field(min_length=1, max_length=64)
    password: str = Field(min_length=1)

    @field_validator("password")
    @classmethod
    def _reject_nul(cls, value: str) -> str:
        if "\x00" in value:
            raise ValueError("password must not contain NUL characters")
        return value


class UserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    is_admin: bool


class TokenResponse(BaseModel):
    token: str
    token_type: str = "bearer"


class AchievementIn(StrictModel):
    name: str = Field(min_length=1, max_length=128)
    image: str


class AchievementOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    image: str


class UnlockedAchievementOut(BaseModel):
    achievement_id: int
    name: str
    unlocked: bool
    time_unlocked: int
    image: str
