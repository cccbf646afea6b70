from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_ignore_empty=True, extra="ignore")

    # Database
    DATABASE_URL: str = "sqlite:///./achievements.db"
    DB_POOL_SIZE: int = 5

    # Auth
    TOKEN_LENGTH: int = 25
    BCRYPT_ROUNDS: int = 12
    BOOTSTRAP_ADMIN: bool = False
    ADMIN_USERNAME: str = "admin"
    ADMIN_PASSWORD: str = "ChangeMe_123!"

    # Catalog
    ACHIEVEMENT_LIST_LIMIT: int = 50

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = True

    # Environment
    ENVIRONMENT: str = "dev"


@lru_cache
def get_settings() -> Settings:
    return Settings()
