from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    DATABASE_URL: str = "postgresql://meal_user:meal_password@db:5432/meal_planner"
    SQL_ECHO: bool = False
    # При продакшн/обычной разработке лучше не пересоздавать БД на каждом старте
    RESET_DATABASE: bool = False

    SECRET_KEY: str = "SECRET_KEY_FOR_MEAL_PLANNER"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60
    REFRESH_TOKEN_EXPIRE_DAYS: int = 7

    GEMINI_API_KEY: str = ""
    GEMINI_ENDPOINT: str = "https://generativelanguage.googleapis.com/v1beta/models/gemini-2.0-flash:generateContent"
    GEMINI_TIMEOUT: float = 120.0

    # GeneratedDay принимает только дни 1..7
    MEAL_PLAN_DAYS: int = Field(default=7, ge=1, le=7)
    # Новый план переводит прежние активные планы пользователя в archived
    ARCHIVE_PREVIOUS_PLANS: bool = True

    CORS_ORIGINS: List[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]
    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "allow"

settings = Settings()
