import os
from typing import List
from pydantic_settings import BaseSettings
from dotenv import load_dotenv

# Always load .env from root
BASE_DIR = os.path.dirname(os.path.dirname(os.path.dirname(__file__)))
load_dotenv(os.path.join(BASE_DIR, ".env"))


class Settings(BaseSettings):
    APP_NAME: str = "Parking Reservation Service"
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./parking.db")
    DB_POOL_SIZE: int = int(os.getenv("DB_POOL_SIZE", 5))
    DB_MAX_OVERFLOW: int = int(os.getenv("DB_MAX_OVERFLOW", 5))

    JWT_SECRET: str = os.getenv("JWT_SECRET", "change-me")
    JWT_ALGORITHM: str = os.getenv("JWT_ALGORITHM", "HS256")
    JWT_EXPIRE_MINUTES: int = int(os.getenv("JWT_EXPIRE_MINUTES", 1440))

    CORS_ORIGINS: List[str] = ["http://localhost:3000", "http://127.0.0.1:3000"]

    # Booking rules
    CANCELLATION_BUFFER_MINUTES: int = int(
        os.getenv("CANCELLATION_BUFFER_MINUTES", 5))
    PENALTY_RATE_MULTIPLIER: int = int(os.getenv("PENALTY_RATE_MULTIPLIER", 2))

    # 0 disables the background sweep
    AUTO_EXPIRE_INTERVAL_SECONDS: int = int(
        os.getenv("AUTO_EXPIRE_INTERVAL_SECONDS", 60))

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


settings = Settings()

DATABASE_URL = settings.DATABASE_URL
