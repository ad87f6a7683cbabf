# backend/config.py
from pydantic_settings import BaseSettings
from typing import ClassVar
from pathlib import Path

# Resolve absolute path to the .env file for reliable loading
env_path = Path(__file__).parent.parent / ".env"

class Settings(BaseSettings):
    SECRET_KEY: str = "dev-secret-change-me"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60
    DATABASE_URL: str = "sqlite:///./storefront_pricing.db"

    # Carts live only in the TTL cache; every write resets the TTL
    CART_TTL_SECONDS: int = 60 * 60 * 24 * 7

    # Payment gateway; an empty URL selects the simulated gateway
    PAYMENT_API_URL: str = ""
    PAYMENT_API_KEY: str = ""
    PAYMENT_TIMEOUT_SECONDS: float = 10.0
    PAYMENT_SUCCESS_RATE: float = 1.0

    FRONTEND_URL: str = "http://localhost:5173"
    LOG_LEVEL: str = "INFO"

    class Config:
        env_file: ClassVar[str] = str(env_path)
        extra: ClassVar[str] = "ignore"

settings = Settings()
