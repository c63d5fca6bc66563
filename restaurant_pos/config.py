# restaurant_pos/config.py
from pydantic_settings import BaseSettings
from typing import ClassVar
from pathlib import Path

# Resolve absolute path to the .env file for reliable loading
env_path = Path(__file__).parent.parent / ".env"

class Settings(BaseSettings):
    SECRET_KEY: str = "dev-secret-change-me"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 720
    BCRYPT_ROUNDS: int = 12
    DATABASE_URL: str = "sqlite:///./restaurant_pos.db"

    FRONTEND_URL: str = ""
    LOG_LEVEL: str = "INFO"

    # Defaults for the singleton settings row and the built-in admin account
    DEFAULT_BUSINESS_NAME: str = "Restaurant POS"
    ADMIN_USERNAME: str = "sysadmin"
    ADMIN_PASSWORD: str = "change-me"

    class Config:
        env_file: ClassVar[str] = str(env_path)
        extra: ClassVar[str] = "ignore"

settings = Settings()
