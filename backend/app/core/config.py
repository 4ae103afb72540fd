import os
from pydantic_settings import BaseSettings
from dotenv import load_dotenv

from app.core.exceptions import ConfigurationError

# Explicitly load .env file before defining Settings
env_path = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), ".env")
load_dotenv(env_path)

# Value shipped in old sample env files; never accepted as a real secret
INSECURE_SHARE_KEY = "dailymeal-secret-key-32-chars!"

class Settings(BaseSettings):
    PROJECT_NAME: str = "DailyMeal Share"
    API_V1_STR: str = "/api/v1"
    LOG_LEVEL: str = "INFO"

    # Database
    SQLALCHEMY_DATABASE_URI: str

    # Security (JWTs are issued by the auth service with the same key)
    SECRET_KEY: str = "YOUR_SECRET_KEY_HERE"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 10080

    # Referral token cipher
    SHARE_ENCRYPTION_KEY: str = ""
    SHARE_ENCRYPTION_SALT: str = "salt"

    # Share links
    FRONTEND_URL: str = "http://localhost:3000"
    API_BASE_URL: str = "http://localhost:8000"
    SHARE_LINK_EXPIRE_DAYS: int = 30

    class Config:
        case_sensitive = True

def validate_share_secret(secret: str) -> str:
    if not secret or not secret.strip():
        raise ConfigurationError("SHARE_ENCRYPTION_KEY is not set")
    if secret == INSECURE_SHARE_KEY:
        raise ConfigurationError("SHARE_ENCRYPTION_KEY is set to the insecure sample value")
    return secret

settings = Settings()
