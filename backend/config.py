import os
import logging
from typing import Optional
from dotenv import load_dotenv
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlmodel import Session

# Load environment variables from .env file
if os.path.exists(".env"):
    load_dotenv()

# Settings
class Settings:
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///goals.db")
    JWT_SECRET_KEY: str = os.getenv("JWT_SECRET_KEY", "your-secret-key-change-this-in-production")
    ACCESS_TOKEN_EXPIRE_MINUTES: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "30"))
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

# Global settings
settings = Settings()

# Configure logging
logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger("goal_cockpit")

# HTTP Bearer token dependency (returns 401 instead of 403)
security = HTTPBearer(auto_error=False)


def get_current_user_dep(credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)):
    """Get current user dependency with database session access."""
    from fastapi_app import database_engine
    from auth import verify_token

    with Session(database_engine) as session:
        credentials_exception = HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

        # Check if credentials are provided
        if credentials is None:
            raise credentials_exception

        user = verify_token(credentials.credentials, session)
        if user is None:
            raise credentials_exception
        return user
