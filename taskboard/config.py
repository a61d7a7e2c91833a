from pathlib import Path
from typing import List
import os

from dotenv import load_dotenv
from fastapi import Request
from pydantic import BaseModel, Field

# Load environment variables from repo root and package/.env (if present).
REPO_ROOT = Path(__file__).resolve().parents[1]
load_dotenv(REPO_ROOT / ".env")
load_dotenv(Path(__file__).resolve().parent / ".env")


class Settings(BaseModel):
    """Runtime configuration handed to the app factory, store and auth gate."""

    database_url: str = "sqlite:///./taskboard.db"
    secret_key: str = Field(min_length=1)
    access_token_expire_minutes: int = Field(default=60, ge=1)
    bcrypt_rounds: int = Field(default=10, ge=4, le=31)
    cors_origins: List[str] = ["http://localhost:3000"]
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 8000

    @classmethod
    def from_env(cls) -> "Settings":
        _cors_origins = os.getenv("CORS_ORIGINS", "http://localhost:3000")
        return cls(
            database_url=os.getenv("DATABASE_URL", "sqlite:///./taskboard.db"),
            secret_key=os.getenv("SECRET_KEY"),
            access_token_expire_minutes=int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "60")),
            bcrypt_rounds=int(os.getenv("BCRYPT_ROUNDS", "10")),
            cors_origins=[origin.strip() for origin in _cors_origins.split(",") if origin.strip()],
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            host=os.getenv("HOST", "0.0.0.0"),
            port=int(os.getenv("PORT", "8000")),
        )


def get_settings(request: Request) -> Settings:
    """Dependency returning the settings the app was built with."""
    return request.app.state.settings
