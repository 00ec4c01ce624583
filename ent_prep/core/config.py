# ent_prep/core/config.py
import os
from functools import lru_cache
from typing import List, Optional

from dotenv import load_dotenv

load_dotenv()


class Settings:
    """Runtime settings read from the environment (and .env)."""

    def __init__(self):
        self.API_TITLE = "ENT Prep API"
        self.API_VERSION = "0.1.0"

        self.DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./ent_prep.db")

        self.JWT_SECRET: str = os.getenv("JWT_SECRET", "ent-prep-development-secret-change-me")
        self.JWT_ALGORITHM = "HS256"
        self.JWT_EXPIRES_DAYS: int = int(os.getenv("JWT_EXPIRES_DAYS", "30"))

        self.CORS_ORIGINS: List[str] = [
            origin.strip()
            for origin in os.getenv("CORS_ORIGINS", "*").split(",")
            if origin.strip()
        ]

        self.OPENAI_API_KEY: Optional[str] = os.getenv("OPENAI_API_KEY") or None
        self.OPENAI_MODEL: str = os.getenv("OPENAI_MODEL", "gpt-4o-mini")

        self.SEED_TESTS: bool = os.getenv("SEED_TESTS", "true").lower() in ("1", "true", "yes")
        self.LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()
        self.PORT: int = int(os.getenv("PORT", "5000"))


@lru_cache()
def get_settings() -> Settings:
    return Settings()
