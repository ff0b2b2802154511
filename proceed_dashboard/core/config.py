# === proceed_dashboard/core/config.py ===
import os
import re
from typing import List, Optional
from pydantic_settings import BaseSettings
from dotenv import load_dotenv

load_dotenv()

class Settings(BaseSettings):
    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")
    DATABASE_URL: str = os.getenv("DATABASE_URL", "")
    DATABASE_ECHO: bool = False
    API_PREFIX: str = "/api/v1"
    FUNCTION_API_PREFIX: str = "/.netlify/functions/api"
    FRONTEND_URL: str = os.getenv("FRONTEND_URL", "")
    CORS_ORIGIN: str = os.getenv("CORS_ORIGIN", "")
    CORS_ORIGINS: str = "https://localhost:8888"
    CORS_ORIGIN_SUFFIXES: str = ".netlify.app,.netlify.live"
    MAX_UPLOAD_BYTES: int = 10 * 1024 * 1024
    VERSION_HISTORY_LIMIT: int = 10
    LOG_LEVEL: str = "INFO"
    SLOW_REQUEST_SECONDS: float = 5.0

    class Config:
        env_file = ".env"
        extra = "ignore"

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT.lower() == "production"

    @property
    def is_development(self) -> bool:
        return self.ENVIRONMENT.lower() == "development"

    def cors_origins(self) -> List[str]:
        origins = [self.FRONTEND_URL, self.CORS_ORIGIN]
        origins.extend(self.CORS_ORIGINS.split(","))
        return [o.strip() for o in origins if o and o.strip()]

    def cors_origin_regex(self) -> Optional[str]:
        """Regex matching any origin whose host ends with a configured suffix"""
        suffixes = [s.strip() for s in self.CORS_ORIGIN_SUFFIXES.split(",") if s.strip()]
        if not suffixes:
            return None
        alternatives = "|".join(re.escape(s) for s in suffixes)
        return rf"https?://[^/]*({alternatives})(:\d+)?"

settings = Settings()
