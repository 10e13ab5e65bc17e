# app/config/settings.py
# Runtime configuration for the task tracker

import os
from dotenv import load_dotenv

load_dotenv()


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() == "true"


class Settings:
    """Application settings read from the environment"""

    # Database
    DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./tasks.db")
    DATABASE_SSLMODE = os.getenv("DATABASE_SSLMODE", "require")

    # Logging
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

    # Daily digest schedule (midnight by default)
    DIGEST_CRON = os.getenv("DIGEST_CRON", "0 0 * * *")
    DIGEST_TIMEZONE = os.getenv("DIGEST_TIMEZONE", "UTC")
    DIGEST_ALLOW_OVERLAP = _env_flag("DIGEST_ALLOW_OVERLAP")
    DIGEST_MAX_INSTANCES = int(os.getenv("DIGEST_MAX_INSTANCES", "3"))
    RUN_DIGEST_ON_STARTUP = _env_flag("RUN_DIGEST_ON_STARTUP")

    # Server
    HOST = os.getenv("HOST", "0.0.0.0")
    PORT = int(os.getenv("PORT", "8000"))
    RELOAD = _env_flag("RELOAD", "true")

    @classmethod
    def database_connect_args(cls) -> dict:
        """Driver arguments for the configured database URL"""
        url = cls.DATABASE_URL.lower()
        if url.startswith("postgresql") and cls.DATABASE_SSLMODE:
            return {"sslmode": cls.DATABASE_SSLMODE}
        if url.startswith("sqlite"):
            return {"check_same_thread": False}
        return {}


settings = Settings()
