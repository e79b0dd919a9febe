import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv


class Settings:
    """Centralised application configuration sourced from environment variables."""

    def __init__(self) -> None:
        load_dotenv()
        self.token_secret = self._get("TOKEN_SECRET")
        self.token_exp_hours = self._get_int("TOKEN_EXP_HOURS", default=24)
        self.database_path = Path(os.getenv("DATABASE_PATH", "data/helpdesk.db")).resolve()
        self.host = os.getenv("HOST", "0.0.0.0")
        self.port = self._get_int("PORT", default=5000)
        self.app_env = os.getenv("APP_ENV", "production").strip().lower()
        if self.app_env not in ("development", "production"):
            raise RuntimeError("APP_ENV must be either 'development' or 'production'")
        self.log_level = os.getenv("LOG_LEVEL", "INFO").upper()
        origins = os.getenv("CORS_ALLOW_ORIGINS")
        if origins:
            self.cors_allow_origins = [item.strip() for item in origins.split(",") if item.strip()]
        else:
            self.cors_allow_origins = ["*"]

    @property
    def verbose_errors(self) -> bool:
        return self.app_env == "development"

    @staticmethod
    def _get(key: str) -> str:
        value = os.getenv(key)
        if not value:
            raise RuntimeError(f"Missing required environment variable: {key}")
        return value

    @staticmethod
    def _get_int(key: str, default: Optional[int] = None) -> int:
        value = os.getenv(key)
        if value is None:
            if default is None:
                raise RuntimeError(f"Missing required environment variable: {key}")
            return default
        try:
            return int(value)
        except ValueError as exc:
            raise RuntimeError(f"Environment variable {key} must be an integer") from exc
