import os
from decimal import Decimal
from pathlib import Path
from typing import List

from dotenv import load_dotenv

load_dotenv()

# Backend directory (parent of the wewallet package)
BACKEND_DIR = Path(__file__).resolve().parent.parent
DEFAULT_DB_PATH = BACKEND_DIR / "wewallet.db"


def _get_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _get_list(name: str, default: str) -> List[str]:
    return [item.strip() for item in os.getenv(name, default).split(",") if item.strip()]


class Settings:
    """Runtime settings read from the environment (and .env, if present)."""

    def __init__(self):
        self.database_url: str = os.getenv("DATABASE_URL", f"sqlite:///{DEFAULT_DB_PATH}")
        # Empty means admin-only operations are disabled
        self.admin_api_key: str = os.getenv("ADMIN_API_KEY", "")
        self.cors_origins: List[str] = _get_list("CORS_ORIGINS", "http://localhost:3000")
        self.rate_limit_enabled: bool = _get_bool("RATE_LIMIT_ENABLED", True)
        self.trade_rate_limit: str = os.getenv("TRADE_RATE_LIMIT", "30/minute")
        self.default_user_balance: Decimal = Decimal(os.getenv("DEFAULT_USER_BALANCE", "0"))
        self.log_level: str = os.getenv("LOG_LEVEL", "INFO").upper()
        self.host: str = os.getenv("HOST", "0.0.0.0")
        self.port: int = int(os.getenv("PORT", "8000"))

    def __repr__(self):
        # Never echo the admin key
        return (
            f"Settings(database_url={self.database_url!r}, cors_origins={self.cors_origins!r}, "
            f"rate_limit_enabled={self.rate_limit_enabled}, log_level={self.log_level!r})"
        )


settings = Settings()
