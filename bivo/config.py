# bivo/config.py
import os
from datetime import timedelta

BASE_DIR = os.path.dirname(os.path.abspath(__file__))
DEFAULT_DB_PATH = os.path.join(BASE_DIR, "..", "data", "bivo.db")


def _env_flag(name, default=False):
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def load_config():
    """Build the app configuration from environment variables."""
    return {
        "DB_PATH": os.environ.get("DB_PATH", DEFAULT_DB_PATH),
        "LOG_LEVEL": os.environ.get("BIVO_LOG_LEVEL", "INFO").upper(),
        "CORS_ORIGINS": os.environ.get("CORS_ORIGINS", "http://localhost:3000"),
        "JWT_SECRET_KEY": os.environ.get("JWT_SECRET_KEY", "dev-key-for-local-use-only"),
        # Bearer header wins over the "token" cookie when both are sent
        "JWT_TOKEN_LOCATION": ["headers", "cookies"],
        "JWT_ACCESS_COOKIE_NAME": "token",
        "JWT_COOKIE_SAMESITE": "Strict",
        "JWT_COOKIE_SECURE": _env_flag("JWT_COOKIE_SECURE"),
        "JWT_COOKIE_CSRF_PROTECT": False,
        "JWT_ACCESS_TOKEN_EXPIRES": timedelta(days=int(os.environ.get("JWT_EXPIRES_DAYS", "7"))),
    }
