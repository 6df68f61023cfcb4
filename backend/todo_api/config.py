from __future__ import annotations

import os

from dotenv import load_dotenv

load_dotenv()


def _flag(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


APP_ENV = os.environ.get("APP_ENV", "dev").strip().lower()

DATABASE_URL = os.environ.get("DATABASE_URL", "sqlite:///./todos.db")
DB_INIT_RETRIES = int(os.environ.get("DB_INIT_RETRIES", "30"))

SESSION_COOKIE = os.environ.get("SESSION_COOKIE", "sid")
SESSION_TTL_SECONDS = int(os.environ.get("SESSION_TTL_SECONDS", "2592000"))  # 30 days
SESSION_COOKIE_SECURE = _flag("SESSION_COOKIE_SECURE", True)

PBKDF2_ITERS = int(os.environ.get("PBKDF2_ITERS", "200000"))
PASSWORD_MIN_LENGTH = int(os.environ.get("PASSWORD_MIN_LENGTH", "8"))

LOGIN_URL = os.environ.get("LOGIN_URL", "/login")

LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()
LOG_FILE = os.environ.get("LOG_FILE", "").strip() or None
