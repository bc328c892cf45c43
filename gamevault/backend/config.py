import os
from pathlib import Path

from dotenv import load_dotenv

# existing environment variables win over the file
load_dotenv(Path(__file__).resolve().parents[2] / ".env")


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


def _split_origins(value: str) -> list[str]:
    items: list[str] = []
    for raw in value.split(","):
        cleaned = raw.strip()
        if cleaned and cleaned not in items:
            items.append(cleaned)
    return items


DEFAULT_MYSQL_URL = "mysql+pymysql://user:password@db:3306/gamevault_db"
DATABASE_URL = os.getenv("DATABASE_URL", DEFAULT_MYSQL_URL)
DB_POOL_RECYCLE = int(os.getenv("DB_POOL_RECYCLE", "3600"))

JWT_SECRET = os.getenv("JWT_SECRET", "change_this_secret_in_production")
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
JWT_ISSUER = os.getenv("JWT_ISSUER", "GameVaultApi")
JWT_AUDIENCE = os.getenv("JWT_AUDIENCE", "GameVaultClient")
ACCESS_TOKEN_EXPIRE_SECONDS = int(os.getenv("ACCESS_TOKEN_EXPIRE_SECONDS", "86400"))
REFRESH_TOKEN_EXPIRE_DAYS = int(os.getenv("REFRESH_TOKEN_EXPIRE_DAYS", "7"))
PASSWORD_HASH_ITERATIONS = int(os.getenv("PASSWORD_HASH_ITERATIONS", "100000"))

REFRESH_TOKEN_COOKIE_NAME = os.getenv("REFRESH_TOKEN_COOKIE_NAME", "refreshToken")
REFRESH_TOKEN_COOKIE_SECURE = _env_flag("REFRESH_TOKEN_COOKIE_SECURE", "true")

DEFAULT_USER_IMAGE = os.getenv("DEFAULT_USER_IMAGE", "/logo.png")

_DEFAULT_ALLOWED_ORIGINS = "http://localhost:3000,http://localhost:5173"
ALLOWED_ORIGINS = _split_origins(os.getenv("ALLOWED_ORIGINS", _DEFAULT_ALLOWED_ORIGINS))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
