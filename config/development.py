import os

from config import REPO_ROOT, db_config_from_env

SECRET_KEY = os.getenv("JWT_SECRET") or os.getenv("SECRET_KEY", "dev-secret-key")

DB_CONFIG = db_config_from_env()

PORT = int(os.getenv("PORT", "5000"))
URL_PREFIX = os.getenv("URL_PREFIX", "/api")

UPLOAD_FOLDER = os.getenv("UPLOAD_FOLDER", str(REPO_ROOT / "uploads"))
UPLOADS_URL_PATH = "/uploads"
PUBLIC_BASE_URL = os.getenv("PUBLIC_BASE_URL", "")
# Comma-separated list, or "*" for any origin.
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]
MAX_CONTENT_LENGTH = int(os.getenv("MAX_CONTENT_LENGTH", str(16 * 1024 * 1024)))

TOKEN_TTL_HOURS = int(os.getenv("TOKEN_TTL_HOURS", "24"))

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))
