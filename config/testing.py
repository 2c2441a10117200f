import os
import tempfile

from config import db_config_from_env

SECRET_KEY = "test-secret"

DB_CONFIG = db_config_from_env(default_database="idcard_test_db")

PORT = 5001
URL_PREFIX = "/api"

UPLOAD_FOLDER = os.getenv("UPLOAD_FOLDER", os.path.join(tempfile.gettempdir(), "idcard-test-uploads"))
UPLOADS_URL_PATH = "/uploads"
PUBLIC_BASE_URL = ""
CORS_ORIGINS = "*"
MAX_CONTENT_LENGTH = 16 * 1024 * 1024

TOKEN_TTL_HOURS = 1

DEBUG = False
TESTING = True
LOG_LEVEL = "WARNING"

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
