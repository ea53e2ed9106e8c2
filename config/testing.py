import os

SECRET_KEY = "test-secret"

JWT_SECRET = "test-jwt-secret"
JWT_EXPIRE_DAYS = 7

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "pension_test_db"),
}

CLIENT_URL = "http://localhost:5173"

DEBUG = False
TESTING = True

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))

SELF_PING_URL = ""
SELF_PING_INTERVAL_SECONDS = 300
