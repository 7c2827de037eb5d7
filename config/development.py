import os

from .config import Config, db_config_from

SECRET_KEY = Config.SECRET_KEY
JWT_SECRET = Config.JWT_SECRET
JWT_EXPIRES_MINUTES = Config.JWT_EXPIRES_MINUTES

DB_CONFIG = db_config_from(Config)

DEBUG = bool(int(os.getenv("DEBUG", "1")))
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")
LOG_FILE = Config.LOG_FILE

UPLOAD_FOLDER = Config.UPLOAD_FOLDER
CORS_ORIGINS = Config.CORS_ORIGINS
MEAL_DEDUCTION_PER_DAY = Config.MEAL_DEDUCTION_PER_DAY

# Apply schema.sql on startup (idempotent: CREATE TABLE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))
# Create admin/admin123 when no admin account exists
AUTO_SEED_ADMIN = bool(int(os.getenv("AUTO_SEED_ADMIN", "1")))
