import os

from .config import Config, db_config_from

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")
JWT_SECRET = os.getenv("JWT_SECRET", SECRET_KEY)
JWT_EXPIRES_MINUTES = Config.JWT_EXPIRES_MINUTES

DB_CONFIG = db_config_from(Config)

DEBUG = False
LOG_LEVEL = Config.LOG_LEVEL
LOG_FILE = Config.LOG_FILE

UPLOAD_FOLDER = Config.UPLOAD_FOLDER
CORS_ORIGINS = Config.CORS_ORIGINS
MEAL_DEDUCTION_PER_DAY = Config.MEAL_DEDUCTION_PER_DAY

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
AUTO_SEED_ADMIN = bool(int(os.getenv("AUTO_SEED_ADMIN", "0")))
