import os

from .config import Config, db_config_from

SECRET_KEY = "test-secret"
JWT_SECRET = "test-jwt-secret"
JWT_EXPIRES_MINUTES = 60

DB_CONFIG = db_config_from(Config)

DEBUG = False
TESTING = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "WARNING")
LOG_FILE = None

UPLOAD_FOLDER = os.getenv("UPLOAD_FOLDER", "Uploads")
CORS_ORIGINS = ["*"]
MEAL_DEDUCTION_PER_DAY = 50.0

AUTO_INIT_DB = False
AUTO_SEED_ADMIN = False
