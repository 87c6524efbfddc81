import os

from . import db_config_from_env, env_flag

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")
DB_CONFIG = db_config_from_env("school_records")
DEBUG = True

DEFAULT_ACADEMIC_YEAR = os.getenv("DEFAULT_ACADEMIC_YEAR", "2024-2025")

LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")
LOG_FORMAT = os.getenv("LOG_FORMAT", "console")

# Apply the bundled schema.sql on startup (CREATE TABLE IF NOT EXISTS only).
AUTO_INIT_DB = env_flag("AUTO_INIT_DB", "1")
# Also upsert the demo admin/teacher/student accounts.
AUTO_SEED_DB = env_flag("AUTO_SEED_DB", "0")
