from . import db_config_from_env, env_flag

SECRET_KEY = "test-secret"
DB_CONFIG = db_config_from_env("school_records_test")
DEBUG = False
TESTING = True

DEFAULT_ACADEMIC_YEAR = "2024-2025"

LOG_LEVEL = "WARNING"
LOG_FORMAT = "console"

AUTO_INIT_DB = env_flag("AUTO_INIT_DB")
AUTO_SEED_DB = env_flag("AUTO_SEED_DB")
