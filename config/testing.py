from config.config import (  # noqa: F401
    FACE_VERIFY_TIMEOUT,
    FACE_VERIFY_URL,
    LOCATION_SLACK_METERS,
    SHARED_PASSWORD,
    db_config_from_env,
)

SECRET_KEY = "test-secret"

DB_CONFIG = db_config_from_env(default_password="12345")

DEBUG = False
TESTING = True
LOG_LEVEL = "WARNING"

# Tests inject in-memory repositories; never touch a real database on startup
AUTO_INIT_DB = False
AUTO_SEED_DB = False
