import os

from config.config import (  # noqa: F401
    FACE_VERIFY_TIMEOUT,
    FACE_VERIFY_URL,
    LOCATION_SLACK_METERS,
    LOG_LEVEL,
    SHARED_PASSWORD,
    db_config_from_env,
    env_flag,
)

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

DB_CONFIG = db_config_from_env()

DEBUG = False

AUTO_INIT_DB = env_flag("AUTO_INIT_DB", "0")
AUTO_SEED_DB = env_flag("AUTO_SEED_DB", "0")
