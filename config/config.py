"""Settings shared by every environment module."""

import os


def env_flag(name: str, default: str = "0") -> bool:
    return bool(int(os.environ.get(name, default)))


def db_config_from_env(default_password: str = "") -> dict:
    return {
        "host": os.environ.get("DB_HOST", "localhost"),
        "port": int(os.environ.get("DB_PORT", "3306")),
        "user": os.environ.get("DB_USER", "root"),
        "password": os.environ.get("DB_PASSWORD", default_password),
        "database": os.environ.get("DB_NAME", "classroom_attendance"),
    }


# Face recognition oracle: POST {"image_base64": ...} -> {"name": <username>}
FACE_VERIFY_URL = os.environ.get("FACE_VERIFY_URL", "http://localhost:8000/verify")
FACE_VERIFY_TIMEOUT = float(os.environ.get("FACE_VERIFY_TIMEOUT", "10"))

# Tolerance added on top of the teacher-chosen radius
LOCATION_SLACK_METERS = float(os.environ.get("LOCATION_SLACK_METERS", "30"))

# Password given to the demo accounts when seeding
SHARED_PASSWORD = os.environ.get("SHARED_PASSWORD", "123456")

LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
