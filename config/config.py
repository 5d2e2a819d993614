import os


def db_config_from_env(*, default_password: str = "") -> dict:
    return {
        "host": os.getenv("DB_HOST", "localhost"),
        "port": int(os.getenv("DB_PORT", "3306")),
        "user": os.getenv("DB_USER", "root"),
        "password": os.getenv("DB_PASSWORD", default_password),
        "database": os.getenv("DB_NAME", "access_control"),
    }


# Registration is rejected when a stored template matches at least this percentage.
DUPLICATE_THRESHOLD = float(os.getenv("DUPLICATE_THRESHOLD", "80"))

# Seconds of silence before a keepalive event is sent on the attendance stream.
STREAM_KEEPALIVE_SECONDS = float(os.getenv("STREAM_KEEPALIVE_SECONDS", "30"))
