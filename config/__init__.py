import os

_ALIASES = {
    "prod": "production",
    "production": "production",
    "test": "testing",
    "testing": "testing",
    "dev": "development",
    "development": "development",
}


def get_settings_module() -> str:
    """Dotted path of the settings module picked by APP_ENV (FACE_CHECKIN_ENV also works)."""

    raw = os.getenv("APP_ENV") or os.getenv("FACE_CHECKIN_ENV") or "development"
    return "config." + _ALIASES.get(raw.strip().lower(), "development")
