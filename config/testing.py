import os
import tempfile

from .config import *  # noqa: F401,F403

SECRET_KEY = "test-secret"

DEBUG = False
TESTING = True

ADMIN_USER = "admin"
ADMIN_PASS = "secret"
TELEGRAM_BOT_TOKEN = None
AUTO_INIT_DB = False
LOG_LEVEL = "WARNING"
UPLOAD_DIR = os.path.join(tempfile.gettempdir(), "face_checkin_test_uploads")
