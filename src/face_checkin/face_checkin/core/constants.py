"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_FACE_THRESHOLD = 0.55
DEFAULT_NOTIFY_MAX_WORKERS = 4
DEFAULT_NOTIFY_TIMEOUT_SECONDS = 5.0
DEFAULT_NOTIFY_MAX_PENDING = 100
DEFAULT_RECENT_EVENTS_LIMIT = 50
DEFAULT_MAX_UPLOAD_BYTES = 5 * 1024 * 1024

START_COMMAND = "/start"

REASON_WORKER_NOT_FOUND = "worker not found"
REASON_WORKER_INACTIVE = "worker inactive"
REASON_NO_REFERENCE = "no reference image"
REASON_DESCRIPTOR_FORMAT = "descriptor format error"
REASON_FACE_MISMATCH = "face mismatch (dist={distance:.3f})"
REASON_DAILY_LIMIT = "daily entry+exit limit reached"

IMAGE_FALLBACK_MARKER = "\n\n(image could not be attached)"
