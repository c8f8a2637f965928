import re

ALLOWED_EXTENSIONS: tuple[str, ...] = ("jpg", "jpeg", "png", "gif", "webp")

FILENAME_PATTERN = re.compile(r"[A-Za-z0-9_\-/.]+")
TEMPLATE_PATTERN = re.compile(r"[A-Za-z0-9_-]+")
PARENT_DIR_TOKEN = ".."

# 30 days
DEFAULT_LIFETIME_SECONDS = 30 * 24 * 60 * 60

RATIO_TOLERANCE = 0.01

# sha256 hex digest split into a 2 + 62 character directory fan-out
HASH_PREFIX_LENGTH = 2
HASH_HEX_LENGTH = 64

KEY_SEPARATOR = ":"
LEASES_DIR_NAME = ".leases"
TEMP_FILE_PREFIX = ".tmp-"

# rw-r--r--
ARTIFACT_FILE_MODE = 0o644
