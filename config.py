import os

BASE_DIR = os.path.dirname(os.path.abspath(__file__))
LOG_DIR = os.path.join(BASE_DIR, "logs")
REPORT_DIR = os.path.join(BASE_DIR, "reports")

DASHBOARD_HOST = "127.0.0.1"
DASHBOARD_PORT = 5000

# --- Entropy module ---
# Bytes per read; any size >= 1 gives the same score.
FILE_BUFFER_SIZE = 8193
MODULE_NAME = "EntropyModule"
ENTROPY_ATTRIBUTE_TYPE = "entropy"
ENTROPY_LABEL = "Entropy"

# --- Pipeline ---
SCAN_WORKERS = 1
MAX_ATTRIBUTES = 10000


def validate_config():
    errors = []

    if FILE_BUFFER_SIZE < 1:
        errors.append("FILE_BUFFER_SIZE must be at least 1 byte")

    if not MODULE_NAME:
        errors.append("MODULE_NAME must not be empty")

    if not ENTROPY_ATTRIBUTE_TYPE:
        errors.append("ENTROPY_ATTRIBUTE_TYPE must not be empty")

    if SCAN_WORKERS < 1:
        errors.append("SCAN_WORKERS must be positive")
    if SCAN_WORKERS > 64:
        errors.append("SCAN_WORKERS should not exceed 64")

    if MAX_ATTRIBUTES <= 0:
        errors.append("MAX_ATTRIBUTES must be positive")

    if not (1 <= DASHBOARD_PORT <= 65535):
        errors.append("DASHBOARD_PORT must be between 1 and 65535")

    if errors:
        raise ValueError(
            "Configuration errors:\n  " + "\n  ".join(errors)
        )
