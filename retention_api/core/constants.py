"""Application-wide constants.

This module centralizes retention presets and other values shared by the
HTTP trigger, the Celery task and the command line script. For
environment-specific configuration, see config.py.
"""

# =============================================================================
# Retention Presets (minutes)
# =============================================================================

# Short window for verification environments
CLEANUP_INTERVAL_TEST: int = 5

# Aggressive sweep used while a bucket is being drained
CLEANUP_INTERVAL_AGGRESSIVE: int = 20

# 4 months = 4 * 30 * 24 * 60
CLEANUP_INTERVAL_PRODUCTION: int = 175200

CLEANUP_INTERVALS: dict[str, int] = {
    "TEST": CLEANUP_INTERVAL_TEST,
    "AGGRESSIVE": CLEANUP_INTERVAL_AGGRESSIVE,
    "PRODUCTION": CLEANUP_INTERVAL_PRODUCTION,
}

# =============================================================================
# Buckets
# =============================================================================

# Collections swept when no explicit list is configured
DEFAULT_CLEANUP_BUCKETS: tuple[str, ...] = (
    "user-files",
    "admin-files",
    "order-files",
    "invoices",
    "documents",
)

# =============================================================================
# Locking
# =============================================================================

# Redis key of the advisory marker held while a run is in progress
CLEANUP_LOCK_KEY: str = "storage-retention:cleanup-lock"

# =============================================================================
# Reporting
# =============================================================================

# Error message max length (for truncation in reports)
ERROR_MESSAGE_MAX_LENGTH: int = 500

# Maximum error messages kept per bucket in a report
MAX_ERRORS_PER_BUCKET: int = 50
