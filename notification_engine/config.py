"""
Configuration for the notification engine.

Service locations and storage paths come from the environment; the remaining
values are fixed limits of the reminder and digest rules.
"""
import os

# Service URL - configurable via environment variable
NOTIFICATION_SERVICE_URL = os.getenv("NOTIFICATION_SERVICE_URL", "http://localhost:8004")

# Local JSON storage used by the CLI and the MCP server
NOTIFICATION_SETTINGS_PATH = os.getenv("NOTIFICATION_SETTINGS_PATH", "data/settings.json")
ASSIGNMENTS_PATH = os.getenv("ASSIGNMENTS_PATH", "data/assignments.json")

LOG_LEVEL = os.getenv("NOTIFICATION_LOG_LEVEL", "INFO")

# Timeout settings for ledger operations (in seconds)
STANDARD_TIMEOUT = 30.0

# Individual notifications
DUE_SOON_HOURS = 1
DAY_BEFORE_HOURS = 24
TITLE_MAX_LENGTH = 65
BODY_MAX_LENGTH = 240

# Daily digest
DIGEST_HORIZON_DAYS = 14
DIGEST_BODY_MAX_LENGTH = 700
DIGEST_MAX_ITEMS_PER_CATEGORY = 5
DIGEST_DETAILED_DAYS = 2
SEND_IMMEDIATELY_DELAY_SECONDS = 5

# Fired notifications kept by the in-memory ledger
DELIVERED_HISTORY = 100
