"""Shared constants for plan-mode."""

import re

# Store layout
PLAN_DIR_NAME = ".plan_mode/plans"
PLAN_SETTINGS_NAME = "settings.json"
PLAN_FILE_SUFFIX = ".md"
LOCK_FILE_SUFFIX = ".lock"

# Plan ids are 8 lowercase hex digits, displayed as PLAN-<hex>
PLAN_ID_PREFIX = "PLAN-"
PLAN_ID_PATTERN = re.compile(r"^[a-f0-9]{8}$", re.IGNORECASE)
MAX_ID_ATTEMPTS = 10

# Locking
LOCK_TTL_SECONDS = 30 * 60
MAX_LOCK_ATTEMPTS = 2

# Retention defaults
DEFAULT_GC_ENABLED = True
DEFAULT_GC_DAYS = 30

UNTITLED = "(untitled)"
