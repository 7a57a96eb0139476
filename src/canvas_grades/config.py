"""
Configuration Management for Canvas Grades

This module centralizes configuration loading for the grade report service.
Values come from the environment (optionally a .env file) and are exposed as
module-level constants. The resolver precedence list is fixed per deployment.
"""

import logging
import os

from dotenv import load_dotenv

# Configure logging
logger = logging.getLogger(__name__)

# Load environment variables
load_dotenv()


def _env_list(name: str, default: str) -> list[str]:
    raw = os.environ.get(name, default)
    return [item.strip() for item in raw.split(",") if item.strip()]


def _env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


# Canvas API configuration
API_URL = os.environ.get("CANVAS_API_URL", "https://canvas.instructure.com")
REQUEST_TIMEOUT = float(os.environ.get("CANVAS_GRADES_TIMEOUT", "20"))

# Grade resolution policy
RESOLVERS = _env_list("CANVAS_GRADES_RESOLVERS", "history,enrollment,submissions")
HISTORY_COLUMNS = _env_list("CANVAS_GRADES_HISTORY_COLUMNS", "Final Score")
EMBED_SUBMISSIONS = _env_bool("CANVAS_GRADES_EMBED_SUBMISSIONS", True)
DEGRADE_ON_IDENTITY_FAILURE = _env_bool(
    "CANVAS_GRADES_DEGRADE_ON_IDENTITY_FAILURE", False
)

# Upstream concurrency
MAX_CONCURRENCY = int(os.environ.get("CANVAS_GRADES_MAX_CONCURRENCY", "5"))

logger.debug(f"Canvas API URL: {API_URL}, resolver precedence: {RESOLVERS}")

# Export configuration variables
__all__ = [
    "API_URL",
    "REQUEST_TIMEOUT",
    "RESOLVERS",
    "HISTORY_COLUMNS",
    "EMBED_SUBMISSIONS",
    "DEGRADE_ON_IDENTITY_FAILURE",
    "MAX_CONCURRENCY",
]
