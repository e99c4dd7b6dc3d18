"""
Shared configuration for availability scripts.

Loads .env, configures logging and builds the partner API client.
"""

import os
import sys

from dotenv import load_dotenv

load_dotenv()

# Add project root to path for src imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from src.availability.config import get_config  # noqa: E402
from src.availability.logging import setup_logging  # noqa: E402
from src.availability.sync import ScheduleSyncClient  # noqa: E402

DAY_ABBREV = ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]


def get_client():
    """Configure logging and return a ScheduleSyncClient from the environment."""
    config = get_config()
    setup_logging(json_output=config.log_json, log_level=config.log_level)
    return ScheduleSyncClient(
        base_url=config.api_base_url,
        token=config.api_token,
        timeout=config.request_timeout_seconds,
        retry_attempts=config.sync_retry_attempts,
    )


def format_week(blocks_by_day, columns):
    """Render merged blocks as one line per day in column order."""
    lines = []
    for day in columns:
        blocks = blocks_by_day.get(day, [])
        label = ", ".join(str(b) for b in blocks) if blocks else "closed"
        lines.append(f"  {DAY_ABBREV[day]}  {label}")
    return "\n".join(lines)
