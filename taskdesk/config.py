"""
Client configuration.

All settings are read from environment variables (a local .env is loaded
first) and exposed as module constants. Components take these as defaults
and accept explicit overrides in their constructors.
"""

import logging
import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

API_URL = os.getenv("TASKDESK_API_URL", "http://localhost:5000/api")
TIMEOUT = float(os.getenv("TASKDESK_TIMEOUT", "10"))  # seconds

SESSION_FILE = Path(
    os.getenv("TASKDESK_SESSION_FILE", str(Path.home() / ".taskdesk" / "session.json"))
).expanduser()

# ── Polling / UI timers (seconds) ─────────────────────
ADMIN_POLL_SECONDS = float(os.getenv("TASKDESK_ADMIN_POLL_SECONDS", "30"))
USER_POLL_SECONDS = float(os.getenv("TASKDESK_USER_POLL_SECONDS", str(5 * 60)))
BANNER_SECONDS = float(os.getenv("TASKDESK_BANNER_SECONDS", "3"))

LOG_LEVEL = os.getenv("TASKDESK_LOG_LEVEL", "INFO").upper()


def configure_logging(level: str = LOG_LEVEL) -> None:
    """Apply the configured level to the root logger."""
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
