"""
Environment-driven settings for simple-bank.

Values come from the process environment, optionally seeded from a .env file.
"""

import os
from pathlib import Path

from dotenv import find_dotenv, load_dotenv

# Load environment variables early
load_dotenv(find_dotenv(usecwd=True), override=False)

DATABASE_URL = os.getenv("DATABASE_URL")
DB_ECHO = os.getenv("DB_ECHO", "false").strip().lower() in ("1", "true", "yes")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_DIR = Path(os.getenv("LOG_DIR", "logs"))


def get_database_url() -> str:
    """
    Return the configured DATABASE_URL or fail loudly.
    """
    url = os.getenv("DATABASE_URL", DATABASE_URL or "")
    if not url:
        raise RuntimeError("DATABASE_URL not set in environment or .env")
    return url
