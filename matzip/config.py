"""
config.py
---------
Central configuration module. Loads all environment variables
from the .env file and exposes them as typed constants.
"""

import os
from dotenv import load_dotenv

load_dotenv()


# ── Store ─────────────────────────────────────────────────
DB_PATH: str = os.getenv("MATZIP_DB_PATH", "matzip.sqlite3")
BUSY_TIMEOUT_SECONDS: float = float(os.getenv("MATZIP_BUSY_TIMEOUT_SECONDS", "5"))
SQL_ECHO: bool = os.getenv("MATZIP_SQL_ECHO", "false").lower() in ("1", "true", "yes")

# ── Build mode ────────────────────────────────────────────
# "debug" resets a broken store file, "release" fails fast.
# Running Python with -O switches the default to release.
BUILD_MODE: str = os.getenv("MATZIP_BUILD_MODE", "debug" if __debug__ else "release").lower()
DEBUG: bool = BUILD_MODE == "debug"

# ── Logging ───────────────────────────────────────────────
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()
