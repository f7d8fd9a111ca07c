"""
Application configuration from environment variables.

All settings have sensible defaults for local development.
A .env file in the project root is loaded automatically (if present).
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env file before reading any env vars
load_dotenv(Path(__file__).resolve().parent.parent / ".env")

# ── Environment ───────────────────────────────────────────────────────────

ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")

# ── Server ────────────────────────────────────────────────────────────────

API_HOST: str = os.getenv("API_HOST", "0.0.0.0")
API_PORT: int = int(os.getenv("API_PORT", "8000"))
API_RELOAD: bool = os.getenv("API_RELOAD", "false").lower() == "true"

# ── Logging ───────────────────────────────────────────────────────────────

LOG_LEVEL: str = os.getenv("LOG_LEVEL", "info").upper()
LOG_FORMAT: str = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"

# ── Data store ────────────────────────────────────────────────────────────

# Load the demo agencies / agents / activities / bookings on startup.
SEED_MOCK_DATA: bool = os.getenv("SEED_MOCK_DATA", "true").lower() == "true"

# ── Rate limiting ─────────────────────────────────────────────────────────

RATE_LIMIT_DEFAULT: str = os.getenv("RATE_LIMIT_DEFAULT", "120/minute")
RATE_LIMIT_WRITE: str = os.getenv("RATE_LIMIT_WRITE", "30/minute")
RATE_LIMIT_VALIDATE: str = os.getenv("RATE_LIMIT_VALIDATE", "20/minute")

# ── Booking engine ────────────────────────────────────────────────────────

# How many alternative slots the pre-flight validation suggests.
MAX_ALTERNATIVE_SLOTS: int = int(os.getenv("MAX_ALTERNATIVE_SLOTS", "3"))

# ── Pagination ────────────────────────────────────────────────────────────

DEFAULT_PAGE_SIZE: int = int(os.getenv("DEFAULT_PAGE_SIZE", "20"))
MAX_PAGE_SIZE: int = int(os.getenv("MAX_PAGE_SIZE", "100"))


def configure_logging() -> None:
    """Install the root handler once; uvicorn keeps its own loggers."""
    root = logging.getLogger()
    if root.handlers:
        root.setLevel(LOG_LEVEL)
        return
    logging.basicConfig(level=LOG_LEVEL, format=LOG_FORMAT)
