"""
Server Configuration

Environment-driven settings (loaded from .env when present) and the fixed
locations of the bundled content roots.
"""

import logging
import os
import sys
from pathlib import Path
from typing import Dict

import dotenv

dotenv.load_dotenv()

DEFAULT_PORT = 3000
DEFAULT_HOST = "0.0.0.0"

# Bundled data lives next to the package (populated by the fetch-resources step)
DATA_ROOT = Path(__file__).resolve().parents[1] / "data"

# Logical root name -> directory under DATA_ROOT
CONTENT_ROOTS: Dict[str, Path] = {
    "core": DATA_ROOT / "pubky-core",
    "pkarr": DATA_ROOT / "pkarr",
    "pkdns": DATA_ROOT / "pkdns",
    "nexus": DATA_ROOT / "pubky-nexus",
}


def get_port() -> int:
    """Get HTTP port from the PORT environment variable."""
    raw = os.getenv("PORT", str(DEFAULT_PORT))
    try:
        return int(raw)
    except ValueError:
        logging.getLogger(__name__).warning(f"Invalid PORT value {raw!r}, using {DEFAULT_PORT}")
        return DEFAULT_PORT


def get_host() -> str:
    """Get HTTP bind address from the HOST environment variable."""
    return os.getenv("HOST", DEFAULT_HOST)


def configure_logging() -> None:
    """
    Configure root logging for the server process.

    Logs always go to stderr: stdout carries protocol frames on the stdio
    transport.
    """
    level_name = os.getenv("LOG_LEVEL", "INFO").upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )
    # StartupWarning and other warnings go through the same handlers
    logging.captureWarnings(True)
