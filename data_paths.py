"""Centralized helpers for resolving the application's data directory."""
from __future__ import annotations

import logging
import os
from pathlib import Path

LOGGER = logging.getLogger(__name__)

APP_ROOT = Path(__file__).resolve().parent
DATA_ROOT = Path(os.getenv("CAFE_DATA_DIR") or (APP_ROOT / "data"))


def ensure_data_root() -> Path:
    """Return the canonical data root, creating it when missing."""
    if not DATA_ROOT.exists():
        LOGGER.info("Creating data directory %s", DATA_ROOT)
    DATA_ROOT.mkdir(parents=True, exist_ok=True)
    return DATA_ROOT
