"""Runtime settings, read once from the environment."""

from __future__ import annotations

import os

HOST = os.environ.get("HOST", "0.0.0.0")
PORT = int(os.environ.get("PORT", 7860))

# Unset -> commentary disabled, the UI shows the unavailable indicator.
COMMENTARY_URL = os.environ.get("PAGESIM_COMMENTARY_URL") or None
COMMENTARY_TIMEOUT = float(os.environ.get("PAGESIM_COMMENTARY_TIMEOUT", 10.0))

AUTOPLAY_MS = int(os.environ.get("PAGESIM_AUTOPLAY_MS", 1000))
MAX_FRAMES = int(os.environ.get("PAGESIM_MAX_FRAMES", 10))
MAX_SESSIONS = int(os.environ.get("PAGESIM_MAX_SESSIONS", 256))
LOG_LEVEL = os.environ.get("PAGESIM_LOG_LEVEL", "INFO").upper()

DEFAULT_REFERENCES = "7 0 1 2 0 3 0 4 2 3 0 3 2"
DEFAULT_FRAMES = 3
