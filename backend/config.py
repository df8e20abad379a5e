"""Application-wide configuration constants."""

import os
import platform
from pathlib import Path

# --- Identity ---
APP_NAME = "FileShare"
DEVICE_NAME = os.environ.get("FILESHARE_DEVICE_NAME") or platform.node()

# --- Networking ---
API_HOST = "0.0.0.0"
API_PORT = int(os.environ.get("PORT", 5050))
SERVICE_TYPE = "_fileshare._tcp.local."
RESOLVE_TIMEOUT_MS = 3000  # zeroconf service info lookup

# --- Transfer ---
TRANSFER_TIMEOUT = 60.0  # seconds for a single outbound upload

# --- Storage ---
DOWNLOADS_DIR = os.environ.get("FILESHARE_DOWNLOADS_DIR") or str(
    Path.home() / "Downloads"
)
