"""
Cross-platform utilities for CDN Cert Sync.

Centralises the OS-detection logic needed to place the log file in a
platform-appropriate directory.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

# ---- platform flags ----------------------------------------------------

IS_WINDOWS: bool = sys.platform == "win32"
IS_MACOS: bool = sys.platform == "darwin"
IS_LINUX: bool = sys.platform.startswith("linux")

_APP_DIR_NAME = "CdnCertSync"

# ---- directories -------------------------------------------------------


def get_config_dir() -> Path:
    """
    Return the application data directory, created if needed.

    - Windows : ``%APPDATA%\\CdnCertSync``
    - macOS   : ``~/Library/Application Support/CdnCertSync``
    - Linux   : ``$XDG_CONFIG_HOME/CdnCertSync`` (default ``~/.config``)
    """
    if IS_WINDOWS:
        base = os.environ.get("APPDATA", str(Path.home()))
    elif IS_MACOS:
        base = str(Path.home() / "Library" / "Application Support")
    else:
        base = os.environ.get("XDG_CONFIG_HOME", str(Path.home() / ".config"))

    config_dir = Path(base) / _APP_DIR_NAME
    config_dir.mkdir(parents=True, exist_ok=True)
    return config_dir


def get_log_path() -> Path:
    """Return the default path of the log file (inside the data directory)."""
    return get_config_dir() / "cdn_cert_sync.log"
