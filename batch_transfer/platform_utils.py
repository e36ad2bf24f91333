"""
Cross-platform utilities for Batch Transfer.

Centralises all OS-detection logic so every other module can import
a single canonical set of helpers rather than scattering ``sys.platform``
checks throughout the codebase.
"""

from __future__ import annotations

import logging
import os
import subprocess
import sys
from pathlib import Path

logger = logging.getLogger(__name__)

# ---- platform flags ----------------------------------------------------

IS_WINDOWS: bool = sys.platform == "win32"
IS_MACOS: bool = sys.platform == "darwin"
IS_LINUX: bool = sys.platform.startswith("linux")

_APP_DIR_NAME = "BatchTransfer"

# ---- directories -------------------------------------------------------


def get_config_dir() -> Path:
    """
    Return the application config directory.

    - Windows : ``%APPDATA%\\BatchTransfer``
    - macOS   : ``~/Library/Application Support/BatchTransfer``
    - Linux   : ``$XDG_CONFIG_HOME/BatchTransfer`` (default ``~/.config``)
    """
    if IS_WINDOWS:
        base = os.environ.get("APPDATA", str(Path.home()))
    elif IS_MACOS:
        base = str(Path.home() / "Library" / "Application Support")
    else:
        base = os.environ.get("XDG_CONFIG_HOME", str(Path.home() / ".config"))
    return Path(base) / _APP_DIR_NAME


def get_default_log_dir() -> Path:
    """Return the default log folder (inside the config directory)."""
    return get_config_dir() / "logs"


# ---- alerts -------------------------------------------------------------


def play_error_sound() -> None:
    """Play the OS error/alert sound.  Silent on unsupported platforms."""
    try:
        if IS_WINDOWS:
            import winsound  # type: ignore[import-untyped]
            winsound.MessageBeep(winsound.MB_ICONHAND)
        elif IS_MACOS:
            # Basso is the standard macOS alert sound
            subprocess.Popen(
                ["afplay", "/System/Library/Sounds/Basso.aiff"],
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
            )
        # Linux: no universal system sound — skip
    except Exception:
        logger.debug("Could not play error sound.", exc_info=True)
