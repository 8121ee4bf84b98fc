"""Display-server detection and small system helpers."""

from __future__ import annotations

import os
import shutil
from enum import Enum
from typing import Mapping


class Environment(str, Enum):
    X11 = "X11"
    WAYLAND = "Wayland"
    UNKNOWN = "Unknown"


def detect_environment(environ: Mapping[str, str] | None = None) -> Environment:
    """Detect the display server from environment variables."""
    env = os.environ if environ is None else environ
    if env.get("WAYLAND_DISPLAY"):
        return Environment.WAYLAND
    if env.get("DISPLAY"):
        return Environment.X11
    return Environment.UNKNOWN


def utility_exists(name: str) -> bool:
    return shutil.which(name) is not None


def check_privileges() -> bool:
    """True when running as root."""
    return os.geteuid() == 0


def ensure_directory_exists(path: str) -> None:
    os.makedirs(path, mode=0o755, exist_ok=True)