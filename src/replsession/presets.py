"""Launch presets for known REPL consoles."""

from __future__ import annotations

import os
import platform
import shutil

from replsession.config import CHROME_BANNER, SessionConfig
from replsession.errors import LaunchError

__all__ = ["CHROME_BANNER", "chrome_config", "chrome_repl_command", "detect_chrome"]

_MACOS_CHROME = "/Applications/Google Chrome.app/Contents/MacOS/Google Chrome"

_LINUX_CHROME_NAMES = (
    "google-chrome",
    "google-chrome-stable",
    "chromium",
    "chromium-browser",
)


def detect_chrome() -> str | None:
    """Locate a Chrome binary, honouring ``REPLSESSION_CHROME`` first."""
    override = os.environ.get("REPLSESSION_CHROME")
    if override:
        return override

    if platform.system() == "Darwin" and os.path.exists(_MACOS_CHROME):
        return _MACOS_CHROME

    for name in _LINUX_CHROME_NAMES:
        path = shutil.which(name)
        if path:
            return path
    return None


def chrome_repl_command(url: str, binary: str | None = None) -> tuple[str, list[str]]:
    """Return ``(command, args)`` for a headless Chrome JavaScript REPL on ``url``."""
    command = binary or detect_chrome()
    if command is None:
        raise LaunchError(
            "Could not find Chrome. Install it or set REPLSESSION_CHROME."
        )
    args = ["--headless", "--disable-gpu", "--repl", url]
    return command, args


def chrome_config(base: SessionConfig | None = None) -> SessionConfig:
    """Session settings for the Chrome REPL (banner and ``quit``)."""
    base = base or SessionConfig()
    return base.model_copy(update={"banner": CHROME_BANNER, "quit_command": "quit"})
