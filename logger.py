"""
Logging setup for the launcher.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Optional

from loguru import logger as _logger

from utils import ENV_DATA_DIR, app_data_dir, load_env_file

ENV_LOG_LEVEL = "DIRLAUNCHER_LOG_LEVEL"
LOG_FILENAME = "launcher.log"

_LOG_INITIALISED = False


def log_path_for(data_dir: str) -> Path:
    return Path(data_dir) / "logs" / LOG_FILENAME


def default_log_path() -> Path:
    return log_path_for(os.getenv(ENV_DATA_DIR) or app_data_dir())


def resolve_level(level: Optional[str] = None, env_file: Optional[str] = None) -> str:
    """Explicit level, else DIRLAUNCHER_LOG_LEVEL (a .env file counts), else INFO."""
    if level:
        return level.upper()
    load_env_file(env_file)
    return (os.getenv(ENV_LOG_LEVEL) or "INFO").upper()


def configure(log_path: Optional[Path] = None, level: Optional[str] = None, force: bool = False) -> None:
    """
    Configure loguru for the application.

    Runs once per process so modules may call get_logger() at import time.
    force=True replaces the sinks, e.g. once the data dir from the config
    file is known.
    """
    global _LOG_INITIALISED
    if _LOG_INITIALISED and not force:
        return
    console_level = resolve_level(level)
    target = log_path or default_log_path()

    _logger.remove()
    if sys.stderr is not None:
        _logger.add(sys.stderr, level=console_level, enqueue=True)
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        _logger.add(
            target,
            level="DEBUG",
            rotation="10 MB",
            retention=5,
            encoding="utf-8",
            enqueue=True,
            backtrace=True,
            diagnose=False,
        )
    except OSError as exc:
        _logger.warning("File logging disabled, cannot write to {}: {}", target, exc)
    _LOG_INITIALISED = True


def get_logger():
    """Return the shared logger instance."""
    configure()
    return _logger
