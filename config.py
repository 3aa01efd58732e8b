"""
Runtime configuration: environment (optionally from a .env file), then the
per-user config file, then defaults.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from typing import Dict, Mapping, Optional

import logger as app_logger
from utils import ENV_DATA_DIR, app_data_dir, load_env_file

_LOGGER = app_logger.get_logger()

CONFIG_FILENAME = "dirlauncher_config.json"
DEFAULT_MODEL = "gemini-2.0-flash-001"
DEFAULT_ADB = "adb"
DEFAULT_ADB_TIMEOUT = 30
_MIN_ADB_TIMEOUT = 5
_MAX_ADB_TIMEOUT = 300

ENV_API_KEY = "GEMINI_API_KEY"
ENV_MODEL = "DIRLAUNCHER_MODEL"
ENV_ADB = "DIRLAUNCHER_ADB"
ENV_SERIAL = "DIRLAUNCHER_SERIAL"
ENV_ADB_TIMEOUT = "DIRLAUNCHER_ADB_TIMEOUT"

# Config-file key for each environment variable.
_FILE_KEYS = {
    ENV_API_KEY: "api_key",
    ENV_MODEL: "model",
    ENV_ADB: "adb_path",
    ENV_SERIAL: "serial",
    ENV_DATA_DIR: "data_dir",
    ENV_ADB_TIMEOUT: "adb_timeout",
}


@dataclass(frozen=True)
class LauncherConfig:
    api_key: str = ""
    model: str = DEFAULT_MODEL
    adb_path: str = DEFAULT_ADB
    serial: str = ""
    data_dir: str = ""
    adb_timeout: int = DEFAULT_ADB_TIMEOUT

    def resolved_data_dir(self) -> str:
        return self.data_dir or app_data_dir()


def config_path() -> str:
    return os.path.join(app_data_dir(), CONFIG_FILENAME)


def _load_config_file(path: str) -> Dict[str, str]:
    if not os.path.exists(path):
        return {}
    try:
        with open(path, "r", encoding="utf-8") as fh:
            payload = json.load(fh)
    except (OSError, ValueError) as exc:
        _LOGGER.warning("Ignoring unreadable config file {}: {}", path, exc)
        return {}
    if not isinstance(payload, dict):
        return {}
    config: Dict[str, str] = {}
    for key, value in payload.items():
        if not isinstance(key, str):
            continue
        if isinstance(value, bool):
            continue
        if isinstance(value, (str, int, float)):
            config[key] = str(value).strip()
    return config


def _clamp_timeout(raw: str) -> int:
    try:
        value = int(float(raw))
    except (TypeError, ValueError):
        _LOGGER.warning("Invalid adb timeout {!r}; using {} seconds.", raw, DEFAULT_ADB_TIMEOUT)
        return DEFAULT_ADB_TIMEOUT
    if value < _MIN_ADB_TIMEOUT or value > _MAX_ADB_TIMEOUT:
        _LOGGER.warning("adb timeout {} out of range; clamping to safe bounds.", value)
    return max(_MIN_ADB_TIMEOUT, min(_MAX_ADB_TIMEOUT, value))


def load_config(
    env: Optional[Mapping[str, str]] = None,
    path: Optional[str] = None,
    use_dotenv: bool = True,
) -> LauncherConfig:
    if env is None:
        if use_dotenv:
            load_env_file()
        env = os.environ
    file_values = _load_config_file(path or config_path())

    def pick(env_name: str, default: str) -> str:
        value = str(env.get(env_name) or "").strip()
        if value:
            return value
        value = file_values.get(_FILE_KEYS[env_name], "")
        return value or default

    return LauncherConfig(
        api_key=pick(ENV_API_KEY, ""),
        model=pick(ENV_MODEL, DEFAULT_MODEL),
        adb_path=pick(ENV_ADB, DEFAULT_ADB),
        serial=pick(ENV_SERIAL, ""),
        data_dir=pick(ENV_DATA_DIR, ""),
        adb_timeout=_clamp_timeout(pick(ENV_ADB_TIMEOUT, str(DEFAULT_ADB_TIMEOUT))),
    )
