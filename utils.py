import json
import os
import re
from typing import Any, Dict, Iterable, List, Optional, Tuple

from dotenv import find_dotenv, load_dotenv

APP_NAME = "DirLauncher"
ENV_DATA_DIR = "DIRLAUNCHER_DATA_DIR"

_PACKAGE_SEGMENT_SKIP = {"com", "org", "net", "io", "android", "app", "apps", "mobile", "google"}


def app_data_dir(app_name: str = APP_NAME) -> str:
    if os.name == "nt":
        base = os.getenv("LOCALAPPDATA") or os.getenv("APPDATA")
    else:
        base = os.getenv("XDG_CONFIG_HOME") or os.path.join(os.path.expanduser("~"), ".config")
    if not base:
        base = os.path.expanduser("~")
    return os.path.join(base, app_name)


def load_env_file(path: Optional[str] = None) -> bool:
    """Load a .env file into os.environ without overriding variables already set."""
    return load_dotenv(dotenv_path=path or find_dotenv(usecwd=True), override=False)


def is_blank(value: Optional[str]) -> bool:
    return not value or not value.strip()


def contains_ignore_case(haystack: str, needle: str) -> bool:
    return needle.casefold() in (haystack or "").casefold()


def extract_json_object(text: Optional[str]) -> Optional[str]:
    """Return the span from the first '{' to the last '}' inclusive, or None."""
    if not text:
        return None
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end == -1 or end < start:
        return None
    return text[start : end + 1]


def parse_string_map(raw: str) -> Tuple[Dict[str, str], List[str]]:
    """Decode a JSON object of string -> string.

    Returns the mapping plus a list of problems found. Undecodable or
    non-object input yields an empty mapping; individual entries that are not
    string -> string are dropped.
    """
    problems: List[str] = []
    try:
        payload: Any = json.loads(raw)
    except (TypeError, ValueError) as exc:
        return {}, [f"invalid JSON: {exc}"]
    if not isinstance(payload, dict):
        return {}, [f"expected a JSON object, got {type(payload).__name__}"]
    result: Dict[str, str] = {}
    for key, value in payload.items():
        if not isinstance(value, str):
            problems.append(f"non-string value for {key!r}")
            continue
        result[key] = value
    return result, problems


def unique_strings(values: Iterable[Any]) -> List[str]:
    seen = set()
    result: List[str] = []
    for value in values:
        if not isinstance(value, str):
            continue
        item = value.strip()
        if not item or item in seen:
            continue
        seen.add(item)
        result.append(item)
    return result


def label_from_package(identifier: str) -> str:
    """Best-effort display label when the device reports none."""
    parts = [part for part in re.split(r"[._]", identifier or "") if part]
    meaningful = [part for part in parts if part.casefold() not in _PACKAGE_SEGMENT_SKIP]
    chosen = (meaningful or parts or [identifier or ""])[-1]
    return chosen[:1].upper() + chosen[1:]
