import json
import os
import tempfile
from typing import Dict, FrozenSet, Iterable, Optional

import logger as app_logger
from models import CategoryMap
from utils import parse_string_map, unique_strings

_LOGGER = app_logger.get_logger()

PREFS_FILENAME = "AppCategories.json"
CATEGORIES_KEY = "categories"
PINNED_KEY = "PinnedApps"


def prefs_path(data_dir: str) -> str:
    return os.path.join(data_dir, PREFS_FILENAME)


class PreferenceStore:
    """Process-local key-value store persisted as one JSON object.

    Every write rewrites the whole file through a temp file and os.replace.
    """

    def __init__(self, path: str) -> None:
        self.path = path

    def _read(self) -> Dict[str, object]:
        if not os.path.exists(self.path):
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as fh:
                payload = json.load(fh)
        except (OSError, ValueError) as exc:
            _LOGGER.warning("Preferences at {} unreadable, starting empty: {}", self.path, exc)
            return {}
        if not isinstance(payload, dict):
            _LOGGER.warning("Preferences at {} are not a JSON object, starting empty.", self.path)
            return {}
        return payload

    def _write(self, payload: Dict[str, object]) -> bool:
        directory = os.path.dirname(self.path) or "."
        tmp_path = ""
        try:
            os.makedirs(directory, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(prefix=".prefs-", suffix=".tmp", dir=directory)
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(payload, fh, indent=2)
            os.replace(tmp_path, self.path)
            return True
        except OSError as exc:
            _LOGGER.warning("Could not write preferences to {}: {}", self.path, exc)
            if tmp_path and os.path.exists(tmp_path):
                try:
                    os.remove(tmp_path)
                except OSError:
                    pass
            return False

    def get_string(self, key: str) -> Optional[str]:
        value = self._read().get(key)
        if value is None:
            return None
        if not isinstance(value, str):
            _LOGGER.warning("Preference {} is not a string; ignoring it.", key)
            return None
        return value

    def put_string(self, key: str, value: str) -> bool:
        payload = self._read()
        payload[key] = value
        return self._write(payload)

    def get_string_set(self, key: str) -> FrozenSet[str]:
        value = self._read().get(key)
        if not isinstance(value, list):
            return frozenset()
        return frozenset(unique_strings(value))

    def put_string_set(self, key: str, values: Iterable[str]) -> bool:
        payload = self._read()
        payload[key] = sorted(set(values))
        return self._write(payload)

    def remove(self, key: str) -> bool:
        payload = self._read()
        if key not in payload:
            return True
        del payload[key]
        return self._write(payload)


class CategoryStore:
    """Cached identifier -> category label mapping, stored as raw JSON text."""

    def __init__(self, prefs: PreferenceStore) -> None:
        self.prefs = prefs

    def load_raw(self) -> Optional[str]:
        return self.prefs.get_string(CATEGORIES_KEY)

    def load(self) -> Optional[CategoryMap]:
        raw = self.load_raw()
        if raw is None:
            return None
        return parse_category_map(raw)

    def save(self, raw_json_text: str) -> bool:
        return self.prefs.put_string(CATEGORIES_KEY, raw_json_text)

    def clear(self) -> bool:
        return self.prefs.remove(CATEGORIES_KEY)


def parse_category_map(raw: str) -> CategoryMap:
    mapping, problems = parse_string_map(raw)
    for problem in problems:
        _LOGGER.warning("Category cache: {}", problem)
    return mapping


class PinStore:
    def __init__(self, prefs: PreferenceStore) -> None:
        self.prefs = prefs
        self._pinned: FrozenSet[str] = prefs.get_string_set(PINNED_KEY)

    @property
    def pinned(self) -> FrozenSet[str]:
        return self._pinned

    def load(self) -> FrozenSet[str]:
        self._pinned = self.prefs.get_string_set(PINNED_KEY)
        return self._pinned

    def is_pinned(self, identifier: str) -> bool:
        return identifier in self._pinned

    def toggle(self, identifier: str) -> FrozenSet[str]:
        if identifier in self._pinned:
            updated = self._pinned - {identifier}
        else:
            updated = self._pinned | {identifier}
        self._pinned = frozenset(updated)
        self.prefs.put_string_set(PINNED_KEY, self._pinned)
        return self._pinned
