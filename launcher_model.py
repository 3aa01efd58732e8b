"""
Published launcher state and the app-list load pipeline.

run_load() is safe to call from a worker thread; everything that mutates an
Observable is meant for the UI thread only.
"""

from __future__ import annotations

from typing import Callable, FrozenSet, Generic, List, Optional, TypeVar

import logger as app_logger
from categorizer import RemoteCategorizer
from grouping import compute_display, group
from models import FETCH_API, FETCH_CACHE, AppRecord, DisplayModel, LoadResult
from scanner import AppScanner
from store import CategoryStore, PinStore, parse_category_map

_LOGGER = app_logger.get_logger()

T = TypeVar("T")


class Observable(Generic[T]):
    """A value replaced wholesale; subscribers hear about every change."""

    def __init__(self, value: T) -> None:
        self._value = value
        self._subscribers: List[Callable[[T], None]] = []

    @property
    def value(self) -> T:
        return self._value

    def set(self, value: T) -> None:
        if value == self._value:
            return
        self._value = value
        for callback in list(self._subscribers):
            callback(value)

    def subscribe(self, callback: Callable[[T], None]) -> Callable[[], None]:
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe


class LauncherModel:
    def __init__(
        self,
        scanner: AppScanner,
        category_store: CategoryStore,
        pin_store: PinStore,
        categorizer: RemoteCategorizer,
    ) -> None:
        self.scanner = scanner
        self.category_store = category_store
        self.pin_store = pin_store
        self.categorizer = categorizer
        self.categorized: Observable[DisplayModel] = Observable({})
        self.all_apps: Observable[List[AppRecord]] = Observable([])
        self.is_loading: Observable[bool] = Observable(False)
        self.fetch_type: Observable[str] = Observable(FETCH_CACHE)
        self.pinned: Observable[FrozenSet[str]] = Observable(pin_store.load())

    def run_load(self, on_fetch_type: Optional[Callable[[str], None]] = None) -> LoadResult:
        notify = on_fetch_type or (lambda _kind: None)
        fetch_type = FETCH_CACHE
        notify(fetch_type)
        apps = self.scanner.scan()
        raw = self.category_store.load_raw()
        if raw is None:
            if apps:
                fetch_type = FETCH_API
                notify(fetch_type)
                _LOGGER.info("No category cache; categorizing {} apps remotely.", len(apps))
                raw = self.categorizer.categorize(apps)
                if not self.category_store.save(raw):
                    _LOGGER.warning("Category cache was not persisted; the next load will ask again.")
            else:
                _LOGGER.info("No apps found; skipping remote categorization.")
                raw = "{}"
        category_map = parse_category_map(raw)
        return LoadResult(apps=apps, grouped=group(apps, category_map), fetch_type=fetch_type)

    def begin_load(self) -> None:
        self.is_loading.set(True)

    def publish(self, result: LoadResult) -> None:
        self.fetch_type.set(result.fetch_type)
        self.all_apps.set(list(result.apps))
        self.categorized.set(dict(result.grouped))
        self.is_loading.set(False)

    def fail_load(self) -> None:
        self.is_loading.set(False)

    def display(self, query: str = "", search_active: bool = False) -> DisplayModel:
        return compute_display(
            self.all_apps.value,
            self.categorized.value,
            self.pinned.value,
            query,
            search_active,
        )

    def toggle_pin(self, identifier: str) -> FrozenSet[str]:
        updated = self.pin_store.toggle(identifier)
        self.pinned.set(updated)
        return updated

    def is_pinned(self, identifier: str) -> bool:
        return identifier in self.pinned.value

    def reset_categories(self) -> bool:
        return self.category_store.clear()

    def launch(self, identifier: str) -> bool:
        return self.scanner.launch(identifier)
