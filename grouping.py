from typing import AbstractSet, Dict, Iterable, List, Mapping, Optional, Sequence

from models import OTHER_CATEGORY, PINNED_CATEGORY, AppRecord, DisplayModel
from utils import contains_ignore_case, is_blank


def group(apps: Iterable[AppRecord], category_map: Mapping[str, str]) -> DisplayModel:
    """Bucket apps by category label, labels sorted, app order preserved."""
    buckets: Dict[str, List[AppRecord]] = {}
    for app in apps:
        label = category_map.get(app.identifier, OTHER_CATEGORY)
        buckets.setdefault(label, []).append(app)
    return {label: buckets[label] for label in sorted(buckets)}


def is_searching(query: Optional[str], search_active: bool) -> bool:
    return bool(search_active) and not is_blank(query)


def compute_display(
    apps: Sequence[AppRecord],
    grouped: Mapping[str, Sequence[AppRecord]],
    pinned: AbstractSet[str],
    query: Optional[str] = "",
    search_active: bool = False,
) -> DisplayModel:
    searching = is_searching(query, search_active)
    needle = query or ""
    result: DisplayModel = {}

    pinned_apps = [app for app in apps if app.identifier in pinned]
    if searching and not contains_ignore_case(PINNED_CATEGORY, needle):
        pinned_apps = [app for app in pinned_apps if contains_ignore_case(app.display_name, needle)]
    if pinned_apps:
        result[PINNED_CATEGORY] = pinned_apps

    for label, members in grouped.items():
        remaining = [app for app in members if app.identifier not in pinned]
        if searching and not contains_ignore_case(label, needle):
            remaining = [app for app in remaining if contains_ignore_case(app.display_name, needle)]
        if not remaining:
            continue
        if label == PINNED_CATEGORY and PINNED_CATEGORY in result:
            # A model-invented "Pinned" category merges behind the real pins.
            result[label] = result[label] + remaining
            continue
        result[label] = remaining
    return result
