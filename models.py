from dataclasses import dataclass, field
from typing import Any, Dict, List, Tuple

OTHER_CATEGORY = "Other"
PINNED_CATEGORY = "Pinned"
# Suggested to the categorizer; labels stay free text and new ones may appear.
SUGGESTED_CATEGORIES: Tuple[str, ...] = (
    "Social & Communication",
    "Entertainment & Media",
    "Productivity & Tools",
    "Games",
    "Finance & Business",
    "Lifestyle & Shopping",
    "System & Utilities",
    OTHER_CATEGORY,
)

FETCH_CACHE = "CACHE"
FETCH_API = "API"

CategoryMap = Dict[str, str]


@dataclass(frozen=True)
class AppRecord:
    display_name: str
    identifier: str
    # Opaque platform image handle; None when the platform supplies none.
    icon: Any = field(default=None, compare=False, repr=False)


DisplayModel = Dict[str, List[AppRecord]]


@dataclass(frozen=True)
class LoadResult:
    apps: List[AppRecord]
    grouped: DisplayModel
    fetch_type: str = FETCH_CACHE
