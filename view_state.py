from dataclasses import dataclass, field
from typing import Iterable, Optional, Set

from models import PINNED_CATEGORY
from utils import is_blank

# Horizontal drag distance (pixels) that reveals or dismisses the search bar.
DRAG_THRESHOLD = 30


@dataclass
class ViewState:
    """Transient presentation state; never persisted."""

    expanded: Set[str] = field(default_factory=set)
    search_text: str = ""
    search_visible: bool = False
    pinned_count: int = 0

    def is_expanded(self, category: str) -> bool:
        return category in self.expanded

    def toggle_category(self, category: str, forced: Optional[bool] = None) -> bool:
        if forced is None:
            forced = category not in self.expanded
        if forced:
            self.expanded.add(category)
        else:
            self.expanded.discard(category)
        return forced

    def set_search_text(self, text: str, displayed: Iterable[str]) -> None:
        """Expand every displayed category while a query is typed, collapse when cleared."""
        self.search_text = text
        self.expanded = set(displayed) if not is_blank(text) else set()

    def show_search(self) -> bool:
        if self.search_visible:
            return False
        self.search_visible = True
        return True

    def hide_search(self) -> bool:
        if not self.search_visible:
            return False
        self.search_visible = False
        if not is_blank(self.search_text):
            self.set_search_text("", ())
        self.search_text = ""
        return True

    def handle_drag(self, dx: float, loading: bool) -> bool:
        """Leftward drag shows the search bar, rightward hides and clears it."""
        if loading:
            return False
        if not self.search_visible and dx < -DRAG_THRESHOLD:
            return self.show_search()
        if self.search_visible and dx > DRAG_THRESHOLD:
            return self.hide_search()
        return False

    def track_pinned(self, count: int) -> bool:
        """Expand "Pinned" the moment it first gains an app."""
        newly_pinned = self.pinned_count == 0 and count > 0
        self.pinned_count = count
        if newly_pinned:
            self.expanded.add(PINNED_CATEGORY)
        return newly_pinned
