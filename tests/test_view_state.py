from models import PINNED_CATEGORY
from view_state import DRAG_THRESHOLD, ViewState


def test_toggle_category() -> None:
    state = ViewState()
    assert state.toggle_category("Games") is True
    assert state.is_expanded("Games")
    assert state.toggle_category("Games") is False
    assert not state.is_expanded("Games")
    assert state.toggle_category("Games", forced=True) is True
    assert state.toggle_category("Games", forced=True) is True
    assert state.is_expanded("Games")


def test_search_text_expands_then_collapses() -> None:
    state = ViewState(expanded={"Tools"})
    state.set_search_text("ch", ["Games", "Pinned"])
    assert state.expanded == {"Games", "Pinned"}
    state.set_search_text("", ["Games", "Pinned"])
    assert state.expanded == set()


def test_hide_search_clears_query() -> None:
    state = ViewState()
    assert state.show_search() is True
    assert state.show_search() is False
    state.set_search_text("mail", ["Social & Communication"])
    assert state.hide_search() is True
    assert state.search_text == ""
    assert state.expanded == set()
    assert state.hide_search() is False


def test_drag_gestures() -> None:
    state = ViewState()
    assert state.handle_drag(-(DRAG_THRESHOLD + 1), loading=True) is False
    assert state.handle_drag(-DRAG_THRESHOLD, loading=False) is False
    assert state.handle_drag(-(DRAG_THRESHOLD + 1), loading=False) is True
    assert state.search_visible
    assert state.handle_drag(-100, loading=False) is False
    assert state.handle_drag(DRAG_THRESHOLD + 1, loading=False) is True
    assert not state.search_visible


def test_pinned_expands_on_first_pin_only() -> None:
    state = ViewState()
    assert state.track_pinned(1) is True
    assert state.is_expanded(PINNED_CATEGORY)
    state.toggle_category(PINNED_CATEGORY)
    assert state.track_pinned(2) is False
    assert not state.is_expanded(PINNED_CATEGORY)
    state.track_pinned(0)
    assert state.track_pinned(1) is True
    assert state.is_expanded(PINNED_CATEGORY)
