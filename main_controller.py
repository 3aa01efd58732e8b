import queue
import threading
from typing import Optional, Tuple

import tkinter as tk
from tkinter import messagebox

import logger as app_logger
from categorizer import RemoteCategorizer
from config import LauncherConfig, load_config
from launcher_model import LauncherModel
from main_view import MainView
from models import FETCH_API, PINNED_CATEGORY, DisplayModel, LoadResult
from scanner import AdbRunner, AppScanner
from store import CategoryStore, PinStore, PreferenceStore, prefs_path
from view_state import ViewState

_LOGGER = app_logger.get_logger()


def build_model(config: LauncherConfig) -> LauncherModel:
    prefs = PreferenceStore(prefs_path(config.resolved_data_dir()))
    runner = AdbRunner(config.adb_path, serial=config.serial, timeout=config.adb_timeout)
    return LauncherModel(
        scanner=AppScanner(runner),
        category_store=CategoryStore(prefs),
        pin_store=PinStore(prefs),
        categorizer=RemoteCategorizer(config.model, api_key=config.api_key),
    )


class MainController:
    # Typing delay before the search applies.
    SEARCH_DEBOUNCE_MS = 150
    POLL_INTERVAL_MS = 100

    def __init__(self, root: tk.Tk, model: Optional[LauncherModel] = None) -> None:
        self.root = root
        self.root.title("DirLauncher")
        self.model = model or build_model(load_config())
        self.state = ViewState()
        self.display: DisplayModel = {}
        self._bg_queue: queue.Queue = queue.Queue()
        self._bg_poll_job: Optional[str] = None
        self._search_job: Optional[str] = None
        self._load_in_progress = False
        self._load_job_id = 0

        # Default window size and minimum resize bounds.
        self.root.geometry("420x720")
        self.root.minsize(320, 400)

        self.view = MainView(
            self.root,
            callbacks={
                "on_reload": self.trigger_load,
                "on_reset_categories": self.reset_categories,
                "on_search_change": self.on_search_change,
                "on_show_search": self.show_search,
                "on_hide_search": self.hide_search,
                "on_drag": self.on_drag,
                "on_category_click": self.on_category_click,
                "on_app_launch": self.launch_app,
                "on_app_pin": self.toggle_pin,
                "on_close": self.on_close,
            },
        )

        self.model.categorized.subscribe(lambda _value: self.refresh_display())
        self.model.pinned.subscribe(lambda _value: self.refresh_display())
        self.model.is_loading.subscribe(lambda _value: self._update_loading_view())
        self.model.fetch_type.subscribe(lambda _value: self._update_loading_view())

    def trigger_load(self) -> None:
        if self._load_in_progress:
            return
        self._load_in_progress = True
        self._load_job_id += 1
        job_id = self._load_job_id
        self.view.set_reload_enabled(False)
        self.model.begin_load()
        self._update_loading_view()
        thread = threading.Thread(target=self._load_worker, args=(job_id,), daemon=True)
        thread.start()
        self._ensure_polling()

    def _load_worker(self, job_id: int) -> None:
        try:
            result = self.model.run_load(
                on_fetch_type=lambda kind: self._bg_queue.put(("fetch_type", job_id, kind))
            )
            self._bg_queue.put(("load_complete", job_id, result))
        except Exception as exc:  # pragma: no cover - reported to the UI
            _LOGGER.exception("App list load failed")
            self._bg_queue.put(("load_error", job_id, exc))

    def _ensure_polling(self) -> None:
        if self._bg_poll_job is None:
            self._bg_poll_job = self.root.after(self.POLL_INTERVAL_MS, self._poll_bg_queue)

    def _poll_bg_queue(self) -> None:
        while True:
            try:
                event = self._bg_queue.get_nowait()
            except queue.Empty:
                break
            self._handle_bg_event(event)
        if self._load_in_progress:
            self._bg_poll_job = self.root.after(self.POLL_INTERVAL_MS, self._poll_bg_queue)
        else:
            self._bg_poll_job = None

    def _handle_bg_event(self, event: Tuple) -> None:
        kind = event[0]
        if kind == "fetch_type":
            _kind, job_id, fetch_type = event
            if job_id != self._load_job_id:
                return
            self.model.fetch_type.set(fetch_type)
            return
        if kind == "load_complete":
            _kind, job_id, result = event
            if job_id != self._load_job_id:
                return
            self._load_in_progress = False
            self._apply_load_result(result)
            return
        if kind == "load_error":
            _kind, job_id, exc = event
            if job_id != self._load_job_id:
                return
            self._load_in_progress = False
            self.model.fail_load()
            self.view.set_reload_enabled(True)
            self._update_loading_view()
            self.view.set_status(f"Load failed: {exc}")
            messagebox.showwarning("Could not load apps", str(exc), parent=self.root)
            return

    def _apply_load_result(self, result: LoadResult) -> None:
        self.model.publish(result)
        self.view.set_reload_enabled(True)
        self._update_loading_view()
        self.refresh_display()

    def _update_loading_view(self) -> None:
        loading = self.model.is_loading.value
        self.view.set_progress_running(loading)
        if loading:
            text = "Categorizing Apps..." if self.model.fetch_type.value == FETCH_API else "Loading Apps..."
            self.view.set_message(text)
            self.view.set_status(text)
        else:
            self.view.set_message("")

    def compute_display(self) -> DisplayModel:
        return self.model.display(self.state.search_text, self.state.search_visible)

    def refresh_display(self) -> None:
        if self.model.is_loading.value:
            return
        self.display = self.compute_display()
        self.state.track_pinned(len(self.display.get(PINNED_CATEGORY, [])))
        self.view.populate_tree(self.display, self.state.expanded)
        if not self.display and self.state.search_visible:
            self.view.set_message("No apps found")
        else:
            self.view.set_message("")
        total = sum(len(apps) for apps in self.display.values())
        self.view.set_status(f"{total} apps in {len(self.display)} categories")

    def on_search_change(self, value: str) -> None:
        if self._search_job is not None:
            self.root.after_cancel(self._search_job)
        self._search_job = self.root.after(self.SEARCH_DEBOUNCE_MS, lambda: self.apply_search(value))

    def apply_search(self, value: str) -> None:
        self._search_job = None
        self.state.search_text = value
        self.state.set_search_text(value, self.compute_display().keys())
        self.refresh_display()

    def show_search(self) -> None:
        if self.model.is_loading.value:
            return
        if self.state.show_search():
            self.view.set_search_visible(True)
            self.refresh_display()

    def hide_search(self) -> None:
        if self.state.hide_search():
            self._sync_search_widgets()

    def on_drag(self, dx: float) -> None:
        if self.state.handle_drag(dx, loading=self.model.is_loading.value):
            self._sync_search_widgets()

    def _sync_search_widgets(self) -> None:
        if self._search_job is not None:
            self.root.after_cancel(self._search_job)
            self._search_job = None
        self.view.set_search_visible(self.state.search_visible)
        if not self.state.search_visible:
            self.view.set_search("")
        self.refresh_display()

    def on_category_click(self, category: str, forced: Optional[bool] = None) -> None:
        self.state.toggle_category(category, forced)
        self.view.populate_tree(self.display, self.state.expanded)

    def launch_app(self, identifier: str) -> None:
        thread = threading.Thread(target=self._launch_worker, args=(identifier,), daemon=True)
        thread.start()

    def _launch_worker(self, identifier: str) -> None:
        try:
            self.model.launch(identifier)
        except Exception:  # pragma: no cover - launch is best effort
            _LOGGER.exception("Launching {} failed", identifier)

    def toggle_pin(self, identifier: str) -> None:
        was_pinned = self.model.is_pinned(identifier)
        self.model.toggle_pin(identifier)
        self.view.set_status("App unpinned" if was_pinned else "App pinned")

    def reset_categories(self) -> None:
        if self._load_in_progress:
            return
        confirm = messagebox.askyesno(
            "Reset categories",
            "Forget the cached categories and ask the model again?",
            parent=self.root,
        )
        if not confirm:
            return
        self.model.reset_categories()
        self.trigger_load()

    def on_close(self) -> None:
        self.root.destroy()


def main() -> None:
    config = load_config()
    app_logger.configure(log_path=app_logger.log_path_for(config.resolved_data_dir()), force=True)
    root = tk.Tk()
    controller = MainController(root, model=build_model(config))
    controller.trigger_load()
    root.mainloop()


if __name__ == "__main__":
    main()
