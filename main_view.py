import tkinter as tk
from tkinter import ttk
from typing import Callable, Dict, List, Mapping, Optional, Sequence, Set, Tuple

from models import PINNED_CATEGORY, AppRecord
from view_state import DRAG_THRESHOLD

PIN_GLYPH = "⚑"


class MainView:
    def __init__(self, root: tk.Tk, callbacks: dict) -> None:
        self.root = root
        self.callbacks = callbacks
        # row id -> ("category", label) or ("app", identifier)
        self._row_map: Dict[str, Tuple[str, str]] = {}
        self._drag_origin_x: Optional[int] = None
        self._suppress_open_events = False
        self._ignore_next_release = False

        self._build_menubar()

        main = ttk.Frame(root, padding=10)
        main.grid(row=0, column=0, sticky="nsew")
        root.rowconfigure(0, weight=1)
        root.columnconfigure(0, weight=1)
        main.columnconfigure(0, weight=1)

        self.search_frame = ttk.Frame(main)
        self.search_frame.grid(row=0, column=0, sticky="ew", pady=(0, 10))
        self.search_frame.columnconfigure(0, weight=1)
        self.search_var = tk.StringVar()
        self.search_var.trace_add("write", lambda *_: self._dispatch("on_search_change")(self.search_var.get()))
        self.search_entry = ttk.Entry(self.search_frame, textvariable=self.search_var)
        self.search_entry.grid(row=0, column=0, sticky="ew")
        self.clear_search_btn = ttk.Button(self.search_frame, text="✕", width=3, command=lambda: self.set_search(""))
        self.clear_search_btn.grid(row=0, column=1, padx=(6, 0))
        self.search_frame.grid_remove()

        list_frame = ttk.Frame(main)
        list_frame.grid(row=1, column=0, sticky="nsew")
        main.rowconfigure(1, weight=1)
        list_frame.rowconfigure(0, weight=1)
        list_frame.columnconfigure(0, weight=1)

        self.tree = ttk.Treeview(list_frame, show="tree", selectmode="browse")
        scrollbar = ttk.Scrollbar(list_frame, orient=tk.VERTICAL, command=self.tree.yview)
        self.tree.configure(yscrollcommand=scrollbar.set)
        self.tree.grid(row=0, column=0, sticky="nsew")
        scrollbar.grid(row=0, column=1, sticky="ns")
        self.tree.tag_configure("category", font=("TkDefaultFont", 11, "bold"))

        self.message_var = tk.StringVar(value="")
        self.message = ttk.Label(list_frame, textvariable=self.message_var, anchor=tk.CENTER, font=("TkDefaultFont", 14))
        self.message.grid(row=0, column=0, sticky="nsew")
        self.message.grid_remove()

        self.status_var = tk.StringVar(value="")
        status_frame = ttk.Frame(main)
        status_frame.grid(row=2, column=0, sticky="ew", pady=(8, 0))
        status_frame.columnconfigure(0, weight=1)
        self.status = ttk.Label(status_frame, textvariable=self.status_var, anchor=tk.W)
        self.status.grid(row=0, column=0, sticky="ew")
        self.progress = ttk.Progressbar(status_frame, mode="indeterminate", length=120)
        self.progress.grid(row=1, column=0, sticky="ew", pady=(4, 0))
        self.progress.grid_remove()

        self.tree.bind("<ButtonPress-1>", self._on_press, add=True)
        self.tree.bind("<B1-Motion>", self._on_drag, add=True)
        self.tree.bind("<ButtonRelease-1>", self._on_release, add=True)
        self.tree.bind("<Double-1>", self._on_double_click, add=True)
        self.tree.bind("<Return>", self._on_return, add=True)
        self.tree.bind("<Button-3>", self._on_right_click, add=True)
        self.tree.bind("<KeyPress-p>", self._on_pin_key, add=True)
        self.tree.bind("<<TreeviewOpen>>", lambda _e: self._on_open_close(True), add=True)
        self.tree.bind("<<TreeviewClose>>", lambda _e: self._on_open_close(False), add=True)
        self.root.bind("<Control-f>", lambda _e: self._dispatch("on_show_search")(), add=True)
        self.root.bind("<Escape>", lambda _e: self._dispatch("on_hide_search")(), add=True)
        self.root.protocol("WM_DELETE_WINDOW", self._dispatch("on_close"))

    def _dispatch(self, name: str) -> Callable:
        return self.callbacks.get(name, lambda *args, **kwargs: None)

    def _build_menubar(self) -> None:
        menubar = tk.Menu(self.root)
        file_menu = tk.Menu(menubar, tearoff=0)
        self.reload_label = "Reload Apps"
        self.reset_label = "Reset Categories"
        file_menu.add_command(label=self.reload_label, command=self._dispatch("on_reload"))
        file_menu.add_command(label=self.reset_label, command=self._dispatch("on_reset_categories"))
        file_menu.add_separator()
        file_menu.add_command(label="Exit", command=self._dispatch("on_close"))
        menubar.add_cascade(label="File", menu=file_menu)
        view_menu = tk.Menu(menubar, tearoff=0)
        view_menu.add_command(label="Search", accelerator="Ctrl+F", command=self._dispatch("on_show_search"))
        view_menu.add_command(label="Hide Search", accelerator="Esc", command=self._dispatch("on_hide_search"))
        menubar.add_cascade(label="View", menu=view_menu)
        self.root.config(menu=menubar)
        self.file_menu = file_menu

    def set_status(self, text: str) -> None:
        self.status_var.set(text)

    def set_progress_running(self, running: bool) -> None:
        if running:
            if not self.progress.winfo_ismapped():
                self.progress.grid()
            self.progress.start(10)
        else:
            self.progress.stop()
            if self.progress.winfo_ismapped():
                self.progress.grid_remove()

    def set_reload_enabled(self, enabled: bool) -> None:
        state = "normal" if enabled else "disabled"
        self.file_menu.entryconfig(self.reload_label, state=state)
        self.file_menu.entryconfig(self.reset_label, state=state)

    def set_message(self, text: str) -> None:
        self.message_var.set(text)
        if text:
            self.message.grid()
            self.message.lift()
        else:
            self.message.grid_remove()

    def set_search_visible(self, visible: bool) -> None:
        if visible:
            self.search_frame.grid()
            self.search_entry.focus_set()
        else:
            self.search_frame.grid_remove()
            self.tree.focus_set()

    def set_search(self, value: str) -> None:
        if self.search_var.get() != value:
            self.search_var.set(value)

    def populate_tree(self, display: Mapping[str, Sequence[AppRecord]], expanded: Set[str]) -> None:
        self._suppress_open_events = True
        top = self.tree.yview()[0]
        try:
            self.tree.delete(*self.tree.get_children(""))
            self._row_map.clear()
            for index, (label, apps) in enumerate(display.items()):
                if not apps:
                    continue
                text = f"{PIN_GLYPH}  {label}" if label == PINNED_CATEGORY else label
                parent = f"cat:{index}"
                self.tree.insert("", tk.END, iid=parent, text=text, open=label in expanded, tags=("category",))
                self._row_map[parent] = ("category", label)
                for position, app in enumerate(apps):
                    row_id = f"{parent}:{position}"
                    self.tree.insert(parent, tk.END, iid=row_id, text=app.display_name, tags=("app",))
                    self._row_map[row_id] = ("app", app.identifier)
            self.tree.yview_moveto(top)
        finally:
            self._suppress_open_events = False

    def row_kind(self, row_id: str) -> Optional[Tuple[str, str]]:
        return self._row_map.get(row_id)

    def category_rows(self) -> List[str]:
        return [row for row, (kind, _value) in self._row_map.items() if kind == "category"]

    def _on_press(self, event) -> None:
        self._drag_origin_x = event.x

    def _on_drag(self, event) -> None:
        if self._drag_origin_x is None:
            return
        dx = event.x - self._drag_origin_x
        if abs(dx) > DRAG_THRESHOLD:
            self._drag_origin_x = event.x
            self._dispatch("on_drag")(dx)

    def _on_release(self, event) -> None:
        moved = self._drag_origin_x is not None and abs(event.x - self._drag_origin_x) > 4
        self._drag_origin_x = None
        if self._ignore_next_release:
            self._ignore_next_release = False
            return
        if moved:
            return
        row_id = self.tree.identify_row(event.y)
        entry = self._row_map.get(row_id)
        if not entry or entry[0] != "category":
            return
        # Indicator clicks arrive as <<TreeviewOpen>>/<<TreeviewClose>>.
        if "indicator" in str(self.tree.identify_element(event.x, event.y)):
            return
        self._dispatch("on_category_click")(entry[1], None)

    def _on_open_close(self, opened: bool) -> None:
        if self._suppress_open_events:
            return
        entry = self._row_map.get(self.tree.focus())
        if entry and entry[0] == "category":
            self._dispatch("on_category_click")(entry[1], opened)

    def _on_double_click(self, event) -> str:
        self._ignore_next_release = True
        entry = self._row_map.get(self.tree.identify_row(event.y))
        if entry and entry[0] == "app":
            self._dispatch("on_app_launch")(entry[1])
        return "break"

    def _on_return(self, _event) -> None:
        entry = self._row_map.get(self.tree.focus())
        if not entry:
            return
        if entry[0] == "app":
            self._dispatch("on_app_launch")(entry[1])
        else:
            self._dispatch("on_category_click")(entry[1], None)

    def _on_right_click(self, event) -> None:
        row_id = self.tree.identify_row(event.y)
        entry = self._row_map.get(row_id)
        if entry and entry[0] == "app":
            self.tree.selection_set(row_id)
            self._dispatch("on_app_pin")(entry[1])

    def _on_pin_key(self, _event) -> None:
        entry = self._row_map.get(self.tree.focus())
        if entry and entry[0] == "app":
            self._dispatch("on_app_pin")(entry[1])
