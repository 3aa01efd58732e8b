from launcher_model import LauncherModel, Observable
from models import FETCH_API, FETCH_CACHE, OTHER_CATEGORY, PINNED_CATEGORY, AppRecord
from store import CategoryStore, PinStore, PreferenceStore, prefs_path

APPS = [AppRecord("Chess", "com.chess"), AppRecord("Mail", "com.mail")]


class _FakeScanner:
    def __init__(self, apps) -> None:
        self.apps = list(apps)
        self.launched = []

    def scan(self):
        return list(self.apps)

    def launch(self, identifier):
        self.launched.append(identifier)
        return True


class _FakeCategorizer:
    def __init__(self, reply='{"com.chess": "Games", "com.mail": "Social & Communication"}') -> None:
        self.reply = reply
        self.calls = 0

    def categorize(self, apps):
        self.calls += 1
        return self.reply


def _model(tmp_path, apps=APPS, categorizer=None):
    prefs = PreferenceStore(prefs_path(str(tmp_path)))
    model = LauncherModel(
        _FakeScanner(apps),
        CategoryStore(prefs),
        PinStore(prefs),
        categorizer or _FakeCategorizer(),
    )
    return model


def test_observable_notifies_on_change_only() -> None:
    seen = []
    value = Observable(1)
    unsubscribe = value.subscribe(seen.append)
    value.set(1)
    value.set(2)
    unsubscribe()
    value.set(3)
    assert seen == [2]
    assert value.value == 3


def test_first_load_categorizes_and_persists(tmp_path) -> None:
    model = _model(tmp_path)
    kinds = []
    result = model.run_load(kinds.append)
    assert kinds == [FETCH_CACHE, FETCH_API]
    assert result.fetch_type == FETCH_API
    assert model.categorizer.calls == 1
    assert list(result.grouped) == ["Games", "Social & Communication"]
    assert model.category_store.load() == {"com.chess": "Games", "com.mail": "Social & Communication"}


def test_cached_load_skips_remote_call(tmp_path) -> None:
    model = _model(tmp_path)
    model.category_store.save('{"com.chess": "Games"}')
    result = model.run_load()
    assert result.fetch_type == FETCH_CACHE
    assert model.categorizer.calls == 0
    assert [app.identifier for app in result.grouped[OTHER_CATEGORY]] == ["com.mail"]


def test_malformed_cache_degrades_to_other(tmp_path) -> None:
    model = _model(tmp_path)
    model.category_store.save("not json")
    result = model.run_load()
    assert model.categorizer.calls == 0
    assert list(result.grouped) == [OTHER_CATEGORY]


def test_failed_categorization_persists_empty_object(tmp_path) -> None:
    model = _model(tmp_path, categorizer=_FakeCategorizer(reply="{}"))
    result = model.run_load()
    assert list(result.grouped) == [OTHER_CATEGORY]
    assert model.category_store.load_raw() == "{}"
    model.run_load()
    assert model.categorizer.calls == 1


def test_no_apps_skips_remote_call(tmp_path) -> None:
    model = _model(tmp_path, apps=[])
    result = model.run_load()
    assert result.grouped == {}
    assert model.categorizer.calls == 0
    assert model.category_store.load_raw() is None


def test_publish_updates_observables_in_order(tmp_path) -> None:
    model = _model(tmp_path)
    order = []
    model.categorized.subscribe(lambda _value: order.append("categorized"))
    model.is_loading.subscribe(lambda value: order.append(f"loading={value}"))
    model.begin_load()
    model.publish(model.run_load())
    assert order == ["loading=True", "categorized", "loading=False"]
    assert model.fetch_type.value == FETCH_API
    assert len(model.all_apps.value) == 2


def test_toggle_pin_updates_display(tmp_path) -> None:
    model = _model(tmp_path)
    model.publish(model.run_load())
    model.toggle_pin("com.mail")
    assert model.is_pinned("com.mail")
    display = model.display()
    assert list(display) == [PINNED_CATEGORY, "Games"]
    model.toggle_pin("com.mail")
    assert PINNED_CATEGORY not in model.display()


def test_reset_categories_forces_remote_call(tmp_path) -> None:
    model = _model(tmp_path)
    model.run_load()
    assert model.reset_categories() is True
    model.run_load()
    assert model.categorizer.calls == 2


def test_launch_delegates_to_scanner(tmp_path) -> None:
    model = _model(tmp_path)
    assert model.launch("com.chess") is True
    assert model.scanner.launched == ["com.chess"]
