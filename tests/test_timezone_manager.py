import threading
import time

import pytest

from tzbar.core.models import (
    AppSettings,
    IconOnly,
    LocalTime,
    MenuBarLabelStyle,
    SpecificTimezone,
    TimeFormat,
    TimezoneLabelStyle,
)
from tzbar.core.settings_manager import KeyValueSettingsStore, MemoryKeyValueStore
from tzbar.core.timezone_manager import TimezoneManager


class FlakyStore:
    """Store whose writes fail until `broken` is cleared."""

    def __init__(self):
        self.broken = True
        self.saved = []

    def load(self):
        return None

    def save(self, blob):
        if self.broken:
            raise OSError("disk full")
        self.saved.append(blob)


class GatedStore:
    """Store whose first save blocks until `release` is set."""

    def __init__(self):
        self.entered = threading.Event()
        self.release = threading.Event()
        self.saved = []
        self._calls = 0

    def load(self):
        return None

    def save(self, blob):
        self._calls += 1
        if self._calls == 1:
            self.entered.set()
            self.release.wait(5)
        self.saved.append(blob)


def identifiers(manager):
    return manager.timezone_identifiers()


def test_starts_with_defaults_when_store_empty(manager):
    assert manager.settings == AppSettings()


def test_add_timezone_appends(manager):
    manager.add_timezone("Asia/Tokyo")
    assert identifiers(manager)[-1] == "Asia/Tokyo"
    added = manager.settings.timezones[-1]
    assert added.time_format == TimeFormat.SYSTEM
    assert added.label == TimezoneLabelStyle.ABBREVIATION


def test_add_timezone_is_idempotent(manager):
    manager.add_timezone("Asia/Tokyo")
    manager.add_timezone("Asia/Tokyo")
    manager.add_timezone("UTC")
    assert len(manager.settings.timezones) == 4


def test_remove_timezone(manager):
    manager.remove_timezone(1)
    assert identifiers(manager) == ["UTC", "Asia/Kolkata"]


@pytest.mark.parametrize("index", [-1, 3, 100])
def test_remove_out_of_range_is_noop(manager, index):
    manager.remove_timezone(index)
    assert identifiers(manager) == ["UTC", "Europe/Lisbon", "Asia/Kolkata"]


def test_remove_selected_timezone_resets_menu_bar_display(manager):
    manager.set_menu_bar_display(SpecificTimezone("Asia/Kolkata"))
    manager.remove_timezone(2)
    assert manager.settings.menu_bar_display == LocalTime()


def test_remove_unrelated_timezone_keeps_selection(manager):
    manager.set_menu_bar_display(SpecificTimezone("Asia/Kolkata"))
    manager.remove_timezone(0)
    assert manager.settings.menu_bar_display == SpecificTimezone("Asia/Kolkata")


def test_remove_keeps_icon_only(manager):
    manager.set_menu_bar_display(IconOnly())
    manager.remove_timezone(0)
    assert manager.settings.menu_bar_display == IconOnly()


def test_move_clamps_to_end(manager):
    manager.move_timezone(0, 100)
    assert identifiers(manager) == ["Europe/Lisbon", "Asia/Kolkata", "UTC"]


def test_move_to_front(manager):
    manager.move_timezone(2, 0)
    assert identifiers(manager) == ["Asia/Kolkata", "UTC", "Europe/Lisbon"]


def test_move_negative_destination_clamps_to_front(manager):
    manager.move_timezone(1, -5)
    assert identifiers(manager) == ["Europe/Lisbon", "UTC", "Asia/Kolkata"]


def test_move_is_reinsert_not_swap(manager):
    manager.add_timezone("Asia/Tokyo")
    manager.move_timezone(0, 2)
    assert identifiers(manager) == ["Europe/Lisbon", "Asia/Kolkata", "UTC", "Asia/Tokyo"]


@pytest.mark.parametrize("source", [-1, 3, 42])
def test_move_out_of_range_source_is_noop(manager, source):
    manager.move_timezone(source, 0)
    assert identifiers(manager) == ["UTC", "Europe/Lisbon", "Asia/Kolkata"]


def test_update_timezone(manager):
    manager.update_timezone(
        "Europe/Lisbon",
        time_format=TimeFormat.TWENTY_FOUR_HOUR,
        label=TimezoneLabelStyle.CITY_ONLY,
        nickname="  Home  ",
    )
    config = manager.settings.find("Europe/Lisbon")
    assert config.time_format == TimeFormat.TWENTY_FOUR_HOUR
    assert config.label == TimezoneLabelStyle.CITY_ONLY
    assert config.nickname == "Home"

    manager.update_timezone("Europe/Lisbon", time_format=TimeFormat.TWELVE_HOUR)
    assert manager.settings.find("Europe/Lisbon").nickname == "Home"

    manager.update_timezone("Europe/Lisbon", nickname="")
    assert manager.settings.find("Europe/Lisbon").nickname is None


def test_update_unknown_timezone_is_noop(manager):
    before = manager.settings
    manager.update_timezone("Asia/Tokyo", nickname="x")
    assert manager.settings == before


def test_settings_snapshot_is_independent(manager):
    snapshot = manager.settings
    snapshot.timezones.clear()
    assert len(manager.settings.timezones) == 3


def test_every_mutation_is_written_through(kv, store, provider):
    manager = TimezoneManager(store=store, provider=provider)
    manager.add_timezone("Asia/Tokyo")
    manager.set_show_seconds(True)
    manager.set_menu_bar_label(MenuBarLabelStyle.UTC_OFFSET)
    manager.set_include_local_time(False)
    manager.set_menu_bar_display(SpecificTimezone("Asia/Tokyo"))

    reloaded = TimezoneManager(store=KeyValueSettingsStore(kv), provider=provider)
    assert reloaded.settings == manager.settings
    assert reloaded.settings.menu_bar_display == SpecificTimezone("Asia/Tokyo")


def test_noop_mutations_do_not_write(kv, store, provider):
    manager = TimezoneManager(store=store, provider=provider)
    manager.add_timezone("UTC")
    manager.remove_timezone(9)
    manager.move_timezone(9, 0)
    assert kv.get("AppSettings") is None


def test_corrupt_blob_falls_back_to_defaults(provider):
    kv = MemoryKeyValueStore({"AppSettings": "{broken"})
    manager = TimezoneManager(store=KeyValueSettingsStore(kv), provider=provider)
    assert manager.settings == AppSettings()


def test_save_failure_is_swallowed_and_retried(provider):
    store = FlakyStore()
    manager = TimezoneManager(store=store, provider=provider)

    manager.add_timezone("Asia/Tokyo")
    assert manager.last_save_failed is True
    assert "Asia/Tokyo" in identifiers(manager)

    store.broken = False
    manager.set_show_seconds(True)
    assert manager.last_save_failed is False
    saved = AppSettings.from_bytes(store.saved[-1])
    assert saved.find("Asia/Tokyo") is not None
    assert saved.show_seconds is True


def test_listeners_notified_after_mutation(manager):
    seen = []
    manager.add_listener(lambda s: seen.append(len(s.timezones)))
    manager.add_timezone("Asia/Tokyo")
    manager.remove_timezone(0)
    assert seen == [4, 3]


def test_failing_listener_does_not_block_others(manager):
    seen = []

    def boom(_settings):
        raise RuntimeError("listener bug")

    manager.add_listener(boom)
    manager.add_listener(lambda s: seen.append(s.show_seconds))
    manager.set_show_seconds(True)
    assert seen == [True]


def test_remove_listener(manager):
    seen = []
    listener = seen.append
    manager.add_listener(listener)
    manager.remove_listener(listener)
    manager.set_show_seconds(True)
    assert seen == []


def test_reset(manager):
    manager.add_timezone("Asia/Tokyo")
    manager.set_menu_bar_display(IconOnly())
    manager.reset()
    assert manager.settings == AppSettings()


def test_index_of(manager):
    assert manager.index_of("Europe/Lisbon") == 1
    assert manager.index_of("Asia/Tokyo") is None


def test_index_of_unknown_after_remove(manager):
    manager.remove_timezone(0)
    assert manager.index_of("UTC") is None
    assert manager.index_of("Asia/Kolkata") == 1


def test_deeply_nested_blob_falls_back_to_defaults(provider):
    kv = MemoryKeyValueStore({"AppSettings": "[" * 100000})
    manager = TimezoneManager(store=KeyValueSettingsStore(kv), provider=provider)
    assert manager.settings == AppSettings()


def test_update_with_unknown_time_format_is_noop(kv, store, provider):
    manager = TimezoneManager(store=store, provider=provider)
    seen = []
    manager.add_listener(seen.append)
    before = manager.settings

    manager.update_timezone("UTC", time_format="36h", nickname="Zulu")

    assert manager.settings == before
    assert seen == []
    assert kv.get("AppSettings") is None


def test_update_with_unknown_label_is_noop(manager):
    before = manager.settings
    manager.update_timezone("UTC", time_format=TimeFormat.TWELVE_HOUR, label="shout")
    assert manager.settings == before


def test_update_accepts_raw_enum_values(manager):
    manager.update_timezone("UTC", time_format="24h", label="offset")
    config = manager.settings.find("UTC")
    assert config.time_format == TimeFormat.TWENTY_FOUR_HOUR
    assert config.label == TimezoneLabelStyle.UTC_OFFSET


@pytest.mark.parametrize("style", ["flag", None, 3])
def test_unknown_menu_bar_label_is_noop(manager, style):
    manager.set_menu_bar_label(MenuBarLabelStyle.CITY_NAME)
    manager.set_menu_bar_label(style)
    assert manager.settings.menu_bar_label == MenuBarLabelStyle.CITY_NAME


def test_non_mode_menu_bar_display_is_noop(manager):
    manager.set_menu_bar_display(IconOnly())
    manager.set_menu_bar_display("iconOnly")
    assert manager.settings.menu_bar_display == IconOnly()


def test_superseded_blob_is_not_saved(kv, store, provider):
    manager = TimezoneManager(store=store, provider=provider)
    with manager._lock:
        stale = manager._serialize_locked()
    manager.set_show_seconds(True)

    manager._commit(stale)

    saved = AppSettings.from_bytes(kv.get("AppSettings").encode("utf-8"))
    assert saved.show_seconds is True


def test_concurrent_mutations_persist_latest_state(provider):
    store = GatedStore()
    manager = TimezoneManager(store=store, provider=provider)

    adder = threading.Thread(target=manager.add_timezone, args=("Asia/Tokyo",))
    adder.start()
    assert store.entered.wait(5)

    toggler = threading.Thread(target=manager.set_show_seconds, args=(True,))
    toggler.start()
    deadline = time.monotonic() + 5
    while not manager.settings.show_seconds and time.monotonic() < deadline:
        time.sleep(0.01)

    store.release.set()
    adder.join(5)
    toggler.join(5)

    persisted = AppSettings.from_bytes(store.saved[-1])
    assert persisted == manager.settings
    assert persisted.show_seconds is True
    assert persisted.find("Asia/Tokyo") is not None
