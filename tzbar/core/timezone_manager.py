from __future__ import annotations

import copy
import datetime
import threading
from typing import Any, Callable, List, Optional, Tuple

from tzbar.core import menu_content
from tzbar.core.enums import MenuBarLabelStyle, TimeFormat, TimezoneLabelStyle
from tzbar.core.logger import log
from tzbar.core.models import (
    AppSettings,
    LocalTime,
    MenuBarDisplayMode,
    SpecificTimezone,
    TimezoneConfig,
    _enum_or_default,
)
from tzbar.core.settings_manager import KeyValueSettingsStore, MemoryKeyValueStore
from tzbar.utils.timezones import TimezoneDataProvider, default_provider

SettingsListener = Callable[[AppSettings], None]
StampedBlob = Tuple[int, Optional[bytes]]

_UNSET: Any = object()


def _coerce(enum_cls, value):
    """Enum member for value, or None (logged) when the enum has no such value."""
    if value is None:
        return None
    member = _enum_or_default(enum_cls, value, None)
    if member is None:
        log.debug("TimezoneManager: ignoring %r, not a valid %s.", value, enum_cls.__name__)
    return member


class TimezoneManager:
    """
    Owns the AppSettings aggregate for the running process.

    - Mutations go through the methods below; each one rewrites the full
      settings blob to the store (write-through) and then notifies listeners.
    - Bad input (duplicate ids, out-of-range indices, unknown ids, enum
      values that don't exist) is a silent no-op.
    - Each blob carries a revision; a blob older than the last one saved
      is dropped, so concurrent mutations never leave stale state on disk.
    - Store failures are logged and swallowed; memory stays authoritative
      and the next mutation writes the whole state again.

    `store` is any object with load() -> Optional[bytes] and save(bytes).
    When omitted, settings live in memory only.
    """

    def __init__(
        self,
        store: Optional[Any] = None,
        provider: Optional[TimezoneDataProvider] = None,
    ) -> None:
        self.store = store if store is not None else KeyValueSettingsStore(MemoryKeyValueStore())
        self.provider = provider or default_provider()
        self.last_save_failed = False

        self._lock = threading.RLock()
        # Saves happen outside _lock; _save_lock plus the revision counters
        # keep an older blob from landing after a newer one.
        self._save_lock = threading.Lock()
        self._revision = 0
        self._saved_revision = 0
        self._listeners: List[SettingsListener] = []
        self._settings = self._load()

    # ---------- persistence ---------- #

    def _load(self) -> AppSettings:
        try:
            blob = self.store.load()
        except Exception as e:
            log.error("TimezoneManager: failed to read stored settings: %s", e)
            return AppSettings()
        if blob is None:
            log.info("TimezoneManager: no stored settings, using defaults.")
            return AppSettings()
        try:
            settings = AppSettings.from_bytes(blob)
        except (ValueError, RecursionError) as e:
            log.warning("TimezoneManager: stored settings unreadable, using defaults: %s", e)
            return AppSettings()
        log.info("TimezoneManager: loaded %d timezone(s).", len(settings.timezones))
        return settings

    def _serialize_locked(self) -> StampedBlob:
        self._revision += 1
        try:
            return self._revision, self._settings.to_bytes()
        except Exception as e:
            log.error("TimezoneManager: failed to serialize settings: %s", e)
            return self._revision, None

    def _persist(self, stamped: StampedBlob) -> None:
        revision, blob = stamped
        with self._save_lock:
            if revision <= self._saved_revision:
                log.debug("TimezoneManager: revision %d superseded, not saved.", revision)
                return
            if blob is None:
                self.last_save_failed = True
                return
            try:
                self.store.save(blob)
            except Exception as e:
                self.last_save_failed = True
                log.error("TimezoneManager: failed to save settings: %s", e)
                return
            self._saved_revision = revision
            self.last_save_failed = False

    def _commit(self, stamped: StampedBlob) -> None:
        """Write and notify. Called after the lock has been released."""
        self._persist(stamped)
        snapshot = self.settings
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception as e:
                log.error("TimezoneManager: settings listener %r failed: %s", listener, e)

    # ---------- observation ---------- #

    def add_listener(self, callback: SettingsListener) -> None:
        if callback not in self._listeners:
            self._listeners.append(callback)

    def remove_listener(self, callback: SettingsListener) -> None:
        if callback in self._listeners:
            self._listeners.remove(callback)

    # ---------- reads ---------- #

    @property
    def settings(self) -> AppSettings:
        """Independent copy of the current settings."""
        with self._lock:
            return copy.deepcopy(self._settings)

    def timezone_identifiers(self) -> List[str]:
        with self._lock:
            return [tz.identifier for tz in self._settings.timezones]

    def index_of(self, identifier: str) -> Optional[int]:
        with self._lock:
            for idx, tz in enumerate(self._settings.timezones):
                if tz.identifier == identifier:
                    return idx
        return None

    # ---------- timezone list ---------- #

    def add_timezone(self, identifier: str) -> None:
        with self._lock:
            if self._settings.find(identifier) is not None:
                log.debug("TimezoneManager: %s already configured.", identifier)
                return
            self._settings.timezones.append(TimezoneConfig(identifier))
            stamped = self._serialize_locked()
        log.info("TimezoneManager: added %s.", identifier)
        self._commit(stamped)

    def remove_timezone(self, index: int) -> None:
        with self._lock:
            timezones = self._settings.timezones
            if not 0 <= index < len(timezones):
                log.debug("TimezoneManager: remove index %s out of range.", index)
                return
            removed = timezones.pop(index)
            display = self._settings.menu_bar_display
            if isinstance(display, SpecificTimezone) and display.identifier == removed.identifier:
                self._settings.menu_bar_display = LocalTime()
            stamped = self._serialize_locked()
        log.info("TimezoneManager: removed %s.", removed.identifier)
        self._commit(stamped)

    def move_timezone(self, source: int, destination: int) -> None:
        """
        Move the entry at source so it ends up at destination, clamped to
        the list bounds after removal.
        """
        with self._lock:
            timezones = self._settings.timezones
            if not 0 <= source < len(timezones):
                log.debug("TimezoneManager: move source %s out of range.", source)
                return
            item = timezones.pop(source)
            dest = max(0, min(destination, len(timezones)))
            timezones.insert(dest, item)
            stamped = self._serialize_locked()
        self._commit(stamped)

    def update_timezone(
        self,
        identifier: str,
        *,
        time_format: Optional[TimeFormat] = None,
        label: Optional[TimezoneLabelStyle] = None,
        nickname: Any = _UNSET,
    ) -> None:
        """
        Edit one configured clock in place. Pass nickname=None (or "") to
        clear it; leave it out to keep the current one. A time_format or
        label the enums don't know makes the whole call a no-op.
        """
        new_format = _coerce(TimeFormat, time_format)
        new_label = _coerce(TimezoneLabelStyle, label)
        if (time_format is not None and new_format is None) or (
            label is not None and new_label is None
        ):
            return
        with self._lock:
            config = self._settings.find(identifier)
            if config is None:
                log.debug("TimezoneManager: update for unknown timezone %s ignored.", identifier)
                return
            if new_format is not None:
                config.time_format = new_format
            if new_label is not None:
                config.label = new_label
            if nickname is not _UNSET:
                config.nickname = (nickname if isinstance(nickname, str) else "").strip() or None
            stamped = self._serialize_locked()
        self._commit(stamped)

    # ---------- global preferences ---------- #

    def set_menu_bar_display(self, mode: MenuBarDisplayMode) -> None:
        if not isinstance(mode, MenuBarDisplayMode):
            log.debug("TimezoneManager: ignoring menu bar display %r.", mode)
            return
        with self._lock:
            self._settings.menu_bar_display = mode
            stamped = self._serialize_locked()
        self._commit(stamped)

    def set_show_seconds(self, value: bool) -> None:
        with self._lock:
            self._settings.show_seconds = bool(value)
            stamped = self._serialize_locked()
        self._commit(stamped)

    def set_menu_bar_label(self, style: MenuBarLabelStyle) -> None:
        new_style = _coerce(MenuBarLabelStyle, style)
        if new_style is None:
            return
        with self._lock:
            self._settings.menu_bar_label = new_style
            stamped = self._serialize_locked()
        self._commit(stamped)

    def set_include_local_time(self, value: bool) -> None:
        with self._lock:
            self._settings.include_local_time = bool(value)
            stamped = self._serialize_locked()
        self._commit(stamped)

    def reset(self) -> None:
        with self._lock:
            self._settings = AppSettings()
            stamped = self._serialize_locked()
        log.info("TimezoneManager: settings reset to defaults.")
        self._commit(stamped)

    # ---------- rendering ---------- #

    def menu_bar_text(self, instant: Optional[datetime.datetime] = None) -> str:
        with self._lock:
            return menu_content.menu_bar_text(self._settings, instant, self.provider)

    def rows(self, instant: Optional[datetime.datetime] = None) -> List[menu_content.MenuRow]:
        with self._lock:
            return menu_content.rows(self._settings, instant, self.provider)
