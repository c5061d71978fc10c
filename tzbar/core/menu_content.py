"""
Builds what the tray shows: the single-line menu bar title and the
dropdown rows. Rows keep city, time and suffix separate so the renderer
can align the columns with its own font metrics.
"""
from __future__ import annotations

import datetime
from dataclasses import dataclass
from typing import List, Optional

from tzbar.core.enums import MenuBarLabelStyle, TimeFormat, TimezoneLabelStyle
from tzbar.core.formatting import (
    city_name,
    formatted_time,
    normalized_abbreviation,
    utc_offset_string,
)
from tzbar.core.models import AppSettings, IconOnly, SpecificTimezone, TimezoneConfig
from tzbar.utils.timezones import TimezoneDataProvider, default_provider, to_utc

LOCAL_ROW_CITY = "Local"
LABEL_GAP = "  "


@dataclass(frozen=True)
class MenuRow:
    city: str
    time: str
    suffix: str  # abbreviation, offset, both, or empty


def menu_bar_text(
    settings: AppSettings,
    instant: Optional[datetime.datetime] = None,
    provider: Optional[TimezoneDataProvider] = None,
) -> str:
    """
    Title for the menu bar. An empty string means "show the icon instead".
    """
    provider = provider or default_provider()
    instant = to_utc(instant)
    display = settings.menu_bar_display

    if isinstance(display, IconOnly):
        return ""
    if isinstance(display, SpecificTimezone):
        config = settings.find(display.identifier)
        time_format = config.time_format if config is not None else TimeFormat.SYSTEM
        time_text = formatted_time(
            display.identifier, time_format, settings.show_seconds, instant, provider
        )
        return _append_menu_bar_label(
            time_text, display.identifier, config, settings.menu_bar_label, instant, provider
        )
    # LocalTime: host clock, never labelled
    return formatted_time(
        provider.current_local_identifier(), TimeFormat.SYSTEM, settings.show_seconds, instant, provider
    )


def _append_menu_bar_label(
    time_text: str,
    identifier: str,
    config: Optional[TimezoneConfig],
    label: MenuBarLabelStyle,
    instant: datetime.datetime,
    provider: TimezoneDataProvider,
) -> str:
    if label == MenuBarLabelStyle.CITY_NAME:
        name = config.display_name if config is not None else city_name(identifier)
        return f"{time_text}{LABEL_GAP}{name}"
    if label == MenuBarLabelStyle.ABBREVIATION:
        return f"{time_text}{LABEL_GAP}{normalized_abbreviation(identifier, instant, provider)}"
    if label == MenuBarLabelStyle.UTC_OFFSET:
        return f"{time_text}{LABEL_GAP}{utc_offset_string(identifier, instant, provider)}"
    return time_text


def local_time_row(
    instant: Optional[datetime.datetime] = None,
    provider: Optional[TimezoneDataProvider] = None,
) -> MenuRow:
    provider = provider or default_provider()
    identifier = provider.current_local_identifier()
    return MenuRow(
        city=LOCAL_ROW_CITY,
        time=formatted_time(identifier, TimeFormat.SYSTEM, True, instant, provider),
        suffix=normalized_abbreviation(identifier, instant, provider),
    )


def timezone_row(
    config: TimezoneConfig,
    instant: Optional[datetime.datetime] = None,
    provider: Optional[TimezoneDataProvider] = None,
) -> MenuRow:
    """Row for one configured clock. The dropdown always shows seconds."""
    provider = provider or default_provider()
    identifier = config.identifier
    time_text = formatted_time(identifier, config.time_format, True, instant, provider)

    if config.label == TimezoneLabelStyle.CITY_ONLY:
        suffix = ""
    elif config.label == TimezoneLabelStyle.UTC_OFFSET:
        suffix = utc_offset_string(identifier, instant, provider)
    elif config.label == TimezoneLabelStyle.ABBREVIATION_AND_OFFSET:
        abbrev = normalized_abbreviation(identifier, instant, provider)
        offset = utc_offset_string(identifier, instant, provider)
        suffix = f"{abbrev}{LABEL_GAP}{offset}"
    else:
        suffix = normalized_abbreviation(identifier, instant, provider)

    return MenuRow(city=config.display_name, time=time_text, suffix=suffix)


def rows(
    settings: AppSettings,
    instant: Optional[datetime.datetime] = None,
    provider: Optional[TimezoneDataProvider] = None,
) -> List[MenuRow]:
    """
    Dropdown rows in display order. An empty list means nothing is
    configured and the renderer should show its placeholder.
    """
    provider = provider or default_provider()
    instant = to_utc(instant)
    result: List[MenuRow] = []
    if settings.include_local_time:
        result.append(local_time_row(instant, provider))
    for config in settings.timezones:
        result.append(timezone_row(config, instant, provider))
    return result


# ---------------------------------------------------------------------------
# Timezone picker
# ---------------------------------------------------------------------------


def search_timezones(query: str, provider: Optional[TimezoneDataProvider] = None) -> List[str]:
    """
    Known identifiers, sorted, whose identifier or city name contains query
    (case-insensitive). An empty query returns them all.
    """
    provider = provider or default_provider()
    identifiers = sorted(provider.all_known_identifiers())
    needle = (query or "").strip().lower()
    if not needle:
        return identifiers
    return [
        tz for tz in identifiers
        if needle in tz.lower() or needle in city_name(tz).lower()
    ]


def picker_preview(
    identifier: str,
    instant: Optional[datetime.datetime] = None,
    provider: Optional[TimezoneDataProvider] = None,
) -> str:
    """Short system-style time shown next to each picker entry."""
    return formatted_time(identifier, TimeFormat.SYSTEM, False, instant, provider)
