"""
Time and label formatting for the menu bar and the dropdown rows.

Everything here is a pure function of (identifier, options, instant) plus
the offset/abbreviation answers of a TimezoneDataProvider. Unknown
identifiers are rendered in the host's local zone, never rejected.
"""
from __future__ import annotations

import datetime
import locale
import re
from typing import Optional

from tzbar.core.enums import TimeFormat
from tzbar.core.logger import log
from tzbar.utils.timezones import TimezoneDataProvider, default_provider

DEFAULT_SYSTEM_PATTERN = "%H:%M:%S"

# Composite strftime directives some locales report for their time format
_COMPOSITE_DIRECTIVES = {
    "%T": "%H:%M:%S",
    "%r": "%I:%M:%S %p",
    "%R": "%H:%M",
}
# Seconds field with its leading separator and any literal suffix ("秒")
_SECONDS_RE = re.compile(r"[:.,]?%S[^%\s]*")


# ---------------------------------------------------------------------------
# Labels
# ---------------------------------------------------------------------------


def city_name(identifier: str) -> str:
    """
    "America/New_York" -> "New York". "UTC" and slash-free identifiers are
    returned as they are.
    """
    if identifier == "UTC":
        return "UTC"
    city = identifier.rsplit("/", 1)[-1]
    return city.replace("_", " ")


def format_utc_offset(minutes: int) -> str:
    """
    Offset in minutes -> "UTC+5:30", "UTC+0", "UTC-6".
    """
    sign = "+" if minutes >= 0 else "-"
    hours, mins = divmod(abs(minutes), 60)
    if mins == 0:
        return f"UTC{sign}{hours}"
    return f"UTC{sign}{hours}:{mins:02d}"


def normalize_abbreviation(abbreviation: str) -> str:
    """Rewrite GMT-based abbreviations as UTC ("GMT" -> "UTC", "GMT+4" -> "UTC+4")."""
    if abbreviation == "GMT":
        return "UTC"
    if abbreviation.startswith("GMT+") or abbreviation.startswith("GMT-"):
        return "UTC" + abbreviation[3:]
    return abbreviation


def utc_offset_string(
    identifier: Optional[str],
    instant: Optional[datetime.datetime] = None,
    provider: Optional[TimezoneDataProvider] = None,
) -> str:
    provider = provider or default_provider()
    return format_utc_offset(provider.offset_minutes(identifier, instant))


def normalized_abbreviation(
    identifier: Optional[str],
    instant: Optional[datetime.datetime] = None,
    provider: Optional[TimezoneDataProvider] = None,
) -> str:
    provider = provider or default_provider()
    return normalize_abbreviation(provider.abbreviation(identifier, instant))


# ---------------------------------------------------------------------------
# Clock time
# ---------------------------------------------------------------------------


def _locale_time_pattern() -> str:
    try:
        pattern = locale.nl_langinfo(locale.T_FMT)
    except (AttributeError, ValueError) as e:
        # nl_langinfo is unavailable on Windows
        log.debug("formatting: locale time pattern unavailable: %s", e)
        return DEFAULT_SYSTEM_PATTERN
    for directive, expansion in _COMPOSITE_DIRECTIVES.items():
        pattern = pattern.replace(directive, expansion)
    if "%H" not in pattern and "%I" not in pattern and "%l" not in pattern:
        return DEFAULT_SYSTEM_PATTERN
    return pattern


def system_time_pattern(show_seconds: bool) -> str:
    """
    strftime pattern for the host locale's time style: the locale's full
    time format when seconds are wanted, the same without seconds otherwise.
    """
    pattern = _locale_time_pattern()
    if show_seconds:
        if "%S" not in pattern:
            pattern = pattern.replace("%M", "%M:%S", 1)
        return pattern
    return strip_seconds(pattern)


def strip_seconds(pattern: str) -> str:
    """Drop the seconds field from a strftime time pattern."""
    return _SECONDS_RE.sub("", pattern)


def format_clock(local_dt: datetime.datetime, time_format: TimeFormat, show_seconds: bool) -> str:
    """Render the wall-clock time of an already localized datetime."""
    if time_format == TimeFormat.TWELVE_HOUR:
        hour12 = local_dt.hour % 12 or 12
        ampm = "AM" if local_dt.hour < 12 else "PM"
        if show_seconds:
            return f"{hour12}:{local_dt.minute:02d}:{local_dt.second:02d} {ampm}"
        return f"{hour12}:{local_dt.minute:02d} {ampm}"
    if time_format == TimeFormat.TWENTY_FOUR_HOUR:
        if show_seconds:
            return f"{local_dt.hour:02d}:{local_dt.minute:02d}:{local_dt.second:02d}"
        return f"{local_dt.hour:02d}:{local_dt.minute:02d}"
    return local_dt.strftime(system_time_pattern(show_seconds)).strip()


def formatted_time(
    identifier: Optional[str],
    time_format: TimeFormat,
    show_seconds: bool,
    instant: Optional[datetime.datetime] = None,
    provider: Optional[TimezoneDataProvider] = None,
) -> str:
    """
    Clock time of instant in the given zone.

    12-hour and 24-hour output is locale independent ("2:30 PM",
    "14:30:45"); SYSTEM follows the host locale.
    """
    provider = provider or default_provider()
    local_dt = provider.localize(identifier, instant)
    return format_clock(local_dt, time_format, show_seconds)
