"""
Timezone data provider backed by the IANA database shipped with Python
(zoneinfo), the pytz zone catalog and tzlocal for the host zone.
"""
from __future__ import annotations

import datetime
import re
from typing import Optional, Set
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import pytz
import tzlocal

from tzbar.core.logger import log

# tzdata writes some abbreviations as bare offsets ("+04", "-0330")
_NUMERIC_ABBR_RE = re.compile(r"^[+-]\d{2}(\d{2})?$")


def to_utc(instant: Optional[datetime.datetime] = None) -> datetime.datetime:
    """
    Normalise an instant to an aware UTC datetime.
    None means "now"; naive datetimes are taken to be UTC already.
    """
    if instant is None:
        return datetime.datetime.now(datetime.timezone.utc)
    if instant.tzinfo is None:
        return instant.replace(tzinfo=datetime.timezone.utc)
    return instant.astimezone(datetime.timezone.utc)


def _system_local_tzinfo() -> datetime.tzinfo:
    try:
        return datetime.datetime.now().astimezone().tzinfo or datetime.timezone.utc
    except Exception:
        return datetime.timezone.utc


def get_timezone(tz_name: Optional[str]) -> datetime.tzinfo:
    """
    Returns a tzinfo for tz_name. Unknown or empty names resolve to the
    host's local zone instead of raising.
    """
    if tz_name:
        try:
            return ZoneInfo(tz_name)
        except (ZoneInfoNotFoundError, ValueError):
            log.debug("Unknown timezone %r, using the local zone.", tz_name)
    return _system_local_tzinfo()


def _format_gmt_offset(minutes: int) -> str:
    sign = "+" if minutes >= 0 else "-"
    hours, mins = divmod(abs(minutes), 60)
    if mins:
        return f"GMT{sign}{hours}:{mins:02d}"
    return f"GMT{sign}{hours}"


class TimezoneDataProvider:
    """
    Answers the timezone questions the formatting code needs: validity,
    offset and abbreviation at an instant, the host zone and the catalog
    of known identifiers.

    local_identifier pins the host zone (tests, --tz overrides); otherwise
    it is detected with tzlocal.
    """

    def __init__(self, local_identifier: Optional[str] = None) -> None:
        self._local_identifier = local_identifier

    # ---------- host zone ---------- #

    def current_local_identifier(self) -> str:
        if self._local_identifier:
            return self._local_identifier
        try:
            name = tzlocal.get_localzone_name()
        except Exception as e:
            log.debug("TimezoneDataProvider: local zone detection failed: %s", e)
            name = None
        if name and self.is_valid_identifier(name):
            return name
        return "UTC"

    def local_tzinfo(self) -> datetime.tzinfo:
        return get_timezone(self.current_local_identifier())

    def resolve(self, identifier: Optional[str]) -> datetime.tzinfo:
        """tzinfo for identifier, or the host zone when it is unknown."""
        if identifier and self.is_valid_identifier(identifier):
            return ZoneInfo(identifier)
        return self.local_tzinfo()

    # ---------- per-identifier queries ---------- #

    def is_valid_identifier(self, identifier: Optional[str]) -> bool:
        if not identifier:
            return False
        try:
            ZoneInfo(identifier)
            return True
        except ZoneInfoNotFoundError:
            return False
        except Exception:
            # ValueError for malformed keys such as "../etc"
            return False

    def localize(self, identifier: Optional[str], instant: Optional[datetime.datetime] = None) -> datetime.datetime:
        return to_utc(instant).astimezone(self.resolve(identifier))

    def offset_minutes(self, identifier: Optional[str], instant: Optional[datetime.datetime] = None) -> int:
        offset = self.localize(identifier, instant).utcoffset() or datetime.timedelta(0)
        return int(offset.total_seconds() / 60)

    def abbreviation(self, identifier: Optional[str], instant: Optional[datetime.datetime] = None) -> str:
        """
        Zone abbreviation at instant. Numeric tzdata names ("+04") are
        reported GMT-style ("GMT+4") like the platform clocks do.
        """
        local_dt = self.localize(identifier, instant)
        name = local_dt.tzname() or ""
        if not name or _NUMERIC_ABBR_RE.match(name):
            return _format_gmt_offset(self.offset_minutes(identifier, instant))
        return name

    # ---------- catalog ---------- #

    def all_known_identifiers(self) -> Set[str]:
        return set(pytz.all_timezones)


_default_provider: Optional[TimezoneDataProvider] = None


def default_provider() -> TimezoneDataProvider:
    """Process-wide provider following the host zone."""
    global _default_provider
    if _default_provider is None:
        _default_provider = TimezoneDataProvider()
    return _default_provider
