# tzbar/utils/__init__.py
from __future__ import annotations

from tzbar.utils.timezones import TimezoneDataProvider, default_provider, get_timezone, to_utc

__all__ = ["TimezoneDataProvider", "default_provider", "get_timezone", "to_utc"]
