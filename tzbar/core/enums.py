"""Display option enums shared by the settings model and the formatters."""
from __future__ import annotations

from enum import Enum


class TimeFormat(str, Enum):
    TWELVE_HOUR = "12h"
    TWENTY_FOUR_HOUR = "24h"
    SYSTEM = "system"

    @property
    def display_name(self) -> str:
        return {
            TimeFormat.TWELVE_HOUR: "12-hour",
            TimeFormat.TWENTY_FOUR_HOUR: "24-hour",
            TimeFormat.SYSTEM: "System default",
        }[self]


class TimezoneLabelStyle(str, Enum):
    """How a timezone row in the dropdown is labelled."""

    CITY_ONLY = "city"
    ABBREVIATION = "abbrev"
    UTC_OFFSET = "offset"
    ABBREVIATION_AND_OFFSET = "both"

    @property
    def display_name(self) -> str:
        return {
            TimezoneLabelStyle.CITY_ONLY: "City name only",
            TimezoneLabelStyle.ABBREVIATION: "City + abbreviation",
            TimezoneLabelStyle.UTC_OFFSET: "City + UTC offset",
            TimezoneLabelStyle.ABBREVIATION_AND_OFFSET: "City + abbreviation + offset",
        }[self]


class MenuBarLabelStyle(str, Enum):
    """Extra label shown next to the time in the menu bar."""

    NONE = "none"
    CITY_NAME = "city"
    ABBREVIATION = "abbrev"
    UTC_OFFSET = "offset"

    @property
    def display_name(self) -> str:
        return {
            MenuBarLabelStyle.NONE: "Time only",
            MenuBarLabelStyle.CITY_NAME: "City name",
            MenuBarLabelStyle.ABBREVIATION: "Abbreviation (IST, WET)",
            MenuBarLabelStyle.UTC_OFFSET: "UTC offset",
        }[self]
