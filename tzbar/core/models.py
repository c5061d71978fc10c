"""
Settings data model: display options, the configured timezone list and
their JSON document form.
"""
from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar, Dict, List, Optional, Type, TypeVar

from tzbar.core.enums import MenuBarLabelStyle, TimeFormat, TimezoneLabelStyle
from tzbar.core.formatting import city_name

__all__ = [
    "AppSettings",
    "IconOnly",
    "LocalTime",
    "MenuBarDisplayMode",
    "MenuBarLabelStyle",
    "SpecificTimezone",
    "TimeFormat",
    "TimezoneConfig",
    "TimezoneLabelStyle",
]

E = TypeVar("E", bound=Enum)


def _enum_or_default(enum_cls: Type[E], raw: Any, default: E) -> E:
    try:
        return enum_cls(raw)
    except (ValueError, TypeError):
        return default


# ---------------------------------------------------------------------------
# Menu bar display mode (tagged variant)
# ---------------------------------------------------------------------------


class MenuBarDisplayMode:
    """
    What the menu bar title shows. Concrete variants are LocalTime,
    SpecificTimezone(identifier) and IconOnly; each serializes as
    {"kind": ...} plus its payload.
    """

    kind: ClassVar[str] = ""

    @property
    def display_name(self) -> str:
        raise NotImplementedError

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": self.kind}

    @staticmethod
    def from_dict(data: Any) -> "MenuBarDisplayMode":
        if not isinstance(data, dict):
            return LocalTime()
        kind = data.get("kind")
        if kind == SpecificTimezone.kind:
            identifier = data.get("identifier")
            if isinstance(identifier, str) and identifier:
                return SpecificTimezone(identifier)
            return LocalTime()
        if kind == IconOnly.kind:
            return IconOnly()
        return LocalTime()


@dataclass(frozen=True)
class LocalTime(MenuBarDisplayMode):
    kind: ClassVar[str] = "localTime"

    @property
    def display_name(self) -> str:
        return "Local time"


@dataclass(frozen=True)
class SpecificTimezone(MenuBarDisplayMode):
    identifier: str
    kind: ClassVar[str] = "specificTimezone"

    @property
    def display_name(self) -> str:
        return city_name(self.identifier)

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": self.kind, "identifier": self.identifier}


@dataclass(frozen=True)
class IconOnly(MenuBarDisplayMode):
    kind: ClassVar[str] = "iconOnly"

    @property
    def display_name(self) -> str:
        return "Icon only"


# ---------------------------------------------------------------------------
# Timezone list + root aggregate
# ---------------------------------------------------------------------------


@dataclass
class TimezoneConfig:
    """
    One configured clock.

    Attributes:
        identifier (str): IANA zone id, unique within the list.
        time_format (TimeFormat): Hour notation for this clock.
        label (TimezoneLabelStyle): Suffix shown in the dropdown row.
        nickname (str, optional): Replaces the derived city name when set.
    """
    identifier: str
    time_format: TimeFormat = TimeFormat.SYSTEM
    label: TimezoneLabelStyle = TimezoneLabelStyle.ABBREVIATION
    nickname: Optional[str] = None

    @property
    def display_name(self) -> str:
        if self.nickname:
            return self.nickname
        return city_name(self.identifier)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "identifier": self.identifier,
            "timeFormat": self.time_format.value,
            "timezoneLabel": self.label.value,
            "nickname": self.nickname,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Optional["TimezoneConfig"]:
        identifier = data.get("identifier")
        if not isinstance(identifier, str) or not identifier:
            return None
        nickname = data.get("nickname")
        return cls(
            identifier=identifier,
            time_format=_enum_or_default(TimeFormat, data.get("timeFormat"), TimeFormat.SYSTEM),
            label=_enum_or_default(
                TimezoneLabelStyle, data.get("timezoneLabel"), TimezoneLabelStyle.ABBREVIATION
            ),
            nickname=nickname if isinstance(nickname, str) else None,
        )


DEFAULT_TIMEZONES = ("UTC", "Europe/Lisbon", "Asia/Kolkata")


def _default_timezones() -> List[TimezoneConfig]:
    return [TimezoneConfig(identifier) for identifier in DEFAULT_TIMEZONES]


@dataclass
class AppSettings:
    """
    Root settings aggregate: global display preferences plus the ordered
    list of configured clocks.
    """
    menu_bar_display: MenuBarDisplayMode = field(default_factory=LocalTime)
    show_seconds: bool = False
    menu_bar_label: MenuBarLabelStyle = MenuBarLabelStyle.NONE
    include_local_time: bool = True
    timezones: List[TimezoneConfig] = field(default_factory=_default_timezones)

    def find(self, identifier: str) -> Optional[TimezoneConfig]:
        for config in self.timezones:
            if config.identifier == identifier:
                return config
        return None

    # ---------- serialization ---------- #

    def to_dict(self) -> Dict[str, Any]:
        return {
            "menuBarDisplay": self.menu_bar_display.to_dict(),
            "menuBarShowSeconds": self.show_seconds,
            "menuBarLabel": self.menu_bar_label.value,
            "includeLocalTime": self.include_local_time,
            "timezones": [tz.to_dict() for tz in self.timezones],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AppSettings":
        """
        Build settings from a stored document. Unknown keys are ignored and
        missing or malformed ones take their defaults.
        """
        settings = cls()
        if "menuBarDisplay" in data:
            settings.menu_bar_display = MenuBarDisplayMode.from_dict(data["menuBarDisplay"])
        if isinstance(data.get("menuBarShowSeconds"), bool):
            settings.show_seconds = data["menuBarShowSeconds"]
        if "menuBarLabel" in data:
            settings.menu_bar_label = _enum_or_default(
                MenuBarLabelStyle, data["menuBarLabel"], MenuBarLabelStyle.NONE
            )
        if isinstance(data.get("includeLocalTime"), bool):
            settings.include_local_time = data["includeLocalTime"]
        raw_list = data.get("timezones")
        if isinstance(raw_list, list):
            timezones: List[TimezoneConfig] = []
            seen = set()
            for row in raw_list:
                config = TimezoneConfig.from_dict(row) if isinstance(row, dict) else None
                if config is None or config.identifier in seen:
                    continue
                seen.add(config.identifier)
                timezones.append(config)
            settings.timezones = timezones
        return settings

    def to_bytes(self) -> bytes:
        return json.dumps(self.to_dict()).encode("utf-8")

    @classmethod
    def from_bytes(cls, blob: bytes) -> "AppSettings":
        """Raises ValueError when blob is not a JSON object."""
        data = json.loads(blob.decode("utf-8"))
        if not isinstance(data, dict):
            raise ValueError("settings document is not a JSON object")
        return cls.from_dict(data)
