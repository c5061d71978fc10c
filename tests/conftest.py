import datetime
import locale
import os
import tempfile

# Keep the log file and any settings database out of the user's home.
os.environ.setdefault("TZBAR_CONFIG_DIR", tempfile.mkdtemp(prefix="tzbar-tests-"))

import pytest

from tzbar.core.settings_manager import KeyValueSettingsStore, MemoryKeyValueStore
from tzbar.core.timezone_manager import TimezoneManager
from tzbar.utils.timezones import TimezoneDataProvider

INSTANT = datetime.datetime(2025, 1, 15, 14, 30, 45, tzinfo=datetime.timezone.utc)


@pytest.fixture(autouse=True)
def c_time_locale():
    previous = locale.setlocale(locale.LC_TIME)
    locale.setlocale(locale.LC_TIME, "C")
    yield
    locale.setlocale(locale.LC_TIME, previous)


@pytest.fixture
def instant():
    return INSTANT


@pytest.fixture
def provider():
    return TimezoneDataProvider(local_identifier="America/Chicago")


@pytest.fixture
def kv():
    return MemoryKeyValueStore()


@pytest.fixture
def store(kv):
    return KeyValueSettingsStore(kv)


@pytest.fixture
def manager(store, provider):
    return TimezoneManager(store=store, provider=provider)
