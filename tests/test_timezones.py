import datetime

from tzbar.utils.timezones import TimezoneDataProvider, get_timezone, to_utc


def test_valid_identifiers(provider):
    assert provider.is_valid_identifier("Asia/Kolkata")
    assert provider.is_valid_identifier("UTC")
    assert not provider.is_valid_identifier("Mars/Olympus_Mons")
    assert not provider.is_valid_identifier("")
    assert not provider.is_valid_identifier(None)
    assert not provider.is_valid_identifier("../etc/passwd")


def test_offset_minutes(provider, instant):
    assert provider.offset_minutes("Asia/Kolkata", instant) == 330
    assert provider.offset_minutes("UTC", instant) == 0
    assert provider.offset_minutes("America/Chicago", instant) == -360


def test_abbreviation_reports_numeric_zones_gmt_style(provider, instant):
    assert provider.abbreviation("Asia/Dubai", instant) == "GMT+4"
    assert provider.abbreviation("America/Chicago", instant) == "CST"


def test_pinned_local_identifier(provider):
    assert provider.current_local_identifier() == "America/Chicago"


def test_detected_local_identifier_is_valid():
    detected = TimezoneDataProvider().current_local_identifier()
    assert TimezoneDataProvider().is_valid_identifier(detected)


def test_all_known_identifiers(provider):
    known = provider.all_known_identifiers()
    assert {"UTC", "Europe/Lisbon", "Asia/Kolkata"} <= known


def test_get_timezone_falls_back_to_local_zone():
    local = get_timezone(None)
    assert get_timezone("nope/nope") == local
    assert get_timezone("../etc/passwd") == local
    assert get_timezone("Asia/Tokyo").utcoffset(datetime.datetime(2025, 1, 1)) == datetime.timedelta(hours=9)


def test_to_utc():
    aware = datetime.datetime(2025, 1, 15, 20, 0, tzinfo=datetime.timezone(datetime.timedelta(hours=5, minutes=30)))
    assert to_utc(aware) == datetime.datetime(2025, 1, 15, 14, 30, tzinfo=datetime.timezone.utc)
    assert to_utc(datetime.datetime(2025, 1, 15, 14, 30)).tzinfo is datetime.timezone.utc
    assert to_utc().tzinfo is datetime.timezone.utc
