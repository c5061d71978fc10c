"""TimezoneBar package."""

from tzbar.version import __version__  # central version string

APP_NAME = "TimezoneBar"
