import argparse
import datetime
import locale
import sys

from tzbar import __version__
from tzbar.core.logger import log, set_log_level
from tzbar.core.settings_manager import KeyValueSettingsStore, SettingsManager
from tzbar.core.timezone_manager import TimezoneManager


def build_manager() -> TimezoneManager:
    """Composition root: the SQLite store in the config dir behind the manager."""
    store = KeyValueSettingsStore(SettingsManager())
    return TimezoneManager(store=store)


def print_once(manager: TimezoneManager) -> None:
    now = datetime.datetime.now(datetime.timezone.utc)
    title = manager.menu_bar_text(now)
    print(title or "[icon]")
    rows = manager.rows(now)
    if not rows:
        print("  No timezones configured")
        return
    city_w = max(len(r.city) for r in rows)
    time_w = max(len(r.time) for r in rows)
    for r in rows:
        print(f"  {r.city:<{city_w}}  {r.time:<{time_w}}  {r.suffix}".rstrip())


def main(argv=None):
    parser = argparse.ArgumentParser(description="TimezoneBar world clock")
    parser.add_argument("--print", dest="print_once", action="store_true",
                        help="Print the menu bar title and dropdown rows once, then exit.")
    parser.add_argument("--reset", action="store_true", help="Restore default settings before starting.")
    parser.add_argument("--log-level", help="DEBUG, INFO, WARNING, ERROR, CRITICAL or DISABLED.")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    args = parser.parse_args(argv)

    if args.log_level:
        set_log_level(args.log_level)

    # SYSTEM time format follows the user's locale
    try:
        locale.setlocale(locale.LC_TIME, "")
    except locale.Error as e:
        log.warning("Locale setup failed, using C time format: %s", e)

    manager = build_manager()
    if args.reset:
        manager.reset()

    if args.print_once:
        print_once(manager)
        return 0

    from PySide6.QtWidgets import QApplication
    from tzbar.gui.status_bar_controller import StatusBarController

    app = QApplication(sys.argv if argv is None else [sys.argv[0], *argv])
    app.setQuitOnLastWindowClosed(False)
    controller = StatusBarController(manager)
    log.info("TimezoneBar started.")
    code = app.exec()
    controller.timer.stop()
    return code


if __name__ == "__main__":
    sys.exit(main())
