import os

from tzbar.core.logger import _get_log_file


def main():
    path = _get_log_file()
    print(f"Log file: {path}")
    if os.path.exists(path):
        with open(path, "r", encoding="utf-8") as f:
            print(f.read())
    else:
        print("No log file yet.")


if __name__ == "__main__":
    main()
