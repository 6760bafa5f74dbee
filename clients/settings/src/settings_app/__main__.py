"""Thin runnable wrapper for the settings CLI."""

from settings_app.cli import main

if __name__ == "__main__":
    raise SystemExit(main())
