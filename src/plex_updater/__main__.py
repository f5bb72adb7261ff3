"""Entry point for ``python -m plex_updater``."""

from plex_updater.main import run

if __name__ == "__main__":
    run()
