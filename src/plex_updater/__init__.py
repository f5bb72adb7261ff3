"""Stream-aware update checker for a Plex Media Server container.

Checks the plex.tv release feed for a newer build and restarts the
container once no one is watching, or after a bounded wait.
"""

__version__ = "0.1.0"
