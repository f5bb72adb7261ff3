"""Exception hierarchy for plex_updater."""


class UpdaterError(Exception):
    """Base class for all updater errors."""


class ConfigurationError(UpdaterError):
    """Raised when required configuration is missing or invalid."""


class RetrievalError(UpdaterError):
    """Raised when a version or session count cannot be obtained."""


class RestartActionError(UpdaterError):
    """Raised when the container restart command reports failure."""


class LockHeldError(UpdaterError):
    """Raised when another update check already holds the run lock."""


class RunCancelledError(UpdaterError):
    """Raised when a stop was requested between drain attempts."""
