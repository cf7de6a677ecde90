"""Custom exception hierarchy for quanires.

Provides specific exception types for each failure scenario so the
navigation layer can decide what is fatal and what only degrades the session.
"""


class QuaniresError(Exception):
    """Base exception for all quanires errors."""

    pass


class ScraperError(QuaniresError):
    """Raised when the remote catalog cannot be queried."""

    pass


class RequestError(ScraperError):
    """Raised on network, transport, timeout or response decoding failures."""

    pass


class EmptyResultError(ScraperError):
    """Raised when a search or a stream-link lookup yields nothing."""

    pass


class MissingListUrlError(ScraperError):
    """Raised when a title page does not expose its chapter-list endpoint."""

    pass


class MissingTokenError(ScraperError):
    """Raised when a title page does not expose a CSRF token."""

    pass


class TrackerError(QuaniresError):
    """Raised when the watch history is unavailable."""

    pass


class SavePathError(TrackerError):
    """Raised when the save directory cannot be determined."""

    pass


class SaveFileError(TrackerError):
    """Raised when the history file cannot be created, read or written."""

    pass


class UnsupportedPlatformError(TrackerError):
    """Raised on operating systems without a known save directory."""

    pass


class NavigationError(QuaniresError):
    """Raised when the interactive flow cannot continue."""

    pass


class NoChaptersError(NavigationError):
    """Raised when a title has an empty chapter list."""

    pass


class PromptError(QuaniresError):
    """Raised when the terminal prompt fails."""

    pass


class VideoPlaybackError(QuaniresError):
    """Raised when the external player cannot be launched."""

    pass
