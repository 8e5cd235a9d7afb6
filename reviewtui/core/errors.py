# reviewtui/core/errors.py


class ReviewTuiError(Exception):
    """Base class for errors raised by reviewtui."""


class StorageError(ReviewTuiError):
    """A database call failed."""


class VcsError(ReviewTuiError):
    """A Git query failed."""


class ChannelClosed(ReviewTuiError):
    """The event bus was closed while the run loop was waiting on it."""
