class AudioLoadError(Exception):
    """Raised when an audio file cannot be decoded or holds no samples."""


class LoopOutOfRangeError(ValueError):
    """Raised when a loop's bounds do not fit inside the buffer being written."""


class NoLoopSelectedError(Exception):
    """Raised when an export needs a loop but the session has none."""
