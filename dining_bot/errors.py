"""
Exception hierarchy for the dining bot.
Lookups raise FetchError/ParseError, sends raise SendError, the registry raises
PersistenceError and ListenerFileError.
"""

from typing import Optional


class DiningBotError(Exception):
    """Base class for all bot errors"""


class FetchError(DiningBotError):
    """A menu or events page could not be retrieved"""

    def __init__(self, url: str, reason: str):
        self.url = url
        self.reason = reason
        super().__init__(f"Couldn't fetch {url}: {reason}")


class ParseError(DiningBotError):
    """The fetched page does not have the expected structure"""


class SendError(DiningBotError):
    """A chat platform rejected or could not deliver a message"""


class NotConfiguredError(SendError):
    """The destination's platform has no client/credentials at runtime"""

    def __init__(self, platform: str):
        self.platform = platform
        super().__init__(f"Platform '{platform}' is not configured")


class PersistenceError(DiningBotError):
    """The listener file could not be written"""


class ListenerFileError(DiningBotError):
    """A persisted subscription line is corrupt"""

    def __init__(self, path: str, line_number: int, line: str, reason: Optional[str] = None):
        self.path = path
        self.line_number = line_number
        self.line = line
        message = f"{path}:{line_number}: can't parse listener line {line!r}"
        if reason:
            message += f" ({reason})"
        super().__init__(message)
