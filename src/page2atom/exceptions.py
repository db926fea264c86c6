"""Custom exceptions for page2atom.

Every error a feed run can hit derives from Page2AtomError so callers can
isolate failures per feed with a single except clause.
"""

from typing import Optional


class Page2AtomError(Exception):
    """Base exception class for all page2atom errors."""

    pass


class ConfigurationError(Page2AtomError):
    """Raised when a feed definition is missing, duplicated or malformed.

    Attributes:
        feed: Title (or index) of the offending feed, if known.
        key: Configuration key that failed validation, if known.
    """

    def __init__(self, message: str, feed: Optional[str] = None, key: Optional[str] = None):
        self.feed = feed
        self.key = key

        location = []
        if feed is not None:
            location.append(f"feed {feed!r}")
        if key is not None:
            location.append(f"key {key!r}")

        prefix = f"Invalid configuration ({', '.join(location)})" if location else "Invalid configuration"
        super().__init__(f"{prefix}: {message}")


class FetchError(Page2AtomError):
    """Raised when a web page cannot be fetched.

    Attributes:
        url: The page URL that failed.
        status_code: HTTP status of the last response, if any.
    """

    def __init__(self, url: str, message: str, status_code: Optional[int] = None):
        self.url = url
        self.status_code = status_code
        super().__init__(f"Failed to fetch {url}: {message}")


class ParseError(Page2AtomError):
    """Raised when a persisted feed file is unreadable or has no entries.

    Attributes:
        feed: Title of the feed being merged, if known.
        path: The feed file that failed to parse.
    """

    def __init__(self, path: str, message: str, feed: Optional[str] = None):
        self.feed = feed
        self.path = path
        subject = f"feed {feed!r} ({path})" if feed else path
        super().__init__(f"Failed to parse {subject}: {message}")


class PersistenceError(Page2AtomError):
    """Raised when a feed file cannot be written.

    Attributes:
        path: The feed file that failed to write.
    """

    def __init__(self, path: str, message: str):
        self.path = path
        super().__init__(f"Failed to write {path}: {message}")
