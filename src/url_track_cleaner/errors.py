"""Exceptions raised while building or running a cleaner."""
from __future__ import annotations


class UrlCleanerError(Exception):
    pass


class CleanError(UrlCleanerError):
    """A URL could not be cleaned. Raised by ``UrlTrackCleaner.clean``."""


class InvalidInputUrl(CleanError):
    pass


class NetworkError(CleanError):
    """Transport failure during the redirect probe (connect, timeout, TLS)."""


class MissingLocation(CleanError):
    pass


class InvalidLocationUrl(CleanError):
    pass


class PatternError(UrlCleanerError, ValueError):
    """A reserve rule was given a regex that does not compile."""
