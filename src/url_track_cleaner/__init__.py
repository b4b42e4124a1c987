"""Strip tracking parameters from URLs, optionally resolving one short-link redirect."""
from url_track_cleaner.cleaner import DEFAULT_USER_AGENT, UrlTrackCleaner, UrlTrackCleanerBuilder
from url_track_cleaner.dns import HostResolver, SystemResolver
from url_track_cleaner.errors import (
    CleanError,
    InvalidInputUrl,
    InvalidLocationUrl,
    MissingLocation,
    NetworkError,
    PatternError,
    UrlCleanerError,
)
from url_track_cleaner.models import CleanerConfig, RuleConfig, load_cleaner_config
from url_track_cleaner.policy import RedirectMode, RedirectPolicy
from url_track_cleaner.rules import ReserveRule

__all__ = [
    "DEFAULT_USER_AGENT",
    "CleanError",
    "CleanerConfig",
    "HostResolver",
    "InvalidInputUrl",
    "InvalidLocationUrl",
    "MissingLocation",
    "NetworkError",
    "PatternError",
    "RedirectMode",
    "RedirectPolicy",
    "ReserveRule",
    "RuleConfig",
    "SystemResolver",
    "UrlCleanerError",
    "UrlTrackCleaner",
    "UrlTrackCleanerBuilder",
    "load_cleaner_config",
]
