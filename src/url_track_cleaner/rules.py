"""Reserve rules: which query parameters survive cleaning for matching URLs."""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Iterable

from url_track_cleaner.errors import PatternError


@dataclass(frozen=True)
class ReserveRule:
    """A URL regex plus the query keys to keep when it matches.

    The pattern is searched against the full serialized URL, so anchor it
    with ``^`` to match from the scheme. An empty ``reserve_keys`` still
    counts as a match: the URL keeps an empty query instead of none.
    """

    pattern: re.Pattern[str]
    reserve_keys: tuple[str, ...] = ()

    @classmethod
    def from_pattern(cls, pattern: str, reserve_keys: Iterable[str] = ()) -> ReserveRule:
        try:
            compiled = re.compile(pattern)
        except re.error as e:
            raise PatternError(f"invalid url pattern {pattern!r}: {e}") from e
        # Ordered set: keep first occurrence of each key
        return cls(compiled, tuple(dict.fromkeys(reserve_keys)))

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ReserveRule:
        """Build from ``{"url_match": "...", "reserve_queries": [...]}``."""
        try:
            pattern = data["url_match"]
        except KeyError:
            raise PatternError("reserve rule is missing 'url_match'") from None
        return cls.from_pattern(pattern, data.get("reserve_queries") or [])

    def to_dict(self) -> dict[str, Any]:
        return {"url_match": self.pattern.pattern, "reserve_queries": list(self.reserve_keys)}

    def matches(self, url: str) -> bool:
        return self.pattern.search(url) is not None
