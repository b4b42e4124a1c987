"""Redirect policy: decides whether a URL may be probed for a redirect."""
from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any, Iterable

import httpx


class RedirectMode(str, enum.Enum):
    NEVER = "never"
    ALWAYS = "always"
    DOMAINS = "domains"


@dataclass(frozen=True)
class RedirectPolicy:
    """One of ``never``, ``always`` or a list of allowed domain suffixes.

    Build instances with :meth:`never`, :meth:`always` or
    :meth:`allowed_domains`; in config files use :meth:`parse`.
    """

    mode: RedirectMode = RedirectMode.NEVER
    domains: tuple[str, ...] = ()

    @classmethod
    def never(cls) -> RedirectPolicy:
        return cls(RedirectMode.NEVER)

    @classmethod
    def always(cls) -> RedirectPolicy:
        return cls(RedirectMode.ALWAYS)

    @classmethod
    def allowed_domains(cls, domains: Iterable[str]) -> RedirectPolicy:
        return cls(RedirectMode.DOMAINS, tuple(d.lower() for d in domains))

    @classmethod
    def parse(cls, value: Any) -> RedirectPolicy:
        """Read the config form: ``"none"``/``None``, ``"*"`` or a list of suffixes."""
        if isinstance(value, RedirectPolicy):
            return value
        if value is None or value == "none":
            return cls.never()
        if value == "*":
            return cls.always()
        if isinstance(value, str):
            raise ValueError(f"unknown redirect policy: {value}")
        if isinstance(value, (list, tuple, set, frozenset)) and all(isinstance(d, str) for d in value):
            return cls.allowed_domains(value)
        raise ValueError(f"redirect policy must be 'none', '*' or a list of domains, got {value!r}")

    def dump(self) -> str | list[str]:
        if self.mode is RedirectMode.NEVER:
            return "none"
        if self.mode is RedirectMode.ALWAYS:
            return "*"
        return list(self.domains)

    def test(self, url: httpx.URL | str) -> bool:
        if self.mode is RedirectMode.NEVER:
            return False
        if self.mode is RedirectMode.ALWAYS:
            return True
        if self.mode is RedirectMode.DOMAINS:
            try:
                host = httpx.URL(url).host if isinstance(url, str) else url.host
            except httpx.InvalidURL:
                return False
            # Suffix match: "b23.tv" also allows "www.b23.tv"
            return bool(host) and any(host.endswith(d) for d in self.domains)
        raise AssertionError(f"unhandled redirect mode: {self.mode}")
