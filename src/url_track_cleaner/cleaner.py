"""Tracking-parameter cleaner with optional one-hop short-link resolution."""
from __future__ import annotations

import asyncio
import logging
from typing import Iterable, Sequence
from urllib.parse import unquote_plus

import httpx

from url_track_cleaner.dns import HostResolver, SystemResolver
from url_track_cleaner.errors import (
    CleanError,
    InvalidInputUrl,
    InvalidLocationUrl,
    MissingLocation,
    NetworkError,
)
from url_track_cleaner.policy import RedirectPolicy
from url_track_cleaner.rules import ReserveRule

logger = logging.getLogger(__name__)

# Many link shorteners serve a different page (or no redirect) to non-browser agents
DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) Chrome/123.0.0.0 Safari/537.36"
)

DEFAULT_TIMEOUT = 10.0


def _parse_input(url: httpx.URL | str) -> httpx.URL:
    try:
        parsed = httpx.URL(url)
    except (httpx.InvalidURL, TypeError) as e:
        raise InvalidInputUrl(f"invalid url {url!r}: {e}") from e
    if not parsed.scheme:
        raise InvalidInputUrl(f"relative url without a base: {url!r}")
    return parsed


class UrlTrackCleaner:
    """Removes tracking query parameters from URLs.

    For URLs allowed by the redirect policy whose host resolves, one GET is
    sent first and a 3xx ``Location`` replaces the URL (a single hop, the
    target is never requested). Then the first reserve rule matching the URL
    decides which query parameters survive; with no matching rule the query
    is dropped.

    Usage:
        cleaner = UrlTrackCleaner.builder().reserve_rules(rules).build()
        async with cleaner:
            url = await cleaner.clean("https://b23.tv/xxxx")

    Instances hold no per-call state and can be shared between tasks.
    """

    def __init__(
        self,
        redirect_policy: RedirectPolicy | None = None,
        reserve_rules: Sequence[ReserveRule] = (),
        user_agent: str | None = None,
        client: httpx.AsyncClient | None = None,
        resolver: HostResolver | None = None,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        self._redirect_policy = redirect_policy or RedirectPolicy.never()
        self._reserve_rules = tuple(reserve_rules)
        self._user_agent = user_agent or DEFAULT_USER_AGENT
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            follow_redirects=False,
            timeout=httpx.Timeout(timeout),
        )
        self._resolver = resolver or SystemResolver()

    @staticmethod
    def builder() -> UrlTrackCleanerBuilder:
        return UrlTrackCleanerBuilder()

    @property
    def redirect_policy(self) -> RedirectPolicy:
        return self._redirect_policy

    @property
    def reserve_rules(self) -> tuple[ReserveRule, ...]:
        return self._reserve_rules

    @property
    def user_agent(self) -> str:
        return self._user_agent

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> UrlTrackCleaner:
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def clean(self, url: httpx.URL | str) -> httpx.URL:
        """Resolve at most one redirect, then strip the query by the reserve rules.

        Raises ``InvalidInputUrl``, ``NetworkError``, ``MissingLocation`` or
        ``InvalidLocationUrl``. A failed probe aborts the call; there is no
        fallback to cleaning the unresolved URL.

        A relative ``Location`` is joined to the probed URL, as httpx does when
        it follows redirects. A strict absolute-URL parse would reject it as
        ``InvalidLocationUrl`` instead.
        """
        working = _parse_input(url)
        if await self._should_probe(working):
            working = await self._resolve_redirect(working)
        return self.clean_without_redirect(working)

    async def clean_many(self, urls: Iterable[httpx.URL | str]) -> list[httpx.URL | CleanError]:
        """Clean concurrently; each slot holds the cleaned URL or the error for that input."""
        results = await asyncio.gather(*(self.clean(u) for u in urls), return_exceptions=True)
        for r in results:
            if isinstance(r, BaseException) and not isinstance(r, CleanError):
                raise r
        return results

    async def _should_probe(self, url: httpx.URL) -> bool:
        if not self._redirect_policy.test(url):
            return False
        host = url.host
        if not host:
            return False
        try:
            addresses = await self._resolver.lookup(host)
        except OSError as e:
            logger.debug("Skipping redirect probe, %s does not resolve: %s", host, e)
            return False
        if not addresses:
            logger.debug("Skipping redirect probe, %s has no addresses", host)
            return False
        return True

    async def _resolve_redirect(self, url: httpx.URL) -> httpx.URL:
        try:
            # Streamed so the body of a non-redirect page is never downloaded
            async with self._client.stream(
                "GET",
                url,
                headers={"User-Agent": self._user_agent},
                follow_redirects=False,
            ) as resp:
                # Any 3xx, not only the statuses httpx would follow itself
                if not 300 <= resp.status_code < 400:
                    return resp.url
                location = resp.headers.get("Location")
        except httpx.RemoteProtocolError as e:
            # httpx builds the next request for 301/302/303/307/308 even without
            # following it, and fails there on an unparseable Location
            if str(e).startswith("Invalid URL in location header"):
                raise InvalidLocationUrl(f"invalid Location from {url}: {e}") from e
            raise NetworkError(f"redirect probe for {url} failed: {e}") from e
        except httpx.HTTPError as e:
            raise NetworkError(f"redirect probe for {url} failed: {e}") from e

        if location is None:
            raise MissingLocation(f"{url} answered {resp.status_code} without a Location header")
        try:
            target = httpx.URL(location)
            if target.is_relative_url:
                target = url.join(target)
        except (httpx.InvalidURL, TypeError) as e:
            raise InvalidLocationUrl(f"invalid Location {location!r} from {url}: {e}") from e
        if not target.scheme or not target.host:
            raise InvalidLocationUrl(f"invalid Location {location!r} from {url}")

        logger.info("Resolved %s -> %s (%d)", url, target, resp.status_code)
        return target

    def clean_without_redirect(self, url: httpx.URL | str) -> httpx.URL:
        """Apply the first matching reserve rule to the query. No network access."""
        url = _parse_input(url) if isinstance(url, str) else url
        serialized = str(url)
        for rule in self._reserve_rules:
            if rule.matches(serialized):
                # Kept pairs are copied byte for byte; only the key is decoded to compare
                kept = [
                    pair
                    for pair in url.query.decode("ascii").split("&")
                    if pair and unquote_plus(pair.split("=", 1)[0]) in rule.reserve_keys
                ]
                # An empty string keeps the "?" so a matched rule stays visible
                return url.copy_with(query="&".join(kept).encode("ascii"))
        return url.copy_with(query=None)


class UrlTrackCleanerBuilder:
    """Collects optional settings for :class:`UrlTrackCleaner`."""

    def __init__(self) -> None:
        self._redirect_policy = RedirectPolicy.never()
        self._reserve_rules: list[ReserveRule] = []
        self._user_agent: str | None = None
        self._client: httpx.AsyncClient | None = None
        self._resolver: HostResolver | None = None
        self._timeout = DEFAULT_TIMEOUT

    def redirect_policy(self, policy: RedirectPolicy) -> UrlTrackCleanerBuilder:
        self._redirect_policy = policy
        return self

    def reserve_rules(self, rules: Iterable[ReserveRule]) -> UrlTrackCleanerBuilder:
        self._reserve_rules = list(rules)
        return self

    def user_agent(self, user_agent: str) -> UrlTrackCleanerBuilder:
        self._user_agent = user_agent
        return self

    def client(self, client: httpx.AsyncClient) -> UrlTrackCleanerBuilder:
        self._client = client
        return self

    def resolver(self, resolver: HostResolver) -> UrlTrackCleanerBuilder:
        self._resolver = resolver
        return self

    def timeout(self, seconds: float) -> UrlTrackCleanerBuilder:
        self._timeout = seconds
        return self

    def build(self) -> UrlTrackCleaner:
        return UrlTrackCleaner(
            redirect_policy=self._redirect_policy,
            reserve_rules=self._reserve_rules,
            user_agent=self._user_agent,
            client=self._client,
            resolver=self._resolver,
            timeout=self._timeout,
        )
