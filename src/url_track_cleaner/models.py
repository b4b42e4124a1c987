"""Serializable cleaner configuration, as found in YAML/JSON rule files."""
from __future__ import annotations

import logging
from typing import Any

import httpx
import yaml
from pydantic import BaseModel, Field, field_validator

from url_track_cleaner.cleaner import DEFAULT_TIMEOUT, UrlTrackCleaner
from url_track_cleaner.dns import HostResolver
from url_track_cleaner.policy import RedirectPolicy
from url_track_cleaner.rules import ReserveRule

logger = logging.getLogger(__name__)


class RuleConfig(BaseModel):
    url_match: str  # regex, searched in the full url
    reserve_queries: list[str] = Field(default_factory=list)

    @field_validator("url_match")
    def url_match_must_compile(cls, v):
        ReserveRule.from_pattern(v)  # PatternError is a ValueError
        return v

    def to_rule(self) -> ReserveRule:
        return ReserveRule.from_pattern(self.url_match, self.reserve_queries)


class CleanerConfig(BaseModel):
    """Everything needed to build a :class:`UrlTrackCleaner`.

    ``redirect_policy`` is ``"none"`` (default), ``"*"`` or a list of
    domain suffixes. Rules are tried in file order.
    """

    redirect_policy: str | list[str] | None = "none"
    reserve_rules: list[RuleConfig] = Field(default_factory=list)
    user_agent: str | None = None

    @field_validator("redirect_policy")
    def redirect_policy_must_be_known(cls, v):
        RedirectPolicy.parse(v)
        return v

    @property
    def policy(self) -> RedirectPolicy:
        return RedirectPolicy.parse(self.redirect_policy)

    def rules(self) -> list[ReserveRule]:
        return [r.to_rule() for r in self.reserve_rules]

    def build(
        self,
        client: httpx.AsyncClient | None = None,
        resolver: HostResolver | None = None,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> UrlTrackCleaner:
        builder = (
            UrlTrackCleaner.builder()
            .redirect_policy(self.policy)
            .reserve_rules(self.rules())
            .timeout(timeout)
        )
        if self.user_agent:
            builder.user_agent(self.user_agent)
        if client is not None:
            builder.client(client)
        if resolver is not None:
            builder.resolver(resolver)
        return builder.build()


def load_cleaner_config(path: str) -> CleanerConfig:
    """Parse a YAML (or JSON) config file. A missing file gives the defaults."""
    try:
        with open(path) as f:
            data: Any = yaml.safe_load(f)
    except FileNotFoundError:
        logger.warning("Cleaner config not found: %s", path)
        return CleanerConfig()

    config = CleanerConfig.model_validate(data or {})
    logger.info("Loaded %d reserve rules from %s", len(config.reserve_rules), path)
    return config
