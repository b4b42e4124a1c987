import pytest

from url_track_cleaner.errors import PatternError
from url_track_cleaner.rules import ReserveRule


def test_from_pattern_matches_full_url():
    rule = ReserveRule.from_pattern(r"^http(s)?://www.bilibili.com/.*", ["t"])
    assert rule.matches("https://www.bilibili.com/video/BV11111?t=360&track_id=2")
    assert not rule.matches("https://www.acfun.tv/video/BV11111")


def test_unanchored_pattern_searches_anywhere():
    rule = ReserveRule.from_pattern(r"track_id=", [])
    assert rule.matches("https://www.example.com/video?track_id=2")


def test_invalid_pattern_raises_pattern_error():
    with pytest.raises(PatternError):
        ReserveRule.from_pattern(r"^https://(unclosed", ["t"])

    # also usable wherever a ValueError is expected
    with pytest.raises(ValueError):
        ReserveRule.from_pattern(r"[", [])


def test_reserve_keys_keep_order_and_drop_duplicates():
    rule = ReserveRule.from_pattern(".*", ["v", "t", "v", "list"])
    assert rule.reserve_keys == ("v", "t", "list")


def test_empty_reserve_keys_allowed():
    rule = ReserveRule.from_pattern(".*", [])
    assert rule.reserve_keys == ()


def test_from_dict_and_to_dict():
    rule = ReserveRule.from_dict(
        {"url_match": r"^http(s)?://www.bilibili.com/.*", "reserve_queries": ["t"]}
    )
    assert rule.reserve_keys == ("t",)
    assert rule.to_dict() == {"url_match": r"^http(s)?://www.bilibili.com/.*", "reserve_queries": ["t"]}


def test_from_dict_requires_url_match():
    with pytest.raises(PatternError):
        ReserveRule.from_dict({"reserve_queries": ["t"]})
