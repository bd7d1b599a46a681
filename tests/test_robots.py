# File: tests/test_robots.py
import pytest

from polite_crawl.crawler.models import DirectiveKind, Rule
from polite_crawl.crawler.policy import UNREACHABLE_POLICY
from polite_crawl.crawler.robots import is_allowed, parse_robots

ALLOW = DirectiveKind.ALLOW
DISALLOW = DirectiveKind.DISALLOW


def test_parse_groups_rules_by_agent_in_order():
    text = (
        "User-agent: Bot\n"
        "Disallow: /private\n"
        "Allow: /private/open\n"
        "\n"
        "User-agent: *\n"
        "Disallow: /tmp\n"
    )
    rules = parse_robots(text)
    assert rules == {
        "Bot": [Rule(DISALLOW, "/private"), Rule(ALLOW, "/private/open")],
        "*": [Rule(DISALLOW, "/tmp")],
    }


def test_directives_before_first_agent_are_discarded():
    rules = parse_robots("Disallow: /a\nAllow: /b\n")
    assert rules == {}


def test_mixed_line_terminators():
    rules = parse_robots("User-agent: *\r\nDisallow: /a\rDisallow: /b\nAllow: /c")
    assert [r.path for r in rules["*"]] == ["/a", "/b", "/c"]


def test_comments_blank_and_malformed_lines_are_skipped():
    text = "# header\n   # indented comment\nUser-agent: *\ngarbage line\n\nDisallow: /x\n"
    assert parse_robots(text) == {"*": [Rule(DISALLOW, "/x")]}


def test_value_split_on_first_colon_only():
    rules = parse_robots("User-agent: *\nDisallow: /a:b\n")
    assert rules["*"] == [Rule(DISALLOW, "/a:b")]


def test_directive_case_insensitive_agent_case_sensitive():
    rules = parse_robots("USER-AGENT: MyBot\nDISALLOW: /a\nuser-agent: mybot\nallow: /b\n")
    assert rules["MyBot"] == [Rule(DISALLOW, "/a")]
    assert rules["mybot"] == [Rule(ALLOW, "/b")]


def test_repeated_agent_accumulates_rules():
    text = "User-agent: *\nDisallow: /a\nUser-agent: Other\nUser-agent: *\nDisallow: /b\n"
    rules = parse_robots(text)
    assert rules["*"] == [Rule(DISALLOW, "/a"), Rule(DISALLOW, "/b")]
    assert rules["Other"] == []


def test_agent_without_rules_has_empty_list():
    assert parse_robots("User-agent: Lonely\n") == {"Lonely": []}


def test_unreachable_sentinel_parses_to_nothing():
    assert parse_robots(UNREACHABLE_POLICY) == {}
    assert parse_robots("") == {}


def test_unknown_directives_ignored():
    rules = parse_robots("User-agent: *\nCrawl-delay: 10\nSitemap: https://x/s.xml\nDisallow: /a\n")
    assert rules == {"*": [Rule(DISALLOW, "/a")]}


@pytest.mark.parametrize("path", ["/", "/anything", "/private/x"])
def test_absent_agent_is_always_allowed(path):
    rules = parse_robots("User-agent: Other\nDisallow: /\n")
    assert is_allowed("Me", path, rules) is True


def test_last_match_wins():
    rules = {"X": [Rule(DISALLOW, "/a"), Rule(ALLOW, "/a")]}
    assert is_allowed("X", "/a/page", rules) is True
    rules = {"X": [Rule(ALLOW, "/a"), Rule(DISALLOW, "/a")]}
    assert is_allowed("X", "/a/page", rules) is False


def test_last_match_ignores_specificity():
    rules = {"X": [Rule(ALLOW, "/a/page"), Rule(DISALLOW, "/a")]}
    assert is_allowed("X", "/a/page", rules) is False


def test_longest_match_prefers_specific_rule():
    rules = {"X": [Rule(ALLOW, "/a/page"), Rule(DISALLOW, "/a")]}
    assert is_allowed("X", "/a/page", rules, precedence="longest_match") is True
    assert is_allowed("X", "/a/other", rules, precedence="longest_match") is False


def test_longest_match_allow_wins_tie():
    rules = {"X": [Rule(DISALLOW, "/a"), Rule(ALLOW, "/a")]}
    assert is_allowed("X", "/a", rules, precedence="longest_match") is True


def test_non_matching_rules_leave_default_allow():
    rules = parse_robots("User-agent: *\nDisallow: /private\n")
    assert is_allowed("*", "/", rules) is True
    assert is_allowed("*", "/public", rules) is True
    assert is_allowed("*", "/private/page", rules) is False


def test_empty_disallow_matches_every_path():
    rules = parse_robots("User-agent: *\nDisallow:\n")
    assert rules["*"] == [Rule(DISALLOW, "")]
    assert is_allowed("*", "/anything", rules) is False
    assert is_allowed("*", "/", rules) is False


def test_empty_allow_after_disallow_reopens_everything():
    rules = {"*": [Rule(DISALLOW, "/a"), Rule(ALLOW, "")]}
    assert is_allowed("*", "/a/b", rules) is True


def test_longest_match_ignores_empty_rule_path():
    rules = {"*": [Rule(DISALLOW, "")]}
    assert is_allowed("*", "/anything", rules, precedence="longest_match") is True


def test_parsing_is_idempotent():
    text = "User-agent: A\nDisallow: /x\nAllow: /x/y\nUser-agent: *\nDisallow: /\nAllow: /pub\n"
    first, second = parse_robots(text), parse_robots(text)
    for agent in ("A", "*", "B"):
        for path in ("/", "/x", "/x/y/z", "/pub/1", "/other"):
            assert is_allowed(agent, path, first) == is_allowed(agent, path, second)
