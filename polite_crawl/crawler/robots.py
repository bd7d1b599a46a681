# polite_crawl/crawler/robots.py
"""
Parser and checker for robots.txt rules.

Rules are kept per agent in declaration order. Resolution is sequential by
default: every matching prefix overrides the previous verdict, so the last
match wins. ``precedence="longest_match"`` switches to the usual
exclusion-protocol resolver (longest path wins, Allow wins ties).
"""
from __future__ import annotations

import re
from typing import Literal, Optional

from polite_crawl.crawler.models import AgentRuleSet, DirectiveKind, Rule

__all__ = ("parse_robots", "is_allowed", "Precedence", "WILDCARD_AGENT")

Precedence = Literal["last_match", "longest_match"]

WILDCARD_AGENT = "*"

_LINE_BREAK_RE = re.compile(r"\r\n|\r|\n")
_DIRECTIVES = {"allow": DirectiveKind.ALLOW, "disallow": DirectiveKind.DISALLOW}


def parse_robots(text: str) -> AgentRuleSet:
    """Parse robots.txt *text* into ``{agent: [Rule, ...]}``.

    Malformed lines are skipped; this never raises.
    """
    rules: AgentRuleSet = {}
    current: Optional[str] = None
    for raw in _LINE_BREAK_RE.split(text):
        line = raw.strip()
        if not line or line.startswith("#"):
            continue
        key, sep, val = line.partition(":")
        if not sep:
            continue
        key = key.strip().lower()
        val = val.strip()
        if key == "user-agent":
            current = val
            rules.setdefault(current, [])
        elif key in _DIRECTIVES and current is not None:
            rules[current].append(Rule(_DIRECTIVES[key], val))
    return rules


def is_allowed(
    agent: str,
    path: str,
    rules: AgentRuleSet,
    *,
    precedence: Precedence = "last_match",
) -> bool:
    """Return True if *agent* may fetch *path* under *rules*.

    An agent without an entry is unrestricted. Under ``last_match`` an empty
    rule path is a prefix of every path; ``longest_match`` ignores it.
    """
    agent_rules = rules.get(agent)
    if agent_rules is None:
        return True
    if precedence == "longest_match":
        return _longest_match(path, agent_rules)

    allowed = True
    for kind, rule_path in agent_rules:
        if path.startswith(rule_path):
            allowed = kind is DirectiveKind.ALLOW
    return allowed


def _longest_match(path: str, agent_rules: list[Rule]) -> bool:
    best_len = -1
    allowed = True
    for kind, rule_path in agent_rules:
        if not rule_path or not path.startswith(rule_path):
            continue
        length = len(rule_path)
        if length > best_len or (length == best_len and kind is DirectiveKind.ALLOW):
            best_len = length
            allowed = kind is DirectiveKind.ALLOW
    return allowed
