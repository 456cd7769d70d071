"""Ordered keyword-rule intent classification."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum


class Intent(str, Enum):
    SEARCH = "search"
    CARD = "card"
    SUMMARIZE = "summarize"
    HELP = "help"
    CODE_REVIEW = "code_review"
    CODE_ANALYSIS = "code_analysis"
    CODE_GENERATE = "code_generate"
    GIT_STATUS = "git_status"
    GIT_COMMIT = "git_commit"
    GIT_BRANCH = "git_branch"
    PROJECT_INFO = "project_info"
    DEPLOYMENT = "deployment"
    ENVIRONMENT = "environment"
    CHAT = "chat"


@dataclass(frozen=True, slots=True)
class IntentRule:
    pattern: re.Pattern[str]
    intent: Intent

    def matches(self, text: str) -> bool:
        return self.pattern.search(text) is not None


def _rule(pattern: str, intent: Intent) -> IntentRule:
    return IntentRule(re.compile(pattern, flags=re.IGNORECASE), intent)


# Evaluated top to bottom; the first matching rule wins. Rules overlap
# ("search for card games" also mentions a card), so the order is part of
# the command grammar.
INTENT_RULES: tuple[IntentRule, ...] = (
    _rule(r"^search\b", Intent.SEARCH),
    _rule(r"\bcard\b|^generate card", Intent.CARD),
    _rule(r"\bsummary\b|summarize", Intent.SUMMARIZE),
    _rule(r"help|commands", Intent.HELP),
    _rule(r"^review code|code review", Intent.CODE_REVIEW),
    _rule(r"^analyze|analysis", Intent.CODE_ANALYSIS),
    _rule(r"^generate code|^create code", Intent.CODE_GENERATE),
    _rule(r"^git status|^status", Intent.GIT_STATUS),
    _rule(r"^commit", Intent.GIT_COMMIT),
    _rule(r"^branch", Intent.GIT_BRANCH),
    _rule(r"^project|^dashboard", Intent.PROJECT_INFO),
    _rule(r"^deploy", Intent.DEPLOYMENT),
    _rule(r"^env", Intent.ENVIRONMENT),
)


def classify(text: str, rules: tuple[IntentRule, ...] = INTENT_RULES) -> Intent:
    normalized = text.strip()
    for rule in rules:
        if rule.matches(normalized):
            return rule.intent
    return Intent.CHAT
