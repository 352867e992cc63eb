from __future__ import annotations

import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

CAPITALIZED_TOKEN_PATTERN = re.compile(r"\b[A-Z]{3,}\b")
MIN_CAPITALIZED_TOKENS = 3
MAX_REPORTED_CAPITALIZED_TOKENS = 5
MAX_EXCLAMATION_MARKS = 2
MAX_QUESTION_MARKS = 3


@dataclass(frozen=True)
class IndicatorRule:
    category: str
    pattern: re.Pattern[str]
    explanation: str


@dataclass(frozen=True)
class IndicatorMatch:
    category: str
    explanation: str
    matches: tuple[str, ...]


def _keyword_pattern(*terms: str) -> re.Pattern[str]:
    return re.compile(r"\b(?:" + "|".join(terms) + r")\b", re.IGNORECASE)


DEFAULT_RULES: tuple[IndicatorRule, ...] = (
    IndicatorRule(
        category="phishing-keywords",
        pattern=_keyword_pattern(
            "verify", "suspended", "compromised", "security", "account", "bank",
            "paypal", "amazon", "microsoft", "apple", "update", "confirm",
        ),
        explanation=(
            "Contains words commonly used in phishing attempts to trick users "
            "into revealing personal information."
        ),
    ),
    IndicatorRule(
        category="scam-keywords",
        pattern=_keyword_pattern(
            "prince", "nigerian", "inheritance", "lottery", "prize", "million",
            "transfer", "help", "urgent", "immediately", "congratulations",
            "winner", "selected",
        ),
        explanation=(
            "Contains words associated with common scams like lottery, "
            "inheritance, or advance fee fraud."
        ),
    ),
    IndicatorRule(
        category="financial-terms",
        # Currency amounts start with a symbol, so they sit outside the word boundaries.
        pattern=re.compile(
            r"[$£€]\d[\d,]*(?:\.\d+)?|\b(?:dollars?|pounds?|euros?|million|thousand|"
            r"cash|money|funds?|transfer|deposit|refund|reward)\b",
            re.IGNORECASE,
        ),
        explanation=(
            "Contains financial terms or currency symbols, which are often used "
            "in spam to create urgency."
        ),
    ),
    IndicatorRule(
        category="identity-theft-requests",
        pattern=_keyword_pattern(
            "password", "pin", "ssn", "social security", "bank account", "credit card",
            "personal", "details", "information", "verify your identity",
        ),
        explanation=(
            "Requests personal or financial information, which is a red flag for "
            "identity theft attempts."
        ),
    ),
    IndicatorRule(
        category="urgency-language",
        pattern=_keyword_pattern(
            "urgent", "immediately", "now", "asap", "limited time", "expires",
            "act now", "click here", "verify now", "today only",
        ),
        explanation="Uses urgent language to pressure quick action, a common spam tactic.",
    ),
    IndicatorRule(
        category="embedded-links",
        pattern=re.compile(r"https?://\S+", re.IGNORECASE),
        explanation=(
            "Contains URLs, which are often used in spam to direct users to "
            "malicious websites."
        ),
    ),
    IndicatorRule(
        category="embedded-emails",
        pattern=re.compile(r"\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}\b"),
        explanation=(
            "Contains email addresses, which may be used for phishing or spam "
            "distribution."
        ),
    ),
)

CAPITALIZATION_EXPLANATION = (
    "Contains excessive capitalization, which is a common spam characteristic."
)
PUNCTUATION_EXPLANATION = (
    "Contains excessive punctuation marks, which is often used in spam to create emphasis."
)


def _distinct(values: Iterable[str]) -> tuple[str, ...]:
    """Drop case-insensitive repeats, keeping the first spelling in encounter order."""
    seen: set[str] = set()
    ordered: list[str] = []
    for value in values:
        folded = value.casefold()
        if folded in seen:
            continue
        seen.add(folded)
        ordered.append(value)
    return tuple(ordered)


def _capitalization_match(message: str) -> IndicatorMatch | None:
    tokens = CAPITALIZED_TOKEN_PATTERN.findall(message)
    if len(tokens) < MIN_CAPITALIZED_TOKENS:
        return None
    return IndicatorMatch(
        category="excessive-capitalization",
        explanation=CAPITALIZATION_EXPLANATION,
        matches=_distinct(tokens)[:MAX_REPORTED_CAPITALIZED_TOKENS],
    )


def _punctuation_match(message: str) -> IndicatorMatch | None:
    exclamations = message.count("!")
    questions = message.count("?")
    if exclamations > MAX_EXCLAMATION_MARKS:
        summary = f"{exclamations} exclamation marks"
    elif questions > MAX_QUESTION_MARKS:
        summary = f"{questions} question marks"
    else:
        return None
    return IndicatorMatch(
        category="excessive-punctuation",
        explanation=PUNCTUATION_EXPLANATION,
        matches=(summary,),
    )


def analyze_indicators(
    message: str,
    rules: Sequence[IndicatorRule] = DEFAULT_RULES,
) -> list[IndicatorMatch]:
    """Scan a message against the rule table and the formatting thresholds.

    Returns one entry per category with at least one match, in rule order.
    An empty list means no explainable indicator was found.
    """
    indicators: list[IndicatorMatch] = []
    for rule in rules:
        found = _distinct(match.group(0) for match in rule.pattern.finditer(message))
        if found:
            indicators.append(
                IndicatorMatch(category=rule.category, explanation=rule.explanation, matches=found)
            )

    for formatting_check in (_capitalization_match, _punctuation_match):
        indicator = formatting_check(message)
        if indicator is not None:
            indicators.append(indicator)
    return indicators
