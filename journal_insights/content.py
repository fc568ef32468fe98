from __future__ import annotations

from .keywords import (
    CONTENT_PATTERN_FLAGS,
    CONTENT_THEMES,
    SUBSTRING_SENTIMENT,
    TOKEN_SENTIMENT,
    KeywordRuleSet,
)


def sentiment_label(positive: int, negative: int) -> str:
    if positive > negative:
        return "positive"
    if negative > positive:
        return "negative"
    return "neutral"


def substring_sentiment(text: str, rules: KeywordRuleSet = SUBSTRING_SENTIMENT) -> str:
    """Label from how many list words occur anywhere in the text."""
    counts = rules.count(text)
    return sentiment_label(counts.get("positive", 0), counts.get("negative", 0))


def token_counts(text: str, rules: KeywordRuleSet = TOKEN_SENTIMENT) -> tuple[int, int]:
    """Count listed words present as a whole whitespace token; repeats count once."""
    tokens = set(text.lower().split())
    return (
        sum(1 for w in rules.keywords("positive") if w in tokens),
        sum(1 for w in rules.keywords("negative") if w in tokens),
    )


def token_sentiment_score(text: str, rules: KeywordRuleSet = TOKEN_SENTIMENT) -> int:
    positive, negative = token_counts(text, rules)
    return positive - negative


def extract_content_themes(text: str, rules: KeywordRuleSet = CONTENT_THEMES) -> list[str]:
    return rules.matches(text)


def content_flags(text: str) -> dict[str, bool]:
    return CONTENT_PATTERN_FLAGS.flags(text)


def word_count(text: str) -> int:
    # Split on single spaces: "" counts as one word, runs of spaces add empties.
    return len(text.split(" "))
