from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Sequence


@dataclass(frozen=True)
class KeywordRuleSet:
    """Category -> keyword list, matched as case-insensitive substrings."""

    rules: Mapping[str, Sequence[str]]

    def keywords(self, category: str) -> Sequence[str]:
        return self.rules.get(category, ())

    def matches(self, text: str) -> list[str]:
        lowered = text.lower()
        return [cat for cat, words in self.rules.items() if any(w in lowered for w in words)]

    def matches_category(self, text: str, category: str) -> bool:
        lowered = text.lower()
        return any(w in lowered for w in self.keywords(category))

    def count(self, text: str) -> dict[str, int]:
        lowered = text.lower()
        return {cat: sum(1 for w in words if w in lowered) for cat, words in self.rules.items()}

    def flags(self, text: str) -> dict[str, bool]:
        hit = set(self.matches(text))
        return {cat: cat in hit for cat in self.rules}


@dataclass(frozen=True)
class MoodScale:
    scores: Mapping[str, int]
    default: int = 5
    case_insensitive: bool = False
    fallback_label: str = "😐"

    def score(self, mood: str | None) -> int:
        if not mood:
            return self.default
        key = mood.lower() if self.case_insensitive else mood
        return self.scores.get(key, self.default)


# Check-in emoji moods (analytics, insights, nudges, periodic recaps)
EMOJI_MOOD_SCALE = MoodScale(
    scores={
        "😊": 9, "🙂": 7, "😐": 5, "😞": 3, "😢": 1,
        "😡": 2, "😴": 4, "🤔": 6, "😌": 8, "😤": 4,
    },
)

# Word moods (recap cards)
LABEL_MOOD_SCALE = MoodScale(
    scores={
        "excited": 9, "happy": 8, "content": 7, "calm": 6, "neutral": 5,
        "tired": 4, "stressed": 3, "anxious": 2, "sad": 1, "angry": 0,
    },
    case_insensitive=True,
    fallback_label="neutral",
)


CONTENT_THEMES = KeywordRuleSet({
    "work": ("work", "job", "project"),
    "relationships": ("family", "friend", "relationship"),
    "health": ("health", "exercise", "diet"),
    "finance": ("money", "finance", "budget"),
})

RECAP_THEMES = KeywordRuleSet({
    "work": ("work", "job", "career"),
    "relationships": ("family", "friend", "relationship"),
    "health": ("health", "exercise", "diet"),
    "finance": ("money", "finance", "budget"),
    "personal": ("learn", "grow", "develop"),
})

CONTENT_PATTERN_FLAGS = KeywordRuleSet({
    "positiveContent": ("happy", "good", "great"),
    "negativeContent": ("sad", "bad", "stress"),
    "workContent": ("work", "job", "project"),
    "personalContent": ("family", "friend", "relationship"),
})

# Substring sentiment (correlation content patterns)
SUBSTRING_SENTIMENT = KeywordRuleSet({
    "positive": ("happy", "good", "great", "excellent", "wonderful", "amazing", "love", "enjoy"),
    "negative": ("sad", "bad", "terrible", "awful", "hate", "stress", "anxiety", "worried"),
})

# Whole-token sentiment (life area analysis)
TOKEN_SENTIMENT = KeywordRuleSet({
    "positive": (
        "happy", "joy", "excited", "great", "wonderful", "amazing", "love", "enjoy",
        "pleased", "satisfied", "grateful", "blessed", "fulfilled", "accomplished",
    ),
    "negative": (
        "sad", "angry", "frustrated", "disappointed", "worried", "anxious", "stressed",
        "tired", "exhausted", "upset", "depressed", "lonely", "afraid", "scared",
    ),
})

LIFE_AREA_KEYWORDS = KeywordRuleSet({
    "career": (
        "work", "job", "career", "profession", "office", "business", "project", "meeting",
        "colleague", "boss", "promotion", "salary", "workplace", "deadline", "presentation",
    ),
    "finance": (
        "money", "finance", "financial", "budget", "saving", "spending", "expense", "income",
        "investment", "debt", "credit", "bank", "payment", "cost", "price", "expensive", "cheap",
    ),
    "health": (
        "health", "fitness", "exercise", "workout", "gym", "running", "diet", "nutrition",
        "doctor", "medical", "sick", "pain", "energy", "sleep", "rest", "wellness", "physical",
    ),
    "family": (
        "family", "parent", "child", "son", "daughter", "spouse", "husband", "wife", "partner",
        "marriage", "home", "household", "domestic", "parenting", "kids", "children",
    ),
    "relationships": (
        "friend", "friendship", "relationship", "dating", "romance", "love", "partner",
        "boyfriend", "girlfriend", "social", "connection", "people", "interaction", "communication",
    ),
    "personal-growth": (
        "growth", "learning", "development", "skill", "knowledge", "education", "study",
        "reading", "course", "training", "improvement", "goal", "achievement", "progress",
    ),
    "recreation": (
        "fun", "hobby", "entertainment", "leisure", "recreation", "game", "movie", "music",
        "travel", "vacation", "party", "celebration", "enjoyment", "pleasure", "relaxation",
    ),
    "spirituality": (
        "spiritual", "religion", "faith", "meditation", "prayer", "worship", "belief",
        "meaning", "purpose", "inner", "soul", "mindfulness", "zen", "peace", "tranquility",
    ),
})

# Life area ids that differ from their keyword bucket
LIFE_AREA_ALIASES = {"finances": "finance"}

PLACE_KEYWORDS: tuple[str, ...] = (
    "home", "work", "office", "gym", "store", "restaurant", "cafe", "park", "school", "hospital",
)

GROWTH_KEYWORDS = KeywordRuleSet({
    "learning": ("learn", "learned", "discovered", "realized", "understood", "figured out"),
    "challenges": ("challenge", "overcame", "difficult", "struggled", "managed", "solved"),
    "growth": ("grow", "growth", "improve", "develop", "progress", "better"),
    "mindset": ("learn", "grow", "improve", "develop", "progress"),
})

LIFE_EVENT_KEYWORDS = KeywordRuleSet({
    "career": ("job", "work", "career"),
    "relationship": ("relationship", "marriage", "breakup"),
    "health": ("health", "illness", "recovery"),
    "personal_growth": ("learn", "grow", "change"),
})


@dataclass(frozen=True)
class TraitRule:
    raising: Sequence[str]
    lowering: Sequence[str]
    weight: float


TRAIT_RULES: dict[str, TraitRule] = {
    "extraversion": TraitRule(
        raising=("friend", "party", "social", "meet", "talk", "people", "group", "team"),
        lowering=("alone", "quiet", "solitude", "introvert", "shy"),
        weight=0.5,
    ),
    "neuroticism": TraitRule(
        raising=("stress", "anxiety", "worry", "fear", "sad", "angry", "frustrated", "overwhelmed"),
        lowering=("happy", "calm", "peaceful", "relaxed", "content", "satisfied"),
        weight=0.3,
    ),
    "openness": TraitRule(
        raising=("explore", "learn", "new", "creative", "imagine", "curious", "adventure", "experience"),
        lowering=("routine", "same", "boring", "predictable", "traditional"),
        weight=0.4,
    ),
    "conscientiousness": TraitRule(
        raising=("plan", "organize", "goal", "achieve", "complete", "responsible", "diligent"),
        lowering=("procrastinate", "messy", "forget", "late", "chaos"),
        weight=0.4,
    ),
    "agreeableness": TraitRule(
        raising=("help", "kind", "compassionate", "understanding", "forgive", "support"),
        lowering=("conflict", "argue", "angry", "hostile", "critical", "judge"),
        weight=0.4,
    ),
}
