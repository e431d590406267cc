"""Lightweight text signals built on the lexicon keyword sets.

Sentiment, emotion category and urgency tier. These never decide a crisis
on their own; callers use them for tone of response and triage ordering.
"""
from dataclasses import dataclass, field
from typing import Dict, List

from carecheck.shared.models import RiskLevel
from .lexicon import Lexicon
from .matchers import match_keywords


@dataclass(frozen=True)
class SentimentResult:
    sentiment: str              # "positive", "negative" or "neutral"
    confidence: float
    positive_score: int
    negative_score: int
    emotional_intensity: str    # "low", "moderate" or "high"

    def to_dict(self) -> Dict:
        return {
            "sentiment": self.sentiment,
            "confidence": round(self.confidence, 3),
            "positiveScore": self.positive_score,
            "negativeScore": self.negative_score,
            "emotionalIntensity": self.emotional_intensity,
        }


@dataclass(frozen=True)
class EmotionResult:
    primary_emotion: str
    intensity: int
    secondary_emotions: List[str] = field(default_factory=list)
    indicators: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict:
        return {
            "primaryEmotion": self.primary_emotion,
            "intensity": self.intensity,
            "secondaryEmotions": list(self.secondary_emotions),
            "indicators": list(self.indicators),
        }


def emotional_intensity(positive_score: int, negative_score: int) -> str:
    total = positive_score + negative_score
    if total >= 5:
        return "high"
    if total >= 3:
        return "moderate"
    return "low"


def analyze_sentiment(text: str, lexicon: Lexicon) -> SentimentResult:
    """Keyword-ratio sentiment.

    Positive when more than 60% of sentiment hits are positive, negative
    below 40%. Confidence grows with the distance from those bounds and is
    capped at 0.95.
    """
    positive = match_keywords(text, lexicon.sentiment_keywords.positive).count
    negative = match_keywords(text, lexicon.sentiment_keywords.negative).count
    total = positive + negative

    sentiment = "neutral"
    confidence = 0.5
    if total > 0:
        ratio = positive / total
        if ratio > 0.6:
            sentiment = "positive"
            confidence = 0.7 + (ratio - 0.6) * 0.75
        elif ratio < 0.4:
            sentiment = "negative"
            confidence = 0.7 + (0.4 - ratio) * 0.75

    return SentimentResult(
        sentiment=sentiment,
        confidence=min(0.95, confidence),
        positive_score=positive,
        negative_score=negative,
        emotional_intensity=emotional_intensity(positive, negative),
    )


def detect_emotions(text: str, lexicon: Lexicon) -> EmotionResult:
    """Pick the emotion category with the most keyword hits.

    Ties go to the category listed first in the lexicon. Intensity is the
    hit count of the primary category, capped at 10.
    """
    counts: Dict[str, int] = {}
    for category, terms in lexicon.category_keywords.items():
        hits = match_keywords(text, terms).count
        if hits:
            counts[category] = hits

    if not counts:
        return EmotionResult(primary_emotion="neutral", intensity=1)

    primary = max(counts, key=lambda name: counts[name])
    secondary = [name for name in counts if name != primary][:2]
    return EmotionResult(
        primary_emotion=primary,
        intensity=min(counts[primary], 10),
        secondary_emotions=secondary,
        indicators=list(lexicon.category_keywords[primary]),
    )


def urgency_level(crisis_count: int, urgency_count: int) -> RiskLevel:
    """Urgency tier from crisis and time-pressure keyword counts."""
    if crisis_count > 2 or urgency_count > 1:
        return RiskLevel.CRITICAL
    if crisis_count > 0 or urgency_count > 0:
        return RiskLevel.HIGH
    return RiskLevel.LOW
