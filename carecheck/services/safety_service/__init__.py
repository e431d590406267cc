"""Safety Service: crisis-language detection for free text.

Every chat message and assessment free-text answer passes through here.
Detection is deterministic keyword and pattern matching with an optional
upstream classifier in between, and degrades instead of failing.

Components:
- config.py: Thresholds, environment config and built-in keyword sets
- lexicon.py: LexiconStore with per-language, atomically replaceable terms
- matchers.py: Substring keyword matcher and regex pattern matcher
- classifier.py: Optional upstream classifiers (local service, HuggingFace)
- detector.py: CrisisDetector confidence scorer
- signals.py: Sentiment, emotion category and urgency tier

Usage:
    from carecheck.services.safety_service import CrisisDetector
    detector = CrisisDetector()
    result = await detector.analyze("I want to end my life", "en")
"""

from .config import DetectorConfig, EmergencyConfig
from .lexicon import Lexicon, LexiconStore, get_lexicon, update_lexicon
from .matchers import KeywordMatch, match_keywords, match_patterns
from .classifier import (
    ClassifierResult,
    UpstreamClassifier,
    LocalServiceClassifier,
    HuggingFaceToxicityClassifier,
    ChainedClassifier,
)
from .detector import CrisisDetector, analyze
from .signals import analyze_sentiment, detect_emotions, urgency_level

__all__ = [
    "DetectorConfig",
    "EmergencyConfig",
    "Lexicon",
    "LexiconStore",
    "get_lexicon",
    "update_lexicon",
    "KeywordMatch",
    "match_keywords",
    "match_patterns",
    "ClassifierResult",
    "UpstreamClassifier",
    "LocalServiceClassifier",
    "HuggingFaceToxicityClassifier",
    "ChainedClassifier",
    "CrisisDetector",
    "analyze",
    "analyze_sentiment",
    "detect_emotions",
    "urgency_level",
]
