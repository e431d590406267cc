"""Safety Service configuration, thresholds and built-in lexicons.

Thresholds are parameters rather than per-call-site constants; the keyword
sets below are the shipped defaults that administrators can replace at
runtime through ``LexiconStore.update_lexicon``.
"""
import logging
import os
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

logger = logging.getLogger(__name__)

DEFAULT_LANGUAGE = "en"


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning(
            "CONFIG_VALUE_INVALID",
            extra={"variable": name, "fallback": default}
        )
        return default


@dataclass(frozen=True)
class DetectorConfig:
    """Configuration for the crisis confidence scorer."""

    # Keyword confidence needed to call a crisis (CRISIS_DETECTION_THRESHOLD)
    crisis_threshold: float = 0.8

    # Pattern stage uses a fixed, lower bar
    pattern_threshold: float = 0.6

    # Keyword-only threshold applied when the pipeline fails
    degraded_threshold: float = 0.5

    # Matches needed for full confidence
    keyword_divisor: int = 3
    pattern_divisor: int = 2

    max_text_length: int = 5000

    # Optional upstream classifiers
    ml_service_url: Optional[str] = None
    huggingface_api_key: Optional[str] = None
    ml_timeout_seconds: float = 5.0
    huggingface_timeout_seconds: float = 10.0

    def __post_init__(self):
        for name in ("crisis_threshold", "pattern_threshold", "degraded_threshold"):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                raise ValueError(f"{name} must be 0.0-1.0, got {value}")

    @classmethod
    def from_env(cls) -> "DetectorConfig":
        """Create config from environment variables.

        Environment variables:
            CRISIS_DETECTION_THRESHOLD: Keyword/ML threshold (default 0.8)
            ML_SERVICE_URL: Base URL of a local crisis classifier
            HUGGINGFACE_API_KEY: Token for the hosted toxicity model
            ML_TIMEOUT_SECONDS: Local classifier timeout (default 5)
            HUGGINGFACE_TIMEOUT_SECONDS: Hosted model timeout (default 10)
        """
        threshold = _env_float("CRISIS_DETECTION_THRESHOLD", 0.8)
        if not 0.0 <= threshold <= 1.0:
            logger.warning(
                "CONFIG_VALUE_INVALID",
                extra={"variable": "CRISIS_DETECTION_THRESHOLD", "fallback": 0.8}
            )
            threshold = 0.8
        return cls(
            crisis_threshold=threshold,
            ml_service_url=os.getenv("ML_SERVICE_URL") or None,
            huggingface_api_key=os.getenv("HUGGINGFACE_API_KEY") or None,
            ml_timeout_seconds=_env_float("ML_TIMEOUT_SECONDS", 5.0),
            huggingface_timeout_seconds=_env_float("HUGGINGFACE_TIMEOUT_SECONDS", 10.0),
        )


@dataclass(frozen=True)
class EmergencyConfig:
    """Hotline numbers surfaced on escalation."""
    suicide_line: str = "988"
    crisis_text_line: str = "741741"

    @classmethod
    def from_env(cls) -> "EmergencyConfig":
        """Environment variables: EMERGENCY_CONTACT_NUMBER, CRISIS_TEXT_LINE."""
        return cls(
            suicide_line=os.getenv("EMERGENCY_CONTACT_NUMBER") or "988",
            crisis_text_line=os.getenv("CRISIS_TEXT_LINE") or "741741",
        )


# =============================================================================
# BUILT-IN LEXICONS
# Matching is substring-based, so order matters only for reporting.
# =============================================================================

CRISIS_KEYWORDS: Dict[str, Tuple[str, ...]] = {
    "en": (
        "suicide",
        "kill myself",
        "end my life",
        "want to die",
        "better off dead",
        "hurt myself",
        "self harm",
        "cut myself",
        "overdose",
        "jump off",
        "hang myself",
        "shoot myself",
        "no point living",
        "life is meaningless",
        "everyone would be better without me",
        "planning to die",
        "goodbye forever",
        "final goodbye",
        "can't go on",
        "nothing left",
        "hopeless",
        "worthless",
    ),
    "te": (
        "ఆత్మహత్య",
        "చచ్చిపోవాలని",
        "జీవితం అంతం",
        "మరణించాలని",
        "బతకలేను",
    ),
    "hi": (
        "आत्महत्या",
        "मरना चाहता हूं",
        "जीवन समाप्त",
        "मौत",
        "जीना नहीं चाहता",
    ),
    "ta": (
        "தற்கொலை",
        "சாக வேண்டும்",
        "வாழ்க்கை முடிவு",
        "மரணம்",
        "வாழ முடியாது",
    ),
}

# Time pressure and finality markers; raise the urgency tier only
URGENCY_KEYWORDS: Tuple[str, ...] = (
    "tonight",
    "today",
    "right now",
    "immediately",
    "can't take it",
    "final decision",
    "goodbye",
    "last time",
    "planning to",
)

POSITIVE_KEYWORDS: Tuple[str, ...] = (
    "happy", "good", "great", "excellent", "wonderful", "amazing", "fantastic",
    "better", "improved", "hopeful", "optimistic", "grateful", "thankful",
)

NEGATIVE_KEYWORDS: Tuple[str, ...] = (
    "sad", "depressed", "anxious", "worried", "scared", "angry", "frustrated",
    "hopeless", "worthless", "terrible", "awful", "horrible", "devastating",
)

CATEGORY_KEYWORDS: Dict[str, Tuple[str, ...]] = {
    "sadness": ("sad", "down", "depressed", "hopeless", "empty", "lonely"),
    "anxiety": ("anxious", "worried", "nervous", "scared", "overwhelmed", "panic"),
    "anger": ("angry", "frustrated", "irritated", "mad", "furious"),
    "stress": ("stressed", "pressure", "overwhelmed", "burnt out", "exhausted"),
    "hope": ("better", "hopeful", "positive", "motivated", "encouraged"),
    "fear": ("afraid", "terrified", "scared", "fearful", "apprehensive"),
}

# Fallback linguistic patterns (recall safety net, applied to raw text)
CRISIS_PATTERNS: Dict[str, Tuple[str, ...]] = {
    "en": (
        r"\b(want to|going to|plan to|thinking about).*(die|kill|end|suicide)\b",
        r"\b(life is|feeling).*(hopeless|meaningless|worthless|pointless)\b",
        r"\b(can't|cannot).*(go on|continue|take it|handle)\b",
        r"\b(everyone|world).*(better without|better off without)\b",
    ),
}
