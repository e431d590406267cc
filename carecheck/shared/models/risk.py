"""Risk level and clinical result domain models.

This file defines the core enums and result structures shared by the
safety, assessment and response services. Field names emitted by
``to_dict()`` are the wire contract downstream UIs switch on.
"""
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


class DetectionMethod(Enum):
    """Which stage of the crisis pipeline produced the verdict."""
    KEYWORD = "keyword"
    PATTERN = "pattern"
    ML_FALLBACK = "ml_fallback"


class RiskLevel(Enum):
    """Risk tiers used for urgency and longitudinal risk.

    Urgency (per message) only uses LOW, HIGH and CRITICAL.
    Longitudinal risk uses the full range.
    """
    LOW = "low"
    MILD = "mild"
    MODERATE = "moderate"
    HIGH = "high"
    CRITICAL = "critical"


class Instrument(Enum):
    """Validated self-report questionnaires."""
    PHQ9 = "phq9"           # Patient Health Questionnaire (Depression)
    GAD7 = "gad7"           # Generalized Anxiety Disorder scale


class PHQ9Item(Enum):
    """PHQ-9 questionnaire items, one-based as printed on the form."""
    ANHEDONIA = 1           # Little interest or pleasure in doing things
    DEPRESSED_MOOD = 2      # Feeling down, depressed, or hopeless
    SLEEP = 3               # Trouble falling/staying asleep, or sleeping too much
    FATIGUE = 4             # Feeling tired or having little energy
    APPETITE = 5            # Poor appetite or overeating
    GUILT = 6               # Feeling bad about yourself
    CONCENTRATION = 7       # Trouble concentrating
    PSYCHOMOTOR = 8         # Moving/speaking slowly or being fidgety
    SELF_HARM = 9           # Thoughts of self-harm (CRITICAL - triggers escalation)


@dataclass(frozen=True)
class DetectionResult:
    """Verdict of the crisis detector for a single piece of text.

    Immutable - created per call and never persisted by this package.
    """
    is_crisis: bool
    confidence: float
    method: DetectionMethod
    matched_keywords: Tuple[str, ...] = ()
    risk_level: RiskLevel = RiskLevel.LOW
    language: str = "en"
    degraded: bool = False
    classifier: Optional[str] = None
    detected_at: datetime = field(default_factory=datetime.utcnow, compare=False)

    def __post_init__(self):
        if not 0.0 <= self.confidence <= 1.0:
            raise ValueError(f"Confidence must be 0.0-1.0, got {self.confidence}")

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the camelCase shape callers serialize."""
        result = {
            "isCrisis": self.is_crisis,
            "confidence": round(self.confidence, 3),
            "method": self.method.value,
            "matchedKeywords": list(self.matched_keywords),
            "riskLevel": self.risk_level.value,
            "language": self.language,
            "degraded": self.degraded,
        }
        if self.classifier:
            result["classifier"] = self.classifier
        return result


@dataclass(frozen=True)
class SeverityResult:
    """Scored questionnaire with severity band and guidance.

    ``escalate`` is only ever set for PHQ-9 item 9 and is independent of
    the band reached by ``total_score``.
    """
    instrument: Instrument
    total_score: int
    severity: str
    interpretation: str
    recommendations: List[str] = field(default_factory=list)
    escalate: bool = False
    coping_strategies: List[str] = field(default_factory=list)
    emergency_contact: Optional[Dict[str, str]] = None
    emergency_resources: Optional[Dict[str, str]] = None

    def __post_init__(self):
        if self.total_score < 0:
            raise ValueError(f"Total score must be non-negative, got {self.total_score}")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "instrument": self.instrument.value,
            "totalScore": self.total_score,
            "severity": self.severity,
            "interpretation": self.interpretation,
            "recommendations": list(self.recommendations),
            "escalate": self.escalate,
            "copingStrategies": list(self.coping_strategies),
            "emergencyContact": self.emergency_contact,
            "emergencyResources": self.emergency_resources,
        }
