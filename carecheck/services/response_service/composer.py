"""Result composer: detection verdict + optional severity -> caller payload.

Pure mapping with no side effects. Emergency contacts are attached only
when the text was flagged as a crisis or the assessment escalated.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from carecheck.shared.models import DetectionResult, SeverityResult
from carecheck.services.safety_service.config import EmergencyConfig
from .resources import (
    crisis_message,
    crisis_recommendations,
    emergency_contacts,
    support_message,
)


@dataclass(frozen=True)
class ComposedResponse:
    """Single serializable object handed back to routes and bots."""
    is_crisis: bool
    escalate: bool
    language: str
    message: str
    confidence: float
    method: str
    risk_level: str
    matched_keywords: List[str] = field(default_factory=list)
    recommendations: List[str] = field(default_factory=list)
    emergency_contacts: List[Dict[str, str]] = field(default_factory=list)
    severity: Optional[str] = None
    total_score: Optional[int] = None
    interpretation: Optional[str] = None

    @property
    def needs_emergency_resources(self) -> bool:
        return self.is_crisis or self.escalate

    def to_dict(self) -> Dict[str, Any]:
        result = {
            "isCrisis": self.is_crisis,
            "escalate": self.escalate,
            "language": self.language,
            "message": self.message,
            "confidence": round(self.confidence, 3),
            "method": self.method,
            "riskLevel": self.risk_level,
            "matchedKeywords": list(self.matched_keywords),
            "recommendations": list(self.recommendations),
            "emergencyContacts": [dict(c) for c in self.emergency_contacts],
        }
        if self.severity is not None:
            result["severity"] = self.severity
            result["totalScore"] = self.total_score
            result["interpretation"] = self.interpretation
        return result


def compose(
    detection: DetectionResult,
    severity: Optional[SeverityResult] = None,
    language: Optional[str] = None,
    emergency: Optional[EmergencyConfig] = None,
) -> ComposedResponse:
    """Merge a detection verdict and an optional severity result.

    Args:
        detection: Crisis detector output
        severity: Scored questionnaire, if the caller has one
        language: Response language; defaults to the detection's language
        emergency: Hotline numbers for the contact list

    Returns:
        ComposedResponse ready to serialize
    """
    language = language or detection.language
    escalate = bool(severity and severity.escalate)
    urgent = detection.is_crisis or escalate

    recommendations: List[str] = []
    if detection.is_crisis:
        recommendations.extend(crisis_recommendations(language))
    if severity is not None:
        recommendations.extend(
            item for item in severity.recommendations if item not in recommendations
        )

    return ComposedResponse(
        is_crisis=detection.is_crisis,
        escalate=escalate,
        language=language,
        message=crisis_message(language) if urgent else support_message(language),
        confidence=detection.confidence,
        method=detection.method.value,
        risk_level=detection.risk_level.value,
        matched_keywords=list(detection.matched_keywords),
        recommendations=recommendations,
        emergency_contacts=emergency_contacts(emergency) if urgent else [],
        severity=severity.severity if severity else None,
        total_score=severity.total_score if severity else None,
        interpretation=severity.interpretation if severity else None,
    )
