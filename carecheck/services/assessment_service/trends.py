"""Longitudinal risk and score-trend helpers.

Combines questionnaire totals, recent message signals and history flags
into an additive risk score. Persistence is the caller's job: everything
here works on values passed in.
"""
import logging
from typing import Any, Dict, List, Optional, Sequence

from carecheck.shared.models import RiskLevel
from carecheck.services.safety_service.lexicon import Lexicon, get_lexicon
from carecheck.services.safety_service.matchers import match_keywords
from carecheck.services.safety_service.signals import analyze_sentiment

logger = logging.getLogger(__name__)

# Percent change beyond which a trend is no longer "stable"
TREND_BAND_PERCENT = 10.0

RISK_RECOMMENDATIONS: Dict[RiskLevel, List[str]] = {
    RiskLevel.CRITICAL: [
        "Immediate professional intervention required",
        "Contact crisis hotline: 988",
        "Consider emergency services if in immediate danger",
        "Notify college counseling center immediately",
    ],
    RiskLevel.HIGH: [
        "Schedule urgent appointment with counselor",
        "Increase monitoring and check-ins",
        "Consider crisis safety planning",
        "Engage support network",
    ],
    RiskLevel.MODERATE: [
        "Regular counseling sessions recommended",
        "Monitor symptoms closely",
        "Implement coping strategies",
        "Consider medication evaluation",
    ],
    RiskLevel.MILD: [
        "Continue current support level",
        "Practice self-care techniques",
        "Regular assessment monitoring",
    ],
    RiskLevel.LOW: [
        "Maintain preventive care",
        "Continue healthy lifestyle practices",
    ],
}


def overall_risk_level(risk_score: float) -> RiskLevel:
    if risk_score >= 0.8:
        return RiskLevel.CRITICAL
    if risk_score >= 0.6:
        return RiskLevel.HIGH
    if risk_score >= 0.4:
        return RiskLevel.MODERATE
    if risk_score >= 0.2:
        return RiskLevel.MILD
    return RiskLevel.LOW


def assess_overall_risk(
    phq9_score: int = 0,
    gad7_score: int = 0,
    recent_messages: Sequence[str] = (),
    previous_crisis_events: int = 0,
    frequent_negative_assessments: bool = False,
    lexicon: Optional[Lexicon] = None,
) -> Dict[str, Any]:
    """Additive risk score across assessments, messages and history.

    Weights:
        PHQ-9 >= 20 / 15 / 10: +0.4 / +0.3 / +0.2
        GAD-7 >= 15 / 10: +0.3 / +0.2
        Any recent message with a crisis keyword: +0.5
        More than 70% of recent messages negative: +0.2
        Previous crisis events: +0.15
        Frequent negative assessments: +0.1
    """
    lexicon = lexicon or get_lexicon("en")
    risk_score = 0.0
    factors: List[str] = []

    if phq9_score >= 20:
        risk_score += 0.4
        factors.append("Severe depression symptoms")
    elif phq9_score >= 15:
        risk_score += 0.3
        factors.append("Moderately severe depression")
    elif phq9_score >= 10:
        risk_score += 0.2
        factors.append("Moderate depression")

    if gad7_score >= 15:
        risk_score += 0.3
        factors.append("Severe anxiety symptoms")
    elif gad7_score >= 10:
        risk_score += 0.2
        factors.append("Moderate anxiety")

    negative_count = 0
    crisis_count = 0
    for message in recent_messages:
        if analyze_sentiment(message, lexicon).sentiment == "negative":
            negative_count += 1
        if match_keywords(message, lexicon.crisis_keywords).count > 0:
            crisis_count += 1

    if crisis_count > 0:
        risk_score += 0.5
        factors.append("Crisis indicators in recent messages")

    if recent_messages and negative_count > len(recent_messages) * 0.7:
        risk_score += 0.2
        factors.append("Predominantly negative communication")

    if previous_crisis_events > 0:
        risk_score += 0.15
        factors.append("Previous crisis events")

    if frequent_negative_assessments:
        risk_score += 0.1
        factors.append("Pattern of concerning assessments")

    # Level comes from the uncapped sum, the reported score is capped
    risk_level = overall_risk_level(risk_score)

    logger.info(
        "OVERALL_RISK_ASSESSED",
        extra={
            "risk_score": round(min(1.0, risk_score), 3),
            "risk_level": risk_level.value,
            "factor_count": len(factors),
            "message_count": len(recent_messages),
        }
    )

    return {
        "riskScore": min(1.0, risk_score),
        "riskLevel": risk_level.value,
        "factors": factors,
        "recommendations": list(RISK_RECOMMENDATIONS[risk_level]),
    }


def calculate_trend(scores: Sequence[int]) -> Dict[str, Any]:
    """Direction of change between the first and last score.

    Beyond +/-10% of the first score the trend is worsening/improving.
    A zero baseline has no percentage: any rise counts as worsening with
    the absolute change reported as magnitude.
    """
    if len(scores) < 2:
        return {"direction": "stable", "magnitude": 0}

    first = scores[0]
    last = scores[-1]
    change = last - first

    if first == 0:
        direction = "worsening" if change > 0 else "stable"
        magnitude = float(abs(change))
    else:
        percent_change = change / first * 100
        direction = "stable"
        if percent_change > TREND_BAND_PERCENT:
            direction = "worsening"
        elif percent_change < -TREND_BAND_PERCENT:
            direction = "improving"
        magnitude = abs(percent_change)

    return {
        "direction": direction,
        "magnitude": magnitude,
        "change": change,
        "firstScore": first,
        "lastScore": last,
    }


def combine_trends(phq9_trend: Dict[str, Any], gad7_trend: Dict[str, Any]) -> str:
    """Worsening if either worsens; improving only if both improve."""
    directions = (phq9_trend.get("direction"), gad7_trend.get("direction"))
    if "worsening" in directions:
        return "worsening"
    if directions == ("improving", "improving"):
        return "improving"
    return "stable"
