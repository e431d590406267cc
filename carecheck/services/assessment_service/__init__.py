"""Assessment Service: PHQ-9 / GAD-7 scoring and questionnaire flow.

Components:
- instruments.py: Items, response options and fixed severity bands
- scorer.py: score() with validation and PHQ-9 item 9 escalation
- session.py: AssessmentFlow over an injected SessionStore
- trends.py: Longitudinal risk score and score-trend helpers

Usage:
    from carecheck.services.assessment_service import score
    result = score("phq9", [0, 1, 0, 2, 1, 0, 0, 1, 0])
"""

from .instruments import PHQ9, GAD7, INSTRUMENTS, SeverityBand, InstrumentDefinition
from .scorer import score, resolve_instrument, validate_answers
from .session import AssessmentFlow, AssessmentSession, SessionStore, InMemorySessionStore
from .trends import assess_overall_risk, calculate_trend, combine_trends

__all__ = [
    "PHQ9",
    "GAD7",
    "INSTRUMENTS",
    "SeverityBand",
    "InstrumentDefinition",
    "score",
    "resolve_instrument",
    "validate_answers",
    "AssessmentFlow",
    "AssessmentSession",
    "SessionStore",
    "InMemorySessionStore",
    "assess_overall_risk",
    "calculate_trend",
    "combine_trends",
]
