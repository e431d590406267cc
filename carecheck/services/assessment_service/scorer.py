"""Clinical severity calculator for PHQ-9 and GAD-7.

Answers are validated, never corrected: a wrong item count or an
out-of-range value rejects the whole submission with ``InvalidInput``.
"""
import logging
from typing import Optional, Sequence, Union

from carecheck.shared.models import Instrument, InvalidInput, SeverityResult
from carecheck.services.safety_service.config import EmergencyConfig
from .instruments import (
    ANXIETY_ASSOCIATION_LINE,
    INSTRUMENTS,
    MAX_ANSWER,
    MIN_ANSWER,
    SELF_HARM_INDEX,
    SELF_HARM_RECOMMENDATION,
    InstrumentDefinition,
)

logger = logging.getLogger(__name__)


def resolve_instrument(instrument: Union[str, Instrument]) -> InstrumentDefinition:
    """Look up an instrument by enum or name ("phq9", "PHQ-9", "gad7", ...)."""
    if isinstance(instrument, Instrument):
        return INSTRUMENTS[instrument]
    if isinstance(instrument, str):
        key = instrument.strip().lower().replace("-", "").replace("_", "")
        for candidate in Instrument:
            if candidate.value == key:
                return INSTRUMENTS[candidate]
    raise InvalidInput(f"unknown instrument {instrument!r}", field="instrument")


def validate_answers(definition: InstrumentDefinition, answers: Sequence[int]) -> None:
    """Check item count and per-item range.

    Raises:
        InvalidInput: Wrong length, non-integer or out-of-range answer
    """
    if isinstance(answers, (str, bytes)) or not hasattr(answers, "__len__"):
        raise InvalidInput("answers must be a sequence of integers", field="answers")

    name = definition.instrument.value
    if len(answers) != definition.item_count:
        raise InvalidInput(
            f"{name} requires {definition.item_count} answers, got {len(answers)}",
            field="answers",
        )
    for index, answer in enumerate(answers):
        # bool is an int subclass; True is not a valid answer
        if isinstance(answer, bool) or not isinstance(answer, int):
            raise InvalidInput(
                f"answer {index + 1} must be an integer, got {answer!r}",
                field="answers",
            )
        if not MIN_ANSWER <= answer <= MAX_ANSWER:
            raise InvalidInput(
                f"answer {index + 1} must be within [{MIN_ANSWER}, {MAX_ANSWER}], got {answer}",
                field="answers",
            )


def score(
    instrument: Union[str, Instrument],
    answers: Sequence[int],
    emergency: Optional[EmergencyConfig] = None,
) -> SeverityResult:
    """Score a completed questionnaire.

    Args:
        instrument: "phq9" or "gad7" (or the Instrument enum)
        answers: One 0-3 answer per item, in questionnaire order
        emergency: Hotline numbers for the escalation contact block

    Returns:
        SeverityResult with band, interpretation and recommendations

    Raises:
        InvalidInput: Unknown instrument or malformed answers

    Logs:
        - ASSESSMENT_ESCALATED: PHQ-9 item 9 positive (critical level)
        - ASSESSMENT_SCORED: Every scored submission
    """
    definition = resolve_instrument(instrument)
    validate_answers(definition, answers)
    emergency = emergency or EmergencyConfig()

    total_score = sum(answers)
    band = definition.band_for(total_score)
    recommendations = list(band.recommendations)

    escalate = False
    emergency_contact = None
    emergency_resources = None

    if definition.instrument is Instrument.PHQ9:
        escalate = answers[SELF_HARM_INDEX] > 0
        if escalate:
            recommendations.insert(0, SELF_HARM_RECOMMENDATION)
            emergency_contact = {
                "suicide": emergency.suicide_line,
                "crisis": emergency.crisis_text_line,
            }
            logger.critical(
                "ASSESSMENT_ESCALATED",
                extra={
                    "instrument": definition.instrument.value,
                    "total_score": total_score,
                    "severity": band.name,
                    "self_harm_answer": answers[SELF_HARM_INDEX],
                }
            )
    elif band.name == "severe":
        emergency_resources = {
            "crisis": emergency.crisis_text_line,
            "anxiety": ANXIETY_ASSOCIATION_LINE,
        }

    logger.info(
        "ASSESSMENT_SCORED",
        extra={
            "instrument": definition.instrument.value,
            "total_score": total_score,
            "severity": band.name,
            "escalate": escalate,
        }
    )

    return SeverityResult(
        instrument=definition.instrument,
        total_score=total_score,
        severity=band.name,
        interpretation=band.interpretation,
        recommendations=recommendations,
        escalate=escalate,
        coping_strategies=list(band.coping_strategies),
        emergency_contact=emergency_contact,
        emergency_resources=emergency_resources,
    )
