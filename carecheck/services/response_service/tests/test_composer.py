"""Tests for the result composer - emergency resources must never be missing
for a crisis or escalation, and never attached otherwise."""
import pytest

from carecheck.shared.models import DetectionMethod, DetectionResult, RiskLevel
from carecheck.services.assessment_service.instruments import SELF_HARM_RECOMMENDATION
from carecheck.services.assessment_service.scorer import score
from carecheck.services.response_service.composer import compose
from carecheck.services.response_service.resources import (
    CRISIS_MESSAGES,
    CRISIS_RECOMMENDATIONS,
    SUPPORT_MESSAGES,
    crisis_message,
    emergency_contacts,
)
from carecheck.services.safety_service.config import EmergencyConfig


def detection(is_crisis, language="en", confidence=None):
    return DetectionResult(
        is_crisis=is_crisis,
        confidence=confidence if confidence is not None else (1.0 if is_crisis else 0.0),
        method=DetectionMethod.KEYWORD,
        matched_keywords=("suicide", "overdose", "jump off") if is_crisis else (),
        risk_level=RiskLevel.CRITICAL if is_crisis else RiskLevel.LOW,
        language=language,
    )


class TestCrisisResponse:
    """Tests for crisis-flagged text."""

    def test_crisis_gets_contacts_and_message(self):
        response = compose(detection(True))

        assert response.is_crisis is True
        assert response.needs_emergency_resources is True
        assert response.message == CRISIS_MESSAGES["en"]
        assert len(response.emergency_contacts) == 4
        assert response.recommendations == list(CRISIS_RECOMMENDATIONS["en"])

    @pytest.mark.parametrize("language", ["te", "hi", "ta"])
    def test_localized_crisis_message(self, language):
        response = compose(detection(True, language=language))

        assert response.message == CRISIS_MESSAGES[language]
        assert response.recommendations == list(CRISIS_RECOMMENDATIONS[language])

    def test_unknown_language_falls_back_to_english(self):
        assert crisis_message("fr") == CRISIS_MESSAGES["en"]

    def test_explicit_language_overrides_detection(self):
        response = compose(detection(True, language="en"), language="hi")

        assert response.language == "hi"
        assert response.message == CRISIS_MESSAGES["hi"]


class TestNonCrisisResponse:
    """Tests for benign text."""

    def test_no_contacts_without_crisis(self):
        response = compose(detection(False))

        assert response.needs_emergency_resources is False
        assert response.emergency_contacts == []
        assert response.recommendations == []
        assert response.message == SUPPORT_MESSAGES["en"]

    def test_support_message_is_english_for_other_languages(self):
        response = compose(detection(False, language="ta"))

        assert response.message == SUPPORT_MESSAGES["en"]


class TestWithSeverity:
    """Tests for combining detection and questionnaire results."""

    def test_escalation_without_crisis_text(self):
        severity = score("phq9", [0] * 8 + [1])

        response = compose(detection(False), severity)

        assert response.is_crisis is False
        assert response.escalate is True
        assert response.needs_emergency_resources is True
        assert len(response.emergency_contacts) == 4
        assert response.message == CRISIS_MESSAGES["en"]
        assert response.recommendations[0] == SELF_HARM_RECOMMENDATION

    def test_severity_fields_included(self):
        severity = score("gad7", [1] * 7)

        data = compose(detection(False), severity).to_dict()

        assert data["severity"] == "mild"
        assert data["totalScore"] == 7
        assert data["interpretation"] == severity.interpretation
        assert data["emergencyContacts"] == []

    def test_severity_fields_omitted_without_severity(self):
        data = compose(detection(False)).to_dict()

        assert "severity" not in data
        assert "totalScore" not in data

    def test_crisis_recommendations_come_first(self):
        severity = score("phq9", [3] * 9)

        response = compose(detection(True), severity)

        crisis_count = len(CRISIS_RECOMMENDATIONS["en"])
        assert response.recommendations[:crisis_count] == list(CRISIS_RECOMMENDATIONS["en"])
        assert response.recommendations[crisis_count] == SELF_HARM_RECOMMENDATION
        assert len(response.recommendations) == len(set(response.recommendations))


class TestEmergencyContacts:

    def test_numbers_from_config(self):
        contacts = emergency_contacts(EmergencyConfig(suicide_line="112", crisis_text_line="85258"))

        assert contacts[0]["phone"] == "112"
        assert contacts[1]["contact"] == "Text HOME to 85258"

    def test_to_dict_shape(self):
        data = compose(detection(True)).to_dict()

        assert data["isCrisis"] is True
        assert data["method"] == "keyword"
        assert data["riskLevel"] == "critical"
        assert data["matchedKeywords"] == ["suicide", "overdose", "jump off"]
        assert data["emergencyContacts"][2]["phone"] == "911"
