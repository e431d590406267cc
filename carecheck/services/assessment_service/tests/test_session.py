"""Tests for the step-by-step assessment flow."""
from datetime import datetime, timedelta

import pytest

from carecheck.shared.models import Instrument, InvalidInput
from carecheck.shared.utils import configure_pii_salt
from carecheck.services.assessment_service.instruments import QUESTION_PREFIX
from carecheck.services.assessment_service.session import (
    AssessmentFlow,
    AssessmentSession,
    InMemorySessionStore,
)


@pytest.fixture(autouse=True)
def setup_pii_salt():
    """Configure PII salt before each test."""
    configure_pii_salt("test_salt_that_is_at_least_32_characters_long")


@pytest.fixture
def store():
    return InMemorySessionStore()


@pytest.fixture
def phq9_flow(store):
    return AssessmentFlow("phq9", store=store)


def answer_all(flow, answers, user_id="user_1"):
    payload = flow.process_step(user_id)
    session_id = payload["sessionId"]
    for step, answer in enumerate(answers, start=1):
        payload = flow.process_step(user_id, step=step, answer=answer, session_id=session_id)
    return payload


class TestSessionStart:
    """Tests for starting a session."""

    def test_first_question(self, phq9_flow):
        payload = phq9_flow.process_step("user_1")

        assert payload["completed"] is False
        assert payload["step"] == 1
        assert payload["totalSteps"] == 9
        assert payload["progress"] == 0
        assert payload["question"].startswith(QUESTION_PREFIX)
        assert [o["value"] for o in payload["options"]] == [0, 1, 2, 3]

    def test_session_id_prefixed_with_instrument(self, phq9_flow):
        payload = phq9_flow.process_step("user_1")

        assert payload["sessionId"].startswith("phq9_")

    def test_session_persisted(self, phq9_flow, store):
        payload = phq9_flow.process_step("user_1")

        assert store.get(payload["sessionId"]) is not None

    def test_empty_store_is_kept(self, store):
        assert len(store) == 0

        flow = AssessmentFlow("phq9", store=store)

        assert flow.store is store

    def test_flows_share_injected_store(self, store):
        first = AssessmentFlow("phq9", store=store)
        second = AssessmentFlow("phq9", store=store)

        session_id = first.process_step("user_1")["sessionId"]
        payload = second.process_step("user_1", step=1, answer=1, session_id=session_id)

        assert payload["step"] == 2
        assert len(store) == 1

    def test_unknown_instrument(self):
        with pytest.raises(InvalidInput):
            AssessmentFlow("bdi2")


class TestSessionProgress:
    """Tests for answering steps."""

    def test_answer_advances_step(self, phq9_flow):
        session_id = phq9_flow.process_step("user_1")["sessionId"]

        payload = phq9_flow.process_step("user_1", step=1, answer=2, session_id=session_id)

        assert payload["step"] == 2
        assert payload["progress"] == 11

    def test_reanswering_step_overwrites(self, phq9_flow, store):
        session_id = phq9_flow.process_step("user_1")["sessionId"]
        phq9_flow.process_step("user_1", step=1, answer=2, session_id=session_id)
        phq9_flow.process_step("user_1", step=1, answer=0, session_id=session_id)

        assert store.get(session_id).answers == {1: 0}

    @pytest.mark.parametrize("answer", [4, -1, True, "2"])
    def test_bad_answer_rejected(self, phq9_flow, answer):
        session_id = phq9_flow.process_step("user_1")["sessionId"]

        with pytest.raises(InvalidInput) as exc_info:
            phq9_flow.process_step("user_1", step=1, answer=answer, session_id=session_id)

        assert exc_info.value.field == "answer"

    @pytest.mark.parametrize("step", [0, 10])
    def test_bad_step_rejected(self, phq9_flow, step):
        session_id = phq9_flow.process_step("user_1")["sessionId"]

        with pytest.raises(InvalidInput) as exc_info:
            phq9_flow.process_step("user_1", step=step, answer=1, session_id=session_id)

        assert exc_info.value.field == "step"

    def test_other_user_cannot_continue_session(self, phq9_flow):
        session_id = phq9_flow.process_step("user_1")["sessionId"]

        with pytest.raises(InvalidInput):
            phq9_flow.process_step("user_2", step=1, answer=1, session_id=session_id)

    def test_other_instrument_cannot_continue_session(self, store):
        phq9 = AssessmentFlow("phq9", store=store)
        gad7 = AssessmentFlow("gad7", store=store)
        session_id = phq9.process_step("user_1")["sessionId"]

        with pytest.raises(InvalidInput):
            gad7.process_step("user_1", step=1, answer=1, session_id=session_id)


class TestSessionCompletion:
    """Tests for scoring at the final step."""

    def test_completed_phq9(self, phq9_flow, store):
        payload = answer_all(phq9_flow, [1, 1, 1, 1, 1, 1, 1, 1, 0])

        assert payload["completed"] is True
        assert payload["totalScore"] == 8
        assert payload["severity"] == "mild"
        assert payload["escalate"] is False
        assert len(store) == 0

    def test_completed_phq9_with_self_harm(self, phq9_flow):
        payload = answer_all(phq9_flow, [0] * 8 + [1])

        assert payload["escalate"] is True
        assert payload["emergencyContact"] == {"suicide": "988", "crisis": "741741"}

    def test_completed_gad7(self, store):
        flow = AssessmentFlow(Instrument.GAD7, store=store)

        payload = answer_all(flow, [3] * 7)

        assert payload["completed"] is True
        assert payload["severity"] == "severe"
        assert payload["emergencyResources"] is not None

    def test_clear_session(self, phq9_flow, store):
        session_id = phq9_flow.process_step("user_1")["sessionId"]

        assert phq9_flow.clear_session(session_id) is True
        assert phq9_flow.clear_session(session_id) is False
        assert len(store) == 0


class TestInMemorySessionStore:
    """Tests for abandoned-session cleanup."""

    def test_cleanup_removes_only_stale(self, store):
        now = datetime(2026, 1, 1, 12, 0)
        store.set("old", AssessmentSession("old", "u", Instrument.PHQ9, started_at=now - timedelta(hours=3)))
        store.set("new", AssessmentSession("new", "u", Instrument.PHQ9, started_at=now - timedelta(minutes=5)))

        removed = store.cleanup_older_than(now=now)

        assert removed == 1
        assert store.get("old") is None
        assert store.get("new") is not None
