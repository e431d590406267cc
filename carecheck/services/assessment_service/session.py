"""Step-by-step questionnaire flow over an injected session store.

One question per step; answers accumulate in a session record keyed by
session id. Once every item is answered the session is scored and
removed from the store.
"""
import logging
import threading
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional, Union

from carecheck.shared.models import Instrument, InvalidInput
from carecheck.shared.utils import hash_pii
from carecheck.services.safety_service.config import EmergencyConfig
from .instruments import MAX_ANSWER, MIN_ANSWER
from .scorer import resolve_instrument, score

logger = logging.getLogger(__name__)

DEFAULT_SESSION_MAX_AGE = timedelta(hours=2)


@dataclass
class AssessmentSession:
    """Mutable in-progress questionnaire."""
    session_id: str
    user_id: str
    instrument: Instrument
    answers: Dict[int, int] = field(default_factory=dict)   # one-based step -> answer
    started_at: datetime = field(default_factory=datetime.utcnow)

    def ordered_answers(self, item_count: int) -> List[int]:
        return [self.answers[step] for step in range(1, item_count + 1)]

    def next_step(self, item_count: int) -> Optional[int]:
        for step in range(1, item_count + 1):
            if step not in self.answers:
                return step
        return None


class SessionStore(ABC):
    """Capability ``{get, set, delete}`` over a session id."""

    @abstractmethod
    def get(self, session_id: str) -> Optional[AssessmentSession]:
        pass

    @abstractmethod
    def set(self, session_id: str, session: AssessmentSession) -> None:
        pass

    @abstractmethod
    def delete(self, session_id: str) -> bool:
        pass


class InMemorySessionStore(SessionStore):
    """Dict-backed store for single-process deployments and tests."""

    def __init__(self):
        self._sessions: Dict[str, AssessmentSession] = {}
        self._lock = threading.Lock()

    def get(self, session_id: str) -> Optional[AssessmentSession]:
        return self._sessions.get(session_id)

    def set(self, session_id: str, session: AssessmentSession) -> None:
        with self._lock:
            self._sessions[session_id] = session

    def delete(self, session_id: str) -> bool:
        with self._lock:
            return self._sessions.pop(session_id, None) is not None

    def __len__(self) -> int:
        return len(self._sessions)

    def cleanup_older_than(
        self,
        max_age: timedelta = DEFAULT_SESSION_MAX_AGE,
        now: Optional[datetime] = None,
    ) -> int:
        """Drop abandoned sessions. Returns how many were removed."""
        cutoff = (now or datetime.utcnow()) - max_age
        with self._lock:
            stale = [sid for sid, s in self._sessions.items() if s.started_at < cutoff]
            for session_id in stale:
                del self._sessions[session_id]
        if stale:
            logger.info("ASSESSMENT_SESSIONS_EXPIRED", extra={"removed": len(stale)})
        return len(stale)


class AssessmentFlow:
    """Drives one instrument through a session store."""

    def __init__(
        self,
        instrument: Union[str, Instrument],
        store: Optional[SessionStore] = None,
        emergency: Optional[EmergencyConfig] = None,
    ):
        self.definition = resolve_instrument(instrument)
        self.store = store if store is not None else InMemorySessionStore()
        self.emergency = emergency

    @property
    def instrument(self) -> Instrument:
        return self.definition.instrument

    def generate_session_id(self) -> str:
        return f"{self.instrument.value}_{uuid.uuid4().hex}"

    def process_step(
        self,
        user_id: str,
        step: int = 0,
        answer: Optional[int] = None,
        session_id: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Record an answer (if any) and return the next question or result.

        Args:
            user_id: Owner of the session (hashed before logging)
            step: One-based step the answer belongs to; 0 to just fetch
            answer: 0-3 answer for ``step``
            session_id: Existing session, or None to start one

        Returns:
            Next-question payload, or the scored result once complete

        Raises:
            InvalidInput: Step or answer out of range, or the session
                belongs to a different user or instrument
        """
        session_id = session_id or self.generate_session_id()
        session = self.store.get(session_id)
        if session is None:
            session = AssessmentSession(
                session_id=session_id,
                user_id=user_id,
                instrument=self.instrument,
            )
            logger.info(
                "ASSESSMENT_SESSION_STARTED",
                extra={
                    "session_id": session_id,
                    "instrument": self.instrument.value,
                    "user_id_hash": hash_pii(user_id),
                }
            )
        elif session.user_id != user_id or session.instrument is not self.instrument:
            raise InvalidInput("session does not belong to this user or instrument", field="session_id")

        if answer is not None:
            self._record(session, step, answer)
        self.store.set(session_id, session)

        item_count = self.definition.item_count
        next_step = session.next_step(item_count)
        if next_step is None:
            result = score(self.instrument, session.ordered_answers(item_count), self.emergency)
            self.store.delete(session_id)
            logger.info(
                "ASSESSMENT_SESSION_COMPLETED",
                extra={
                    "session_id": session_id,
                    "instrument": self.instrument.value,
                    "severity": result.severity,
                }
            )
            payload = {"completed": True, "sessionId": session_id}
            payload.update(result.to_dict())
            return payload

        return {
            "completed": False,
            "step": next_step,
            "totalSteps": item_count,
            "question": self.definition.question(next_step),
            "options": [dict(option) for option in self.definition.options],
            "sessionId": session_id,
            "progress": round(len(session.answers) / item_count * 100),
        }

    def clear_session(self, session_id: str) -> bool:
        return self.store.delete(session_id)

    def _record(self, session: AssessmentSession, step: int, answer: int) -> None:
        item_count = self.definition.item_count
        if isinstance(step, bool) or not isinstance(step, int) or not 1 <= step <= item_count:
            raise InvalidInput(f"step must be within [1, {item_count}], got {step!r}", field="step")
        if isinstance(answer, bool) or not isinstance(answer, int) or not MIN_ANSWER <= answer <= MAX_ANSWER:
            raise InvalidInput(
                f"answer must be within [{MIN_ANSWER}, {MAX_ANSWER}], got {answer!r}",
                field="answer",
            )
        session.answers[step] = answer
