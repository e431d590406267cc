"""Error taxonomy for detection and assessment.

Only ``InvalidInput`` ever reaches callers. ``UpstreamUnavailable`` and
``DetectionDegraded`` are recovered inside the detector and exist so the
recovery paths can be logged and tested by type.
"""
from typing import Optional


class CareCheckError(Exception):
    """Base class for all carecheck errors."""


class InvalidInput(CareCheckError, ValueError):
    """Malformed request: bad answers, text, language or threshold."""

    def __init__(self, reason: str, field: Optional[str] = None):
        self.reason = reason
        self.field = field
        message = f"{field}: {reason}" if field else reason
        super().__init__(message)


class UpstreamUnavailable(CareCheckError):
    """External classifier timed out, errored or returned garbage."""


class DetectionDegraded(CareCheckError):
    """Unexpected failure inside the detection pipeline."""
