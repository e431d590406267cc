"""Shared domain models for the carecheck core."""
from .risk import (
    DetectionMethod,
    RiskLevel,
    Instrument,
    PHQ9Item,
    DetectionResult,
    SeverityResult,
)
from .errors import (
    CareCheckError,
    InvalidInput,
    UpstreamUnavailable,
    DetectionDegraded,
)

__all__ = [
    "DetectionMethod",
    "RiskLevel",
    "Instrument",
    "PHQ9Item",
    "DetectionResult",
    "SeverityResult",
    "CareCheckError",
    "InvalidInput",
    "UpstreamUnavailable",
    "DetectionDegraded",
]
