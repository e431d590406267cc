"""Optional upstream crisis classifiers.

The detector treats any classifier as best-effort: a timeout, transport
error or malformed payload surfaces as ``UpstreamUnavailable`` (or ``None``)
and simply means "no ML signal". Implementations:

- LocalServiceClassifier: self-hosted service at ``{ML_SERVICE_URL}/crisis-detect``
- HuggingFaceToxicityClassifier: hosted toxicity model, rescaled to crisis confidence
- ChainedClassifier: tries several classifiers in order
"""
import asyncio
import logging
import math
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

import aiohttp

from carecheck.shared.models import UpstreamUnavailable
from .config import DetectorConfig

logger = logging.getLogger(__name__)

HUGGINGFACE_TOXICITY_ENDPOINT = (
    "https://api-inference.huggingface.co/models/martin-ha/toxic-comment-model"
)

# Toxicity is only a rough proxy for crisis language
TOXICITY_TO_CRISIS_SCALE = 1.2


@dataclass(frozen=True)
class ClassifierResult:
    """Confidence returned by an upstream classifier."""
    confidence: float
    source: str
    raw_score: Optional[float] = None

    def __post_init__(self):
        if not 0.0 <= self.confidence <= 1.0:
            raise ValueError(f"Confidence must be 0.0-1.0, got {self.confidence}")


class UpstreamClassifier(ABC):
    """Capability: ``classify(text, language, timeout, threshold) -> result | None``."""

    name: str = "upstream"

    @abstractmethod
    async def classify(
        self,
        text: str,
        language: str,
        timeout: float,
        threshold: Optional[float] = None,
    ) -> Optional[ClassifierResult]:
        """Classify text.

        Args:
            text: Raw user text
            language: Language code of the text
            timeout: Upper bound in seconds for the whole call
            threshold: Confidence the caller will act on; single
                classifiers ignore it, chains stop once it is reached

        Returns:
            ClassifierResult, or None when the classifier has no opinion

        Raises:
            UpstreamUnavailable: On timeout, transport or payload errors
        """


async def _post_json(
    url: str,
    payload: Dict[str, Any],
    timeout: float,
    headers: Optional[Dict[str, str]] = None,
) -> Any:
    try:
        async with aiohttp.ClientSession() as session:
            async with session.post(
                url,
                headers=headers or {},
                json=payload,
                timeout=aiohttp.ClientTimeout(total=timeout),
            ) as response:
                response.raise_for_status()
                return await response.json()
    except asyncio.TimeoutError as e:
        raise UpstreamUnavailable(f"timed out after {timeout}s") from e
    except (aiohttp.ClientError, ValueError) as e:
        raise UpstreamUnavailable(str(e)) from e


def _finite(value: Any, what: str) -> float:
    """Parse a numeric score; NaN, infinities and non-numbers are garbage."""
    try:
        number = float(value)
    except (TypeError, ValueError) as e:
        raise UpstreamUnavailable(f"non-numeric {what}: {value!r}") from e
    if not math.isfinite(number):
        raise UpstreamUnavailable(f"non-finite {what}: {value!r}")
    return number


def _clamp(value: float) -> float:
    return max(0.0, min(1.0, value))


class LocalServiceClassifier(UpstreamClassifier):
    """Self-hosted classifier answering ``{"confidence": float}``."""

    name = "ml_local"

    def __init__(self, base_url: str, timeout_seconds: float = 5.0):
        if not base_url:
            raise ValueError("Local ML service URL required")
        self.endpoint = f"{base_url.rstrip('/')}/crisis-detect"
        self.timeout_seconds = timeout_seconds

    async def classify(
        self,
        text: str,
        language: str,
        timeout: float,
        threshold: Optional[float] = None,
    ) -> Optional[ClassifierResult]:
        data = await _post_json(
            self.endpoint,
            {"text": text, "language": language},
            timeout=min(timeout, self.timeout_seconds),
        )
        if not isinstance(data, dict) or "confidence" not in data:
            return None
        confidence = _finite(data["confidence"], "confidence")
        return ClassifierResult(confidence=_clamp(confidence), source=self.name)


class HuggingFaceToxicityClassifier(UpstreamClassifier):
    """Hosted toxicity model; TOXIC score * 1.2, capped at 1.0."""

    name = "huggingface"

    def __init__(
        self,
        api_key: str,
        endpoint: str = HUGGINGFACE_TOXICITY_ENDPOINT,
        timeout_seconds: float = 10.0,
    ):
        if not api_key:
            raise ValueError("HuggingFace API key required")
        self.endpoint = endpoint
        self.timeout_seconds = timeout_seconds
        self.headers = {
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
        }

    async def classify(
        self,
        text: str,
        language: str,
        timeout: float,
        threshold: Optional[float] = None,
    ) -> Optional[ClassifierResult]:
        data = await _post_json(
            self.endpoint,
            {"inputs": text},
            timeout=min(timeout, self.timeout_seconds),
            headers=self.headers,
        )
        # Response shape: [[{"label": "TOXIC", "score": 0.9}, {"label": "NON_TOXIC", ...}]]
        if not isinstance(data, list) or not data or not isinstance(data[0], list):
            return None
        toxic_score = 0.0
        for entry in data[0]:
            if isinstance(entry, dict) and entry.get("label") == "TOXIC":
                toxic_score = _finite(entry.get("score", 0.0), "toxicity score")
                break
        return ClassifierResult(
            confidence=_clamp(toxic_score * TOXICITY_TO_CRISIS_SCALE),
            source=self.name,
            raw_score=toxic_score,
        )


class ChainedClassifier(UpstreamClassifier):
    """Consult classifiers in order; first confident answer wins.

    The caller's threshold, when given, overrides the one set at
    construction. All classifiers share one time budget: each gets what is
    left of it, and one that overruns is cut off and skipped like a failing
    one. If none reaches the threshold the highest-confidence answer seen
    is returned.
    """

    name = "chain"

    def __init__(self, classifiers: Sequence[UpstreamClassifier], threshold: float = 0.8):
        self.classifiers: List[UpstreamClassifier] = list(classifiers)
        self.threshold = threshold

    async def classify(
        self,
        text: str,
        language: str,
        timeout: float,
        threshold: Optional[float] = None,
    ) -> Optional[ClassifierResult]:
        limit = self.threshold if threshold is None else threshold
        loop = asyncio.get_running_loop()
        deadline = loop.time() + timeout
        best: Optional[ClassifierResult] = None

        for classifier in self.classifiers:
            remaining = deadline - loop.time()
            if remaining <= 0:
                logger.warning(
                    "UPSTREAM_CHAIN_BUDGET_EXHAUSTED",
                    extra={"skipped": classifier.name, "timeout_s": timeout}
                )
                break
            try:
                result = await asyncio.wait_for(
                    classifier.classify(text, language, remaining, limit),
                    timeout=remaining,
                )
            except asyncio.TimeoutError:
                logger.warning(
                    "UPSTREAM_CLASSIFIER_TIMEOUT",
                    extra={"classifier": classifier.name, "timeout_s": round(remaining, 3)}
                )
                continue
            except UpstreamUnavailable as e:
                logger.warning(
                    "UPSTREAM_CLASSIFIER_UNAVAILABLE",
                    extra={"classifier": classifier.name, "error": str(e)}
                )
                continue
            if result is None:
                continue
            if result.confidence >= limit:
                return result
            if best is None or result.confidence > best.confidence:
                best = result
        return best


def build_classifier(config: DetectorConfig) -> Optional[UpstreamClassifier]:
    """Build the classifier chain configured in the environment, if any."""
    classifiers: List[UpstreamClassifier] = []
    if config.ml_service_url:
        classifiers.append(
            LocalServiceClassifier(config.ml_service_url, config.ml_timeout_seconds)
        )
    if config.huggingface_api_key:
        classifiers.append(
            HuggingFaceToxicityClassifier(
                config.huggingface_api_key,
                timeout_seconds=config.huggingface_timeout_seconds,
            )
        )
    if not classifiers:
        return None
    if len(classifiers) == 1:
        return classifiers[0]
    return ChainedClassifier(classifiers, threshold=config.crisis_threshold)
