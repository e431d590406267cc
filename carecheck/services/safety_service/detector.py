"""Crisis confidence scorer - layered detection with graceful degradation.

Stages, first decisive stage wins:
- Stage 1: Crisis keywords (highest precision, min(n/3, 1) vs threshold)
- Stage 2: Optional upstream classifier (best-effort, bounded timeout)
- Stage 3: Linguistic patterns (recall safety net, min(n/2, 1) vs 0.6)

Detection sits on a safety-critical path: pipeline failures are logged and
answered with a relaxed keyword-only verdict instead of an exception.
"""
import asyncio
import logging
import time
from typing import Any, Dict, Optional

from carecheck.shared.models import (
    DetectionDegraded,
    DetectionMethod,
    DetectionResult,
    InvalidInput,
    RiskLevel,
    UpstreamUnavailable,
)
from carecheck.shared.utils import hash_text_for_audit
from .classifier import ClassifierResult, UpstreamClassifier, build_classifier
from .config import DEFAULT_LANGUAGE, DetectorConfig
from .lexicon import Lexicon, LexiconStore, get_default_store
from .matchers import KeywordMatch, match_keywords, match_patterns
from .signals import urgency_level

logger = logging.getLogger(__name__)

# Slack on top of the classifier budget before the detector cuts it off
UPSTREAM_GRACE_SECONDS = 0.25


class CrisisDetector:
    """Decides whether free text indicates a mental-health crisis.

    Stateless apart from the injected lexicon store; each call works on a
    single lexicon snapshot, so two identical calls without an intervening
    lexicon update return equal results.
    """

    def __init__(
        self,
        config: Optional[DetectorConfig] = None,
        lexicon_store: Optional[LexiconStore] = None,
        classifier: Optional[UpstreamClassifier] = None,
    ):
        """Initialize detector.

        Args:
            config: Thresholds and upstream settings
            lexicon_store: Keyword store; defaults to the process-wide store
            classifier: Upstream classifier; defaults to whatever the
                config enables (none when no URL or key is set)
        """
        self.config = config or DetectorConfig()
        self.lexicon_store = lexicon_store if lexicon_store is not None else get_default_store()
        self.classifier = classifier if classifier is not None else build_classifier(self.config)

        logger.info(
            "CRISIS_DETECTOR_INITIALIZED",
            extra={
                "threshold": self.config.crisis_threshold,
                "pattern_threshold": self.config.pattern_threshold,
                "classifier": self.classifier.name if self.classifier else None,
            }
        )

    @property
    def upstream_timeout(self) -> float:
        return max(self.config.ml_timeout_seconds, self.config.huggingface_timeout_seconds)

    async def analyze(
        self,
        text: str,
        language_code: Optional[str] = DEFAULT_LANGUAGE,
        threshold: Optional[float] = None,
    ) -> DetectionResult:
        """Analyze text for crisis language.

        Args:
            text: Raw user text, 1-5000 characters
            language_code: Any language in the lexicon store; others use English
            threshold: Keyword/classifier threshold, defaults to config

        Returns:
            DetectionResult; never raises for internal failures

        Raises:
            InvalidInput: Empty or oversized text, or threshold outside [0, 1]

        Logs:
            - CRISIS_DETECTION_CRISIS: Crisis verdict (critical level)
            - CRISIS_DETECTION_DEGRADED: Pipeline failure, relaxed fallback used
            - CRISIS_DETECTION_COMPLETED: Every successful analysis
        """
        threshold = self._validate(text, threshold)
        language = self._resolve_language(language_code)
        start_time = time.perf_counter()
        text_hash = hash_text_for_audit(text)

        lexicon = self.lexicon_store.get_lexicon(language)

        try:
            result = await self._run_pipeline(text, language, lexicon, threshold)
        except Exception as e:
            degraded = DetectionDegraded(f"{type(e).__name__}: {e}")
            degraded.__cause__ = e
            logger.error(
                "CRISIS_DETECTION_DEGRADED",
                exc_info=degraded,
                extra={
                    "text_hash": text_hash,
                    "language": language,
                    "error_type": type(e).__name__,
                    "fallback_threshold": self.config.degraded_threshold,
                }
            )
            result = self._degraded_result(text, language, lexicon)

        latency_ms = (time.perf_counter() - start_time) * 1000
        log_context = {
            "text_hash": text_hash,
            "text_length": len(text),
            "language": language,
            "is_crisis": result.is_crisis,
            "confidence": round(result.confidence, 3),
            "method": result.method.value,
            "risk_level": result.risk_level.value,
            "keyword_matches": len(result.matched_keywords),
            "degraded": result.degraded,
            "latency_ms": latency_ms,
        }
        if result.is_crisis:
            logger.critical("CRISIS_DETECTION_CRISIS", extra=log_context)
        logger.info("CRISIS_DETECTION_COMPLETED", extra=log_context)

        return result

    async def _run_pipeline(
        self,
        text: str,
        language: str,
        lexicon: Lexicon,
        threshold: float,
    ) -> DetectionResult:
        # Stage 1: keywords
        keywords = match_keywords(text, lexicon.crisis_keywords)
        urgency = match_keywords(text, lexicon.urgency_keywords)
        risk_level = urgency_level(keywords.count, urgency.count)

        confidence = self._keyword_confidence(keywords)
        if confidence >= threshold:
            return DetectionResult(
                is_crisis=True,
                confidence=confidence,
                method=DetectionMethod.KEYWORD,
                matched_keywords=keywords.matched,
                risk_level=risk_level,
                language=language,
            )

        # Stage 2: upstream classifier
        upstream = await self._classify_upstream(text, language, threshold)
        if upstream is not None and upstream.confidence >= threshold:
            return DetectionResult(
                is_crisis=True,
                confidence=upstream.confidence,
                method=DetectionMethod.ML_FALLBACK,
                matched_keywords=keywords.matched,
                risk_level=risk_level,
                language=language,
                classifier=upstream.source,
            )

        # Stage 3: patterns
        pattern_count = match_patterns(text, lexicon.crisis_patterns)
        confidence = min(pattern_count / self.config.pattern_divisor, 1.0)
        if confidence >= self.config.pattern_threshold:
            return DetectionResult(
                is_crisis=True,
                confidence=confidence,
                method=DetectionMethod.PATTERN,
                matched_keywords=keywords.matched,
                risk_level=risk_level,
                language=language,
            )

        return DetectionResult(
            is_crisis=False,
            confidence=confidence,
            method=DetectionMethod.KEYWORD,
            matched_keywords=keywords.matched,
            risk_level=risk_level,
            language=language,
        )

    async def _classify_upstream(
        self,
        text: str,
        language: str,
        threshold: float,
    ) -> Optional[ClassifierResult]:
        """Best-effort classifier call; any failure means no signal."""
        if self.classifier is None:
            return None

        timeout = self.upstream_timeout
        try:
            # The classifier enforces ``timeout`` itself; the outer bound only
            # catches one that ignores it, so a chain keeps its partial result.
            return await asyncio.wait_for(
                self.classifier.classify(text, language, timeout, threshold),
                timeout=timeout + UPSTREAM_GRACE_SECONDS,
            )
        except asyncio.TimeoutError:
            logger.warning(
                "UPSTREAM_CLASSIFIER_TIMEOUT",
                extra={"classifier": self.classifier.name, "timeout_s": timeout}
            )
        except UpstreamUnavailable as e:
            logger.warning(
                "UPSTREAM_CLASSIFIER_UNAVAILABLE",
                extra={"classifier": self.classifier.name, "error": str(e)}
            )
        except Exception as e:
            logger.warning(
                "UPSTREAM_CLASSIFIER_FAILED",
                extra={
                    "classifier": self.classifier.name,
                    "error_type": type(e).__name__,
                    "error": str(e),
                }
            )
        return None

    def _keyword_confidence(self, keywords: KeywordMatch) -> float:
        return min(keywords.count / self.config.keyword_divisor, 1.0)

    def _degraded_result(self, text: str, language: str, lexicon: Lexicon) -> DetectionResult:
        """Relaxed keyword-only verdict used when the pipeline fails."""
        try:
            keywords = match_keywords(text, lexicon.crisis_keywords)
            confidence = self._keyword_confidence(keywords)
            is_crisis = confidence >= self.config.degraded_threshold
            return DetectionResult(
                is_crisis=is_crisis,
                confidence=confidence,
                method=DetectionMethod.KEYWORD,
                matched_keywords=keywords.matched,
                risk_level=RiskLevel.HIGH if keywords.count else RiskLevel.LOW,
                language=language,
                degraded=True,
            )
        except Exception:
            logger.critical(
                "CRISIS_DETECTION_FALLBACK_FAILED",
                exc_info=True,
                extra={"language": language}
            )
            return DetectionResult(
                is_crisis=False,
                confidence=0.0,
                method=DetectionMethod.KEYWORD,
                language=language,
                degraded=True,
            )

    def _validate(self, text: str, threshold: Optional[float]) -> float:
        if not isinstance(text, str):
            raise InvalidInput("text must be a string", field="text")
        if not text.strip():
            raise InvalidInput("text must not be empty", field="text")
        if len(text) > self.config.max_text_length:
            raise InvalidInput(
                f"text exceeds {self.config.max_text_length} characters",
                field="text",
            )

        if threshold is None:
            return self.config.crisis_threshold
        if isinstance(threshold, bool) or not isinstance(threshold, (int, float)):
            raise InvalidInput("threshold must be a number", field="threshold")
        if not 0.0 <= threshold <= 1.0:
            raise InvalidInput("threshold must be within [0, 1]", field="threshold")
        return float(threshold)

    def _resolve_language(self, language_code: Optional[str]) -> str:
        if not language_code:
            return DEFAULT_LANGUAGE
        language = str(language_code).lower()
        if language not in self.lexicon_store.supported_languages():
            logger.warning(
                "CRISIS_DETECTION_LANGUAGE_FALLBACK",
                extra={"requested": language, "used": DEFAULT_LANGUAGE}
            )
            return DEFAULT_LANGUAGE
        return language

    def get_detection_stats(self) -> Dict[str, Any]:
        """Summary for the admin dashboard."""
        return {
            "threshold": self.config.crisis_threshold,
            "patternThreshold": self.config.pattern_threshold,
            "mlServiceAvailable": bool(self.config.ml_service_url),
            "huggingFaceAvailable": bool(self.config.huggingface_api_key),
            "classifier": self.classifier.name if self.classifier else None,
            "supportedLanguages": self.lexicon_store.supported_languages(),
        }


_default_detector: Optional[CrisisDetector] = None


def get_default_detector() -> CrisisDetector:
    """Detector configured from the environment, built on first use."""
    global _default_detector
    if _default_detector is None:
        _default_detector = CrisisDetector(config=DetectorConfig.from_env())
    return _default_detector


async def analyze(
    text: str,
    language_code: Optional[str] = DEFAULT_LANGUAGE,
    threshold: Optional[float] = None,
) -> DetectionResult:
    """Module-level shortcut for ``get_default_detector().analyze``."""
    return await get_default_detector().analyze(text, language_code, threshold)
