"""Tests for the upstream classifiers and their error mapping."""
import asyncio

import aiohttp
import pytest
from unittest.mock import AsyncMock, patch

from carecheck.shared.models import UpstreamUnavailable
from carecheck.services.safety_service.classifier import (
    ChainedClassifier,
    ClassifierResult,
    HuggingFaceToxicityClassifier,
    LocalServiceClassifier,
    UpstreamClassifier,
    _post_json,
    build_classifier,
)
from carecheck.services.safety_service.config import DetectorConfig

POST_JSON = "carecheck.services.safety_service.classifier._post_json"


class StaticClassifier(UpstreamClassifier):
    def __init__(self, name, result=None, error=None, delay=0.0):
        self.name = name
        self.result = result
        self.error = error
        self.delay = delay
        self.timeouts = []

    async def classify(self, text, language, timeout, threshold=None):
        self.timeouts.append(timeout)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error:
            raise self.error
        return self.result


@pytest.mark.asyncio
class TestPostJson:
    """Transport failures surface as UpstreamUnavailable."""

    async def test_client_error_mapped(self):
        with patch(
            "carecheck.services.safety_service.classifier.aiohttp.ClientSession",
            side_effect=aiohttp.ClientConnectionError("refused"),
        ):
            with pytest.raises(UpstreamUnavailable):
                await _post_json("http://ml.local/crisis-detect", {}, timeout=1.0)

    async def test_timeout_mapped(self):
        with patch(
            "carecheck.services.safety_service.classifier.aiohttp.ClientSession",
            side_effect=asyncio.TimeoutError(),
        ):
            with pytest.raises(UpstreamUnavailable, match="timed out"):
                await _post_json("http://ml.local/crisis-detect", {}, timeout=1.0)


@pytest.mark.asyncio
class TestLocalServiceClassifier:
    """Tests for the self-hosted classifier."""

    async def test_returns_confidence(self):
        classifier = LocalServiceClassifier("http://ml.local:8001/")

        with patch(POST_JSON, new=AsyncMock(return_value={"confidence": 0.92})) as mock_post:
            result = await classifier.classify("text", "en", timeout=5.0)

        assert result == ClassifierResult(confidence=0.92, source="ml_local")
        assert mock_post.call_args.args[0] == "http://ml.local:8001/crisis-detect"
        assert mock_post.call_args.args[1] == {"text": "text", "language": "en"}

    async def test_confidence_clamped(self):
        classifier = LocalServiceClassifier("http://ml.local")

        with patch(POST_JSON, new=AsyncMock(return_value={"confidence": 1.7})):
            result = await classifier.classify("text", "en", timeout=5.0)

        assert result.confidence == 1.0

    async def test_missing_confidence_means_no_opinion(self):
        classifier = LocalServiceClassifier("http://ml.local")

        with patch(POST_JSON, new=AsyncMock(return_value={"label": "crisis"})):
            assert await classifier.classify("text", "en", timeout=5.0) is None

    async def test_non_numeric_confidence_raises(self):
        classifier = LocalServiceClassifier("http://ml.local")

        with patch(POST_JSON, new=AsyncMock(return_value={"confidence": "high"})):
            with pytest.raises(UpstreamUnavailable):
                await classifier.classify("text", "en", timeout=5.0)

    @pytest.mark.parametrize("garbage", [float("nan"), float("inf"), float("-inf"), "nan"])
    async def test_non_finite_confidence_raises(self, garbage):
        classifier = LocalServiceClassifier("http://ml.local")

        with patch(POST_JSON, new=AsyncMock(return_value={"confidence": garbage})):
            with pytest.raises(UpstreamUnavailable, match="non-finite"):
                await classifier.classify("text", "en", timeout=5.0)

    async def test_timeout_bounded_by_own_setting(self):
        classifier = LocalServiceClassifier("http://ml.local", timeout_seconds=5.0)

        with patch(POST_JSON, new=AsyncMock(return_value={"confidence": 0.1})) as mock_post:
            await classifier.classify("text", "en", timeout=10.0)

        assert mock_post.call_args.kwargs["timeout"] == 5.0

    def test_url_required(self):
        with pytest.raises(ValueError):
            LocalServiceClassifier("")


@pytest.mark.asyncio
class TestHuggingFaceToxicityClassifier:
    """Tests for the hosted toxicity model."""

    async def test_toxic_score_scaled(self):
        classifier = HuggingFaceToxicityClassifier("hf_test")
        payload = [[{"label": "NON_TOXIC", "score": 0.3}, {"label": "TOXIC", "score": 0.7}]]

        with patch(POST_JSON, new=AsyncMock(return_value=payload)):
            result = await classifier.classify("text", "en", timeout=10.0)

        assert result.confidence == pytest.approx(0.84)
        assert result.raw_score == 0.7
        assert result.source == "huggingface"

    async def test_scaled_score_capped(self):
        classifier = HuggingFaceToxicityClassifier("hf_test")

        with patch(POST_JSON, new=AsyncMock(return_value=[[{"label": "TOXIC", "score": 0.95}]])):
            result = await classifier.classify("text", "en", timeout=10.0)

        assert result.confidence == 1.0

    async def test_no_toxic_label_is_zero(self):
        classifier = HuggingFaceToxicityClassifier("hf_test")

        with patch(POST_JSON, new=AsyncMock(return_value=[[{"label": "NON_TOXIC", "score": 0.99}]])):
            result = await classifier.classify("text", "en", timeout=10.0)

        assert result.confidence == 0.0

    @pytest.mark.parametrize("garbage", [float("nan"), float("inf"), None, "high"])
    async def test_bad_toxic_score_raises(self, garbage):
        classifier = HuggingFaceToxicityClassifier("hf_test")

        with patch(POST_JSON, new=AsyncMock(return_value=[[{"label": "TOXIC", "score": garbage}]])):
            with pytest.raises(UpstreamUnavailable):
                await classifier.classify("text", "en", timeout=10.0)

    async def test_unexpected_shape_means_no_opinion(self):
        classifier = HuggingFaceToxicityClassifier("hf_test")

        with patch(POST_JSON, new=AsyncMock(return_value={"error": "loading"})):
            assert await classifier.classify("text", "en", timeout=10.0) is None

    async def test_sends_bearer_token(self):
        classifier = HuggingFaceToxicityClassifier("hf_test")

        with patch(POST_JSON, new=AsyncMock(return_value=[[]])) as mock_post:
            await classifier.classify("text", "en", timeout=10.0)

        assert mock_post.call_args.kwargs["headers"]["Authorization"] == "Bearer hf_test"

    def test_api_key_required(self):
        with pytest.raises(ValueError):
            HuggingFaceToxicityClassifier("")


@pytest.mark.asyncio
class TestChainedClassifier:
    """Tests for classifier chaining."""

    async def test_first_confident_answer_wins(self):
        chain = ChainedClassifier([
            StaticClassifier("a", ClassifierResult(0.9, "a")),
            StaticClassifier("b", ClassifierResult(0.95, "b")),
        ])

        result = await chain.classify("text", "en", 5.0)

        assert result.source == "a"

    async def test_failing_classifier_skipped(self):
        chain = ChainedClassifier([
            StaticClassifier("a", error=UpstreamUnavailable("down")),
            StaticClassifier("b", ClassifierResult(0.85, "b")),
        ])

        result = await chain.classify("text", "en", 5.0)

        assert result.source == "b"

    async def test_best_answer_when_none_confident(self):
        chain = ChainedClassifier([
            StaticClassifier("a", ClassifierResult(0.4, "a")),
            StaticClassifier("b", None),
            StaticClassifier("c", ClassifierResult(0.6, "c")),
        ])

        result = await chain.classify("text", "en", 5.0)

        assert result.source == "c"

    async def test_all_unavailable(self):
        chain = ChainedClassifier([StaticClassifier("a", error=UpstreamUnavailable("down"))])

        assert await chain.classify("text", "en", 5.0) is None

    async def test_call_threshold_overrides_configured(self):
        chain = ChainedClassifier([
            StaticClassifier("a", ClassifierResult(0.85, "a")),
            StaticClassifier("b", ClassifierResult(0.95, "b")),
        ], threshold=0.8)

        result = await chain.classify("text", "en", 5.0, threshold=0.9)

        assert result.source == "b"

    async def test_slow_member_cut_off_and_best_kept(self):
        chain = ChainedClassifier([
            StaticClassifier("a", ClassifierResult(0.5, "a")),
            StaticClassifier("b", ClassifierResult(1.0, "b"), delay=5.0),
        ])

        result = await asyncio.wait_for(chain.classify("text", "en", 0.1), timeout=1.0)

        assert result.source == "a"

    async def test_members_share_one_budget(self):
        first = StaticClassifier("a", ClassifierResult(0.1, "a"), delay=0.05)
        second = StaticClassifier("b", ClassifierResult(0.2, "b"))
        chain = ChainedClassifier([first, second])

        await chain.classify("text", "en", 1.0)

        assert first.timeouts[0] == pytest.approx(1.0, abs=0.01)
        assert second.timeouts[0] < first.timeouts[0] - 0.04


class TestBuildClassifier:
    """Tests for config-driven classifier selection."""

    def test_nothing_configured(self):
        assert build_classifier(DetectorConfig()) is None

    def test_local_only(self):
        classifier = build_classifier(DetectorConfig(ml_service_url="http://ml.local"))

        assert isinstance(classifier, LocalServiceClassifier)

    def test_huggingface_only(self):
        classifier = build_classifier(DetectorConfig(huggingface_api_key="hf_test"))

        assert isinstance(classifier, HuggingFaceToxicityClassifier)

    def test_both_chained_local_first(self):
        classifier = build_classifier(
            DetectorConfig(ml_service_url="http://ml.local", huggingface_api_key="hf_test")
        )

        assert isinstance(classifier, ChainedClassifier)
        assert [c.name for c in classifier.classifiers] == ["ml_local", "huggingface"]
