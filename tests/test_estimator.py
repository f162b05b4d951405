import asyncio
import logging
import math
import threading
import time

import pytest
from pydantic import ValidationError

from compression_visualizer.analysis import (
    AnalysisReply,
    AnalysisService,
    LLMAnalysisService,
    UnavailableAnalysisService,
)
from compression_visualizer.catalog import get_dataset, get_model, get_technique
from compression_visualizer.estimator import (
    DATA_FALLBACK_SUMMARY,
    MODEL_FALLBACK_SUMMARY,
    estimate_data_compression,
    estimate_model_compression,
    pca_retained_fraction,
    run_estimate,
    run_estimate_sync,
)
from compression_visualizer.exceptions import SelectionError
from compression_visualizer.llm_providers import MockLLMProvider
from compression_visualizer.models import (
    AnalysisSource,
    DataSimulationResult,
    DatasetAsset,
    Mode,
    SimulationResult,
)


class SlowService(AnalysisService):
    async def request_analysis(self, payload):
        await asyncio.sleep(5)
        return AnalysisReply(metric=1.0, summary="too late")


class BrokenService(AnalysisService):
    async def request_analysis(self, payload):
        raise RuntimeError("boom")


PRUNING = get_technique(Mode.MODEL, "pruning")
QUANTIZATION = get_technique(Mode.MODEL, "quantization")
PCA = get_technique(Mode.DATA, "pca")
SAMPLING = get_technique(Mode.DATA, "sampling")


def test_pruning_fallback_numbers():
    result = run_estimate_sync(
        get_model("mobilenet_v2"), PRUNING, {"sparsity": 50}, UnavailableAnalysisService()
    )
    assert isinstance(result, SimulationResult)
    assert result.compressed_size == pytest.approx(7.7)
    assert result.compressed_params == pytest.approx(1.75)
    assert result.compressed_accuracy == pytest.approx(89.49)
    assert result.original_accuracy == 94.2
    assert result.summary == MODEL_FALLBACK_SUMMARY
    assert result.analysis_source is AnalysisSource.FALLBACK


@pytest.mark.parametrize("bits,divisor", [(16, 2), (8, 4), (4, 8)])
def test_quantization_divides_size_only(bits, divisor):
    model = get_model("resnet50")
    estimate = estimate_model_compression(model, QUANTIZATION, {"bits": bits})
    assert estimate.compressed_size == pytest.approx(102 / divisor)
    assert estimate.compressed_params == 25.6


def test_unknown_technique_rejected():
    with pytest.raises(SelectionError):
        estimate_model_compression(get_model("resnet50"), SAMPLING, {})
    with pytest.raises(SelectionError):
        estimate_data_compression(get_dataset("iris_dataset"), PRUNING, {})


def test_sampling_keeps_features():
    result = run_estimate_sync(
        get_dataset("iris_dataset"), SAMPLING, {"sampling_ratio": 50}, UnavailableAnalysisService()
    )
    assert isinstance(result, DataSimulationResult)
    assert result.compressed_size == pytest.approx(0.05)
    assert result.compressed_features == 4
    assert result.samples == 150
    assert result.information_loss == 5.0
    assert result.summary == DATA_FALLBACK_SUMMARY


def test_compressed_size_floor():
    tiny = DatasetAsset(
        id="tiny", name="Tiny", description="d", size_mb=0.005, features=3, samples=10
    )
    estimate = estimate_data_compression(tiny, SAMPLING, {"sampling_ratio": 10})
    assert estimate.compressed_size == 0.01


def test_pca_feature_count():
    mnist = get_dataset("mnist_digits")
    estimate = estimate_data_compression(mnist, PCA, {"variance_to_keep": 80})
    expected = math.ceil(784 * pca_retained_fraction(0.8, 0.7))
    assert estimate.compressed_features == expected
    assert 1 <= estimate.compressed_features < 784
    assert estimate.compressed_size == pytest.approx(50 * expected / 784)


def test_pca_uses_dataset_complexity_when_present():
    spread = DatasetAsset(
        id="spread", name="Spread", description="d", size_mb=10, features=100, samples=10,
        intrinsic_dimensionality=0.3,
    )
    compact = spread.model_copy(update={"intrinsic_dimensionality": 0.9})
    cfg = {"variance_to_keep": 90}
    assert (
        estimate_data_compression(spread, PCA, cfg).compressed_features
        > estimate_data_compression(compact, PCA, cfg).compressed_features
    )


def test_pca_keeps_at_least_one_feature():
    single = DatasetAsset(id="one", name="One", description="d", size_mb=1, features=1, samples=5)
    assert estimate_data_compression(single, PCA, {"variance_to_keep": 80}).compressed_features == 1


def test_defaults_used_for_missing_config():
    estimate = estimate_model_compression(get_model("mobilenet_v2"), PRUNING, {})
    assert estimate.compressed_size == pytest.approx(7.7)


def test_llm_reply_used_for_model(mock_service, mock_provider):
    result = run_estimate_sync(get_model("mobilenet_v2"), PRUNING, {"sparsity": 50}, mock_service)
    assert result.analysis_source is AnalysisSource.LLM
    assert result.compressed_accuracy == 85.0
    assert result.summary.startswith("Pruning half")
    assert "MobileNetV2" in mock_provider.prompts[0]
    assert "Sparsity Target: 50%" in mock_provider.prompts[0]


def test_llm_reply_used_for_data():
    provider = MockLLMProvider(default_response="3.2%\nSampling keeps the feature space intact.")
    service = LLMAnalysisService(provider, "mock-model")
    result = run_estimate_sync(get_dataset("wine_quality"), SAMPLING, {}, service)
    assert result.information_loss == 3.2
    assert result.analysis_source is AnalysisSource.LLM


def test_malformed_reply_falls_back(mock_provider, mock_service):
    mock_provider.set_default_response("no numbers here")
    result = run_estimate_sync(get_model("bert_base"), QUANTIZATION, {"bits": 4}, mock_service)
    assert result.analysis_source is AnalysisSource.FALLBACK
    assert result.compressed_accuracy == pytest.approx(97.8 * 0.95)
    assert result.compressed_size == pytest.approx(55)


def test_timeout_falls_back(caplog):
    caplog.set_level(logging.WARNING)
    result = asyncio.run(
        run_estimate(get_model("resnet50"), PRUNING, {}, SlowService(), timeout=0.05)
    )
    assert result.analysis_source is AnalysisSource.FALLBACK
    assert "timed out" in caplog.text


def test_unexpected_service_error_falls_back():
    result = run_estimate_sync(get_dataset("iris_dataset"), PCA, {}, BrokenService())
    assert result.analysis_source is AnalysisSource.FALLBACK
    assert result.information_loss == 5.0


def test_hung_provider_does_not_block_past_timeout(caplog):
    release = threading.Event()

    def hang(prompt):
        release.wait(10)
        return "50\nToo late to matter."

    service = LLMAnalysisService(MockLLMProvider(response_fn=hang), "mock-model")
    caplog.set_level(logging.WARNING)
    started = time.monotonic()
    try:
        result = run_estimate_sync(get_model("resnet50"), PRUNING, {}, service, timeout=0.2)
        elapsed = time.monotonic() - started
    finally:
        release.set()
    assert result.analysis_source is AnalysisSource.FALLBACK
    assert result.compressed_accuracy == pytest.approx(96.5 * 0.95)
    assert elapsed < 2
    assert "timed out" in caplog.text


def test_zero_timeout_still_bounds_the_call():
    started = time.monotonic()
    result = asyncio.run(
        run_estimate(get_model("resnet50"), PRUNING, {}, SlowService(), timeout=0)
    )
    assert result.analysis_source is AnalysisSource.FALLBACK
    assert time.monotonic() - started < 2


def test_zero_intrinsic_dimensionality_rejected():
    with pytest.raises(ValidationError):
        DatasetAsset(
            id="flat", name="Flat", description="d", size_mb=1, features=10, samples=5,
            intrinsic_dimensionality=0.0,
        )
