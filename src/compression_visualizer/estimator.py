"""Simulated compression metrics for models and datasets.

The size, parameter and feature numbers are closed-form heuristics computed
locally. The qualitative metric (accuracy after compression, or information
loss) and the prose summary come from an :class:`AnalysisService`; when it
fails or times out a deterministic fallback is used instead, so callers
always get a complete result.
"""

from __future__ import annotations

import asyncio
import logging
import math
from dataclasses import dataclass
from typing import Dict, Mapping, Optional

from .analysis import (
    AnalysisReply,
    AnalysisRequest,
    AnalysisService,
    DataAnalysisRequest,
    ModelAnalysisRequest,
)
from .exceptions import AnalysisUnavailable, SelectionError
from .models import (
    AnalysisSource,
    AnyResult,
    Asset,
    ConfigValue,
    DataSimulationResult,
    DatasetAsset,
    ModelAsset,
    SimulationResult,
    Technique,
)
from .upload import DEFAULT_INTRINSIC_DIMENSIONALITY

logger = logging.getLogger(__name__)

# Pruning zeroes weights but storage only shrinks with sparse encoding.
PRUNING_SIZE_FACTOR = 0.9
QUANTIZATION_DIVISORS: Dict[int, int] = {16: 2, 8: 4, 4: 8}
MIN_COMPRESSED_SIZE_MB = 0.01

FALLBACK_ACCURACY_FACTOR = 0.95
FALLBACK_INFORMATION_LOSS = 5.0
MODEL_FALLBACK_SUMMARY = (
    "An error occurred while generating the AI analysis. This is a placeholder "
    "summary. Compression generally involves a trade-off between model size and "
    "performance. Please try again later."
)
DATA_FALLBACK_SUMMARY = (
    "An error occurred while generating the AI analysis. This is a placeholder "
    "summary. Data compression typically trades off data fidelity for reduced "
    "storage and faster processing. The impact on model performance varies "
    "depending on the technique and dataset."
)


@dataclass
class ModelEstimate:
    compressed_size: float
    compressed_params: float


@dataclass
class DataEstimate:
    compressed_size: float
    compressed_features: int


def estimate_model_compression(
    model: ModelAsset, technique: Technique, config: Mapping[str, ConfigValue]
) -> ModelEstimate:
    config = technique.effective_config(dict(config))
    size = model.size_mb
    params = model.parameters_million

    if technique.id == "pruning":
        sparsity = float(config["sparsity"]) / 100
        size *= 1 - sparsity * PRUNING_SIZE_FACTOR
        params *= 1 - sparsity
    elif technique.id == "quantization":
        bits = int(config["bits"])
        if bits not in QUANTIZATION_DIVISORS:
            raise SelectionError(f"Unsupported bit precision: {bits}")
        size /= QUANTIZATION_DIVISORS[bits]
    else:
        raise SelectionError(f"'{technique.id}' is not a model compression technique")

    return ModelEstimate(compressed_size=size, compressed_params=params)


def pca_retained_fraction(variance_to_keep: float, complexity: float) -> float:
    """Fraction of features kept by PCA for a variance target in ``[0, 1)``."""
    return 1 - (1 - variance_to_keep) ** (1 / complexity)


def estimate_data_compression(
    dataset: DatasetAsset, technique: Technique, config: Mapping[str, ConfigValue]
) -> DataEstimate:
    config = technique.effective_config(dict(config))
    size = dataset.size_mb
    features = dataset.features

    if technique.id == "pca":
        complexity = dataset.intrinsic_dimensionality
        if complexity is None:
            complexity = DEFAULT_INTRINSIC_DIMENSIONALITY
        fraction = pca_retained_fraction(
            float(config["variance_to_keep"]) / 100, complexity
        )
        features = max(1, math.ceil(dataset.features * fraction))
        size *= features / dataset.features
    elif technique.id == "sampling":
        size *= float(config["sampling_ratio"]) / 100
    else:
        raise SelectionError(f"'{technique.id}' is not a data compression technique")

    return DataEstimate(
        compressed_size=max(MIN_COMPRESSED_SIZE_MB, size), compressed_features=features
    )


async def _ask(
    service: AnalysisService, payload: AnalysisRequest, timeout: Optional[float]
) -> Optional[AnalysisReply]:
    try:
        if timeout is not None:
            return await asyncio.wait_for(service.request_analysis(payload), timeout)
        return await service.request_analysis(payload)
    except asyncio.TimeoutError:
        logger.warning("Analysis timed out after %.1fs; using fallback values", timeout)
    except AnalysisUnavailable as exc:
        logger.warning("Analysis unavailable: %s; using fallback values", exc)
    except Exception:
        logger.exception("Unexpected analysis failure; using fallback values")
    return None


async def simulate_model(
    model: ModelAsset,
    technique: Technique,
    config: Mapping[str, ConfigValue],
    service: AnalysisService,
    timeout: Optional[float] = None,
) -> SimulationResult:
    effective = technique.effective_config(dict(config))
    estimate = estimate_model_compression(model, technique, effective)
    reply = await _ask(
        service,
        ModelAnalysisRequest(
            model=model,
            technique=technique,
            config=effective,
            compressed_size=estimate.compressed_size,
            compressed_params=estimate.compressed_params,
        ),
        timeout,
    )
    if reply is None:
        accuracy = model.accuracy * FALLBACK_ACCURACY_FACTOR
        summary = MODEL_FALLBACK_SUMMARY
        source = AnalysisSource.FALLBACK
    else:
        accuracy, summary, source = reply.metric, reply.summary, AnalysisSource.LLM

    return SimulationResult(
        original_size=model.size_mb,
        compressed_size=estimate.compressed_size,
        original_params=model.parameters_million,
        compressed_params=estimate.compressed_params,
        original_accuracy=model.accuracy,
        compressed_accuracy=accuracy,
        summary=summary,
        analysis_source=source,
    )


async def simulate_data(
    dataset: DatasetAsset,
    technique: Technique,
    config: Mapping[str, ConfigValue],
    service: AnalysisService,
    timeout: Optional[float] = None,
) -> DataSimulationResult:
    effective = technique.effective_config(dict(config))
    estimate = estimate_data_compression(dataset, technique, effective)
    reply = await _ask(
        service,
        DataAnalysisRequest(
            dataset=dataset,
            technique=technique,
            config=effective,
            compressed_size=estimate.compressed_size,
            compressed_features=estimate.compressed_features,
        ),
        timeout,
    )
    if reply is None:
        loss, summary = FALLBACK_INFORMATION_LOSS, DATA_FALLBACK_SUMMARY
        source = AnalysisSource.FALLBACK
    else:
        loss, summary, source = reply.metric, reply.summary, AnalysisSource.LLM

    return DataSimulationResult(
        original_size=dataset.size_mb,
        compressed_size=estimate.compressed_size,
        original_features=dataset.features,
        compressed_features=estimate.compressed_features,
        samples=dataset.samples,
        information_loss=loss,
        summary=summary,
        analysis_source=source,
    )


async def run_estimate(
    subject: Asset,
    technique: Technique,
    config: Mapping[str, ConfigValue],
    service: AnalysisService,
    timeout: Optional[float] = None,
) -> AnyResult:
    """Dispatch to the model or data pipeline according to ``subject``."""
    if isinstance(subject, ModelAsset):
        return await simulate_model(subject, technique, config, service, timeout)
    return await simulate_data(subject, technique, config, service, timeout)


def run_estimate_sync(
    subject: Asset,
    technique: Technique,
    config: Mapping[str, ConfigValue],
    service: AnalysisService,
    timeout: Optional[float] = None,
) -> AnyResult:
    return asyncio.run(run_estimate(subject, technique, config, service, timeout))


__all__ = [
    "ModelEstimate",
    "DataEstimate",
    "estimate_model_compression",
    "estimate_data_compression",
    "pca_retained_fraction",
    "simulate_model",
    "simulate_data",
    "run_estimate",
    "run_estimate_sync",
    "MODEL_FALLBACK_SUMMARY",
    "DATA_FALLBACK_SUMMARY",
]
