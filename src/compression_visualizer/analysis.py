"""Narrative analysis of a simulated compression, delegated to an LLM."""

from __future__ import annotations

import asyncio
import logging
import re
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, Optional, Union

from .config import Config
from .exceptions import AnalysisUnavailable
from .llm_providers.factory import create_llm_provider, resolve_provider_settings
from .llm_providers_abc import LLMProvider
from .models import ConfigValue, DatasetAsset, ModelAsset, Technique

logger = logging.getLogger(__name__)


@dataclass
class ModelAnalysisRequest:
    model: ModelAsset
    technique: Technique
    config: Dict[str, ConfigValue]
    compressed_size: float
    compressed_params: float


@dataclass
class DataAnalysisRequest:
    dataset: DatasetAsset
    technique: Technique
    config: Dict[str, ConfigValue]
    compressed_size: float
    compressed_features: int


AnalysisRequest = Union[ModelAnalysisRequest, DataAnalysisRequest]


@dataclass
class AnalysisReply:
    """First-line metric (new accuracy or information loss) plus prose summary."""

    metric: float
    summary: str


class AnalysisService(ABC):
    """Anything that can turn a simulated compression into an analysis."""

    @abstractmethod
    async def request_analysis(self, payload: AnalysisRequest) -> AnalysisReply:
        """Return the analysis for ``payload`` or raise ``AnalysisUnavailable``."""


def _config_lines(technique: Technique, config: Dict[str, ConfigValue]) -> str:
    return "\n".join(
        f"  - {p.name}: {p.format_value(config[p.id])}"
        for p in technique.parameters
        if p.id in config
    )


MODEL_PROMPT = """\
Act as a world-class Machine Learning engineer specializing in model optimization and compression.

You are analyzing the compression of an ML model.

**Original Model Details:**
- Name: {name}
- Original Size: {original_size:.1f} MB
- Original Parameters: {original_params:.1f} Million
- Original Accuracy: {accuracy}%

**Compressed Model Details:**
- Compressed Size: {compressed_size:.1f} MB
- Compressed Parameters: {compressed_params:.1f} Million

**Compression Technique Applied:**
- Name: {technique_name}
- Description: {technique_description}
- Configuration:
{config_lines}

**Your Task:**
Answer in two parts separated by a newline.
1. On the first line, give a single realistic number for the accuracy after compression, for example "90.5". Nothing else on that line.
2. On the following lines, give 2-4 sentences for a technical audience on the trade-offs of this configuration for this model: why accuracy changed, the benefits (latency, footprint) and the risks.
"""

DATA_PROMPT = """\
Act as a world-class Data Scientist specializing in feature engineering and data preprocessing.

You are analyzing the compression of a dataset.

**Original Dataset Details:**
- Name: {name}
- Original Size: {original_size:.2f} MB
- Original Features: {original_features}
- Samples: {samples}

**Compressed Dataset Details:**
- Compressed Size: {compressed_size:.2f} MB
- Compressed Features: {compressed_features}

**Compression Technique Applied:**
- Name: {technique_name}
- Description: {technique_description}
- Configuration:
{config_lines}

**Your Task:**
Answer in two parts separated by a newline.
1. On the first line, give a single realistic percentage of information loss, for example "5.0". For PCA this is 100 minus the explained variance; for sampling estimate a plausible value. Nothing else on that line.
2. On the following lines, give 2-4 sentences on what the reduction means for model training (speed, overfitting) and its drawbacks (lost nuance, sampling bias).
"""


def build_prompt(payload: AnalysisRequest) -> str:
    if isinstance(payload, ModelAnalysisRequest):
        return MODEL_PROMPT.format(
            name=payload.model.name,
            original_size=payload.model.size_mb,
            original_params=payload.model.parameters_million,
            accuracy=payload.model.accuracy,
            compressed_size=payload.compressed_size,
            compressed_params=payload.compressed_params,
            technique_name=payload.technique.name,
            technique_description=payload.technique.description,
            config_lines=_config_lines(payload.technique, payload.config),
        )
    return DATA_PROMPT.format(
        name=payload.dataset.name,
        original_size=payload.dataset.size_mb,
        original_features=payload.dataset.features,
        samples=payload.dataset.samples,
        compressed_size=payload.compressed_size,
        compressed_features=payload.compressed_features,
        technique_name=payload.technique.name,
        technique_description=payload.technique.description,
        config_lines=_config_lines(payload.technique, payload.config),
    )


_LEADING_NUMBER = re.compile(r"^\s*[-+]?(\d+(\.\d*)?|\.\d+)")


def parse_analysis_reply(text: str) -> AnalysisReply:
    """Split a raw reply into metric and summary.

    The first line must start with a number; anything after the number on
    that line (a trailing ``%`` for instance) is ignored. Raises
    ``AnalysisUnavailable`` for replies with fewer than two lines, no number
    or an empty summary.
    """
    lines = (text or "").strip().split("\n")
    if len(lines) < 2:
        raise AnalysisUnavailable("Invalid response format from analysis provider")
    match = _LEADING_NUMBER.match(lines[0])
    if not match:
        raise AnalysisUnavailable(
            f"Could not parse a number from analysis reply: {lines[0]!r}"
        )
    summary = "\n".join(lines[1:]).strip()
    if not summary:
        raise AnalysisUnavailable("Analysis reply has no summary")
    return AnalysisReply(metric=float(match.group(0)), summary=summary)


def _run_detached(func, *args) -> asyncio.Future:
    """Run ``func`` on a daemon thread and expose its outcome as a future.

    Cancelling the future abandons the call: nothing joins the thread, so a
    hung provider cannot hold up loop shutdown or interpreter exit.
    """
    loop = asyncio.get_running_loop()
    future = loop.create_future()

    def _settle(result, exc) -> None:
        if future.done():
            return
        if exc is not None:
            future.set_exception(exc)
        else:
            future.set_result(result)

    def _worker() -> None:
        try:
            result, exc = func(*args), None
        except Exception as e:
            result, exc = None, e
        try:
            loop.call_soon_threadsafe(_settle, result, exc)
        except RuntimeError:
            logger.debug("event loop closed before the abandoned provider call returned")

    threading.Thread(target=_worker, name="analysis-provider", daemon=True).start()
    return future


class LLMAnalysisService(AnalysisService):
    """Analysis backed by an :class:`LLMProvider`.

    Providers are synchronous, so the call runs on a detached daemon thread
    and the event loop stays free while the request is outstanding.
    """

    def __init__(
        self, provider: LLMProvider, model_name: str, max_new_tokens: int = 512
    ) -> None:
        self.provider = provider
        self.model_name = model_name
        self.max_new_tokens = max_new_tokens

    async def request_analysis(self, payload: AnalysisRequest) -> AnalysisReply:
        prompt = build_prompt(payload)
        try:
            text = await _run_detached(
                self.provider.generate_response,
                prompt,
                self.model_name,
                self.max_new_tokens,
            )
        except Exception as exc:
            raise AnalysisUnavailable(
                f"{type(self.provider).__name__} failed: {exc}"
            ) from exc
        logger.debug("analysis reply from %s: %r", self.model_name, text)
        return parse_analysis_reply(text)


class UnavailableAnalysisService(AnalysisService):
    """Service that always fails; used for offline runs."""

    async def request_analysis(self, payload: AnalysisRequest) -> AnalysisReply:
        raise AnalysisUnavailable("analysis disabled (offline mode)")


def build_analysis_service(
    app_config: Optional[Config] = None,
    *,
    config_name: Optional[str] = None,
    provider_type: Optional[str] = None,
    model_name: Optional[str] = None,
    offline: bool = False,
) -> AnalysisService:
    """Create the analysis service described by the configuration."""
    if offline:
        return UnavailableAnalysisService()
    app_config = app_config or Config()
    provider_type, model_name, _ = resolve_provider_settings(
        config_name=config_name,
        provider_type=provider_type,
        model_name=model_name,
        app_config=app_config,
    )
    provider = create_llm_provider(
        config_name=config_name, provider_type=provider_type, app_config=app_config
    )
    return LLMAnalysisService(
        provider,
        model_name,
        max_new_tokens=int(app_config.get("analysis_max_tokens", 512)),
    )


__all__ = [
    "ModelAnalysisRequest",
    "DataAnalysisRequest",
    "AnalysisRequest",
    "AnalysisReply",
    "AnalysisService",
    "LLMAnalysisService",
    "UnavailableAnalysisService",
    "build_analysis_service",
    "build_prompt",
    "parse_analysis_reply",
]
