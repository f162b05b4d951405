"""Data models for the wizard selections and simulation results."""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, Field

from .exceptions import SelectionError

ConfigValue = Union[int, float, str]


class Mode(str, Enum):
    MODEL = "model"
    DATA = "data"


class Source(str, Enum):
    PREDEFINED = "predefined"
    UPLOAD = "upload"


class ParameterKind(str, Enum):
    SLIDER = "slider"
    CHOICE = "choice"


class AnalysisSource(str, Enum):
    LLM = "llm"
    FALLBACK = "fallback"


class ModelAsset(BaseModel):
    """A machine-learning model as described by the catalog or an upload form."""

    id: str
    name: str
    description: str
    size_mb: float = Field(gt=0, description="Model size on disk in megabytes.")
    parameters_million: float = Field(
        gt=0, description="Parameter count in millions."
    )
    accuracy: float = Field(ge=0, le=100, description="Top-line accuracy in percent.")

    @property
    def mode(self) -> Mode:
        return Mode.MODEL


class DatasetAsset(BaseModel):
    """A dataset as described by the catalog or an upload form."""

    id: str
    name: str
    description: str
    size_mb: float = Field(gt=0, description="Dataset size on disk in megabytes.")
    features: int = Field(gt=0)
    samples: int = Field(gt=0)
    intrinsic_dimensionality: Optional[float] = Field(
        default=None,
        gt=0,
        le=1,
        description="Complexity heuristic used by the PCA estimate. None means use the default.",
    )

    @property
    def mode(self) -> Mode:
        return Mode.DATA


Asset = Union[ModelAsset, DatasetAsset]


class ParameterOption(BaseModel):
    value: ConfigValue
    label: str


class Parameter(BaseModel):
    """A tunable knob of a compression technique."""

    id: str
    name: str
    kind: ParameterKind
    default_value: ConfigValue
    min: Optional[float] = None
    max: Optional[float] = None
    step: Optional[float] = None
    options: List[ParameterOption] = Field(default_factory=list)
    unit: str = ""

    def coerce(self, value: Any) -> ConfigValue:
        """Return ``value`` converted to this parameter's type.

        Strings are accepted so values typed into a form or passed on the
        command line can be fed in directly. Raises ``SelectionError`` when the
        value is outside the slider bounds or not one of the choices.
        """
        if self.kind is ParameterKind.CHOICE:
            for option in self.options:
                if option.value == value or str(option.value) == str(value).strip():
                    return option.value
            allowed = ", ".join(str(o.value) for o in self.options)
            raise SelectionError(
                f"'{value}' is not a valid choice for {self.name}. Allowed: {allowed}."
            )

        try:
            number = float(value)
        except (TypeError, ValueError) as exc:
            raise SelectionError(f"{self.name} expects a number, got '{value}'.") from exc
        if self.min is not None and number < self.min:
            raise SelectionError(f"{self.name} must be >= {self.min:g}, got {number:g}.")
        if self.max is not None and number > self.max:
            raise SelectionError(f"{self.name} must be <= {self.max:g}, got {number:g}.")
        return number

    def format_value(self, value: ConfigValue) -> str:
        if isinstance(value, float) and value.is_integer():
            value = int(value)
        return f"{value}{self.unit}"


class Technique(BaseModel):
    """A compression technique and the parameters it exposes."""

    id: str
    name: str
    description: str
    mode: Mode
    parameters: List[Parameter] = Field(default_factory=list)

    def parameter(self, parameter_id: str) -> Parameter:
        for param in self.parameters:
            if param.id == parameter_id:
                return param
        raise SelectionError(
            f"Technique '{self.id}' has no parameter '{parameter_id}'."
        )

    def effective_config(self, config: Dict[str, ConfigValue]) -> Dict[str, ConfigValue]:
        """Return ``config`` with each parameter's default filling missing keys."""
        merged = {p.id: p.default_value for p in self.parameters}
        merged.update({k: v for k, v in config.items() if k in merged})
        return merged


class WorkflowSelection(BaseModel):
    """Accumulated user choices for one wizard run."""

    mode: Optional[Mode] = None
    source: Optional[Source] = None
    subject: Optional[Asset] = None
    technique: Optional[Technique] = None
    config: Dict[str, ConfigValue] = Field(default_factory=dict)


def _reduction(original: float, compressed: float) -> float:
    if original <= 0:
        return 0.0
    return (original - compressed) / original * 100


class SimulationResult(BaseModel):
    """Before/after comparison for the model path."""

    original_size: float
    compressed_size: float
    original_params: float
    compressed_params: float
    original_accuracy: float
    compressed_accuracy: float
    summary: str
    analysis_source: AnalysisSource = AnalysisSource.LLM

    @property
    def size_reduction(self) -> float:
        return _reduction(self.original_size, self.compressed_size)

    @property
    def params_reduction(self) -> float:
        return _reduction(self.original_params, self.compressed_params)

    @property
    def accuracy_change(self) -> float:
        return self.compressed_accuracy - self.original_accuracy


class DataSimulationResult(BaseModel):
    """Before/after comparison for the data path."""

    original_size: float
    compressed_size: float
    original_features: int
    compressed_features: int
    samples: int
    information_loss: float
    summary: str
    analysis_source: AnalysisSource = AnalysisSource.LLM

    @property
    def size_reduction(self) -> float:
        return _reduction(self.original_size, self.compressed_size)

    @property
    def features_reduction(self) -> float:
        return _reduction(self.original_features, self.compressed_features)


AnyResult = Union[SimulationResult, DataSimulationResult]

__all__ = [
    "ConfigValue",
    "Mode",
    "Source",
    "ParameterKind",
    "AnalysisSource",
    "ModelAsset",
    "DatasetAsset",
    "Asset",
    "ParameterOption",
    "Parameter",
    "Technique",
    "WorkflowSelection",
    "SimulationResult",
    "DataSimulationResult",
    "AnyResult",
]
