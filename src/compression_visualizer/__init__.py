"""Compression Visualizer package with lazy loading of submodules."""

from __future__ import annotations

import importlib
from typing import Any

__all__ = [
    "WizardController",
    "Step",
    "Mode",
    "Source",
    "ModelAsset",
    "DatasetAsset",
    "Technique",
    "SimulationResult",
    "DataSimulationResult",
    "run_estimate",
]

_lazy_map = {
    "WizardController": "compression_visualizer.wizard",
    "Step": "compression_visualizer.wizard",
    "Mode": "compression_visualizer.models",
    "Source": "compression_visualizer.models",
    "ModelAsset": "compression_visualizer.models",
    "DatasetAsset": "compression_visualizer.models",
    "Technique": "compression_visualizer.models",
    "SimulationResult": "compression_visualizer.models",
    "DataSimulationResult": "compression_visualizer.models",
    "run_estimate": "compression_visualizer.estimator",
}


def __getattr__(name: str) -> Any:  # pragma: no cover - simple passthrough
    if name in _lazy_map:
        module = importlib.import_module(_lazy_map[name])
        value = getattr(module, name)
        globals()[name] = value
        return value
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


def __dir__() -> list[str]:  # pragma: no cover - for completeness
    return sorted(list(globals().keys()) + list(_lazy_map.keys()))


__version__ = "0.1.0"
