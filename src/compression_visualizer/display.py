"""Rich renderables shared by the CLI and the TUI."""

from __future__ import annotations

from typing import Iterable, List, Sequence

import numpy as np
from rich.table import Table
from rich.text import Text

from .charts import Cluster
from .models import (
    AnalysisSource,
    AnyResult,
    DatasetAsset,
    ModelAsset,
    SimulationResult,
    Technique,
)
from .wizard import STEP_LABELS, WizardController

CLUSTER_STYLES = ["magenta", "green", "yellow", "red"]


def models_table(models: Iterable[ModelAsset], title: str = "Models") -> Table:
    table = Table("ID", "Name", "Size (MB)", "Params (M)", "Accuracy (%)", title=title)
    for m in models:
        table.add_row(m.id, m.name, f"{m.size_mb:g}", f"{m.parameters_million:g}", f"{m.accuracy:g}")
    return table


def datasets_table(datasets: Iterable[DatasetAsset], title: str = "Datasets") -> Table:
    table = Table("ID", "Name", "Size (MB)", "Features", "Samples", title=title)
    for d in datasets:
        table.add_row(d.id, d.name, f"{d.size_mb:g}", str(d.features), str(d.samples))
    return table


def techniques_table(techniques: Iterable[Technique], title: str = "Techniques") -> Table:
    table = Table("ID", "Mode", "Name", "Parameters", title=title)
    for t in techniques:
        params = []
        for p in t.parameters:
            if p.options:
                choices = "/".join(str(o.value) for o in p.options)
                params.append(f"{p.id} [{choices}] default {p.default_value}")
            else:
                params.append(
                    f"{p.id} {p.min:g}-{p.max:g}{p.unit} step {p.step:g} default {p.default_value}"
                )
        table.add_row(t.id, t.mode.value, t.name, "\n".join(params))
    return table


def comparison_table(result: AnyResult) -> Table:
    table = Table("Metric", "Original", "Compressed", "Change", title="Comparison Metrics")
    table.add_row(
        "Size (MB)",
        f"{result.original_size:.2f}",
        f"{result.compressed_size:.2f}",
        f"-{result.size_reduction:.1f}%",
    )
    if isinstance(result, SimulationResult):
        table.add_row(
            "Parameters (M)",
            f"{result.original_params:.2f}",
            f"{result.compressed_params:.2f}",
            f"-{result.params_reduction:.1f}%",
        )
        change = result.accuracy_change
        style = "green" if change >= 0 else "red"
        table.add_row(
            "Accuracy (%)",
            f"{result.original_accuracy:.2f}",
            f"{result.compressed_accuracy:.2f}",
            Text(f"{change:+.2f}", style=style),
        )
    else:
        table.add_row(
            "Features",
            str(result.original_features),
            str(result.compressed_features),
            f"-{result.features_reduction:.1f}%",
        )
        table.add_row(
            "Information loss",
            "",
            "",
            Text(f"~{result.information_loss:.1f}%", style="red"),
        )
    if result.analysis_source is AnalysisSource.FALLBACK:
        table.caption = "analysis service unavailable: fallback estimate"
    return table


def _heat_style(value: float) -> str:
    alpha = min(1.0, abs(value) * 0.8 + 0.2)
    level = int(80 + 175 * alpha)
    if value > 0.05:
        return f"on rgb({level},40,40)"
    if value < -0.05:
        return f"on rgb(40,60,{level})"
    return "on rgb(50,55,65)"


def heatmap_text(matrix: np.ndarray) -> Text:
    """Colour-block rendering of a correlation matrix, red positive, blue negative."""
    text = Text()
    for row in matrix:
        for value in row:
            text.append("  ", style=_heat_style(float(value)))
        text.append("\n")
    return text


def scatter_text(clusters: Sequence[Cluster], width: int = 60, height: int = 20) -> Text:
    """Character-cell scatter plot; each cluster is drawn with its class number."""
    all_points = np.vstack([c.points for c in clusters])
    lo = all_points.min(axis=0)
    span = np.maximum(all_points.max(axis=0) - lo, 1e-9)
    grid: List[List[tuple]] = [[(" ", "")] * width for _ in range(height)]
    for idx, cluster in enumerate(clusters):
        style = CLUSTER_STYLES[idx % len(CLUSTER_STYLES)]
        cells = ((cluster.points - lo) / span * [width - 1, height - 1]).round().astype(int)
        for x, y in cells:
            grid[height - 1 - y][x] = (str(idx + 1), style)
    text = Text()
    for row in grid:
        for char, style in row:
            text.append(char, style=style or None)
        text.append("\n")
    return text


def step_indicator(controller: WizardController) -> Text:
    """One-line progress display of the path the wizard is on."""
    text = Text()
    steps = controller.path()
    for i, step in enumerate(steps):
        if i:
            text.append(" > ", style="dim")
        label = STEP_LABELS[step]
        if step is controller.step:
            text.append(label, style="bold cyan")
        elif i < steps.index(controller.step):
            text.append(label, style="green")
        else:
            text.append(label, style="dim")
    return text


__all__ = [
    "models_table",
    "datasets_table",
    "techniques_table",
    "comparison_table",
    "heatmap_text",
    "scatter_text",
    "step_indicator",
]
