"""Seeded, purely illustrative chart data for the dataset results view."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List

import numpy as np

from .models import DatasetAsset

MAX_HEATMAP_FEATURES = 20
POINTS_PER_CLUSTER = 50
BASE_SPREAD = 60.0


def dataset_seed(dataset_id: str) -> int:
    return sum(ord(ch) for ch in dataset_id)


def _base_correlation(dataset_id: str) -> float:
    if dataset_id == "wine_quality":
        return 0.6
    if dataset_id == "iris_dataset":
        return 0.3
    return 0.1


def simulate_correlation_matrix(dataset: DatasetAsset) -> np.ndarray:
    """Symmetric fake correlation matrix over the first 20 features."""
    rng = np.random.default_rng(dataset_seed(dataset.id))
    size = min(dataset.features, MAX_HEATMAP_FEATURES)
    base = _base_correlation(dataset.id)
    matrix = np.eye(size)
    for i in range(size):
        for j in range(i + 1, size):
            if rng.random() < 0.2:
                sign = 1 if rng.random() > 0.5 else -1
                value = (base + rng.random() * (1 - base)) * sign
            else:
                value = (rng.random() - 0.5) * base
            matrix[i, j] = matrix[j, i] = value
    return matrix


@dataclass
class Cluster:
    name: str
    points: np.ndarray  # shape (n, 2)


def _cluster_count(dataset_id: str) -> int:
    if dataset_id == "iris_dataset":
        return 3
    if dataset_id == "wine_quality":
        return 2
    return 4


def simulate_pca_projection(
    dataset_id: str, original_features: int, compressed_features: int
) -> List[Cluster]:
    """Fake projection onto two principal components.

    Cluster centres are pulled together and spread out as more features are
    dropped, so overlap grows with the feature reduction.
    """
    rng = np.random.default_rng(dataset_seed(dataset_id))
    reduction = max(0.0, 1 - compressed_features / original_features)
    loss_factor = reduction * 1.5

    count = _cluster_count(dataset_id)
    centers = (rng.random((count, 2)) - 0.5) * 200
    centers *= 1 - loss_factor * 0.5
    spread = BASE_SPREAD * (1 + loss_factor)

    clusters = []
    for i, center in enumerate(centers):
        angles = rng.random(POINTS_PER_CLUSTER) * 2 * np.pi
        radii = rng.random(POINTS_PER_CLUSTER) * spread
        offsets = np.column_stack((np.cos(angles), np.sin(angles))) * radii[:, None]
        clusters.append(Cluster(name=f"Class {i + 1}", points=center + offsets))
    return clusters


__all__ = [
    "Cluster",
    "dataset_seed",
    "simulate_correlation_matrix",
    "simulate_pca_projection",
]
