"""Static catalog of predefined models, datasets and compression techniques."""

from __future__ import annotations

from typing import Dict, List

from .exceptions import CatalogError
from .models import (
    DatasetAsset,
    Mode,
    ModelAsset,
    Parameter,
    ParameterKind,
    ParameterOption,
    Technique,
)

MODELS: List[ModelAsset] = [
    ModelAsset(
        id="mobilenet_v2",
        name="MobileNetV2",
        description="A lightweight, mobile-first computer vision model designed for efficient on-device processing.",
        size_mb=14,
        parameters_million=3.5,
        accuracy=94.2,
    ),
    ModelAsset(
        id="resnet50",
        name="ResNet-50",
        description="A classic 50-layer deep convolutional neural network known for its powerful feature extraction.",
        size_mb=102,
        parameters_million=25.6,
        accuracy=96.5,
    ),
    ModelAsset(
        id="bert_base",
        name="BERT-Base",
        description="A transformer-based model for natural language processing tasks like text classification and Q&A.",
        size_mb=440,
        parameters_million=110,
        accuracy=97.8,
    ),
]

DATASETS: List[DatasetAsset] = [
    DatasetAsset(
        id="iris_dataset",
        name="Iris Flower Dataset",
        description="A classic dataset in pattern recognition, containing 3 classes of 50 instances each.",
        size_mb=0.1,
        features=4,
        samples=150,
    ),
    DatasetAsset(
        id="wine_quality",
        name="Wine Quality Dataset",
        description="Contains chemical analysis of wines to predict their quality, with many correlated features.",
        size_mb=0.5,
        features=11,
        samples=4898,
    ),
    DatasetAsset(
        id="mnist_digits",
        name="MNIST Digits",
        description="A large database of handwritten digits, commonly used for training image processing systems.",
        size_mb=50,
        features=784,  # 28x28 pixels
        samples=60000,
    ),
]

MODEL_TECHNIQUES: List[Technique] = [
    Technique(
        id="pruning",
        name="Weight Pruning",
        description="Removes individual weights from the network that are close to zero, creating a sparse model.",
        mode=Mode.MODEL,
        parameters=[
            Parameter(
                id="sparsity",
                name="Sparsity Target",
                kind=ParameterKind.SLIDER,
                min=10,
                max=95,
                step=5,
                default_value=50,
                unit="%",
            )
        ],
    ),
    Technique(
        id="quantization",
        name="Quantization",
        description="Reduces the precision of model weights from 32-bit floating point to lower-bit representations.",
        mode=Mode.MODEL,
        parameters=[
            Parameter(
                id="bits",
                name="Bit Precision",
                kind=ParameterKind.CHOICE,
                default_value=8,
                options=[
                    ParameterOption(value=16, label="16-bit Float"),
                    ParameterOption(value=8, label="8-bit Integer"),
                    ParameterOption(value=4, label="4-bit Integer"),
                ],
            )
        ],
    ),
]

DATA_TECHNIQUES: List[Technique] = [
    Technique(
        id="pca",
        name="PCA (Principal Component Analysis)",
        description="A dimensionality-reduction method that transforms a large set of variables into a smaller one that still contains most of the information.",
        mode=Mode.DATA,
        parameters=[
            Parameter(
                id="variance_to_keep",
                name="Explained Variance Target",
                kind=ParameterKind.SLIDER,
                min=80,
                max=99,
                step=1,
                default_value=95,
                unit="%",
            )
        ],
    ),
    Technique(
        id="sampling",
        name="Random Sampling",
        description="Reduces the dataset size by selecting a random subset of the data samples.",
        mode=Mode.DATA,
        parameters=[
            Parameter(
                id="sampling_ratio",
                name="Sampling Ratio",
                kind=ParameterKind.SLIDER,
                min=10,
                max=90,
                step=5,
                default_value=50,
                unit="%",
            )
        ],
    ),
]

_TECHNIQUES_BY_MODE: Dict[Mode, List[Technique]] = {
    Mode.MODEL: MODEL_TECHNIQUES,
    Mode.DATA: DATA_TECHNIQUES,
}


def assets_for(mode: Mode) -> List[ModelAsset] | List[DatasetAsset]:
    return MODELS if Mode(mode) is Mode.MODEL else DATASETS


def techniques_for(mode: Mode) -> List[Technique]:
    return _TECHNIQUES_BY_MODE[Mode(mode)]


def get_model(model_id: str) -> ModelAsset:
    for model in MODELS:
        if model.id == model_id:
            return model
    raise CatalogError(
        f"Unknown model '{model_id}'. Available: {', '.join(m.id for m in MODELS)}"
    )


def get_dataset(dataset_id: str) -> DatasetAsset:
    for dataset in DATASETS:
        if dataset.id == dataset_id:
            return dataset
    raise CatalogError(
        f"Unknown dataset '{dataset_id}'. Available: {', '.join(d.id for d in DATASETS)}"
    )


def get_asset(mode: Mode, asset_id: str) -> ModelAsset | DatasetAsset:
    if Mode(mode) is Mode.MODEL:
        return get_model(asset_id)
    return get_dataset(asset_id)


def get_technique(mode: Mode, technique_id: str) -> Technique:
    techniques = techniques_for(mode)
    for technique in techniques:
        if technique.id == technique_id:
            return technique
    raise CatalogError(
        f"Unknown {Mode(mode).value} technique '{technique_id}'. "
        f"Available: {', '.join(t.id for t in techniques)}"
    )


__all__ = [
    "MODELS",
    "DATASETS",
    "MODEL_TECHNIQUES",
    "DATA_TECHNIQUES",
    "assets_for",
    "techniques_for",
    "get_model",
    "get_dataset",
    "get_asset",
    "get_technique",
]
