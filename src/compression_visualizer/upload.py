"""Validation of user-entered model and dataset details."""

from __future__ import annotations

import math
import time
from typing import Dict, List, Mapping, Optional, Tuple

from .exceptions import SelectionError
from .models import DatasetAsset, Mode, ModelAsset

DEFAULT_INTRINSIC_DIMENSIONALITY = 0.7

# (field id, label, integer?, upper bound)
_NUMERIC_FIELDS: Dict[Mode, List[Tuple[str, str, bool, Optional[float]]]] = {
    Mode.MODEL: [
        ("size_mb", "Size (MB)", False, None),
        ("parameters_million", "Params (M)", False, None),
        ("accuracy", "Accuracy (%)", False, 100.0),
    ],
    Mode.DATA: [
        ("size_mb", "Size (MB)", False, None),
        ("features", "Features", True, None),
        ("samples", "Samples", True, None),
    ],
}


def upload_fields(mode: Mode) -> List[Tuple[str, str]]:
    """Return ``(field id, label)`` pairs of the upload form for ``mode``."""
    numeric = [(fid, label) for fid, label, _, _ in _NUMERIC_FIELDS[Mode(mode)]]
    return [("name", "Name"), ("description", "Description")] + numeric


def _parse_positive(raw: object, *, integer: bool, upper: Optional[float]) -> Optional[float]:
    try:
        value = float(str(raw).strip())
    except (TypeError, ValueError):
        return None
    if not math.isfinite(value) or value <= 0:
        return None
    if upper is not None and value > upper:
        return None
    if integer and not value.is_integer():
        return None
    return value


def validate_upload(mode: Mode, fields: Mapping[str, object]) -> List[str]:
    """Return a list of problems with ``fields``; empty when the form is valid."""
    problems: List[str] = []
    for text_field in ("name", "description"):
        if not str(fields.get(text_field) or "").strip():
            problems.append(f"{text_field} must not be empty")
    for fid, label, integer, upper in _NUMERIC_FIELDS[Mode(mode)]:
        if _parse_positive(fields.get(fid, ""), integer=integer, upper=upper) is None:
            kind = "a positive whole number" if integer else "a positive number"
            bound = f" no greater than {upper:g}" if upper is not None else ""
            problems.append(f"{label} must be {kind}{bound}")
    return problems


def is_upload_valid(mode: Mode, fields: Mapping[str, object]) -> bool:
    return not validate_upload(mode, fields)


def _synthesize_id() -> str:
    return f"custom-{time.time_ns() // 1_000_000}"


def build_asset(mode: Mode, fields: Mapping[str, object]) -> ModelAsset | DatasetAsset:
    """Build the asset described by ``fields``.

    Raises ``SelectionError`` listing every problem when the form is invalid.
    """
    problems = validate_upload(mode, fields)
    if problems:
        raise SelectionError("; ".join(problems))

    name = str(fields["name"]).strip()
    description = str(fields["description"]).strip()
    size_mb = float(str(fields["size_mb"]).strip())
    if Mode(mode) is Mode.MODEL:
        return ModelAsset(
            id=_synthesize_id(),
            name=name,
            description=description,
            size_mb=size_mb,
            parameters_million=float(str(fields["parameters_million"]).strip()),
            accuracy=float(str(fields["accuracy"]).strip()),
        )
    return DatasetAsset(
        id=_synthesize_id(),
        name=name,
        description=description,
        size_mb=size_mb,
        features=int(float(str(fields["features"]).strip())),
        samples=int(float(str(fields["samples"]).strip())),
        intrinsic_dimensionality=DEFAULT_INTRINSIC_DIMENSIONALITY,
    )


__all__ = [
    "DEFAULT_INTRINSIC_DIMENSIONALITY",
    "upload_fields",
    "validate_upload",
    "is_upload_valid",
    "build_asset",
]
