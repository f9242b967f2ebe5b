"""Face descriptor comparison.

Descriptors come from an external extraction step (e.g. face-api.js in the
browser); this module only measures how far apart two of them are.
"""

from __future__ import annotations

from collections.abc import Mapping
from numbers import Real
from typing import Any, Sequence

import numpy as np

from ..core.constants import DEFAULT_FACE_THRESHOLD
from ..core.exceptions import ShapeMismatch


def _as_vector(value: Any, label: str) -> np.ndarray:
    if isinstance(value, (str, bytes, Mapping)) or not isinstance(value, (Sequence, np.ndarray)):
        raise ShapeMismatch(f"{label} is not a numeric sequence")
    if not all(isinstance(x, Real) and not isinstance(x, bool) for x in value):
        raise ShapeMismatch(f"{label} contains non-numeric values")
    try:
        vec = np.asarray(value, dtype=np.float64)
    except (OverflowError, ValueError, TypeError) as e:
        raise ShapeMismatch(f"{label} is not convertible to floats: {e}") from e
    if vec.ndim != 1 or vec.size == 0:
        raise ShapeMismatch(f"{label} must be a flat, non-empty vector")
    if not np.isfinite(vec).all():
        raise ShapeMismatch(f"{label} contains non-finite values")
    return vec


def validate_descriptor(value: Any, label: str = "descriptor") -> list[float]:
    """Return ``value`` as a list of floats, or raise ShapeMismatch."""

    return _as_vector(value, label).tolist()


def euclidean_distance(a: Sequence[float], b: Sequence[float]) -> float:
    """L2 distance between two descriptors of equal length.

    Raises ShapeMismatch when either side is not a flat numeric sequence or
    when the lengths differ.
    """

    va = _as_vector(a, "first descriptor")
    vb = _as_vector(b, "second descriptor")
    if va.shape != vb.shape:
        raise ShapeMismatch(f"descriptor lengths differ ({va.size} != {vb.size})")
    return float(np.linalg.norm(va - vb))


def is_match(distance: float, threshold: float) -> bool:
    return distance <= threshold


class DescriptorMatcher:
    """Binds the configured threshold to the distance/decision pair."""

    def __init__(self, threshold: float = DEFAULT_FACE_THRESHOLD):
        self._threshold = float(threshold)

    @property
    def threshold(self) -> float:
        return self._threshold

    def distance(self, a: Sequence[float], b: Sequence[float]) -> float:
        return euclidean_distance(a, b)

    def is_match(self, distance: float) -> bool:
        return is_match(distance, self._threshold)
