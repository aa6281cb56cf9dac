"""
Smoothing Filter Module.

Single-pole exponential smoothing of successive raw field samples:

    smoothed_t = smoothed_{t-1} * (1 - alpha) + raw_t * alpha

The first sample initializes the state and is returned unchanged.
"""

from typing import Optional, Tuple

from ..config import DEFAULT_SMOOTHING_FACTOR
from ..models.data.geometry import Vector3d


def _check_alpha(alpha: float) -> float:
    if not (0.0 < alpha <= 1.0):
        raise ValueError(f"Smoothing factor must be in (0, 1]. Got {alpha}")
    return alpha


def smooth(
    state: Optional[Vector3d], raw: Vector3d, alpha: float = DEFAULT_SMOOTHING_FACTOR
) -> Tuple[Vector3d, Vector3d]:
    """
    Pure smoothing step.

    Args:
        state: The previous smoothed value, or None before the first sample.
        raw: The new raw sample.
        alpha: Weight given to the new sample.

    Returns:
        (new_state, output). Both are the same value; the pair keeps the
        state transition explicit for callers that thread it themselves.
    """
    _check_alpha(alpha)
    if state is None:
        return raw, raw

    keep = 1.0 - alpha
    smoothed = Vector3d(
        x=state.x * keep + raw.x * alpha,
        y=state.y * keep + raw.y * alpha,
        z=state.z * keep + raw.z * alpha,
    )
    return smoothed, smoothed


class SmoothingFilter:
    """
    Stateful wrapper around `smooth`. The carried value is the only state;
    `reset()` must be called at the start of each collection session so that
    no history leaks across stop/start boundaries.
    """

    def __init__(self, alpha: float = DEFAULT_SMOOTHING_FACTOR):
        self._alpha = _check_alpha(alpha)
        self._state: Optional[Vector3d] = None

    @property
    def alpha(self) -> float:
        return self._alpha

    @property
    def state(self) -> Optional[Vector3d]:
        return self._state

    def update(self, raw: Vector3d) -> Vector3d:
        self._state, output = smooth(self._state, raw, self._alpha)
        return output

    def reset(self) -> None:
        self._state = None
