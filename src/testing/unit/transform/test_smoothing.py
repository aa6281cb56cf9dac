import pytest

from visualfield.config import CollectorConfig
from visualfield.models.data.geometry import Vector3d
from visualfield.transform.smoothing import (
    DEFAULT_SMOOTHING_FACTOR,
    SmoothingFilter,
    smooth,
)


def test_first_output_equals_first_input_exactly():
    raw = Vector3d(x=12.345678901, y=-0.1, z=42.0)
    f = SmoothingFilter()
    assert f.update(raw) == raw
    assert f.state == raw


def test_smoothing_step():
    f = SmoothingFilter(alpha=0.3)
    f.update(Vector3d(x=10.0, y=0.0, z=0.0))
    out = f.update(Vector3d(x=0.0, y=10.0, z=0.0))
    assert out.x == pytest.approx(7.0)
    assert out.y == pytest.approx(3.0)
    assert out.z == 0.0


@pytest.mark.parametrize(
    "start", [Vector3d(x=100.0, y=-50.0, z=0.0), Vector3d.zero(), Vector3d(x=1.0, y=2.0, z=3.0)]
)
def test_constant_input_converges(start):
    c = Vector3d(x=22.0, y=-5.0, z=-42.0)
    f = SmoothingFilter(DEFAULT_SMOOTHING_FACTOR)
    f.update(start)
    for _ in range(100):
        out = f.update(c)
    assert out.is_close(c, 1e-9)


def test_reset_drops_history():
    f = SmoothingFilter()
    f.update(Vector3d(x=100.0, y=0.0, z=0.0))
    f.reset()
    assert f.state is None
    raw = Vector3d(x=0.0, y=1.0, z=0.0)
    assert f.update(raw) == raw


def test_alpha_one_passes_through():
    f = SmoothingFilter(alpha=1.0)
    f.update(Vector3d(x=5.0, y=5.0, z=5.0))
    raw = Vector3d(x=1.0, y=2.0, z=3.0)
    assert f.update(raw) == raw


@pytest.mark.parametrize("alpha", [0.0, -0.1, 1.5])
def test_invalid_alpha(alpha):
    with pytest.raises(ValueError, match="Smoothing factor"):
        SmoothingFilter(alpha)


def test_pure_step_threads_state():
    state, out = smooth(None, Vector3d(x=1.0, y=0.0, z=0.0))
    assert state == out == Vector3d(x=1.0, y=0.0, z=0.0)
    state, out = smooth(state, Vector3d(x=0.0, y=0.0, z=0.0), alpha=0.5)
    assert out == Vector3d(x=0.5, y=0.0, z=0.0)


def test_default_alpha_matches_collector_config():
    assert SmoothingFilter().alpha == CollectorConfig().smoothing_factor == DEFAULT_SMOOTHING_FACTOR
