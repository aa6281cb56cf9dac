import math

import pytest

from visualfield.config import CollectorConfig
from visualfield.handlers.sample_collector import SampleCollector
from visualfield.models.data.geometry import Orientation, Vector3d
from visualfield.sources.source_base import CallbackMagnetometerSource, CallbackPoseSource
from visualfield.store.point_store import PointStore

from .helpers import ManualScheduler, VirtualClock, make_point


@pytest.fixture
def scheduler():
    return ManualScheduler()


@pytest.fixture
def clock(scheduler):
    return VirtualClock(scheduler)


@pytest.fixture
def store():
    return PointStore()


@pytest.fixture
def magnetometer():
    return CallbackMagnetometerSource()


@pytest.fixture
def pose_source():
    return CallbackPoseSource()


@pytest.fixture
def collector(store, magnetometer, pose_source, scheduler, clock):
    """A collector on the manual scheduler, with default timer cadences."""
    _collector = SampleCollector(
        store,
        magnetometer,
        pose_source,
        config=CollectorConfig(),
        scheduler=scheduler,
        clock=clock,
    )
    yield _collector
    _collector.stop()


@pytest.fixture
def quarter_turn_z():
    """90 degrees about +z: device x maps to world y."""
    return Orientation.from_axis_angle(Vector3d(x=0.0, y=0.0, z=1.0), math.pi / 2)


@pytest.fixture
def mixed_points(quarter_turn_z):
    """Points with and without orientation / tracked position."""
    return [
        make_point((10.0, 0.0, 0.0), position=(0.0, 0.5, 2.0), nanosec=0),
        make_point(
            (0.0, 25.5, -41.25),
            orientation=quarter_turn_z,
            position=(1.0, 0.5, 1.5),
            nanosec=500_000_000,
        ),
        make_point((3.0, -4.0, 12.0), orientation=Orientation.identity(), sec=1_700_000_001),
    ]
