import pytest

from visualfield.config import CollectorConfig
from visualfield.enum import CollectorState
from visualfield.handlers.sample_collector import SampleCollector
from visualfield.models.data.geometry import Orientation, Point3d, Pose, Vector3d
from visualfield.models.header import Time
from visualfield.models.sensors import MagnetometerSample
from visualfield.sources.source_base import CallbackMagnetometerSource, CallbackPoseSource
from visualfield.store.point_store import PointStore

from ...helpers import ManualScheduler


def _publish(source, x, y, z):
    source.publish(
        MagnetometerSample(stamp=Time.now(), magnetic_field=Vector3d(x=x, y=y, z=z))
    )


# -----------------------------------------------------------------------------
# Lifecycle
# -----------------------------------------------------------------------------


def test_start_and_stop_states(collector, scheduler, magnetometer, pose_source):
    assert collector.state == CollectorState.Idle

    collector.start()
    assert collector.is_collecting
    assert len(scheduler.active_timers) == 2
    assert magnetometer.subscriber_count == 1
    assert pose_source.subscriber_count == 1

    collector.stop()
    assert collector.state == CollectorState.Idle
    assert scheduler.active_timers == []
    assert magnetometer.subscriber_count == 0
    assert pose_source.subscriber_count == 0


def test_double_start_and_stop_are_noops(collector, scheduler, magnetometer):
    collector.start()
    collector.start()
    assert len(scheduler.timers) == 2
    assert magnetometer.subscriber_count == 1

    collector.stop()
    collector.stop()
    assert collector.state == CollectorState.Idle


def test_context_manager(store, magnetometer, scheduler):
    with SampleCollector(store, magnetometer, scheduler=scheduler) as collector:
        assert collector.is_collecting
    assert not collector.is_collecting


def test_default_store_is_sized_from_config(magnetometer, scheduler):
    config = CollectorConfig(store_capacity=20, eviction_batch_fraction=0.5)
    collector = SampleCollector(None, magnetometer, config=config, scheduler=scheduler)
    assert collector.store.capacity == 20
    assert collector.store.eviction_batch == 10


def test_empty_store_argument_is_kept(store, magnetometer, scheduler):
    collector = SampleCollector(store, magnetometer, scheduler=scheduler)
    assert collector.store is store


# -----------------------------------------------------------------------------
# Sampling
# -----------------------------------------------------------------------------


def test_no_point_before_first_field(collector, scheduler, store):
    collector.start()
    scheduler.advance(3.0)
    assert len(store) == 0
    assert collector.current_field is None


def test_cadences(collector, scheduler, store, magnetometer):
    collector.start()
    _publish(magnetometer, 1.0, 2.0, 3.0)
    scheduler.advance(0.1)
    assert collector.current_field == Vector3d(x=1.0, y=2.0, z=3.0)
    assert len(store) == 0

    scheduler.advance(0.4)
    assert len(store) == 1
    scheduler.advance(2.0)
    assert len(store) == 5


def test_three_samples_with_identity_orientation(store, magnetometer, pose_source, scheduler, clock):
    """World field equals raw field for each point; mean magnitude is 10 μT."""
    collector = SampleCollector(
        store,
        magnetometer,
        pose_source,
        config=CollectorConfig(smoothing_factor=1.0),
        scheduler=scheduler,
        clock=clock,
    )
    collector.start()
    pose_source.publish(Pose(orientation=Orientation.identity()))

    raws = [(10.0, 0.0, 0.0), (0.0, 10.0, 0.0), (0.0, 0.0, 10.0)]
    for raw in raws:
        _publish(magnetometer, *raw)
        scheduler.advance(0.5)
    collector.stop()

    points = store.snapshot()
    assert [p.raw_field.to_list() for p in points] == [list(r) for r in raws]
    for p in points:
        assert p.orientation == Orientation.identity()
        assert p.world_field == p.raw_field
    assert store.statistics().mean == pytest.approx(10.0)


def test_smoothing_is_applied(collector, scheduler, store, magnetometer):
    collector.start()
    _publish(magnetometer, 10.0, 0.0, 0.0)
    scheduler.advance(0.1)
    _publish(magnetometer, 0.0, 10.0, 0.0)
    scheduler.advance(0.4)

    point = store.latest()
    assert point.raw_field.x == pytest.approx(7.0)
    assert point.raw_field.y == pytest.approx(3.0)


def test_world_field_uses_latest_attitude(collector, scheduler, store, magnetometer, pose_source, quarter_turn_z):
    collector.start()
    pose_source.publish(Pose(position=Point3d(x=1.0, y=0.5, z=2.0), orientation=quarter_turn_z))
    _publish(magnetometer, 10.0, 0.0, 0.0)
    scheduler.advance(0.5)

    point = store.latest()
    assert point.world_field.is_close(Vector3d(x=0.0, y=10.0, z=0.0), 1e-9)
    assert point.position == Point3d(x=1.0, y=0.5, z=2.0)
    assert point.position_tracked
    assert collector.current_world_field.is_close(point.world_field, 1e-9)
    assert collector.current_pose.orientation == quarter_turn_z


def test_missing_pose_degrades_to_raw(collector, scheduler, store, magnetometer):
    collector.start()
    _publish(magnetometer, 5.0, -5.0, 1.0)
    scheduler.advance(0.5)

    point = store.latest()
    assert point.orientation is None
    assert point.world_field == point.raw_field
    assert point.position == Point3d.origin()
    assert not point.position_tracked


def test_fallback_position(store, magnetometer, pose_source, scheduler):
    fallback = Point3d(x=0.0, y=1.2, z=0.0)
    collector = SampleCollector(
        store,
        magnetometer,
        pose_source,
        config=CollectorConfig(fallback_position=fallback),
        scheduler=scheduler,
    )
    collector.start()
    pose_source.publish(Pose(orientation=Orientation.identity()))
    _publish(magnetometer, 1.0, 0.0, 0.0)
    scheduler.advance(0.5)
    collector.stop()

    point = store.latest()
    assert point.position == fallback
    assert not point.position_tracked
    assert point.orientation == Orientation.identity()


def test_unavailable_pose_feed(store, magnetometer, scheduler):
    pose_source = CallbackPoseSource(available=False)
    collector = SampleCollector(store, magnetometer, pose_source, scheduler=scheduler)
    collector.start()
    assert pose_source.subscriber_count == 0
    _publish(magnetometer, 1.0, 0.0, 0.0)
    scheduler.advance(0.5)
    collector.stop()

    assert store.latest().orientation is None


def test_unavailable_magnetometer_is_reported_once(store, scheduler, caplog):
    magnetometer = CallbackMagnetometerSource(available=False)
    collector = SampleCollector(store, magnetometer, scheduler=scheduler)

    collector.start()
    scheduler.advance(2.0)
    collector.stop()
    collector.start()
    scheduler.advance(2.0)
    collector.stop()

    assert len(store) == 0
    warnings = [r for r in caplog.records if "Magnetometer unavailable" in r.getMessage()]
    assert len(warnings) == 1


def test_manual_ticks(store, magnetometer, scheduler):
    collector = SampleCollector(store, magnetometer, scheduler=scheduler)
    collector.sample_tick()
    collector.persist_tick()
    assert len(store) == 0  # idle: ticks are no-ops

    collector.start()
    _publish(magnetometer, 0.0, 0.0, 4.0)
    collector.sample_tick()
    collector.persist_tick()
    assert len(store) == 1
    collector.stop()


# -----------------------------------------------------------------------------
# Stop and session boundaries
# -----------------------------------------------------------------------------


def test_no_point_appended_after_stop(collector, scheduler, store, magnetometer):
    collector.start()
    _publish(magnetometer, 10.0, 0.0, 0.0)
    scheduler.advance(0.4)
    collector.stop()

    # Fast-forward well past the moment the capture timer would have fired.
    scheduler.advance(10.0)
    _publish(magnetometer, 10.0, 0.0, 0.0)
    scheduler.advance(10.0)
    assert len(store) == 0


def test_stop_during_capture_tick(store, magnetometer, scheduler):
    """stop() running while a capture is being built prevents its append."""
    holder = {}

    def clock():
        holder["collector"].stop()
        return Time.now()

    collector = SampleCollector(store, magnetometer, scheduler=scheduler, clock=clock)
    holder["collector"] = collector
    collector.start()
    _publish(magnetometer, 10.0, 0.0, 0.0)
    scheduler.advance(1.0)

    assert not collector.is_collecting
    assert len(store) == 0


def test_stop_clears_caches(collector, scheduler, magnetometer, pose_source):
    collector.start()
    pose_source.publish(Pose(orientation=Orientation.identity()))
    _publish(magnetometer, 1.0, 1.0, 1.0)
    scheduler.advance(0.1)
    assert collector.current_field is not None

    collector.stop()
    assert collector.current_field is None
    assert collector.current_world_field is None
    assert collector.current_pose is None


def test_no_history_leak_across_sessions(collector, scheduler, store, magnetometer):
    collector.start()
    _publish(magnetometer, 100.0, 0.0, 0.0)
    scheduler.advance(0.5)
    collector.stop()

    collector.start()
    _publish(magnetometer, 0.0, 10.0, 0.0)
    scheduler.advance(0.5)
    collector.stop()

    # First output of the new session is the raw sample, unblended.
    assert store.latest().raw_field == Vector3d(x=0.0, y=10.0, z=0.0)


def test_store_survives_stop_start(collector, scheduler, store, magnetometer):
    collector.start()
    _publish(magnetometer, 1.0, 0.0, 0.0)
    scheduler.advance(1.0)
    collector.stop()
    collector.start()
    assert len(store) == 2

    store.clear()
    assert len(store) == 0


def test_eviction_during_collection(magnetometer):
    scheduler = ManualScheduler()
    store = PointStore(capacity=10, eviction_batch_fraction=0.2)
    collector = SampleCollector(store, magnetometer, scheduler=scheduler)
    collector.start()
    _publish(magnetometer, 1.0, 0.0, 0.0)
    scheduler.advance(0.5 * 25)
    collector.stop()

    assert len(store) <= 10
    assert store.evicted_total > 0
