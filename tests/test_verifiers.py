"""Test verification adapters and the ephemeral store."""
import threading
import time

import pytest

from attendance_engine.services.ephemeral_store import InMemoryStore
from attendance_engine.services.face_verifier import DescriptorFaceVerifier
from attendance_engine.services.geofence_verifier import (
    HaversineGeofenceVerifier, StaticGeofenceVerifier, calculate_distance, is_valid_coordinate
)
from attendance_engine.services.verdict import VerifierRunner
from attendance_engine.utils.errors import AdapterTimeout, VerifierUnavailable

ENROLLED = [[0.0, 0.0, 0.0], [1.0, 1.0, 1.0]]
ROOM = (33.3152, 44.3661)


# Face

def test_face_exact_match_has_full_confidence():
    verdict = DescriptorFaceVerifier().verify([1.0, 1.0, 1.0], ENROLLED, 0.6)

    assert verdict.matched is True
    assert verdict.confidence == 1.0
    assert verdict.distance == 0.0


def test_face_uses_closest_enrolled_descriptor():
    verdict = DescriptorFaceVerifier().verify([0.0, 0.0, 0.3], ENROLLED, 0.6)

    assert verdict.matched is True
    assert verdict.confidence == pytest.approx(0.7)


def test_face_far_sample_is_rejected():
    verdict = DescriptorFaceVerifier().verify([0.5, 0.5, 0.5], ENROLLED, 0.6)

    assert verdict.matched is False
    assert verdict.confidence == pytest.approx(0.134, abs=1e-3)


def test_face_confidence_never_negative():
    verdict = DescriptorFaceVerifier().verify([9.0, 9.0, 9.0], ENROLLED, 0.6)

    assert verdict.confidence == 0.0


def test_face_threshold_is_inclusive():
    verdict = DescriptorFaceVerifier().verify([1.0, 1.0, 1.0], ENROLLED, 1.0)

    assert verdict.matched is True


@pytest.mark.parametrize('sample,enrolled', [
    ([0.1, 0.2], ENROLLED),
    ([0.1, 0.2, 0.3], []),
    (['a', 'b', 'c'], ENROLLED),
])
def test_face_unusable_input_is_rejected(sample, enrolled):
    verdict = DescriptorFaceVerifier().verify(sample, enrolled, 0.6)

    assert verdict.matched is False
    assert verdict.confidence == 0.0


def test_face_does_not_mutate_enrolled():
    enrolled = [list(d) for d in ENROLLED]

    DescriptorFaceVerifier().verify([0.5, 0.5, 0.5], enrolled, 0.6)

    assert enrolled == ENROLLED


# Geofence

def test_distance_between_same_points_is_zero():
    assert calculate_distance(*ROOM, *ROOM) == 0.0


def test_distance_one_degree_latitude():
    assert calculate_distance(0.0, 0.0, 1.0, 0.0) == pytest.approx(111195, rel=1e-3)


@pytest.mark.parametrize('lat,lng,valid', [
    (0, 0, True),
    (90, 180, True),
    (91, 0, False),
    (0, -181, False),
    (None, 0, False),
])
def test_is_valid_coordinate(lat, lng, valid):
    assert is_valid_coordinate(lat, lng) is valid


def test_geofence_ssid_only():
    verdict = HaversineGeofenceVerifier().verify('Room101', 'Room101')

    assert verdict.matched is True
    assert verdict.confidence == 0.8


def test_geofence_ssid_must_match_exactly():
    verdict = HaversineGeofenceVerifier().verify('room101', 'Room101', ROOM, ROOM)

    assert verdict.matched is False
    assert verdict.confidence == 0.0


def test_geofence_missing_ssid():
    assert HaversineGeofenceVerifier().verify(None, 'Room101').matched is False


def test_geofence_inside_radius():
    # ~55m north
    observed = (ROOM[0] + 0.0005, ROOM[1])

    verdict = HaversineGeofenceVerifier().verify('Room101', 'Room101', observed, ROOM, 100)

    assert verdict.matched is True
    assert verdict.distance == pytest.approx(55.6, abs=0.5)
    assert 0.8 < verdict.confidence < 1.0


def test_geofence_outside_radius():
    observed = (ROOM[0] + 0.002, ROOM[1])

    verdict = HaversineGeofenceVerifier().verify('Room101', 'Room101', observed, ROOM, 100)

    assert verdict.matched is False
    assert verdict.distance > 100


def test_geofence_falls_back_to_default_radius():
    observed = (ROOM[0] + 0.002, ROOM[1])

    verdict = HaversineGeofenceVerifier(default_radius_meters=500).verify(
        'Room101', 'Room101', observed, ROOM
    )

    assert verdict.matched is True


def test_geofence_invalid_observed_coordinates():
    verdict = HaversineGeofenceVerifier().verify('Room101', 'Room101', (123.0, 0.0), ROOM)

    assert verdict.matched is False


# Runner

def test_runner_returns_adapter_result():
    runner = VerifierRunner(timeout_seconds=1.0)
    try:
        assert runner.run('face', lambda x: x * 2, 21) == 42
    finally:
        runner.shutdown()


def test_runner_times_out_slow_adapter():
    runner = VerifierRunner(timeout_seconds=0.05)
    try:
        with pytest.raises(AdapterTimeout) as exc_info:
            runner.run('wifi', time.sleep, 0.5)
    finally:
        runner.shutdown()

    assert exc_info.value.kind == 'AdapterTimeout'
    assert exc_info.value.details['channel'] == 'wifi'


def test_runner_times_out_static_fake_with_delay():
    fake = StaticGeofenceVerifier(delay_seconds=0.5)
    runner = VerifierRunner(timeout_seconds=0.05)
    try:
        with pytest.raises(AdapterTimeout):
            runner.run('wifi', fake.verify, 'Room101', 'Room101')
    finally:
        runner.shutdown()

    assert fake.calls == [('Room101', 'Room101', None, None)]


def test_runner_queue_time_does_not_count_against_adapter():
    """More concurrent calls than workers, each finishing inside the timeout."""
    runner = VerifierRunner(timeout_seconds=0.5, max_workers=2, queue_timeout_seconds=5.0)
    callers = 8
    barrier = threading.Barrier(callers)
    outcomes = []

    def call():
        barrier.wait()
        try:
            runner.run('face', time.sleep, 0.3)
            outcomes.append('ok')
        except (AdapterTimeout, VerifierUnavailable) as error:
            outcomes.append(error.kind)

    threads = [threading.Thread(target=call) for _ in range(callers)]
    try:
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(timeout=10)
    finally:
        runner.shutdown()

    assert outcomes == ['ok'] * callers


def test_runner_saturated_pool_is_unavailable_not_timeout():
    runner = VerifierRunner(timeout_seconds=2.0, max_workers=1, queue_timeout_seconds=0.1)
    busy = threading.Event()
    release = threading.Event()
    fast = []

    def hold():
        busy.set()
        release.wait(5)
        return 'done'

    def quick():
        fast.append(True)
        return 'quick'

    holder = threading.Thread(target=runner.run, args=('face', hold))
    holder.start()
    try:
        assert busy.wait(2)
        with pytest.raises(VerifierUnavailable) as exc_info:
            runner.run('wifi', quick)
    finally:
        release.set()
        holder.join(timeout=5)
        runner.shutdown()

    assert exc_info.value.status_code == 503
    assert exc_info.value.details['channel'] == 'wifi'
    # Withdrawn from the queue, never executed
    assert fast == []


def test_runner_propagates_adapter_errors():
    def broken():
        raise RuntimeError('adapter crashed')

    runner = VerifierRunner(timeout_seconds=1.0)
    try:
        with pytest.raises(RuntimeError):
            runner.run('face', broken)
    finally:
        runner.shutdown()


# Ephemeral store

class Ticker:
    def __init__(self):
        self.value = 0.0

    def __call__(self):
        return self.value


def test_store_entry_lapses_after_ttl():
    ticker = Ticker()
    store = InMemoryStore(timer=ticker)
    store.set_with_ttl('k', 'v', 10)

    ticker.value = 9.9
    assert store.get('k') == 'v'
    ticker.value = 10
    assert store.get('k') is None


def test_store_get_and_delete_returns_value_once():
    store = InMemoryStore()
    store.set_with_ttl('k', 'v', 10)

    assert store.get_and_delete_if_present('k') == 'v'
    assert store.get_and_delete_if_present('k') is None
    assert store.get('k') is None


def test_store_get_and_delete_is_atomic():
    store = InMemoryStore()
    store.set_with_ttl('k', 'v', 10)
    workers = 20
    barrier = threading.Barrier(workers)
    results = []

    def take():
        barrier.wait()
        results.append(store.get_and_delete_if_present('k'))

    threads = [threading.Thread(target=take) for _ in range(workers)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=5)

    assert results.count('v') == 1
    assert results.count(None) == workers - 1
