import threading

import pytest

from posetracker.pose.Pose import Pose
from posetracker.tracker.Guid import split_guid
from posetracker.tracker.PosesTracker import PosesTracker, PosesTrackerConfig

from conftest import make_pose


def test_seen_returns_guid_and_counts_distinct_bodies(make_tracker):
    tracker = make_tracker()

    assert tracker.seen("cam1", make_pose(5)) == "cam1-5"
    assert tracker.seen("cam1", make_pose(5)) == "cam1-5"
    assert tracker.seen("cam1", make_pose(6)) == "cam1-6"
    assert tracker.seen("cam2", make_pose(5)) == "cam2-5"

    assert tracker.size == 3
    assert len(tracker) == 3
    assert "cam2-5" in tracker


def test_missing_pose_id_defaults_to_zero(make_tracker):
    tracker = make_tracker()

    assert tracker.seen("cam1", Pose()) == "cam1-0"
    assert tracker.get_tracker_by_guid("cam1-0").pose_id == "0"


def test_added_fires_once_and_last_is_updated(make_tracker):
    tracker = make_tracker()
    added = []
    tracker.add_added_callback(added.append)

    first = make_pose(1)
    second = make_pose(1, nose=(0.5, 0.5))
    guid = tracker.seen("cam1", first)
    tracker.seen("cam1", second)

    assert len(added) == 1
    assert added[0].guid == guid
    assert tracker.get_value_by_guid(guid) is second
    assert tracker.get_tracker_by_guid(guid).initial is first


def test_added_fires_before_seen_returns(make_tracker):
    tracker = make_tracker()
    sizes = []
    tracker.add_added_callback(lambda t: sizes.append(tracker.size))

    tracker.seen("cam1", make_pose(1))

    assert sizes == [1]


@pytest.mark.parametrize("from_id, pose", [(None, Pose(id=1)), ("cam1", None)])
def test_seen_rejects_missing_arguments(make_tracker, from_id, pose):
    tracker = make_tracker()
    added = []
    tracker.add_added_callback(added.append)

    with pytest.raises(ValueError):
        tracker.seen(from_id, pose)

    assert tracker.size == 0
    assert added == []


def test_same_pose_id_from_two_senders(make_tracker):
    tracker = make_tracker()

    tracker.seen("cam1", make_pose(5))
    tracker.seen("cam2", make_pose(5))

    cam1 = tracker.get_tracker_by_guid("cam1-5")
    cam2 = tracker.get_tracker_by_guid("cam2-5")
    assert cam1 is not None and cam2 is not None
    assert cam1 is not cam2

    by_pose_id = tracker.get_tracker_by_pose_id("5")
    assert by_pose_id in (cam1, cam2)
    assert tracker.get_tracker_by_pose_id(5) is not None


def test_lookups_return_none_when_absent(make_tracker):
    tracker = make_tracker()
    tracker.seen("cam1", make_pose(1))

    assert tracker.get_tracker_by_guid("cam9-1") is None
    assert tracker.get_value_by_guid("cam9-1") is None
    assert tracker.get_tracker_by_pose_id("42") is None
    assert tracker.get_value_by_pose_id("42") is None
    assert list(tracker.get_from_sender("cam9")) == []


def test_empty_tracker_enumerations(make_tracker):
    tracker = make_tracker()

    assert list(tracker.get_sender_ids()) == []
    assert list(tracker.get_guids()) == []
    assert list(tracker.get_trackers_by_age()) == []
    assert list(tracker.get_values()) == []


def test_trackers_by_age_freshest_first(make_tracker, clock):
    tracker = make_tracker()
    tracker.seen("cam1", make_pose(1))
    clock.advance(0.5)
    tracker.seen("cam1", make_pose(2))
    clock.advance(0.5)
    tracker.seen("cam2", make_pose(1))
    clock.advance(0.25)

    ordered = list(tracker.get_trackers_by_age())

    assert [t.guid for t in ordered] == ["cam2-1", "cam1-2", "cam1-1"]
    elapsed = [t.elapsed for t in ordered]
    assert elapsed == sorted(elapsed)


def test_values_by_age_yield_last_poses(make_tracker, clock):
    tracker = make_tracker()
    old = make_pose(1)
    new = make_pose(2)
    tracker.seen("cam1", old)
    clock.advance(1.0)
    tracker.seen("cam1", new)

    assert list(tracker.get_values_by_age()) == [new, old]
    assert set(map(id, tracker.get_values())) == {id(old), id(new)}


def test_from_sender_and_sender_ids(make_tracker):
    tracker = make_tracker()
    tracker.seen("cam1", make_pose(1))
    tracker.seen("cam2", make_pose(1))
    tracker.seen("cam1", make_pose(2))

    assert sorted(t.guid for t in tracker.get_from_sender("cam1")) == ["cam1-1", "cam1-2"]
    assert list(tracker.get_sender_ids()) == ["cam1", "cam2"]


def test_guids_are_distinct_and_decompose(make_tracker):
    tracker = make_tracker()
    pairs = {("cam1", "1"), ("cam1", "2"), ("cam-2", "1")}
    for from_id, pose_id in pairs:
        tracker.seen(from_id, make_pose(pose_id))

    guids = list(tracker.get_guids())

    assert len(guids) == len(set(guids)) == 3
    assert {split_guid(g) for g in guids} == pairs


def test_enumeration_is_a_snapshot(make_tracker):
    tracker = make_tracker()
    tracker.seen("cam1", make_pose(1))

    trackers = tracker.get_trackers()
    guids = tracker.get_guids()
    tracker.seen("cam1", make_pose(2))
    tracker.clear()

    assert [t.guid for t in trackers] == ["cam1-1"]
    assert list(guids) == ["cam1-1"]


def test_clear_removes_all_without_notifications(make_tracker):
    tracker = make_tracker()
    events = []
    tracker.add_added_callback(lambda t: events.append(("added", t.guid)))
    tracker.add_expired_callback(lambda t: events.append(("expired", t.guid)))
    tracker.seen("cam1", make_pose(1))
    tracker.seen("cam2", make_pose(1))
    events.clear()

    tracker.clear()

    assert tracker.size == 0
    assert events == []


def test_expired_after_max_age(make_tracker, clock):
    tracker = make_tracker(max_age_ms=1000)
    expired = []
    tracker.add_expired_callback(expired.append)
    guid = tracker.seen("cam1", make_pose(1))

    clock.advance(0.5)
    assert tracker.remove_expired() == []

    clock.advance(0.75)
    removed = tracker.remove_expired()

    assert [t.guid for t in removed] == [guid]
    assert [t.guid for t in expired] == [guid]
    assert tracker.size == 0
    assert tracker.remove_expired() == []
    assert len(expired) == 1


def test_seen_keeps_tracker_alive(make_tracker, clock):
    tracker = make_tracker(max_age_ms=1000)
    tracker.seen("cam1", make_pose(1))

    for _ in range(5):
        clock.advance(0.75)
        tracker.seen("cam1", make_pose(1))
        assert tracker.remove_expired() == []

    assert tracker.size == 1


def test_expired_oldest_first(make_tracker, clock):
    tracker = make_tracker(max_age_ms=1000)
    expired = []
    tracker.add_expired_callback(lambda t: expired.append(t.guid))
    tracker.seen("cam1", make_pose(2))
    clock.advance(0.25)
    tracker.seen("cam1", make_pose(1))
    clock.advance(0.25)
    tracker.seen("cam2", make_pose(1))
    clock.advance(1.25)
    tracker.seen("cam3", make_pose(1))

    tracker.remove_expired()

    assert expired == ["cam1-2", "cam1-1", "cam2-1"]
    assert list(tracker.get_guids()) == ["cam3-1"]


def test_guid_reused_after_expiry_is_a_new_tracker(make_tracker, clock):
    tracker = make_tracker(max_age_ms=1000)
    added = []
    tracker.add_added_callback(added.append)
    tracker.seen("cam1", make_pose(1))
    tracker.seen("cam1", make_pose(1))
    clock.advance(2.0)
    tracker.remove_expired()

    tracker.seen("cam1", make_pose(1))

    assert len(added) == 2
    assert added[0] is not added[1]
    assert added[1].sample_count == 1


def test_failing_callback_does_not_break_others(make_tracker, capsys):
    tracker = make_tracker()
    added = []

    def broken(t):
        raise RuntimeError("boom")

    tracker.add_added_callback(broken)
    tracker.add_added_callback(added.append)

    guid = tracker.seen("cam1", make_pose(1))

    assert guid == "cam1-1"
    assert len(added) == 1
    assert "boom" in capsys.readouterr().out


def test_removed_callback_is_not_called(make_tracker):
    tracker = make_tracker()
    added = []
    tracker.add_added_callback(added.append)
    tracker.remove_added_callback(added.append)
    tracker.remove_expired_callback(added.append)

    tracker.seen("cam1", make_pose(1))

    assert added == []


def test_config_passed_to_each_tracker(make_tracker):
    tracker = make_tracker(store_intermediate=True, sample_limit=2)
    for _ in range(4):
        tracker.seen("cam1", make_pose(1))

    body = tracker.get_tracker_by_guid("cam1-1")
    assert body.store_intermediate is True
    assert body.sample_limit == 2
    assert len(body.history) == 2
    assert body.sample_count == 4


def test_config_is_locked_after_construction():
    config = PosesTrackerConfig(max_age_ms=500)

    assert config.max_age_ms == 500
    with pytest.raises(AttributeError):
        config.max_age_ms = 1000
    with pytest.raises(AttributeError):
        config.unknown = 1


def test_default_config():
    config = PosesTrackerConfig()

    assert config.max_age_ms == 10000
    assert config.reset_after_samples == 0
    assert config.sample_limit == 100
    assert config.store_intermediate is False
    assert config.expire_interval == 1.0


def test_expiry_timer_runs_in_background():
    tracker = PosesTracker(PosesTrackerConfig(max_age_ms=10, expire_interval=0.05))
    expired = threading.Event()
    tracker.add_expired_callback(lambda t: expired.set())

    with tracker:
        assert tracker.is_running
        tracker.seen("cam1", make_pose(1))
        assert expired.wait(timeout=2.0)

    assert not tracker.is_running
    assert tracker.size == 0


def test_start_and_stop_are_idempotent(make_tracker):
    tracker = make_tracker()

    tracker.stop()
    tracker.start()
    tracker.start()
    assert tracker.is_running
    tracker.stop()
    tracker.stop()
    assert not tracker.is_running


def test_non_string_sender_id(make_tracker):
    tracker = make_tracker()
    tracker.seen(1, make_pose(5))

    assert list(tracker.get_sender_ids()) == ["1"]
    assert [t.guid for t in tracker.get_from_sender(1)] == ["1-5"]
    assert [t.guid for t in tracker.get_from_sender("1")] == ["1-5"]


def test_integral_float_pose_id_matches_int(make_tracker):
    tracker = make_tracker()

    assert tracker.seen("cam1", make_pose(5)) == "cam1-5"
    assert tracker.seen("cam1", make_pose(5.0)) == "cam1-5"
    assert tracker.size == 1
    assert tracker.get_tracker_by_pose_id(5.0) is tracker.get_tracker_by_guid("cam1-5")


def test_expired_waits_for_added_callback(make_tracker, clock):
    tracker = make_tracker(max_age_ms=1000)
    events = []
    scan = threading.Thread(target=tracker.remove_expired)

    def on_added(t) -> None:
        # Make the new body stale and scan from another thread while added is still running
        clock.advance(2.0)
        scan.start()
        scan.join(timeout=0.2)
        events.append(("added", t.guid))

    tracker.add_added_callback(on_added)
    tracker.add_expired_callback(lambda t: events.append(("expired", t.guid)))

    tracker.seen("cam1", make_pose(1))
    scan.join(timeout=2.0)

    assert not scan.is_alive()
    assert events == [("added", "cam1-1"), ("expired", "cam1-1")]
    assert tracker.size == 0
