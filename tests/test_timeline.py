import datetime as dt

import pytest

from core.clock import to_iso
from core.timeline import (
    COMPACT_THRESHOLD_MINUTES,
    MIN_BLOCK_HEIGHT_PX,
    PIXELS_PER_MINUTE,
    assign_lanes,
    block_geometry,
)
from domain.models import LaneLog, TimeLog


def _log(log_id, start, end, day="2026-02-15"):
    return TimeLog(
        id=log_id,
        task=log_id.upper(),
        planned_minutes=25,
        actual_seconds=1500,
        started_at=f"{day}T{start}:00.000Z",
        ended_at=f"{day}T{end}:00.000Z",
        date_key=day,
    )


def _local_log(log_id, start: dt.datetime, end: dt.datetime):
    return TimeLog(
        id=log_id,
        task=log_id,
        planned_minutes=25,
        actual_seconds=int((end - start).total_seconds()),
        started_at=to_iso(start.timestamp()),
        ended_at=to_iso(end.timestamp()),
        date_key=start.strftime("%Y-%m-%d"),
    )


def _lanes(layout):
    return {ll.id: ll.lane for ll in layout.logs}


def test_overlapping_logs_get_distinct_lanes():
    layout = assign_lanes([_log("a", "09:00", "09:30"), _log("b", "09:10", "09:20")])
    assert layout.lane_count == 2
    assert layout.logs[0].lane != layout.logs[1].lane


def test_sequential_logs_share_a_lane():
    layout = assign_lanes([_log("a", "09:00", "09:30"), _log("b", "09:30", "10:00")])
    assert layout.lane_count == 1
    assert _lanes(layout) == {"a": 0, "b": 0}


def test_empty_input_still_has_one_lane():
    layout = assign_lanes([])
    assert layout.lane_count == 1
    assert layout.logs == []


def test_three_log_example():
    logs = [
        _log("c", "09:25", "09:40"),
        _log("a", "09:00", "09:30"),
        _log("b", "09:10", "09:20"),
    ]
    layout = assign_lanes(logs)

    lanes = _lanes(layout)
    assert layout.lane_count == 2
    assert lanes["a"] == 0
    assert lanes["b"] == 1
    # lane 0 is busy until 09:30, lane 1 is free since 09:20
    assert lanes["c"] == 1
    assert [ll.id for ll in layout.logs] == ["a", "b", "c"]


def test_reuses_lowest_free_lane():
    logs = [
        _log("a", "09:00", "10:00"),
        _log("b", "09:05", "09:15"),
        _log("c", "09:10", "09:50"),
        _log("d", "09:20", "09:30"),
    ]
    lanes = _lanes(assign_lanes(logs))
    assert lanes == {"a": 0, "b": 1, "c": 2, "d": 1}


def test_lane_count_is_max_overlap():
    logs = [_log(f"x{i}", "09:00", "10:00") for i in range(4)]
    layout = assign_lanes(logs)
    assert layout.lane_count == 4
    assert sorted(_lanes(layout).values()) == [0, 1, 2, 3]


def test_equal_starts_keep_input_order():
    logs = [_log("first", "09:00", "09:10"), _log("second", "09:00", "09:20")]
    layout = assign_lanes(logs)
    assert [ll.id for ll in layout.logs] == ["first", "second"]
    assert _lanes(layout) == {"first": 0, "second": 1}


def test_input_is_not_mutated():
    logs = [_log("b", "10:00", "10:30"), _log("a", "09:00", "09:30")]
    before = list(logs)
    assign_lanes(logs)
    assert logs == before


def test_geometry_for_short_block_is_compact():
    start = dt.datetime(2026, 2, 17, 9, 0)
    item = _local_log("short", start, start + dt.timedelta(minutes=25))

    block = block_geometry(LaneLog(log=item, lane=1), lane_count=2)

    assert block.top_px == pytest.approx(540 * PIXELS_PER_MINUTE)
    assert block.height_px == pytest.approx(25 * PIXELS_PER_MINUTE)
    assert block.left_fraction == 0.5
    assert block.width_fraction == 0.5
    assert block.compact


def test_geometry_for_long_block_is_full():
    start = dt.datetime(2026, 2, 17, 13, 0)
    item = _local_log("long", start, start + dt.timedelta(minutes=COMPACT_THRESHOLD_MINUTES))

    block = block_geometry(LaneLog(log=item, lane=0), lane_count=1)
    assert not block.compact
    assert block.left_fraction == 0
    assert block.width_fraction == 1


def test_geometry_has_minimum_height():
    start = dt.datetime(2026, 2, 17, 8, 0)
    item = _local_log("tiny", start, start + dt.timedelta(seconds=30))

    block = block_geometry(LaneLog(log=item, lane=0), lane_count=1)
    assert block.height_px == MIN_BLOCK_HEIGHT_PX
