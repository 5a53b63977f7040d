# -*- coding: utf-8 -*-

from dataclasses import dataclass
from typing import Iterable, List

from core.clock import minutes_from_start_of_day, parse_iso
from domain.models import LaneLog, TimeLog

DAY_MINUTES = 24 * 60
PIXELS_PER_MINUTE = 1.2
TIMELINE_BODY_HEIGHT = DAY_MINUTES * PIXELS_PER_MINUTE
COMPACT_THRESHOLD_MINUTES = 30
MIN_BLOCK_HEIGHT_PX = 12


@dataclass(frozen=True)
class TimelineLayout:
    logs: List[LaneLog]
    lane_count: int


@dataclass(frozen=True)
class TimelineBlock:
    lane_log: LaneLog
    top_px: float
    height_px: float
    left_fraction: float
    width_fraction: float
    compact: bool


def _instant(iso: str) -> float:
    ts = parse_iso(iso)
    return ts if ts is not None else 0.0


def assign_lanes(logs: Iterable[TimeLog]) -> TimelineLayout:
    """
    Greedy interval partitioning: sort by start, put each log in the lowest
    lane that is already free when it starts. Yields the minimum number of
    lanes (= max overlap). Equal starts keep input order (sorted is stable).
    """
    ordered = sorted(logs, key=lambda log: _instant(log.started_at))

    lane_ends: List[float] = []
    out: List[LaneLog] = []
    for log in ordered:
        start = _instant(log.started_at)
        end = _instant(log.ended_at)

        lane = next((i for i, lane_end in enumerate(lane_ends) if lane_end <= start), -1)
        if lane < 0:
            lane = len(lane_ends)
            lane_ends.append(end)
        else:
            lane_ends[lane] = end

        out.append(LaneLog(log=log, lane=lane))

    return TimelineLayout(logs=out, lane_count=max(1, len(lane_ends)))


def block_geometry(lane_log: LaneLog, lane_count: int) -> TimelineBlock:
    lane_count = max(1, lane_count)
    start_minute = minutes_from_start_of_day(lane_log.started_at)
    end_minute = minutes_from_start_of_day(lane_log.ended_at)
    block_minutes = max(0.0, end_minute - start_minute)

    return TimelineBlock(
        lane_log=lane_log,
        top_px=max(0.0, start_minute * PIXELS_PER_MINUTE),
        height_px=max(MIN_BLOCK_HEIGHT_PX, block_minutes * PIXELS_PER_MINUTE),
        left_fraction=lane_log.lane / lane_count,
        width_fraction=1 / lane_count,
        compact=block_minutes < COMPACT_THRESHOLD_MINUTES,
    )


def layout_blocks(layout: TimelineLayout) -> List[TimelineBlock]:
    return [block_geometry(ll, layout.lane_count) for ll in layout.logs]
