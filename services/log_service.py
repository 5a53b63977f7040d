# services/log_service.py
#!/usr/bin/env python3
# -*- coding: utf-8 -*-

from __future__ import annotations

import logging
import math
from dataclasses import replace
from typing import List, Optional

from core.clock import date_key_for_ts, local_today_key, parse_iso, to_iso
from core.timeline import TimelineLayout, assign_lanes
from core.timer_engine import UNTITLED_TASK
from domain.models import TimeLog
from services.timer_service import TimerService

MIN_EDIT_SECONDS = 60

log = logging.getLogger(__name__)


def clamp_duration_minutes(minutes) -> int:
    try:
        f = float(minutes)
    except (TypeError, ValueError, OverflowError):
        return 1
    if not math.isfinite(f):
        return 1
    return max(1, int(math.floor(f + 0.5)))


class LogService:
    """
    Edits keep ended_at == started_at + actual_seconds:
    - duration edit: start fixed, end recomputed
    - end edit: end fixed, start kept to the whole second (pulled back if needed)
    - start edit: end fixed, duration recomputed
    """

    def __init__(self, timer_service: TimerService):
        self.timer_service = timer_service

    # ---- queries ----
    def list_logs(self) -> List[TimeLog]:
        return list(self.timer_service.logs)

    def get_log(self, log_id: str) -> Optional[TimeLog]:
        return next((item for item in self.timer_service.logs if item.id == log_id), None)

    def logs_for_day(self, date_key: str) -> List[TimeLog]:
        return [item for item in self.timer_service.logs if item.date_key == date_key]

    def timeline_for_day(self, date_key: str) -> TimelineLayout:
        return assign_lanes(self.logs_for_day(date_key))

    def today_timeline(self) -> TimelineLayout:
        return self.timeline_for_day(local_today_key())

    # ---- edits ----
    def rename(self, log_id: str, task: str) -> TimeLog:
        return self.update(log_id, task=task)

    def edit_duration(self, log_id: str, minutes) -> TimeLog:
        return self.update(log_id, minutes=minutes)

    def edit_end(self, log_id: str, ended_at: str) -> TimeLog:
        return self.update(log_id, ended_at=ended_at)

    def edit_start(self, log_id: str, started_at: str) -> TimeLog:
        return self.update(log_id, started_at=started_at)

    def update(
        self,
        log_id: str,
        task: Optional[str] = None,
        started_at: Optional[str] = None,
        ended_at: Optional[str] = None,
        minutes=None,
    ) -> TimeLog:
        """
        Applies several edits at once; nothing is stored unless all of them are valid.
        An end edit wins over a duration edit.
        """
        item = self._require(log_id)

        start = end = None
        if started_at is not None:
            start = parse_iso(started_at)
            if start is None:
                raise ValueError("Invalid start time.")
        if ended_at is not None:
            end = parse_iso(ended_at)
            if end is None:
                raise ValueError("Invalid end time.")

        updated = item
        if task is not None:
            updated = replace(updated, task=task.strip() or UNTITLED_TASK)
        if start is not None:
            fixed_end = self._end_ts(updated)
            updated = self._with_span(updated, min(start, fixed_end - MIN_EDIT_SECONDS), fixed_end, keep_end=True)
        if end is not None:
            updated = self._with_span(updated, min(self._start_ts(updated), end - MIN_EDIT_SECONDS), end, keep_end=True)
        elif minutes is not None:
            fixed_start = self._start_ts(updated)
            updated = self._with_span(updated, fixed_start, fixed_start + clamp_duration_minutes(minutes) * 60)
        return self._store(updated)

    def delete(self, log_id: str) -> None:
        self._require(log_id)
        self.timer_service.replace_logs(
            [item for item in self.timer_service.logs if item.id != log_id]
        )
        log.info("deleted log %s", log_id)

    # ---- internals ----
    def _require(self, log_id: str) -> TimeLog:
        item = self.get_log(log_id)
        if item is None:
            raise ValueError("Log not found.")
        return item

    def _start_ts(self, item: TimeLog) -> float:
        start = parse_iso(item.started_at)
        if start is None:
            raise ValueError("Stored start time is unreadable.")
        return start

    def _end_ts(self, item: TimeLog) -> float:
        end = parse_iso(item.ended_at)
        if end is None:
            return self._start_ts(item) + max(MIN_EDIT_SECONDS, item.actual_seconds)
        return end

    def _with_span(self, item: TimeLog, start: float, end: float, keep_end: bool = False) -> TimeLog:
        # whole seconds; the anchored side stays put and the other one moves
        actual = max(MIN_EDIT_SECONDS, int(math.floor(end - start + 0.5)))
        if keep_end:
            start = end - actual
        else:
            end = start + actual
        return replace(
            item,
            started_at=to_iso(start),
            ended_at=to_iso(end),
            actual_seconds=actual,
            date_key=date_key_for_ts(start),
        )

    def _store(self, updated: TimeLog) -> TimeLog:
        self.timer_service.replace_logs(
            [updated if item.id == updated.id else item for item in self.timer_service.logs]
        )
        return updated
