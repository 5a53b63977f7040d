# -*- coding: utf-8 -*-

import math
import time
import uuid
from dataclasses import dataclass
from typing import Any, Callable, Optional

from core.clock import date_key_for_ts, to_iso
from domain.models import SessionMeta, TimeLog

MIN_MINUTES = 0
MAX_MINUTES = 180
DEFAULT_MINUTES = 25
BREAK_RATIO = 0.2
UNTITLED_TASK = "Untitled task"

IDLE = "idle"
RUNNING = "running"
PAUSED = "paused"
DONE = "done"

WORK = "work"
BREAK = "break"


def clamp_minutes(value: Any) -> int:
    try:
        f = float(value)
    except (TypeError, ValueError, OverflowError):
        return DEFAULT_MINUTES
    if not math.isfinite(f):
        return DEFAULT_MINUTES
    # half-up, not banker's rounding
    return min(MAX_MINUTES, max(MIN_MINUTES, int(math.floor(f + 0.5))))


def break_seconds_for(planned_minutes: int) -> int:
    return max(1, int(math.floor(planned_minutes * 60 * BREAK_RATIO + 0.5)))


@dataclass(frozen=True)
class EngineSnapshot:
    status: str  # idle | running | paused | done
    mode: str  # work | break
    remaining_sec: int
    planned_minutes: int
    task: Optional[str]
    break_suggestion_sec: int

    @property
    def is_running(self) -> bool:
        return self.status == RUNNING

    @property
    def can_configure(self) -> bool:
        return self.mode == WORK and self.status in (IDLE, DONE)

    @property
    def total_sec(self) -> int:
        """Length of the current countdown: the break in break mode, else the planned session."""
        if self.mode == BREAK:
            return self.break_suggestion_sec
        return self.planned_minutes * 60


@dataclass(frozen=True)
class Completion:
    log: TimeLog
    timed_out: bool  # False => completed manually


class TimerEngine:
    """
    Pure countdown state machine (no Tkinter, no storage).

    Remaining time is derived from an absolute deadline, never decremented,
    so late or skipped tick() calls cannot make it drift. The deadline only
    exists while RUNNING.

    Invalid transitions are no-ops: methods return False / None.
    """

    def __init__(
        self,
        planned_minutes: int = DEFAULT_MINUTES,
        now: Callable[[], float] = time.time,
    ):
        self._now = now

        self.planned_minutes = clamp_minutes(planned_minutes)
        self.status = IDLE
        self.mode = WORK
        self.remaining_sec = self.planned_minutes * 60
        self.break_suggestion_sec = 0

        self.session: Optional[SessionMeta] = None
        self.deadline: Optional[float] = None

    def snapshot(self) -> EngineSnapshot:
        return EngineSnapshot(
            status=self.status,
            mode=self.mode,
            remaining_sec=self.remaining_sec,
            planned_minutes=self.planned_minutes,
            task=self.session.task if self.session else None,
            break_suggestion_sec=self.break_suggestion_sec,
        )

    @property
    def can_configure(self) -> bool:
        return self.mode == WORK and self.status in (IDLE, DONE)

    # ----- transitions -----
    def configure(self, minutes: Any) -> bool:
        if not self.can_configure:
            return False
        self.planned_minutes = clamp_minutes(minutes)
        self.remaining_sec = self.planned_minutes * 60
        return True

    def start(self, task: str = "") -> bool:
        if self.status not in (IDLE, DONE) or self.mode != WORK:
            return False
        if self.planned_minutes <= 0:
            return False

        now = self._now()
        total = self.planned_minutes * 60
        self.session = SessionMeta(
            started_at=now,
            planned_minutes=self.planned_minutes,
            task=(task or "").strip() or UNTITLED_TASK,
        )
        self.deadline = now + total
        self.remaining_sec = total
        self.break_suggestion_sec = 0
        self.status = RUNNING
        return True

    def pause(self) -> bool:
        if self.status != RUNNING:
            return False
        self.remaining_sec = self._remaining_from_deadline()
        self.deadline = None
        self.status = PAUSED
        return True

    def resume(self) -> bool:
        if self.status != PAUSED:
            return False
        self.deadline = self._now() + self.remaining_sec
        self.status = RUNNING
        return True

    def complete(self) -> Optional[Completion]:
        """Manual completion: logs the elapsed time so far."""
        if self.status not in (RUNNING, PAUSED) or self.mode != WORK:
            return None
        if self.session is None:
            return None

        if self.status == RUNNING:
            self.remaining_sec = self._remaining_from_deadline()

        elapsed = self.session.planned_minutes * 60 - self.remaining_sec
        log = self._finalize(ended_at=self._now(), actual_seconds=elapsed)
        return Completion(log=log, timed_out=False)

    def reset(self) -> None:
        self.session = None
        self.deadline = None
        self.mode = WORK
        self.status = IDLE
        self.remaining_sec = self.planned_minutes * 60
        self.break_suggestion_sec = 0

    # ----- break -----
    def start_break(self) -> bool:
        if self.mode != WORK or self.status not in (IDLE, DONE):
            return False
        if self.break_suggestion_sec <= 0:
            return False
        self.mode = BREAK
        self.remaining_sec = self.break_suggestion_sec
        self.deadline = self._now() + self.remaining_sec
        self.status = RUNNING
        return True

    def skip_break(self) -> bool:
        if self.mode != BREAK:
            return False
        self._back_to_work()
        return True

    # ----- reconciliation -----
    def tick(self) -> Optional[Completion]:
        """
        Re-derive remaining time from the deadline.
        Returns a Completion when a work session times out on this call.
        """
        if self.status != RUNNING or self.deadline is None:
            return None

        self.remaining_sec = self._remaining_from_deadline()
        if self.remaining_sec > 0:
            return None

        if self.mode == BREAK:
            self._back_to_work()
            return None

        if self.session is None:
            return None
        # record the theoretical end, not the moment we noticed it
        log = self._finalize(
            ended_at=self.deadline,
            actual_seconds=self.session.planned_minutes * 60,
        )
        return Completion(log=log, timed_out=True)

    # ----- internals -----
    def _remaining_from_deadline(self) -> int:
        if self.deadline is None:
            return self.remaining_sec
        return max(0, int(math.ceil(self.deadline - self._now())))

    def _finalize(self, ended_at: float, actual_seconds: float) -> TimeLog:
        session = self.session
        planned_sec = session.planned_minutes * 60
        safe_actual = max(1, min(planned_sec, int(math.floor(actual_seconds + 0.5))))

        log = TimeLog(
            id=str(uuid.uuid4()),
            task=session.task,
            planned_minutes=session.planned_minutes,
            actual_seconds=safe_actual,
            started_at=to_iso(session.started_at),
            ended_at=to_iso(ended_at),
            date_key=date_key_for_ts(session.started_at),
        )

        self.session = None
        self.deadline = None
        self.remaining_sec = 0
        self.break_suggestion_sec = break_seconds_for(session.planned_minutes)
        self.status = DONE
        return log

    def _back_to_work(self) -> None:
        self.deadline = None
        self.mode = WORK
        self.status = IDLE
        self.remaining_sec = self.planned_minutes * 60
        self.break_suggestion_sec = 0
