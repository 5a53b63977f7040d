# -*- coding: utf-8 -*-

import math
from dataclasses import dataclass
from typing import Any, Dict, Optional

from core.clock import parse_iso


@dataclass(frozen=True)
class SessionMeta:
    started_at: float  # epoch seconds
    planned_minutes: int
    task: str


@dataclass(frozen=True)
class TimeLog:
    id: str
    task: str
    planned_minutes: int
    actual_seconds: int
    started_at: str  # ISO, UTC
    ended_at: str  # ISO, UTC
    date_key: str  # yyyy-mm-dd, local

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "task": self.task,
            "plannedMinutes": self.planned_minutes,
            "actualSeconds": self.actual_seconds,
            "startedAt": self.started_at,
            "endedAt": self.ended_at,
            "dateKey": self.date_key,
        }

    @classmethod
    def from_dict(cls, obj: Any) -> Optional["TimeLog"]:
        """
        Returns None when any field is missing or has the wrong type.
        """
        if not isinstance(obj, dict):
            return None

        for key in ("id", "task", "startedAt", "endedAt", "dateKey"):
            if not isinstance(obj.get(key), str):
                return None

        for key in ("plannedMinutes", "actualSeconds"):
            if not is_finite_number(obj.get(key)):
                return None

        # both instants must convert to local time
        if parse_iso(obj["startedAt"]) is None or parse_iso(obj["endedAt"]) is None:
            return None

        return cls(
            id=obj["id"],
            task=obj["task"],
            planned_minutes=int(obj["plannedMinutes"]),
            actual_seconds=int(obj["actualSeconds"]),
            started_at=obj["startedAt"],
            ended_at=obj["endedAt"],
            date_key=obj["dateKey"],
        )


@dataclass(frozen=True)
class LaneLog:
    log: TimeLog
    lane: int

    @property
    def id(self) -> str:
        return self.log.id

    @property
    def task(self) -> str:
        return self.log.task

    @property
    def started_at(self) -> str:
        return self.log.started_at

    @property
    def ended_at(self) -> str:
        return self.log.ended_at


def is_finite_number(value: Any) -> bool:
    # json gives bool for true/false, which is an int subclass
    if isinstance(value, bool):
        return False
    if not isinstance(value, (int, float)):
        return False
    try:
        return math.isfinite(value)
    except OverflowError:
        return False
