# -*- coding: utf-8 -*-

from typing import Any, Dict, Optional

from core.clock import local_today_key
from services.timer_service import TimerService


class StatsService:
    def __init__(self, timer_service: TimerService):
        self.timer_service = timer_service

    def total_seconds_for_day(self, date_key: Optional[str] = None) -> int:
        key = date_key or local_today_key()
        return sum(item.actual_seconds for item in self.timer_service.logs if item.date_key == key)

    def sessions_for_day(self, date_key: Optional[str] = None) -> int:
        key = date_key or local_today_key()
        return sum(1 for item in self.timer_service.logs if item.date_key == key)

    def summary(self, date_key: Optional[str] = None) -> Dict[str, Any]:
        key = date_key or local_today_key()
        return {
            "date_key": key,
            "sessions": self.sessions_for_day(key),
            "total_sec": self.total_seconds_for_day(key),
            "all_time_sessions": len(self.timer_service.logs),
        }
