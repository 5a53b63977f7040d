# -*- coding: utf-8 -*-

import logging
from typing import Any, Callable, List, Optional

from core.clock import parse_iso
from core.timer_engine import Completion, EngineSnapshot, TimerEngine
from domain.models import TimeLog
from storage.repos import SOUND_TYPES, LogRepo, Settings, SettingsRepo, clamp_volume

# (task, planned_minutes, sound_type, volume)
AlertSink = Callable[[str, int, str, int], None]

log = logging.getLogger(__name__)


def sort_by_end(logs: List[TimeLog]) -> List[TimeLog]:
    return sorted(logs, key=lambda item: parse_iso(item.ended_at) or 0.0)


class TimerService:
    """
    Orchestrates:
    - TimerEngine state
    - the persisted log collection + settings (loaded once, saved on change)
    - completion alerts on natural timeout only
    - Callbacks for UI
    """

    def __init__(
        self,
        engine: TimerEngine,
        settings_repo: SettingsRepo,
        log_repo: LogRepo,
        alerts: Optional[AlertSink] = None,
    ):
        self.engine = engine
        self.settings_repo = settings_repo
        self.log_repo = log_repo
        self.alerts = alerts

        self.settings: Settings = settings_repo.load()
        self.logs: List[TimeLog] = sort_by_end(log_repo.load())
        self.engine.configure(self.settings.set_minutes)

        self._on_tick: Optional[Callable[[EngineSnapshot], None]] = None
        self._on_state_change: Optional[Callable[[EngineSnapshot], None]] = None
        self._on_logs_changed: Optional[Callable[[List[TimeLog]], None]] = None

    # ----- Callbacks -----
    def set_on_tick(self, fn: Callable[[EngineSnapshot], None]) -> None:
        self._on_tick = fn

    def set_on_state_change(self, fn: Callable[[EngineSnapshot], None]) -> None:
        self._on_state_change = fn

    def set_on_logs_changed(self, fn: Callable[[List[TimeLog]], None]) -> None:
        self._on_logs_changed = fn

    def _emit_tick(self) -> None:
        if self._on_tick:
            self._on_tick(self.engine.snapshot())

    def _emit_state_change(self) -> None:
        if self._on_state_change:
            self._on_state_change(self.engine.snapshot())

    def _emit_logs_changed(self) -> None:
        if self._on_logs_changed:
            self._on_logs_changed(list(self.logs))

    # ----- Public API -----
    def get_snapshot(self) -> EngineSnapshot:
        return self.engine.snapshot()

    def configure(self, minutes: Any) -> bool:
        if not self.engine.configure(minutes):
            return False
        self.settings = self.settings_repo.update(set_minutes=self.engine.planned_minutes)
        self._emit_state_change()
        return True

    def start(self, task: str = "") -> bool:
        ok = self.engine.start(task)
        if ok:
            log.info("session started: %r, %d min", self.engine.session.task, self.engine.planned_minutes)
            self._emit_state_change()
        return ok

    def pause(self) -> bool:
        ok = self.engine.pause()
        if ok:
            self._emit_state_change()
        return ok

    def resume(self) -> bool:
        ok = self.engine.resume()
        if ok:
            self._emit_state_change()
        return ok

    def complete(self) -> Optional[TimeLog]:
        completion = self.engine.complete()
        if completion is None:
            return None
        self._record(completion)
        self._emit_state_change()
        return completion.log

    def reset(self) -> None:
        self.engine.reset()
        self._emit_state_change()

    def start_break(self) -> bool:
        ok = self.engine.start_break()
        if ok:
            self._emit_state_change()
        return ok

    def skip_break(self) -> bool:
        ok = self.engine.skip_break()
        if ok:
            self._emit_state_change()
        return ok

    def tick(self) -> None:
        """
        Called every ~250ms by the UI loop while running.
        Emits on_tick only when the displayed value actually changed.
        """
        before = self.engine.snapshot()
        if not before.is_running:
            return

        completion = self.engine.tick()
        after = self.engine.snapshot()

        if completion is not None:
            self._record(completion)
            self._emit_state_change()
            self._fire_alerts(completion)
            return

        if after.status != before.status or after.mode != before.mode:
            self._emit_state_change()
        elif after.remaining_sec != before.remaining_sec:
            self._emit_tick()

    # ----- settings -----
    def set_sound_type(self, sound_type: str) -> bool:
        if sound_type not in SOUND_TYPES:
            return False
        self.settings = self.settings_repo.update(sound_type=sound_type)
        return True

    def set_sound_volume(self, volume: Any) -> int:
        self.settings = self.settings_repo.update(sound_volume=clamp_volume(volume))
        return self.settings.sound_volume

    def test_sound(self) -> None:
        play = getattr(self.alerts, "play", None)
        if callable(play):
            play(self.settings.sound_type, self.settings.sound_volume)

    # ----- log collection -----
    def replace_logs(self, logs: List[TimeLog]) -> None:
        self.logs = sort_by_end(logs)
        self.log_repo.save(self.logs)
        self._emit_logs_changed()

    def _record(self, completion: Completion) -> None:
        item = completion.log
        log.info(
            "session finished (%s): %r %ds",
            "timeout" if completion.timed_out else "manual",
            item.task,
            item.actual_seconds,
        )
        self.replace_logs(self.logs + [item])

    def _fire_alerts(self, completion: Completion) -> None:
        if not completion.timed_out or self.alerts is None:
            return
        try:
            self.alerts(
                completion.log.task,
                completion.log.planned_minutes,
                self.settings.sound_type,
                self.settings.sound_volume,
            )
        except Exception:
            log.warning("completion alert failed", exc_info=True)
