# storage/repos.py
#!/usr/bin/env python3
# -*- coding: utf-8 -*-

import json
import logging
import math
from dataclasses import dataclass, replace
from typing import Any, Dict, List, Optional

from core.timer_engine import DEFAULT_MINUTES, clamp_minutes
from domain.models import TimeLog, is_finite_number
from storage.db import Database

SETTINGS_KEY = "timer.settings.v1"
LOGS_KEY = "timer.logs.v1"

SOUND_TYPES = ("chime", "bell", "beep", "silent")
DEFAULT_SOUND_TYPE = "chime"
DEFAULT_SOUND_VOLUME = 120
MIN_SOUND_VOLUME = 0
MAX_SOUND_VOLUME = 200

log = logging.getLogger(__name__)


def clamp_volume(value: Any) -> int:
    try:
        f = float(value)
    except (TypeError, ValueError, OverflowError):
        return DEFAULT_SOUND_VOLUME
    if not math.isfinite(f):
        return DEFAULT_SOUND_VOLUME
    return min(MAX_SOUND_VOLUME, max(MIN_SOUND_VOLUME, int(math.floor(f + 0.5))))


@dataclass(frozen=True)
class Settings:
    set_minutes: int = DEFAULT_MINUTES
    sound_volume: int = DEFAULT_SOUND_VOLUME
    sound_type: str = DEFAULT_SOUND_TYPE


class AppStateRepo:
    def __init__(self, db: Database):
        self.db = db

    def get(self, key: str) -> Optional[str]:
        row = self.db.conn.execute(
            "SELECT value FROM app_state WHERE key=?",
            (key,),
        ).fetchone()
        return row["value"] if row else None

    def set(self, key: str, value: str) -> None:
        self.db.conn.execute(
            """
            INSERT INTO app_state(key, value) VALUES(?, ?)
            ON CONFLICT(key) DO UPDATE SET value=excluded.value
            """,
            (key, value),
        )
        self.db.conn.commit()

    def delete(self, key: str) -> None:
        self.db.conn.execute("DELETE FROM app_state WHERE key=?", (key,))
        self.db.conn.commit()

    def get_json(self, key: str) -> Any:
        """Parsed JSON value, or None when missing / not JSON."""
        raw = self.get(key)
        if not raw:
            return None
        try:
            return json.loads(raw)
        except ValueError:
            log.warning("discarding unparseable value under %r", key)
            return None

    def set_json(self, key: str, value: Any) -> None:
        self.set(key, json.dumps(value, ensure_ascii=False))


class SettingsRepo:
    def __init__(self, state: AppStateRepo):
        self.state = state

    def load(self) -> Settings:
        parsed = self.state.get_json(SETTINGS_KEY)
        if not isinstance(parsed, dict):
            return Settings()

        minutes = parsed.get("setMinutes", DEFAULT_MINUTES)
        sound_type = parsed.get("soundType")
        if sound_type not in SOUND_TYPES:
            sound_type = DEFAULT_SOUND_TYPE

        return Settings(
            set_minutes=clamp_minutes(minutes),
            sound_volume=self._load_volume(parsed),
            sound_type=sound_type,
        )

    def _load_volume(self, parsed: Dict[str, Any]) -> int:
        volume = parsed.get("soundVolume")
        boost = parsed.get("soundBoost")
        if not is_finite_number(volume):
            return DEFAULT_SOUND_VOLUME
        # legacy: separate volume + boost percentages
        if is_finite_number(boost):
            return clamp_volume(volume * boost / 100)
        return clamp_volume(volume)

    def save(self, settings: Settings) -> None:
        self.state.set_json(
            SETTINGS_KEY,
            {
                "setMinutes": clamp_minutes(settings.set_minutes),
                "soundVolume": clamp_volume(settings.sound_volume),
                "soundType": settings.sound_type
                if settings.sound_type in SOUND_TYPES
                else DEFAULT_SOUND_TYPE,
            },
        )

    def update(self, **changes) -> Settings:
        settings = replace(self.load(), **changes)
        self.save(settings)
        return settings


class LogRepo:
    def __init__(self, state: AppStateRepo):
        self.state = state

    def load(self) -> List[TimeLog]:
        parsed = self.state.get_json(LOGS_KEY)
        if parsed is None:
            return []
        if not isinstance(parsed, list):
            log.warning("log collection is not a list; starting empty")
            return []

        out: List[TimeLog] = []
        for entry in parsed:
            item = TimeLog.from_dict(entry)
            if item is None:
                log.warning("dropping malformed log entry: %r", entry)
                continue
            out.append(item)
        return out

    def save(self, logs: List[TimeLog]) -> None:
        self.state.set_json(LOGS_KEY, [item.to_dict() for item in logs])

