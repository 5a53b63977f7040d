# -*- coding: utf-8 -*-

import pytest

from core.timer_engine import TimerEngine
from services.log_service import LogService
from services.timer_service import TimerService
from storage.db import Database
from storage.repos import AppStateRepo, LogRepo, SettingsRepo

# 2026-02-17T09:00:00Z
T0 = 1771318800.0


class FakeClock:
    def __init__(self, start: float = T0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeAlerts:
    def __init__(self):
        self.calls = []
        self.plays = []

    def __call__(self, task, planned_minutes, sound_type, volume):
        self.calls.append((task, planned_minutes, sound_type, volume))

    def play(self, sound_type, volume):
        self.plays.append((sound_type, volume))


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def engine(clock):
    return TimerEngine(planned_minutes=25, now=clock)


@pytest.fixture
def db():
    d = Database(":memory:")
    d.init_schema()
    yield d
    d.close()


@pytest.fixture
def state_repo(db):
    return AppStateRepo(db)


@pytest.fixture
def alerts():
    return FakeAlerts()


@pytest.fixture
def make_service(state_repo, clock, alerts):
    def _make(**kwargs):
        return TimerService(
            engine=TimerEngine(now=clock),
            settings_repo=SettingsRepo(state_repo),
            log_repo=LogRepo(state_repo),
            alerts=kwargs.get("alerts", alerts),
        )

    return _make


@pytest.fixture
def timer_service(make_service):
    return make_service()


@pytest.fixture
def log_service(timer_service):
    return LogService(timer_service)
