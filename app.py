#!/usr/bin/env python3
# -*- coding: utf-8 -*-

import logging
import sys

from core.paths import db_path, log_path
from core.timer_engine import TimerEngine
from services.alert_service import CompletionAlerts
from services.log_service import LogService
from services.stats_service import StatsService
from services.timer_service import TimerService
from storage.db import Database
from storage.repos import AppStateRepo, LogRepo, SettingsRepo

LOGGER = logging.getLogger()


def setup_logging(path: str, level: int = logging.INFO) -> None:
    LOGGER.setLevel(level)
    handler = logging.FileHandler(path, encoding="utf-8")
    formatter = logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s")
    handler.setFormatter(formatter)
    LOGGER.addHandler(handler)


def log_unhandled_exception(exc_type, exc, tb) -> None:
    LOGGER.error("Unhandled exception", exc_info=(exc_type, exc, tb))


def build_services(db: Database, alerts=None):
    state_repo = AppStateRepo(db)
    timer_service = TimerService(
        engine=TimerEngine(),
        settings_repo=SettingsRepo(state_repo),
        log_repo=LogRepo(state_repo),
        alerts=alerts,
    )
    return timer_service, LogService(timer_service), StatsService(timer_service)


def main():
    setup_logging(str(log_path()))
    sys.excepthook = log_unhandled_exception

    db = Database(db_path=db_path())
    db.init_schema()

    timer_service, log_service, stats_service = build_services(db, alerts=CompletionAlerts())

    # tkinter is imported only when a window is actually needed
    from ui.main_window import MainWindow

    app = MainWindow(timer_service, log_service, stats_service)
    try:
        app.run()
    finally:
        db.close()


if __name__ == "__main__":
    main()
