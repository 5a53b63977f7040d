import app
from core.paths import HOME_ENV, db_path, user_data_dir
from services.stats_service import StatsService
from storage.db import Database


def test_stats_for_day(timer_service, clock):
    stats = StatsService(timer_service)
    timer_service.start("a")
    clock.advance(600)
    first = timer_service.complete()
    timer_service.start("b")
    clock.advance(300)
    timer_service.complete()

    assert stats.total_seconds_for_day(first.date_key) == 900
    assert stats.sessions_for_day(first.date_key) == 2
    assert stats.summary(first.date_key)["all_time_sessions"] == 2
    assert stats.sessions_for_day("1999-01-01") == 0


def test_data_dir_override(monkeypatch, tmp_path):
    target = tmp_path / "home"
    monkeypatch.setenv(HOME_ENV, str(target))

    assert user_data_dir() == target
    assert target.is_dir()
    assert db_path() == target / "focus_timeline.db"


def test_build_services_on_fresh_database(tmp_path):
    db = Database(tmp_path / "t.db")
    db.init_schema()
    try:
        timer_service, log_service, stats_service = app.build_services(db)
        snap = timer_service.get_snapshot()
        assert snap.status == "idle"
        assert snap.planned_minutes == 25
        assert log_service.list_logs() == []
        assert stats_service.total_seconds_for_day() == 0
    finally:
        db.close()
