from core.clock import parse_iso
from core.timer_engine import DONE, IDLE, RUNNING
from storage.repos import LogRepo, SettingsRepo


def test_natural_timeout_saves_one_log_and_alerts_once(timer_service, state_repo, clock, alerts):
    timer_service.configure(1)
    timer_service.start("test work")

    clock.advance(61)
    timer_service.tick()
    clock.advance(5)
    timer_service.tick()

    saved = LogRepo(state_repo).load()
    assert len(saved) == 1
    assert saved[0].task == "test work"
    assert saved[0].actual_seconds == 60
    assert parse_iso(saved[0].ended_at) - parse_iso(saved[0].started_at) == 60
    assert alerts.calls == [("test work", 1, "chime", 120)]
    assert timer_service.get_snapshot().status == DONE


def test_manual_completion_does_not_alert(timer_service, state_repo, clock, alerts):
    timer_service.start("reading")
    clock.advance(300)

    item = timer_service.complete()

    assert item.actual_seconds == 300
    assert LogRepo(state_repo).load() == [item]
    assert alerts.calls == []


def test_reset_does_not_alert_or_log(timer_service, state_repo, clock, alerts):
    timer_service.start()
    clock.advance(30)
    timer_service.reset()

    assert timer_service.get_snapshot().status == IDLE
    assert LogRepo(state_repo).load() == []
    assert alerts.calls == []


def test_failing_alert_does_not_affect_state(make_service, state_repo, clock):
    def broken(*args):
        raise RuntimeError("no sink")

    service = make_service(alerts=broken)
    service.configure(1)
    service.start()
    clock.advance(60)
    service.tick()

    assert service.get_snapshot().status == DONE
    assert len(LogRepo(state_repo).load()) == 1


def test_missing_alert_sink_is_fine(make_service, clock):
    service = make_service(alerts=None)
    service.configure(1)
    service.start()
    clock.advance(60)
    service.tick()
    assert service.get_snapshot().status == DONE
    service.test_sound()


def test_configure_persists_and_reloads(timer_service, make_service, state_repo):
    assert timer_service.configure("40")
    assert SettingsRepo(state_repo).load().set_minutes == 40

    reloaded = make_service()
    assert reloaded.get_snapshot().planned_minutes == 40
    assert reloaded.get_snapshot().remaining_sec == 40 * 60


def test_configure_rejected_while_running(timer_service, state_repo):
    timer_service.start()
    assert not timer_service.configure(10)
    assert SettingsRepo(state_repo).load().set_minutes == 25


def test_tick_emits_only_on_change(timer_service, clock):
    ticks = []
    timer_service.set_on_tick(ticks.append)
    timer_service.start()

    timer_service.tick()
    clock.advance(0.25)
    timer_service.tick()
    assert ticks == []

    clock.advance(1)
    timer_service.tick()
    assert [snap.remaining_sec for snap in ticks] == [1499]


def test_state_change_callbacks(timer_service, clock):
    states = []
    timer_service.set_on_state_change(lambda snap: states.append(snap.status))

    timer_service.start()
    timer_service.pause()
    timer_service.pause()  # no-op, no event
    timer_service.resume()
    clock.advance(25 * 60)
    timer_service.tick()

    assert states == [RUNNING, "paused", RUNNING, DONE]


def test_logs_changed_callback_and_end_time_order(timer_service, clock):
    seen = []
    timer_service.set_on_logs_changed(lambda logs: seen.append([item.task for item in logs]))

    timer_service.start("first")
    clock.advance(100)
    timer_service.complete()
    timer_service.start("second")
    clock.advance(100)
    timer_service.complete()

    assert seen[-1] == ["first", "second"]


def test_sound_settings(timer_service, state_repo, alerts):
    assert not timer_service.set_sound_type("trumpet")
    assert timer_service.set_sound_type("bell")
    assert timer_service.set_sound_volume(500) == 200

    timer_service.test_sound()

    assert alerts.plays == [("bell", 200)]
    settings = SettingsRepo(state_repo).load()
    assert (settings.sound_type, settings.sound_volume) == ("bell", 200)
