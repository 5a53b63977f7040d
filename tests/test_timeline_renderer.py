import datetime as dt

from core.clock import to_iso
from core.timeline import assign_lanes
from domain.models import TimeLog
from ui.timeline_renderer import EMPTY_TIMELINE_TEXT, TimelineRenderer


def _log(log_id, task, start: dt.datetime, minutes: int):
    return TimeLog(
        id=log_id,
        task=task,
        planned_minutes=minutes,
        actual_seconds=minutes * 60,
        started_at=to_iso(start.timestamp()),
        ended_at=to_iso((start + dt.timedelta(minutes=minutes)).timestamp()),
        date_key=start.strftime("%Y-%m-%d"),
    )


def test_empty_timeline_still_draws_axis():
    out = TimelineRenderer().to_html(assign_lanes([]))

    assert EMPTY_TIMELINE_TEXT in out
    assert "00:00" in out
    assert "24:00" in out
    assert 'id="timeline-grid"' in out
    assert 'id="timeline-events"' in out


def test_short_session_renders_compact():
    item = _log("a", "deep work", dt.datetime(2026, 2, 17, 9, 0), 25)
    out = TimelineRenderer().timeline_body(assign_lanes([item]))

    assert 'class="block compact"' in out
    assert "deep work, 09:00~09:25" in out
    assert "planned 25 min" not in out
    assert EMPTY_TIMELINE_TEXT not in out


def test_long_session_renders_details():
    item = _log("a", "report", dt.datetime(2026, 2, 17, 13, 0), 60)
    out = TimelineRenderer().timeline_body(assign_lanes([item]))

    assert 'class="block"' in out
    assert "planned 60 min / actual 60:00" in out


def test_overlapping_sessions_split_width():
    start = dt.datetime(2026, 2, 17, 10, 0)
    out = TimelineRenderer().timeline_body(
        assign_lanes([_log("a", "a", start, 60), _log("b", "b", start + dt.timedelta(minutes=10), 30)])
    )
    assert "left: 0.00%" in out
    assert "left: 50.00%" in out


def test_task_text_is_escaped():
    item = _log("a", "<b>x</b> | y", dt.datetime(2026, 2, 17, 9, 0), 25)
    renderer = TimelineRenderer()

    assert "<b>x</b>" not in renderer.timeline_body(assign_lanes([item]))
    table = renderer.history_body([item])
    assert "<table>" in table
    assert "&lt;b&gt;" in table
    assert "<b>x</b>" not in table


def test_history_is_newest_first():
    a = _log("a", "older", dt.datetime(2026, 2, 17, 9, 0), 25)
    b = _log("b", "newer", dt.datetime(2026, 2, 17, 11, 0), 25)
    md_text = TimelineRenderer().history_markdown([a, b])
    assert md_text.index("newer") < md_text.index("older")
    assert TimelineRenderer().history_body([]) == ""
