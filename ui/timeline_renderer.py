# ui/timeline_renderer.py
# -*- coding: utf-8 -*-

from __future__ import annotations

import html
from dataclasses import dataclass
from typing import List, Optional

from markdown import markdown

from core.clock import format_remaining, to_local_datetime, to_local_hm
from core.timeline import (
    PIXELS_PER_MINUTE,
    TIMELINE_BODY_HEIGHT,
    TimelineLayout,
    layout_blocks,
)
from domain.models import TimeLog

EMPTY_TIMELINE_TEXT = "No sessions yet. Finish one and it will show up here."
TIMELINE_EDGE_PADDING = 14
TIMELINE_LABEL_GUTTER = 72


@dataclass(frozen=True)
class TimelineTheme:
    text: str = "#111827"
    muted: str = "#6B7280"
    border: str = "#E5E7EB"
    panel: str = "#FFFFFF"
    block: str = "#FEE2E2"
    block_edge: str = "#EF4444"


class TimelineRenderer:
    """
    Single responsibility:
    - Turn a TimelineLayout (today's lane-assigned logs) into HTML for HtmlFrame
    - Turn the log history into an HTML table (via markdown)

    tkinterweb (tkhtml) has no calc(), so lane positions are resolved to
    percentages here.
    """

    def __init__(self, theme: Optional[TimelineTheme] = None):
        self.theme = theme or TimelineTheme()

    # ---------- CSS ----------
    def css(self) -> str:
        t = self.theme
        return f"""
        body {{
          font-family: -apple-system, BlinkMacSystemFont, "Segoe UI", Roboto, Arial, sans-serif;
          margin: 10px;
          color: {t.text};
          background: {t.panel};
          font-size: 13px;
        }}
        .timeline {{
          position: relative;
          height: {TIMELINE_BODY_HEIGHT + TIMELINE_EDGE_PADDING * 2:.0f}px;
        }}
        .hour {{
          position: absolute;
          left: 0;
          width: 100%;
          border-top: 1px solid {t.border};
          color: {t.muted};
          font-size: 11px;
        }}
        .events {{
          position: absolute;
          top: {TIMELINE_EDGE_PADDING}px;
          left: {TIMELINE_LABEL_GUTTER}px;
          right: 0;
          height: {TIMELINE_BODY_HEIGHT:.0f}px;
        }}
        .block {{
          position: absolute;
          overflow: hidden;
          background: {t.block};
          border-left: 3px solid {t.block_edge};
          border-radius: 6px;
          padding: 2px 6px;
          font-size: 12px;
        }}
        .block.compact {{ font-size: 10px; padding: 0 4px; }}
        .block .meta {{ color: {t.muted}; }}
        .empty {{ color: {t.muted}; margin: 0 0 8px; }}
        table {{ border-collapse: collapse; width: 100%; }}
        th, td {{ border: 1px solid {t.border}; padding: 6px 8px; text-align: left; }}
        th {{ background: #F9FAFB; }}
        """

    # ---------- timeline ----------
    def timeline_body(self, layout: TimelineLayout) -> str:
        parts: List[str] = []
        if not layout.logs:
            parts.append(f'<p class="empty">{html.escape(EMPTY_TIMELINE_TEXT)}</p>')

        parts.append('<div class="timeline" id="timeline-grid">')
        for hour in range(25):
            top = TIMELINE_EDGE_PADDING + hour * 60 * PIXELS_PER_MINUTE
            parts.append(f'<div class="hour" style="top: {top:.1f}px">{hour:02d}:00</div>')

        parts.append('<div class="events" id="timeline-events">')
        for block in layout_blocks(layout):
            log = block.lane_log.log
            time_range = f"{to_local_hm(log.started_at)}~{to_local_hm(log.ended_at)}"
            label = html.escape(f"{log.task}, {time_range}")
            cls = "block compact" if block.compact else "block"
            style = (
                f"top: {block.top_px:.1f}px; height: {block.height_px:.1f}px; "
                f"left: {block.left_fraction * 100:.2f}%; "
                f"width: {block.width_fraction * 100 - 1:.2f}%"
            )
            parts.append(f'<div class="{cls}" style="{style}" title="{label}">')
            parts.append(f'<div class="task">{label}</div>')
            if not block.compact:
                parts.append(
                    f'<div class="meta">planned {log.planned_minutes} min / '
                    f"actual {format_remaining(log.actual_seconds)}</div>"
                )
            parts.append("</div>")
        parts.append("</div></div>")
        return "\n".join(parts)

    # ---------- history ----------
    def history_markdown(self, logs: List[TimeLog]) -> str:
        if not logs:
            return ""
        rows = [
            "| Task | Start | End | Planned | Actual |",
            "|---|---|---|---|---|",
        ]
        # newest first
        for log in reversed(logs):
            task = html.escape(log.task).replace("|", "\\|")
            rows.append(
                f"| {task} | {to_local_datetime(log.started_at)} | "
                f"{to_local_datetime(log.ended_at)} | {log.planned_minutes} min | "
                f"{format_remaining(log.actual_seconds)} |"
            )
        return "\n".join(rows)

    def history_body(self, logs: List[TimeLog]) -> str:
        md_text = self.history_markdown(logs)
        if not md_text:
            return ""
        return markdown(md_text, extensions=["tables"], output_format="html5")

    # ---------- render ----------
    def to_html(self, layout: TimelineLayout, history: Optional[List[TimeLog]] = None) -> str:
        body = self.timeline_body(layout)
        if history:
            body += "<h3>History</h3>" + self.history_body(history)
        return f"""
        <html>
          <head>
            <meta charset="utf-8"/>
            <style>{self.css()}</style>
          </head>
          <body>{body}</body>
        </html>
        """
