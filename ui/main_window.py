# -*- coding: utf-8 -*-

import tkinter as tk
from tkinter import messagebox, ttk
from typing import Dict, List, Optional

from tkinterweb import HtmlFrame

from core.clock import countdown_title, format_wall_clock, local_today_key, to_local_datetime
from core.timer_engine import MAX_MINUTES, MIN_MINUTES, EngineSnapshot
from domain.models import TimeLog
from services.log_service import LogService
from services.stats_service import StatsService
from services.timer_service import TimerService
from storage.repos import MAX_SOUND_VOLUME, MIN_SOUND_VOLUME, SOUND_TYPES
from ui.log_edit_dialog import LogEditDialog
from ui.timeline_renderer import TimelineRenderer
from ui.timer_widget import TimerWidget

APP_TITLE = "Focus Timeline"
CLOCK_MS = 1000


def _fmt_hms(sec: int) -> str:
    sec = max(0, int(sec))
    h = sec // 3600
    m = (sec % 3600) // 60
    s = sec % 60
    if h > 0:
        return f"{h}h {m:02d}m"
    return f"{m}m {s:02d}s"


class MainWindow:
    def __init__(
        self,
        timer_service: TimerService,
        log_service: LogService,
        stats_service: StatsService,
    ):
        self.timer_service = timer_service
        self.log_service = log_service
        self.stats_service = stats_service
        self.renderer = TimelineRenderer()

        self.root = tk.Tk()
        self.root.title(APP_TITLE)
        self.root.geometry("1100x720")

        self._list_index_to_log_id: Dict[int, str] = {}

        self._build_ui()
        self.timer_service.set_on_logs_changed(self._on_logs_changed)
        self._refresh_all()
        self._clock_loop()

    def _build_ui(self):
        root = self.root

        outer = ttk.Frame(root, padding=10)
        outer.pack(fill="both", expand=True)
        outer.columnconfigure(0, weight=1)
        outer.columnconfigure(1, weight=2)
        outer.rowconfigure(0, weight=1)

        # LEFT: clock + settings + timer
        left = ttk.Frame(outer)
        left.grid(row=0, column=0, sticky="nsew", padx=(0, 10))
        left.columnconfigure(0, weight=1)

        self.clock_var = tk.StringVar(value=format_wall_clock())
        ttk.Label(left, textvariable=self.clock_var, font=("Sans", 14)).grid(
            row=0, column=0, sticky="w"
        )

        settings = ttk.Labelframe(left, text="Session", padding=10)
        settings.grid(row=1, column=0, sticky="ew", pady=(8, 8))

        ttk.Label(settings, text="Minutes").grid(row=0, column=0, sticky="w")
        self.minutes_var = tk.StringVar(value=str(self.timer_service.get_snapshot().planned_minutes))
        self.minutes_spin = ttk.Spinbox(
            settings,
            from_=MIN_MINUTES,
            to=MAX_MINUTES,
            increment=1,
            width=6,
            textvariable=self.minutes_var,
            command=self._apply_minutes,
        )
        self.minutes_spin.grid(row=0, column=1, sticky="w", padx=(6, 6))
        self.minutes_spin.bind("<Return>", lambda e: self._apply_minutes())
        self.minutes_spin.bind("<FocusOut>", lambda e: self._apply_minutes())

        self._step_btns: List[ttk.Button] = []
        for col, delta in enumerate((-10, -5, 5, 10), start=2):
            btn = ttk.Button(
                settings,
                text=f"{delta:+d}",
                width=4,
                command=lambda d=delta: self._step_minutes(d),
            )
            btn.grid(row=0, column=col, padx=(0, 2))
            self._step_btns.append(btn)

        ttk.Label(settings, text="Task").grid(row=1, column=0, sticky="w", pady=(6, 0))
        self.task_var = tk.StringVar()
        self.task_entry = ttk.Entry(settings, textvariable=self.task_var)
        self.task_entry.grid(row=1, column=1, columnspan=5, sticky="ew", pady=(6, 0))

        ttk.Label(settings, text="Sound").grid(row=2, column=0, sticky="w", pady=(6, 0))
        self.sound_type_var = tk.StringVar(value=self.timer_service.settings.sound_type)
        sound_box = ttk.Combobox(
            settings,
            textvariable=self.sound_type_var,
            values=SOUND_TYPES,
            state="readonly",
            width=8,
        )
        sound_box.grid(row=2, column=1, sticky="w", pady=(6, 0))
        sound_box.bind("<<ComboboxSelected>>", lambda e: self._apply_sound_type())

        self.volume_var = tk.IntVar(value=self.timer_service.settings.sound_volume)
        self.volume_label_var = tk.StringVar(value=f"Volume ({self.volume_var.get()}%)")
        ttk.Label(settings, textvariable=self.volume_label_var).grid(
            row=3, column=0, sticky="w", pady=(6, 0)
        )
        ttk.Scale(
            settings,
            from_=MIN_SOUND_VOLUME,
            to=MAX_SOUND_VOLUME,
            variable=self.volume_var,
            command=lambda v: self._apply_volume(),
        ).grid(row=3, column=1, columnspan=3, sticky="ew", pady=(6, 0))
        ttk.Button(settings, text="Test sound", command=self.timer_service.test_sound).grid(
            row=3, column=4, columnspan=2, sticky="e", pady=(6, 0)
        )

        self.timer_widget = TimerWidget(
            left,
            timer_service=self.timer_service,
            get_task=self.task_var.get,
            on_request_refresh=self._on_timer_refresh,
        )
        self.timer_widget.grid(row=2, column=0, sticky="ew")

        self.stats_var = tk.StringVar(value="")
        ttk.Label(left, textvariable=self.stats_var).grid(row=3, column=0, sticky="w", pady=(10, 0))

        # history list + actions
        hist = ttk.Labelframe(left, text="History", padding=10)
        hist.grid(row=4, column=0, sticky="nsew", pady=(10, 0))
        left.rowconfigure(4, weight=1)
        hist.columnconfigure(0, weight=1)
        hist.rowconfigure(0, weight=1)

        self.log_list = tk.Listbox(hist, height=8)
        self.log_list.grid(row=0, column=0, sticky="nsew")

        actions = ttk.Frame(hist)
        actions.grid(row=1, column=0, sticky="ew", pady=(6, 0))
        ttk.Button(actions, text="Edit", command=self._edit_selected).pack(side="left")
        ttk.Button(actions, text="Delete", command=self._delete_selected).pack(side="left", padx=(6, 0))

        self.err_var = tk.StringVar(value="")
        ttk.Label(hist, textvariable=self.err_var, foreground="red").grid(row=2, column=0, sticky="w")

        # RIGHT: today's timeline
        right = ttk.Labelframe(outer, text="Today", padding=6)
        right.grid(row=0, column=1, sticky="nsew")
        right.columnconfigure(0, weight=1)
        right.rowconfigure(0, weight=1)

        self.timeline_view = HtmlFrame(right, horizontal_scrollbar="auto")
        self.timeline_view.grid(row=0, column=0, sticky="nsew")

    def run(self):
        self.root.mainloop()

    # ----- loops -----
    def _clock_loop(self):
        self.clock_var.set(format_wall_clock())
        snap = self.timer_service.get_snapshot()
        self.root.title(countdown_title(snap.mode, snap.status, snap.remaining_sec) or APP_TITLE)
        self.root.after(CLOCK_MS, self._clock_loop)

    # ----- settings -----
    def _apply_minutes(self):
        self.timer_service.configure(self.minutes_var.get())
        # clamped / rejected value is written back
        self.minutes_var.set(str(self.timer_service.get_snapshot().planned_minutes))

    def _step_minutes(self, delta: int):
        current = self.timer_service.get_snapshot().planned_minutes
        self.timer_service.configure(current + delta)
        self.minutes_var.set(str(self.timer_service.get_snapshot().planned_minutes))

    def _apply_sound_type(self):
        self.timer_service.set_sound_type(self.sound_type_var.get())

    def _apply_volume(self):
        volume = self.timer_service.set_sound_volume(self.volume_var.get())
        self.volume_label_var.set(f"Volume ({volume}%)")

    # ----- history actions -----
    def _selected_log_id(self) -> Optional[str]:
        sel = self.log_list.curselection()
        if not sel:
            return None
        return self._list_index_to_log_id.get(int(sel[0]))

    def _edit_selected(self):
        log_id = self._selected_log_id()
        item = self.log_service.get_log(log_id) if log_id else None
        if item is None:
            self.err_var.set("Pick a session first.")
            return
        self.err_var.set("")
        LogEditDialog(self.root, self.log_service, item, on_saved=self._refresh_all)

    def _delete_selected(self):
        log_id = self._selected_log_id()
        if not log_id:
            self.err_var.set("Pick a session first.")
            return
        if not messagebox.askyesno(APP_TITLE, "Delete this session?"):
            return
        try:
            self.log_service.delete(log_id)
            self.err_var.set("")
        except ValueError as e:
            self.err_var.set(str(e))

    # ----- refresh -----
    def _on_logs_changed(self, logs: List[TimeLog]):
        self._refresh_all()

    def _on_timer_refresh(self):
        snap = self.timer_service.get_snapshot()
        self._refresh_controls(snap)
        self._refresh_stats_only()

    def _refresh_all(self):
        self._on_timer_refresh()
        self._refresh_history()
        self._refresh_timeline()

    def _refresh_controls(self, snap: EngineSnapshot):
        state = ["!disabled"] if snap.can_configure else ["disabled"]
        self.minutes_spin.state(state)
        for btn in self._step_btns:
            btn.state(state)
        self.task_entry.state(["!disabled"] if snap.mode == "work" else ["disabled"])

        title = countdown_title(snap.mode, snap.status, snap.remaining_sec)
        self.root.title(title or APP_TITLE)

    def _refresh_stats_only(self):
        today = self.stats_service.summary()
        self.stats_var.set(
            f"Today: {today['sessions']} sessions, {_fmt_hms(today['total_sec'])}"
        )

    def _refresh_history(self):
        logs = self.log_service.list_logs()
        self.log_list.delete(0, tk.END)
        self._list_index_to_log_id.clear()
        for i, item in enumerate(reversed(logs)):
            label = f"{to_local_datetime(item.started_at)}  {item.task}  ({_fmt_hms(item.actual_seconds)})"
            self.log_list.insert(tk.END, label)
            self._list_index_to_log_id[i] = item.id

    def _refresh_timeline(self):
        layout = self.log_service.today_timeline()
        history = self.log_service.logs_for_day(local_today_key())
        self.timeline_view.load_html(self.renderer.to_html(layout, history))
