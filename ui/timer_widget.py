# -*- coding: utf-8 -*-

import tkinter as tk
from tkinter import ttk
from typing import Callable

from core.clock import calc_hour_cap_ratio, calc_minute_hand_angle, calc_red_ratio, format_remaining
from core.timer_engine import BREAK, DONE, IDLE, PAUSED, RUNNING, EngineSnapshot
from services.timer_service import TimerService

RECONCILE_MS = 250

STATUS_TEXT = {
    IDLE: "Ready",
    RUNNING: "Running...",
    PAUSED: "Paused",
    DONE: "Done",
}


class TimerWidget(ttk.Frame):
    def __init__(
        self,
        master,
        timer_service: TimerService,
        get_task: Callable[[], str],
        on_request_refresh: Callable[[], None],
    ):
        super().__init__(master)

        self.timer_service = timer_service
        self.get_task = get_task
        self.on_request_refresh = on_request_refresh

        self._tick_job = None

        self._build_ui()

        # wire callbacks from service -> widget UI
        self.timer_service.set_on_tick(self._on_tick)
        self.timer_service.set_on_state_change(self._on_state_change)

        # initial render
        self._render(self.timer_service.get_snapshot())
        self._update_buttons()

    def _build_ui(self):
        self.columnconfigure(0, weight=1)

        self.mode_var = tk.StringVar(value="Work")
        self.time_var = tk.StringVar(value="25:00")
        self.info_var = tk.StringVar(value="Ready")

        self.mode_label = ttk.Label(self, textvariable=self.mode_var)
        self.mode_label.grid(row=0, column=0, sticky="w")

        self.dial = tk.Canvas(self, width=140, height=140, highlightthickness=0)
        self.dial.grid(row=1, column=0, sticky="w", pady=(6, 0))

        self.time_label = ttk.Label(
            self, textvariable=self.time_var, font=("Sans", 32, "bold")
        )
        self.time_label.grid(row=2, column=0, sticky="w", pady=(8, 4))

        self.info_label = ttk.Label(self, textvariable=self.info_var)
        self.info_label.grid(row=3, column=0, sticky="w", pady=(0, 10))

        btns = ttk.Frame(self)
        btns.grid(row=4, column=0, sticky="w")

        self.start_btn = ttk.Button(btns, text="Start", command=self._start)
        self.pause_btn = ttk.Button(btns, text="Pause", command=self._pause)
        self.resume_btn = ttk.Button(btns, text="Resume", command=self._resume)
        self.complete_btn = ttk.Button(btns, text="Complete", command=self._complete)
        self.break_btn = ttk.Button(btns, text="Take break", command=self._start_break)
        self.skip_btn = ttk.Button(btns, text="Skip break", command=self._skip_break)
        self.reset_btn = ttk.Button(btns, text="Reset", command=self._reset)

        self._buttons = [
            self.start_btn,
            self.pause_btn,
            self.resume_btn,
            self.complete_btn,
            self.break_btn,
            self.skip_btn,
            self.reset_btn,
        ]

    def _update_buttons(self):
        snap = self.timer_service.get_snapshot()
        in_break = snap.mode == BREAK
        idle_like = snap.status in (IDLE, DONE)

        visible = []
        if idle_like and not in_break:
            visible.append(self.start_btn)
            if snap.break_suggestion_sec > 0:
                visible.append(self.break_btn)
        if snap.status == RUNNING:
            visible.append(self.pause_btn)
        if snap.status == PAUSED:
            visible.append(self.resume_btn)
        if not in_break and snap.status in (RUNNING, PAUSED):
            visible.append(self.complete_btn)
        if in_break:
            visible.append(self.skip_btn)
        if not in_break:
            visible.append(self.reset_btn)

        for btn in self._buttons:
            btn.grid_forget()
        for col, btn in enumerate(visible):
            btn.grid(row=0, column=col, padx=(0, 6))

        if snap.planned_minutes <= 0:
            self.start_btn.state(["disabled"])
        else:
            self.start_btn.state(["!disabled"])

    def _start(self):
        self.timer_service.start(self.get_task())
        self._ensure_tick_loop()
        self.on_request_refresh()

    def _pause(self):
        self.timer_service.pause()
        self._stop_tick_loop()

    def _resume(self):
        self.timer_service.resume()
        self._ensure_tick_loop()

    def _complete(self):
        self.timer_service.complete()
        self._stop_tick_loop()
        self.on_request_refresh()

    def _start_break(self):
        self.timer_service.start_break()
        self._ensure_tick_loop()

    def _skip_break(self):
        self.timer_service.skip_break()
        self._stop_tick_loop()

    def _reset(self):
        self.timer_service.reset()
        self._stop_tick_loop()
        self.on_request_refresh()

    # ---- Tick loop (UI-driven) ----
    def _ensure_tick_loop(self):
        if self._tick_job is None and self.timer_service.get_snapshot().is_running:
            self._tick_job = self.after(RECONCILE_MS, self._tick_once)

    def _stop_tick_loop(self):
        if self._tick_job is not None:
            self.after_cancel(self._tick_job)
            self._tick_job = None

    def _tick_once(self):
        self._tick_job = None
        self.timer_service.tick()
        if self.timer_service.get_snapshot().is_running:
            # schedule next tick
            self._tick_job = self.after(RECONCILE_MS, self._tick_once)

    # ---- Service callbacks ----
    def _on_tick(self, snap: EngineSnapshot):
        self._render(snap)

    def _on_state_change(self, snap: EngineSnapshot):
        self._render(snap)
        self._update_buttons()
        if not snap.is_running:
            self._stop_tick_loop()
        self.on_request_refresh()

    def _render(self, snap: EngineSnapshot):
        self.time_var.set(format_remaining(snap.remaining_sec))
        self.mode_var.set("Break" if snap.mode == BREAK else "Work")

        info = STATUS_TEXT.get(snap.status, "")
        if snap.task and snap.status in (RUNNING, PAUSED):
            info = f"{info} {snap.task}"
        if snap.status == DONE and snap.break_suggestion_sec > 0:
            info = f"Done. Suggested break {format_remaining(snap.break_suggestion_sec)}"
        self.info_var.set(info)
        self._draw_dial(snap)

    def _draw_dial(self, snap: EngineSnapshot):
        c = self.dial
        c.delete("all")
        pad = 6
        size = int(c.cget("width"))
        remaining_sec = snap.remaining_sec
        c.create_oval(pad, pad, size - pad, size - pad, outline="#D1D5DB", width=2)

        angle = calc_minute_hand_angle(remaining_sec)
        # red sector fills the whole face above one hour
        extent = 359.9 if remaining_sec > 60 * 60 else angle
        if extent > 0:
            c.create_arc(
                pad, pad, size - pad, size - pad,
                start=90, extent=-extent, fill="#EF4444", outline="",
            )

        # outer ring: share of the session still left
        session_ratio = calc_red_ratio(remaining_sec, snap.total_sec)
        if session_ratio > 0:
            c.create_arc(
                2, 2, size - 2, size - 2,
                start=90, extent=-359.9 * session_ratio, style="arc", outline="#B91C1C", width=3,
            )

        # hub: how much of a full hour is left
        cap = calc_hour_cap_ratio(remaining_sec)
        hub = size / 2
        r = 10
        c.create_oval(hub - r, hub - r, hub + r, hub + r, fill="#FFFFFF", outline="#9CA3AF")
        if cap > 0:
            c.create_arc(
                hub - r, hub - r, hub + r, hub + r,
                start=90, extent=-359.9 * cap, fill="#374151", outline="",
            )
