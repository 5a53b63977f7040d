# -*- coding: utf-8 -*-

import datetime as dt
import tkinter as tk
from tkinter import ttk
from typing import Callable

from core.clock import local_datetime, parse_iso
from domain.models import TimeLog
from services.log_service import LogService

INPUT_FMT = "%Y-%m-%d %H:%M"


def _to_input(iso: str) -> str:
    ts = parse_iso(iso)
    d = local_datetime(ts) if ts is not None else None
    if d is None:
        return ""
    return d.strftime(INPUT_FMT)


def _from_input(text: str) -> str:
    # local wall time -> ISO understood by parse_iso; ValueError on bad input
    return dt.datetime.strptime(text.strip(), INPUT_FMT).isoformat()


class LogEditDialog(tk.Toplevel):
    """
    Edit one log. Only the fields the user touched drive the recompute:
    a new start or end keeps the other end in place, a new duration moves the end.
    Nothing is saved when any field is invalid.
    """

    def __init__(self, master, log_service: LogService, item: TimeLog, on_saved: Callable[[], None]):
        super().__init__(master)
        self.title("Edit session")
        self.resizable(False, False)
        self.transient(master)

        self.log_service = log_service
        self.item = item
        self.on_saved = on_saved

        self.task_var = tk.StringVar(value=item.task)
        self.start_var = tk.StringVar(value=_to_input(item.started_at))
        self.end_var = tk.StringVar(value=_to_input(item.ended_at))
        self.duration_var = tk.StringVar(value=str(max(1, round(item.actual_seconds / 60))))
        self.err_var = tk.StringVar(value="")

        self._build_ui()

    def _build_ui(self):
        body = ttk.Frame(self, padding=10)
        body.pack(fill="both", expand=True)

        rows = [
            ("Task", self.task_var),
            ("Start (YYYY-MM-DD HH:MM)", self.start_var),
            ("End (YYYY-MM-DD HH:MM)", self.end_var),
            ("Duration (min)", self.duration_var),
        ]
        for i, (label, var) in enumerate(rows):
            ttk.Label(body, text=label).grid(row=i, column=0, sticky="w", pady=2)
            ttk.Entry(body, textvariable=var, width=24).grid(row=i, column=1, sticky="ew", pady=2)

        ttk.Label(body, textvariable=self.err_var, foreground="red").grid(
            row=len(rows), column=0, columnspan=2, sticky="w", pady=(6, 0)
        )

        btns = ttk.Frame(body)
        btns.grid(row=len(rows) + 1, column=0, columnspan=2, sticky="e", pady=(8, 0))
        ttk.Button(btns, text="Cancel", command=self.destroy).pack(side="right")
        ttk.Button(btns, text="Save", command=self._save).pack(side="right", padx=(0, 6))

    def _save(self):
        start_text = self.start_var.get().strip()
        end_text = self.end_var.get().strip()
        duration_text = self.duration_var.get().strip()
        try:
            started_at = None
            ended_at = None
            minutes = None
            if start_text != _to_input(self.item.started_at):
                started_at = _from_input(start_text)
            if end_text != _to_input(self.item.ended_at):
                ended_at = _from_input(end_text)
            elif duration_text != str(max(1, round(self.item.actual_seconds / 60))):
                minutes = duration_text

            self.log_service.update(
                self.item.id,
                task=self.task_var.get(),
                started_at=started_at,
                ended_at=ended_at,
                minutes=minutes,
            )
        except ValueError as e:
            self.err_var.set(str(e))
            return

        self.on_saved()
        self.destroy()
