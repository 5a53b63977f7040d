# -*- coding: utf-8 -*-

import os
from pathlib import Path

APP_DIR_NAME = "FocusTimeline"
HOME_ENV = "FOCUS_TIMELINE_HOME"


def user_data_dir(app_name: str = APP_DIR_NAME) -> Path:
    """Per-user data dir (Windows/macOS/Linux), overridable via $FOCUS_TIMELINE_HOME."""
    override = os.environ.get(HOME_ENV)
    if override:
        path = Path(override)
    else:
        if os.name == "nt":
            base = os.environ.get("LOCALAPPDATA", os.path.expanduser("~\\AppData\\Local"))
        elif os.name == "posix":
            base = os.environ.get("XDG_DATA_HOME", os.path.expanduser("~/.local/share"))
        else:
            base = os.path.expanduser("~")
        path = Path(base) / app_name
    path.mkdir(parents=True, exist_ok=True)
    return path


def db_path() -> Path:
    return user_data_dir() / "focus_timeline.db"


def log_path() -> Path:
    return user_data_dir() / "focus_timeline.log"
