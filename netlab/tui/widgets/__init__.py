"""TUI widget components."""

from __future__ import annotations

from netlab.tui.widgets.action_bar import ActionBar
from netlab.tui.widgets.lab_progress import LabProgress, render_bar

__all__ = [
    "ActionBar",
    "LabProgress",
    "render_bar",
]
