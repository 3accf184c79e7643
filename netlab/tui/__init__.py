"""Textual interface for NetLab.

Usage:
    python -m netlab.tui                 # Module menu
    python -m netlab.tui 01-osi-model    # Open one module
"""

from __future__ import annotations

__all__ = [
    "NetLabApp",
    "NetLabSettings",
]


def __getattr__(name: str):
    """Lazy import of TUI components."""
    if name == "NetLabApp":
        from netlab.tui.app import NetLabApp
        return NetLabApp
    if name == "NetLabSettings":
        from netlab.tui.settings import NetLabSettings
        return NetLabSettings
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
