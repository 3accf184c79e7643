"""NetLab: interactive networking labs in the terminal.

Usage:
    netlab start                # Module menu
    netlab module 01-osi-model  # Open one module directly
    netlab doctor               # Check lab tooling
"""

from __future__ import annotations

__version__ = "0.1.0"

__all__ = [
    "NetLabApp",
    "DependencyVerifier",
    "LabOrchestrator",
]


def __getattr__(name: str):
    """Lazy import so the CLI can run doctor without loading Textual."""
    if name == "NetLabApp":
        from netlab.tui.app import NetLabApp
        return NetLabApp
    if name == "DependencyVerifier":
        from netlab.lib.dependencies import DependencyVerifier
        return DependencyVerifier
    if name == "LabOrchestrator":
        from netlab.lib.orchestrator import LabOrchestrator
        return LabOrchestrator
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
