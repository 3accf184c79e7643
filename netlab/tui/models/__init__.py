"""UI-agnostic state for the TUI.

This module provides testable state classes that can be used without
Textual dependencies: the per-screen states the app moves between, and
the pane geometry derived from the terminal size.
"""

from netlab.tui.models.layout import (
    MIN_HEIGHT,
    MIN_WIDTH,
    PaneLayout,
    compute_layout,
    too_small_message,
)
from netlab.tui.models.screen_state import (
    ContentExplorerState,
    DependencyGateState,
    GateAction,
    MenuState,
    MnemonicOverlayState,
    ProcessWorkflowState,
    ScreenState,
    WorkflowAction,
    WorkflowView,
    status_row,
)

__all__ = [
    "MIN_HEIGHT",
    "MIN_WIDTH",
    "PaneLayout",
    "compute_layout",
    "too_small_message",
    "ContentExplorerState",
    "DependencyGateState",
    "GateAction",
    "MenuState",
    "MnemonicOverlayState",
    "ProcessWorkflowState",
    "ScreenState",
    "WorkflowAction",
    "WorkflowView",
    "status_row",
]
