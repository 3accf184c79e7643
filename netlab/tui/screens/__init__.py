"""TUI screen components."""

from __future__ import annotations

from netlab.tui.screens.base import NetLabScreen
from netlab.tui.screens.menu import MenuScreen
from netlab.tui.screens.dependency_gate import DependencyGateScreen, RemediationGuideScreen
from netlab.tui.screens.explorer import LAB_ADVANCE, ContentExplorerScreen
from netlab.tui.screens.mnemonic import MnemonicScreen
from netlab.tui.screens.workflow import ProcessWorkflowScreen

__all__ = [
    "LAB_ADVANCE",
    "NetLabScreen",
    "MenuScreen",
    "DependencyGateScreen",
    "RemediationGuideScreen",
    "ContentExplorerScreen",
    "MnemonicScreen",
    "ProcessWorkflowScreen",
]
