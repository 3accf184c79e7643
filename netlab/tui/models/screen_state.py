"""Per-screen state for the NetLab state machine.

Exactly one of these is the app's ``current_state`` at any time. Each
screen owns the instance it displays and hands it to the app when it
becomes active, so transitions replace the state rather than mutate a
shared one. None of these classes import Textual.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Union

from netlab.content import PacketLayer
from netlab.lib.dependencies import ToolState, ToolStatus
from netlab.lib.orchestrator import WorkflowMode, WorkflowRun
from netlab.tui.constants import MODULES, ModuleInfo
from netlab.tui.models.layout import PaneLayout


def _clamp(value: int, upper: int) -> int:
    return max(0, min(value, upper - 1)) if upper > 0 else 0


@dataclass
class MenuState:
    """Module list with the current selection."""

    modules: tuple[ModuleInfo, ...] = MODULES
    selected: int = 0
    layout: Optional[PaneLayout] = None

    def move(self, delta: int) -> None:
        self.selected = _clamp(self.selected + delta, len(self.modules))

    @property
    def selected_module(self) -> ModuleInfo:
        return self.modules[self.selected]


class GateAction(str, Enum):
    CONTINUE = "continue"
    GUIDE = "guide"
    RECHECK = "recheck"


GATE_ACTION_LABELS = {
    GateAction.CONTINUE: "Continue",
    GateAction.GUIDE: "Install Guide",
    GateAction.RECHECK: "Check Again",
}


def status_row(status: ToolStatus) -> str:
    """One gate row: "✓ kind", "✗ kind - Not found" or "✗ kind - Error"."""
    if status.state is ToolState.SATISFIED:
        return f"✓ {status.name}"
    if status.state is ToolState.MISSING:
        return f"✗ {status.name} - Not found"
    return f"✗ {status.name} - Error"


@dataclass
class DependencyGateState:
    """Result of probing a module's tools, plus the focused action."""

    module_id: str
    module_title: str = ""
    statuses: List[ToolStatus] = field(default_factory=list)
    all_satisfied: bool = True
    checked: bool = False
    focused: int = 0
    layout: Optional[PaneLayout] = None

    def update(self, statuses: List[ToolStatus], all_satisfied: bool) -> None:
        """Store a fresh probe result. Focus returns to the first action."""
        self.statuses = list(statuses)
        self.all_satisfied = all_satisfied
        self.checked = True
        self.focused = 0

    @property
    def actions(self) -> List[GateAction]:
        """Visible actions. The guide is only offered when something is unsatisfied."""
        if self.all_satisfied:
            return [GateAction.CONTINUE, GateAction.RECHECK]
        return [GateAction.CONTINUE, GateAction.GUIDE, GateAction.RECHECK]

    @property
    def focused_action(self) -> GateAction:
        return self.actions[_clamp(self.focused, len(self.actions))]

    def move_focus(self, delta: int) -> None:
        self.focused = _clamp(self.focused + delta, len(self.actions))

    @property
    def unsatisfied(self) -> List[ToolStatus]:
        return [status for status in self.statuses if not status.satisfied]

    @property
    def missing_count(self) -> int:
        return len(self.unsatisfied)

    @property
    def summary(self) -> str:
        if self.all_satisfied:
            return "All dependencies satisfied!"
        return f"Missing {self.missing_count} dependencies"


@dataclass
class ContentExplorerState:
    """Topic list selection and detail pane scroll position."""

    module_id: str
    topic_count: int
    selected: int = 0
    scroll_offset: int = 0
    layout: Optional[PaneLayout] = None

    def select(self, index: int) -> bool:
        """Select a topic. Returns True if the selection changed.

        A new selection regenerates the detail pane, so scrolling restarts
        at the top.
        """
        index = _clamp(index, self.topic_count)
        if index == self.selected:
            return False
        self.selected = index
        self.scroll_offset = 0
        return True

    def move(self, delta: int) -> bool:
        return self.select(self.selected + delta)


@dataclass
class MnemonicOverlayState:
    """Full-pane mnemonic view over an explorer it returns to unchanged."""

    explorer: ContentExplorerState
    layout: Optional[PaneLayout] = None


class WorkflowView(str, Enum):
    INSTRUCTIONS = "instructions"
    STREAMING = "streaming"
    SUMMARY = "summary"
    WALKTHROUGH = "walkthrough"


class WorkflowAction(str, Enum):
    SETUP = "setup"
    CLEANUP = "cleanup"
    CAPTURE = "capture"
    EXPORT = "export"
    NAVIGATE = "navigate"


LAUNCH_ACTIONS = {
    WorkflowAction.SETUP: WorkflowMode.SETUP,
    WorkflowAction.CLEANUP: WorkflowMode.CLEANUP,
    WorkflowAction.CAPTURE: WorkflowMode.CAPTURE,
}


@dataclass
class ProcessWorkflowState:
    """The lab screen: current run, loaded walkthrough layers, and position."""

    module_id: str
    run: Optional[WorkflowRun] = None
    layers: List[PacketLayer] = field(default_factory=list)
    layer_index: int = 0
    summary_dismissed: bool = False
    notice: str = ""
    layout: Optional[PaneLayout] = None

    @property
    def streaming(self) -> bool:
        return self.run is not None and self.run.streaming

    @property
    def has_output(self) -> bool:
        return self.run is not None and bool(self.run.output_log)

    @property
    def view(self) -> WorkflowView:
        run = self.run
        if run is not None and run.streaming:
            return WorkflowView.STREAMING
        if run is not None and run.finished and not self.summary_dismissed:
            if not run.succeeded or run.mode is WorkflowMode.CLEANUP or not self.layers:
                return WorkflowView.SUMMARY
        if self.layers:
            return WorkflowView.WALKTHROUGH
        if run is not None and run.finished:
            return WorkflowView.SUMMARY
        return WorkflowView.INSTRUCTIONS

    @property
    def available_actions(self) -> List[WorkflowAction]:
        actions: List[WorkflowAction] = []
        if not self.streaming:
            actions.extend(LAUNCH_ACTIONS)
        if self.has_output:
            actions.append(WorkflowAction.EXPORT)
        if self.layers and not self.streaming:
            actions.append(WorkflowAction.NAVIGATE)
        return actions

    def can(self, action: WorkflowAction) -> bool:
        return action in self.available_actions

    def start_run(self, run: WorkflowRun) -> None:
        self.run = run
        self.summary_dismissed = False
        self.notice = ""

    def set_layers(self, layers: List[PacketLayer]) -> None:
        self.layers = list(layers)
        self.layer_index = _clamp(self.layer_index, len(self.layers))

    def step_layer(self, delta: int) -> bool:
        """Move through the walkthrough. Returns True if anything changed."""
        if not self.layers:
            return False
        if self.view is not WorkflowView.WALKTHROUGH:
            self.summary_dismissed = True
            return True
        index = _clamp(self.layer_index + delta, len(self.layers))
        if index == self.layer_index:
            return False
        self.layer_index = index
        return True

    @property
    def current_layer(self) -> Optional[PacketLayer]:
        if not self.layers:
            return None
        return self.layers[self.layer_index]


ScreenState = Union[
    MenuState,
    DependencyGateState,
    ContentExplorerState,
    MnemonicOverlayState,
    ProcessWorkflowState,
]
