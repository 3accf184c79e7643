"""Tests for netlab/tui/models/screen_state.py - per-screen state."""

from __future__ import annotations

from netlab.content import SAMPLE_PACKET_LAYERS
from netlab.lib.dependencies import ToolState, ToolStatus
from netlab.lib.orchestrator import OutputEvent, WorkflowMode, WorkflowPhase, WorkflowRun
from netlab.lib.patterns import ErrorCategory, ErrorReport
from netlab.tui.models import (
    ContentExplorerState,
    DependencyGateState,
    GateAction,
    MenuState,
    ProcessWorkflowState,
    WorkflowAction,
    WorkflowView,
    status_row,
)

OK = ToolStatus(name="Docker", state=ToolState.SATISFIED, raw_output="Docker version 24")
MISSING = ToolStatus(name="kind", state=ToolState.MISSING)
BROKEN = ToolStatus(name="tshark", state=ToolState.PROBE_ERROR)


def _finished_run(mode: WorkflowMode, success: bool) -> WorkflowRun:
    run = WorkflowRun(mode=mode, phase=WorkflowPhase.STREAMING)
    run.apply(OutputEvent.line_event("working"))
    error = None if success else ErrorReport(ErrorCategory.GENERIC, "❌ failed", "retry")
    run.apply(OutputEvent.finished(success=success, error=error, exit_code=0 if success else 1))
    return run


class TestMenuState:
    """Tests for the module menu."""

    def test_move_is_clamped(self) -> None:
        """Selection stays within the module list."""
        state = MenuState()
        state.move(-1)
        assert state.selected == 0
        state.move(100)
        assert state.selected == len(state.modules) - 1
        assert state.selected_module.id == "07-service-mesh"


class TestStatusRow:
    """Tests for gate row text."""

    def test_rows(self) -> None:
        """Each probe outcome has its own row text."""
        assert status_row(OK) == "✓ Docker"
        assert status_row(MISSING) == "✗ kind - Not found"
        assert status_row(BROKEN) == "✗ tshark - Error"


class TestDependencyGateState:
    """Tests for the dependency gate."""

    def test_all_satisfied_actions(self) -> None:
        """No install guide is offered when nothing is missing."""
        state = DependencyGateState(module_id="01-osi-model")
        state.update([OK], True)
        assert state.actions == [GateAction.CONTINUE, GateAction.RECHECK]
        assert state.summary == "All dependencies satisfied!"

    def test_missing_actions(self) -> None:
        """Missing tools add the install guide; Continue stays available."""
        state = DependencyGateState(module_id="01-osi-model")
        state.update([OK, MISSING, BROKEN], False)
        assert state.actions == [GateAction.CONTINUE, GateAction.GUIDE, GateAction.RECHECK]
        assert state.missing_count == 2
        assert state.unsatisfied == [MISSING, BROKEN]
        assert state.summary == "Missing 2 dependencies"

    def test_focus_moves_and_clamps(self) -> None:
        """Focus walks the action row without leaving it."""
        state = DependencyGateState(module_id="m")
        state.update([MISSING], False)
        state.move_focus(1)
        assert state.focused_action is GateAction.GUIDE
        state.move_focus(5)
        assert state.focused_action is GateAction.RECHECK
        state.move_focus(-9)
        assert state.focused_action is GateAction.CONTINUE

    def test_recheck_resets_focus(self) -> None:
        """A fresh probe result returns focus to Continue."""
        state = DependencyGateState(module_id="m")
        state.update([MISSING], False)
        state.move_focus(2)
        state.update([OK], True)
        assert state.focused == 0
        assert state.focused_action is GateAction.CONTINUE

    def test_focus_survives_shrinking_actions(self) -> None:
        """The focused action stays valid if the guide disappears."""
        state = DependencyGateState(module_id="m")
        state.update([MISSING], False)
        state.focused = 2
        state.all_satisfied = True
        assert state.focused_action is GateAction.RECHECK


class TestContentExplorerState:
    """Tests for topic selection."""

    def test_new_selection_resets_scroll(self) -> None:
        """Selecting another topic scrolls the detail pane to the top."""
        state = ContentExplorerState(module_id="01-osi-model", topic_count=7, scroll_offset=12)
        assert state.select(3) is True
        assert state.selected == 3
        assert state.scroll_offset == 0

    def test_same_selection_keeps_scroll(self) -> None:
        """Re-selecting the current topic changes nothing."""
        state = ContentExplorerState(module_id="01-osi-model", topic_count=7, selected=2, scroll_offset=5)
        assert state.select(2) is False
        assert state.scroll_offset == 5

    def test_move_is_clamped(self) -> None:
        """Moving past either end stays on the edge topic."""
        state = ContentExplorerState(module_id="01-osi-model", topic_count=7)
        assert state.move(-1) is False
        state.move(10)
        assert state.selected == 6


class TestProcessWorkflowState:
    """Tests for the lab screen's views and actions."""

    def test_instructions_before_any_run(self) -> None:
        """A fresh lab screen shows instructions and the launch actions."""
        state = ProcessWorkflowState(module_id="01-osi-model")
        assert state.view is WorkflowView.INSTRUCTIONS
        assert state.available_actions == [
            WorkflowAction.SETUP,
            WorkflowAction.CLEANUP,
            WorkflowAction.CAPTURE,
        ]

    def test_streaming_disables_launches(self) -> None:
        """No launch is available while the script runs."""
        state = ProcessWorkflowState(module_id="m")
        state.start_run(WorkflowRun(mode=WorkflowMode.SETUP, phase=WorkflowPhase.STREAMING))
        assert state.view is WorkflowView.STREAMING
        assert state.available_actions == []
        assert not state.can(WorkflowAction.SETUP)

    def test_export_while_streaming(self) -> None:
        """Output received so far can be exported before the run ends."""
        state = ProcessWorkflowState(module_id="m")
        state.start_run(
            WorkflowRun(
                mode=WorkflowMode.SETUP,
                phase=WorkflowPhase.STREAMING,
                output_log=["Checking prerequisites..."],
            )
        )
        state.set_layers(list(SAMPLE_PACKET_LAYERS))
        assert state.available_actions == [WorkflowAction.EXPORT]
        assert not state.can(WorkflowAction.CAPTURE)
        assert not state.can(WorkflowAction.NAVIGATE)

    def test_failed_run_shows_summary_and_export(self) -> None:
        """A failed run ends on the summary with export available."""
        state = ProcessWorkflowState(module_id="m")
        state.start_run(_finished_run(WorkflowMode.SETUP, success=False))
        assert state.view is WorkflowView.SUMMARY
        assert state.can(WorkflowAction.EXPORT)
        assert not state.can(WorkflowAction.NAVIGATE)

    def test_successful_setup_with_layers_walks_through(self) -> None:
        """A successful setup with layers goes straight to the walkthrough."""
        state = ProcessWorkflowState(module_id="m")
        state.start_run(_finished_run(WorkflowMode.SETUP, success=True))
        state.set_layers(list(SAMPLE_PACKET_LAYERS))
        assert state.view is WorkflowView.WALKTHROUGH
        assert state.current_layer == SAMPLE_PACKET_LAYERS[0]
        assert state.can(WorkflowAction.NAVIGATE)

    def test_cleanup_summary_then_walkthrough(self) -> None:
        """After cleanup the summary shows first; navigating dismisses it."""
        state = ProcessWorkflowState(module_id="m")
        state.set_layers(list(SAMPLE_PACKET_LAYERS))
        state.start_run(_finished_run(WorkflowMode.CLEANUP, success=True))
        assert state.view is WorkflowView.SUMMARY
        assert state.step_layer(1) is True
        assert state.view is WorkflowView.WALKTHROUGH
        assert state.layer_index == 0

    def test_step_layer_clamps(self) -> None:
        """Stepping stops at both ends of the walkthrough."""
        state = ProcessWorkflowState(module_id="m")
        state.set_layers(list(SAMPLE_PACKET_LAYERS))
        assert state.step_layer(-1) is False
        for _ in range(10):
            state.step_layer(1)
        assert state.layer_index == len(SAMPLE_PACKET_LAYERS) - 1

    def test_step_without_layers(self) -> None:
        """Nothing to step through without layers."""
        assert ProcessWorkflowState(module_id="m").step_layer(1) is False

    def test_start_run_clears_notice(self) -> None:
        """A new run clears the previous export notice."""
        state = ProcessWorkflowState(module_id="m", notice="✅ Logs exported", summary_dismissed=True)
        state.start_run(WorkflowRun(mode=WorkflowMode.CAPTURE, phase=WorkflowPhase.STREAMING))
        assert state.notice == ""
        assert state.summary_dismissed is False
