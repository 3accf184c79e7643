"""Lab workflow screen: run the lab script, watch it, then walk the packet."""

from __future__ import annotations

import logging
from typing import List, Optional

from rich.markup import escape
from textual.app import ComposeResult
from textual.containers import VerticalScroll
from textual.message import Message
from textual.widgets import Log, Static

from netlab.content import PacketLayer, layer_by_number
from netlab.lib.errors import ExportError
from netlab.lib.orchestrator import CLEANUP_WARNING, LabOrchestrator, WorkflowMode, WorkflowRun
from netlab.tui.models import ProcessWorkflowState, WorkflowAction, WorkflowView
from netlab.tui.models.screen_state import LAUNCH_ACTIONS
from netlab.tui.screens.base import NetLabScreen
from netlab.tui.theme import DEFAULT_PALETTE, Palette
from netlab.tui.widgets import LabProgress

logger = logging.getLogger(__name__)

LAUNCH_KEYS = {
    "run_setup": WorkflowAction.SETUP,
    "run_cleanup": WorkflowAction.CLEANUP,
    "run_capture": WorkflowAction.CAPTURE,
}


def render_instructions(palette: Palette, script: str) -> str:
    return "\n".join(
        [
            palette.h1("🚀 Kubernetes Packet Analysis Lab"),
            "",
            "This lab demonstrates the OSI layers in action using a real HTTP request "
            "from a Pod to nginx running in a kind cluster.",
            "",
            palette.h2("Lab Components:"),
            "• kind cluster (local Kubernetes)",
            "• nginx Deployment and Service",
            "• busybox Pod for making requests",
            "• tcpdump for packet capture",
            "",
            palette.h2("What happens during setup:"),
            "1. Check and start Docker if needed (may take 30-60 seconds)",
            "2. Create a kind Kubernetes cluster",
            "3. Deploy nginx and busybox pods",
            "4. Capture HTTP packets between pods",
            "",
            palette.highlight("Press 'r' to run the lab setup script"),
            palette.highlight("Press 'c' to clean up the lab environment"),
            "",
            palette.muted_text(
                f"💡 Tip: Run '{script} setup' manually if you prefer to see detailed output"
            ),
        ]
    )


def render_summary(run: WorkflowRun, palette: Palette) -> str:
    mode = run.mode.value
    if run.succeeded:
        parts = [palette.ok(f"✅ Lab {mode} completed successfully!")]
        if run.warnings:
            parts.append(palette.warn(CLEANUP_WARNING))
        if run.mode is WorkflowMode.CLEANUP:
            parts.append("Press 'r' to set the lab up again.")
        return "\n".join(parts)

    parts = [palette.fail(f"❌ Lab {mode} failed")]
    if run.last_error is not None:
        parts.extend(
            [
                escape(run.last_error.user_message),
                "",
                palette.h3("Troubleshooting"),
                escape(run.last_error.remediation),
            ]
        )
    parts.extend(["", palette.highlight("Press 'r' to retry, 'c' to clean up, 'e' to export the log")])
    return "\n".join(parts)


def render_packet_layer(layer: PacketLayer, palette: Palette) -> str:
    parts = [
        palette.h1(f"OSI Layer {layer.osi_layer}: {layer.name}"),
        "",
        escape(layer.explanation),
    ]
    if layer.headers:
        parts.extend(["", palette.h2("📋 Headers & Fields")])
        parts.extend(palette.code(f"{name:<20}: {value}") for name, value in layer.headers)
    if layer.raw_data:
        parts.extend(["", palette.h2("🔍 Raw Data"), palette.code(layer.raw_data)])

    osi_layer = layer_by_number(layer.osi_layer)
    if osi_layer is not None:
        parts.extend(
            [
                "",
                palette.h2("📚 OSI Layer Context"),
                escape(osi_layer.description),
                "",
                palette.h3("Key Concepts:"),
            ]
        )
        parts.extend(f"• {escape(concept)}" for concept in osi_layer.key_concepts)
    return "\n".join(parts)


class ProcessWorkflowScreen(NetLabScreen):
    """Lab screen for one module.

    Shows instructions before the first run, live output and progress
    while the script runs, a summary when it ends, and the packet
    walkthrough once lab data is loaded.
    """

    class RunFinished(Message):
        """A lab run delivered its terminal event."""

        def __init__(self, workflow_screen: "ProcessWorkflowScreen", run: WorkflowRun) -> None:
            super().__init__()
            self.workflow_screen = workflow_screen
            self.run = run

    BINDINGS = [
        ("r", "run_setup", "Setup"),
        ("c", "run_cleanup", "Cleanup"),
        ("a", "run_capture", "Capture"),
        ("e", "export_log", "Export log"),
        ("n", "next_layer", "Next"),
        ("right", "next_layer", "Next"),
        ("space", "next_layer", "Next"),
        ("p", "prev_layer", "Prev"),
        ("left", "prev_layer", "Prev"),
        ("escape", "back", "Back"),
    ]

    DEFAULT_CSS = """
    ProcessWorkflowScreen #lab-status {
        text-align: center;
        text-style: bold;
        padding: 0 1;
    }

    ProcessWorkflowScreen #progress {
        margin: 1 0;
    }

    ProcessWorkflowScreen #output {
        height: 1fr;
        border: round $primary;
        margin: 0 1;
    }

    ProcessWorkflowScreen #content {
        height: 1fr;
        border: round $primary;
        padding: 0 1;
        margin: 0 1;
    }

    ProcessWorkflowScreen #notice {
        height: auto;
        padding: 0 1;
        color: $text-muted;
    }
    """

    def __init__(
        self,
        module_id: str,
        orchestrator: LabOrchestrator,
        palette: Palette = DEFAULT_PALETTE,
        lab_title: str = "",
    ) -> None:
        super().__init__(palette)
        self.orchestrator = orchestrator
        self.lab_title = lab_title
        self.state = ProcessWorkflowState(module_id=module_id, run=orchestrator.run)
        self._shown_lines = 0

    def compose_body(self) -> ComposeResult:
        """Compose the lab layout."""
        yield Static("", id="lab-status")
        yield LabProgress(id="progress")
        yield Log(id="output")
        with VerticalScroll(id="content"):
            yield Static("", id="content-text")
        yield Static("", id="notice")

    def on_mount(self) -> None:
        super().on_mount()
        if self.lab_title:
            self.title = self.lab_title
        self.state.set_layers(self.netlab.load_lab_layers())
        self.refresh_view()

    # -- rendering ---------------------------------------------------------

    def refresh_view(self) -> None:
        """Redraw everything from the state."""
        state = self.state
        view = state.view
        palette = self.palette

        progress = self.query_one("#progress", LabProgress)
        output = self.query_one("#output", Log)
        content = self.query_one("#content", VerticalScroll)
        content_text = self.query_one("#content-text", Static)
        status = self.query_one("#lab-status", Static)

        progress.display = view in (WorkflowView.STREAMING, WorkflowView.SUMMARY)
        output.display = view in (WorkflowView.STREAMING, WorkflowView.SUMMARY)
        content.display = view is not WorkflowView.STREAMING

        if state.run is not None:
            progress.set_progress(state.run.progress)
        self._sync_output()

        if view is WorkflowView.INSTRUCTIONS:
            status.update(palette.h2("Packet Analysis Lab"))
            content_text.update(render_instructions(palette, str(self.orchestrator.entry_point)))
        elif view is WorkflowView.STREAMING:
            assert state.run is not None
            status.update(palette.h2(f"🔄 Lab {state.run.mode.value} in progress..."))
        elif view is WorkflowView.SUMMARY:
            assert state.run is not None
            status.update(
                palette.ok("✅ Lab run complete")
                if state.run.succeeded
                else palette.fail("❌ Lab run failed")
            )
            content_text.update(render_summary(state.run, palette))
        else:
            layer = state.current_layer
            assert layer is not None
            status.update(
                palette.muted_text(f"Layer {state.layer_index + 1} of {len(state.layers)}")
            )
            content_text.update(render_packet_layer(layer, palette))

        self.query_one("#notice", Static).update(state.notice)
        self.refresh_bindings()

    def _sync_output(self) -> None:
        output = self.query_one("#output", Log)
        run = self.state.run
        lines: List[str] = run.output_log if run is not None else []
        if len(lines) < self._shown_lines:
            output.clear()
            self._shown_lines = 0
        first_output = self._shown_lines == 0 and bool(lines)
        for line in lines[self._shown_lines:]:
            output.write_line(line)
        self._shown_lines = len(lines)
        if first_output:
            self.refresh_bindings()

    def show_layers(self, layers: List[PacketLayer]) -> None:
        """Hand freshly loaded walkthrough layers to the screen."""
        self.state.set_layers(layers)
        self.refresh_view()

    # -- bindings ----------------------------------------------------------

    def check_action(self, action: str, parameters: tuple[object, ...]) -> Optional[bool]:
        state = self.state
        if action in LAUNCH_KEYS or action == "back":
            return None if state.streaming else True
        if action == "export_log":
            return True if state.can(WorkflowAction.EXPORT) else None
        if action in ("next_layer", "prev_layer"):
            return state.can(WorkflowAction.NAVIGATE)
        return True

    def _launch(self, action: WorkflowAction) -> None:
        if not self.state.can(action):
            return
        run = self.orchestrator.launch(LAUNCH_ACTIONS[action])
        if run is None:
            return
        self.state.start_run(run)
        self.query_one("#output", Log).clear()
        self._shown_lines = 0
        self.refresh_view()
        self.run_worker(self._consume(run), exclusive=True, group="lab-run")

    async def _consume(self, run: WorkflowRun) -> None:
        progress = self.query_one("#progress", LabProgress)
        async for _event in self.orchestrator.stream_events():
            self._sync_output()
            progress.set_progress(run.progress)
        logger.info("Lab %s ended in phase %s", run.mode.value, run.phase.value)
        self.refresh_view()
        self.post_message(self.RunFinished(self, run))

    def action_run_setup(self) -> None:
        self._launch(WorkflowAction.SETUP)

    def action_run_cleanup(self) -> None:
        self._launch(WorkflowAction.CLEANUP)

    def action_run_capture(self) -> None:
        self._launch(WorkflowAction.CAPTURE)

    def action_export_log(self) -> None:
        """Write the current output to the logs directory."""
        if not self.state.can(WorkflowAction.EXPORT):
            return
        try:
            path = self.orchestrator.export_log()
        except ExportError as exc:
            logger.warning("Log export failed: %s", exc)
            self.state.notice = self.palette.fail(f"❌ {exc.message}")
        else:
            self.state.notice = self.palette.ok(f"✅ Logs exported to {path}")
        self.refresh_view()

    def action_next_layer(self) -> None:
        if self.state.step_layer(1):
            self.refresh_view()
            self.query_one("#content", VerticalScroll).scroll_home(animate=False)

    def action_prev_layer(self) -> None:
        if self.state.step_layer(-1):
            self.refresh_view()
            self.query_one("#content", VerticalScroll).scroll_home(animate=False)

    def action_back(self) -> None:
        if self.state.streaming:
            return
        self.dismiss(None)
