"""Textual application and navigation controller for NetLab.

The app owns the current ScreenState, the dependency verifier and the one
lab orchestrator. It sequences the screens of a module:

    menu -> dependency gate -> content explorer -> lab workflow

and interprets what each screen returns when it is dismissed.
"""

from __future__ import annotations

import logging
from functools import partial
from pathlib import Path
from typing import List, Optional

from textual.app import App

from netlab.content import PacketLayer, get_module_content, load_packet_layers
from netlab.lib.dependencies import DependencyVerifier
from netlab.lib.errors import WorkflowError
from netlab.lib.orchestrator import LabOrchestrator
from netlab.tui.constants import get_module
from netlab.tui.models import ContentExplorerState, GateAction, MenuState, ScreenState
from netlab.tui.screens import (
    LAB_ADVANCE,
    ContentExplorerScreen,
    DependencyGateScreen,
    MenuScreen,
    ProcessWorkflowScreen,
)
from netlab.tui.settings import NetLabSettings
from netlab.tui.theme import DEFAULT_PALETTE, Palette

logger = logging.getLogger(__name__)


class NetLabApp(App[int]):
    """Interactive networking labs.

    Args:
        settings: Project settings; defaults are used when omitted
        palette: Colours handed to every screen
        start_module: Open this module's gate directly and exit when the
            user leaves it, instead of showing the menu
        project_root: Directory relative paths in settings resolve against
        verifier: Dependency verifier (injectable for tests)
        orchestrator: Lab orchestrator (injectable for tests)
    """

    TITLE = "NetLab"
    SUB_TITLE = "Interactive networking labs"

    BINDINGS = [
        ("q", "quit", "Quit"),
        ("ctrl+c", "quit", "Quit"),
    ]

    def __init__(
        self,
        settings: Optional[NetLabSettings] = None,
        *,
        palette: Palette = DEFAULT_PALETTE,
        start_module: Optional[str] = None,
        project_root: Optional[Path] = None,
        verifier: Optional[DependencyVerifier] = None,
        orchestrator: Optional[LabOrchestrator] = None,
    ) -> None:
        super().__init__()
        self.settings = settings or NetLabSettings()
        self.palette = palette
        self.start_module = start_module
        self.project_root = project_root or Path.cwd()

        self.verifier = verifier or DependencyVerifier(timeout=self.settings.probe_timeout)
        self.orchestrator = orchestrator or LabOrchestrator(
            entry_point=self.settings.lab_script,
            artifact=self.settings.capture_artifact,
            logs_dir=self.settings.logs_dir,
            timeout=self.settings.workflow_timeout,
            cwd=self.project_root,
        )

        self.current_state: ScreenState = MenuState()
        self._explorer_states: dict[str, ContentExplorerState] = {}

    def on_mount(self) -> None:
        if self.start_module:
            self.run_module(self.start_module)
        else:
            self.show_menu()

    def on_unmount(self) -> None:
        # Quitting mid-run must not leave the lab script behind.
        self.orchestrator.cancel()

    def show_menu(self) -> None:
        self.push_screen(MenuScreen(self.palette))

    def run_module(self, module_id: str) -> None:
        """Open a module, starting with its dependency gate."""
        module = get_module(module_id)
        title = module.title if module else module_id
        logger.info("Opening module %s", module_id)
        self.push_screen(
            DependencyGateScreen(module_id, title, self.palette),
            callback=partial(self._on_gate_finished, module_id),
        )

    def _on_gate_finished(self, module_id: str, choice: Optional[GateAction]) -> None:
        if choice is not GateAction.CONTINUE:
            logger.info("Left dependency gate for %s", module_id)
            self._leave_module()
            return
        self.open_explorer(module_id)

    def open_explorer(self, module_id: str) -> None:
        content = get_module_content(module_id)
        if content is None:
            self.notify(f"Module {module_id} is not implemented yet", severity="warning")
            self._leave_module()
            return
        screen = ContentExplorerScreen(content, self.palette, self._explorer_states.get(module_id))
        self._explorer_states[module_id] = screen.state
        self.push_screen(screen, callback=partial(self._on_explorer_finished, module_id))

    def _on_explorer_finished(self, module_id: str, result: Optional[str]) -> None:
        if result != LAB_ADVANCE:
            self._explorer_states.pop(module_id, None)
            self._leave_module()
            return

        content = get_module_content(module_id)
        self.push_screen(
            ProcessWorkflowScreen(
                module_id,
                self.orchestrator,
                self.palette,
                lab_title=content.lab_title if content else "",
            ),
            callback=lambda _: self.open_explorer(module_id),
        )

    def _leave_module(self) -> None:
        """Return to the menu, or exit when started for a single module."""
        if self.start_module:
            self.exit(0)

    def load_lab_layers(self) -> List[PacketLayer]:
        """Walkthrough layers for the lab, empty until the capture exists."""
        if not self.orchestrator.artifact_ready():
            return []
        return load_packet_layers(self.orchestrator.artifact_path)

    def on_process_workflow_screen_run_finished(
        self, message: ProcessWorkflowScreen.RunFinished
    ) -> None:
        try:
            message.run.raise_for_status()
        except WorkflowError as exc:
            logger.warning("Lab run failed: %s", exc.message, extra=exc.details)
            return
        message.workflow_screen.show_layers(self.load_lab_layers())
