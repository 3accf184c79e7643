"""Dependency checkpoint shown before a module opens."""

from __future__ import annotations

import logging

from textual.app import ComposeResult
from textual.containers import Center, Vertical, VerticalScroll
from textual.widgets import Static

from netlab.tui.models import DependencyGateState, GateAction, status_row
from netlab.tui.models.screen_state import GATE_ACTION_LABELS
from netlab.tui.screens.base import NetLabScreen
from netlab.tui.theme import DEFAULT_PALETTE, Palette
from netlab.tui.widgets import ActionBar

logger = logging.getLogger(__name__)


class DependencyGateScreen(NetLabScreen):
    """Probe a module's tools and let the user decide how to proceed.

    Dismisses with GateAction.CONTINUE, or None when the user backs out.
    The install guide and re-checks are handled here without dismissing.
    """

    BINDINGS = [
        ("left", "focus_previous_action", "Previous"),
        ("h", "focus_previous_action", "Previous"),
        ("right", "focus_next_action", "Next"),
        ("l", "focus_next_action", "Next"),
        ("tab", "focus_next_action", "Next"),
        ("enter", "activate", "Select"),
        ("escape", "abort", "Back"),
    ]

    DEFAULT_CSS = """
    DependencyGateScreen #body {
        align: center middle;
    }

    DependencyGateScreen .gate-container {
        width: 70;
        height: auto;
        padding: 1 2;
        border: round $primary;
        background: $surface;
    }

    DependencyGateScreen #gate-title {
        text-align: center;
        text-style: bold;
        color: $primary;
        margin-bottom: 1;
    }

    DependencyGateScreen #gate-rows {
        margin-bottom: 1;
    }

    DependencyGateScreen #gate-warning {
        color: $warning;
    }
    """

    def __init__(
        self,
        module_id: str,
        module_title: str = "",
        palette: Palette = DEFAULT_PALETTE,
    ) -> None:
        super().__init__(palette)
        self.state = DependencyGateState(module_id=module_id, module_title=module_title)

    def compose_body(self) -> ComposeResult:
        """Compose the gate layout."""
        with Center():
            with Vertical(classes="gate-container"):
                yield Static(
                    f"Dependency Check: {self.state.module_title or self.state.module_id}",
                    id="gate-title",
                    markup=False,
                )
                yield Static("Checking dependencies...", id="gate-rows")
                yield Static("", id="gate-summary")
                yield Static("", id="gate-warning")
                yield ActionBar(accent=self.palette.primary, id="gate-actions")

    def on_mount(self) -> None:
        super().on_mount()
        self.call_after_refresh(self.run_check)

    def run_check(self) -> None:
        """Probe the module's tools and redraw. Focus returns to Continue."""
        statuses, all_satisfied = self.netlab.verifier.probe(self.state.module_id)
        self.state.update(statuses, all_satisfied)
        self.refresh_state()

    def refresh_state(self) -> None:
        """Redraw rows, summary and actions from the state."""
        palette = self.palette
        state = self.state

        rows = []
        for status in state.statuses:
            row = status_row(status)
            rows.append(palette.ok(row) if status.satisfied else palette.fail(row))
        self.query_one("#gate-rows", Static).update("\n".join(rows) or "No external tools required.")

        if state.all_satisfied:
            summary = palette.ok(state.summary)
            warning = ""
        else:
            summary = palette.fail(state.summary)
            warning = "Some features may not work without these dependencies."
        self.query_one("#gate-summary", Static).update(summary)
        self.query_one("#gate-warning", Static).update(warning)

        self.query_one("#gate-actions", ActionBar).show(
            [GATE_ACTION_LABELS[action] for action in state.actions],
            state.focused,
        )

    def action_focus_previous_action(self) -> None:
        self.state.move_focus(-1)
        self.refresh_state()

    def action_focus_next_action(self) -> None:
        self.state.move_focus(1)
        self.refresh_state()

    def action_activate(self) -> None:
        """Run the focused action."""
        if not self.state.checked:
            return
        action = self.state.focused_action
        logger.debug("Gate %s: %s", self.state.module_id, action.value)
        if action is GateAction.CONTINUE:
            self.dismiss(GateAction.CONTINUE)
        elif action is GateAction.GUIDE:
            guide = self.netlab.verifier.generate_remediation(self.state.unsatisfied)
            self.app.push_screen(RemediationGuideScreen(self.state, guide, self.palette))
        else:
            self.run_check()

    def action_abort(self) -> None:
        self.dismiss(None)


class RemediationGuideScreen(NetLabScreen):
    """Read-only installation guide. Escape returns to the gate."""

    BINDINGS = [
        ("escape", "close", "Back"),
        ("j", "scroll_down", "Down"),
        ("k", "scroll_up", "Up"),
    ]

    DEFAULT_CSS = """
    RemediationGuideScreen #guide {
        border: round $primary;
        padding: 1 2;
        margin: 1 2;
    }

    RemediationGuideScreen #guide-title {
        text-style: bold;
        color: $primary;
        margin-bottom: 1;
    }
    """

    def __init__(
        self,
        gate_state: DependencyGateState,
        guide: str,
        palette: Palette = DEFAULT_PALETTE,
    ) -> None:
        super().__init__(palette)
        self.state = gate_state
        self.guide = guide

    def compose_body(self) -> ComposeResult:
        with VerticalScroll(id="guide"):
            yield Static("📦 Installation Guide", id="guide-title")
            yield Static(self.guide, id="guide-text", markup=False)

    def on_mount(self) -> None:
        super().on_mount()
        self.query_one("#guide", VerticalScroll).focus()

    def action_scroll_down(self) -> None:
        self.query_one("#guide", VerticalScroll).scroll_down()

    def action_scroll_up(self) -> None:
        self.query_one("#guide", VerticalScroll).scroll_up()

    def action_close(self) -> None:
        self.dismiss(None)
