"""Module menu, the first screen of ``netlab start``."""

from __future__ import annotations

from textual.app import ComposeResult
from textual.containers import Center, Vertical
from textual.widgets import OptionList, Static
from textual.widgets.option_list import Option

from netlab.tui.constants import progress_summary
from netlab.tui.models import MenuState
from netlab.tui.screens.base import NetLabScreen
from netlab.tui.theme import DEFAULT_PALETTE, Palette


class MenuScreen(NetLabScreen):
    """Initial screen listing the course modules.

    Enter opens the selected module's dependency check.
    """

    BINDINGS = [
        ("j", "cursor_down", "Down"),
        ("k", "cursor_up", "Up"),
        ("d", "doctor", "Doctor"),
    ]

    DEFAULT_CSS = """
    MenuScreen #body {
        align: center middle;
    }

    MenuScreen .menu-container {
        width: 80%;
        max-width: 90;
        height: auto;
        padding: 1 2;
        border: round $primary;
        background: $surface;
    }

    MenuScreen .title {
        text-align: center;
        text-style: bold;
        color: $primary;
    }

    MenuScreen .subtitle {
        text-align: center;
        color: $text-muted;
        margin-bottom: 1;
    }

    MenuScreen OptionList {
        height: auto;
        max-height: 20;
    }

    MenuScreen .description {
        text-align: center;
        color: $text-muted;
        margin-top: 1;
    }
    """

    def __init__(self, palette: Palette = DEFAULT_PALETTE) -> None:
        super().__init__(palette)
        self.state = MenuState()

    def compose_body(self) -> ComposeResult:
        """Compose the menu layout."""
        with Center():
            with Vertical(classes="menu-container"):
                yield Static("🌐 NetLab", classes="title")
                yield Static(
                    "Hands-on networking labs in your terminal",
                    classes="subtitle",
                )
                yield OptionList(
                    *(
                        Option(self._module_label(index), id=module.id)
                        for index, module in enumerate(self.state.modules)
                    ),
                    id="modules",
                )
                yield Static(progress_summary(self.state.modules), id="progress", classes="description")

    def _module_label(self, index: int) -> str:
        module = self.state.modules[index]
        return (
            f"{self.palette.badge(module.status)}  [b]{module.title}[/b]\n"
            f"   {self.palette.muted_text(module.description)}"
        )

    def on_mount(self) -> None:
        super().on_mount()
        option_list = self.query_one("#modules", OptionList)
        option_list.highlighted = self.state.selected
        option_list.focus()

    def on_option_list_option_highlighted(self, event: OptionList.OptionHighlighted) -> None:
        self.state.selected = event.option_index

    def on_option_list_option_selected(self, event: OptionList.OptionSelected) -> None:
        """Open the chosen module."""
        self.state.selected = event.option_index
        self.netlab.run_module(self.state.selected_module.id)

    def action_cursor_down(self) -> None:
        self.query_one("#modules", OptionList).action_cursor_down()

    def action_cursor_up(self) -> None:
        self.query_one("#modules", OptionList).action_cursor_up()

    def action_doctor(self) -> None:
        """Probe every registered tool and summarize in a notification."""
        statuses = self.netlab.verifier.probe_all()
        unsatisfied = [status.name for status in statuses if not status.satisfied]
        if unsatisfied:
            self.notify(
                "Missing or broken: " + ", ".join(unsatisfied),
                title="Environment check",
                severity="warning",
            )
        else:
            self.notify("All tools found.", title="Environment check")
