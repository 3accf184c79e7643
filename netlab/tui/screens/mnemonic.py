"""Full-pane OSI mnemonic overlay."""

from __future__ import annotations

from rich.markup import escape
from textual.app import ComposeResult
from textual.containers import VerticalScroll
from textual.widgets import Static

from netlab.content import MNEMONIC_MAPPING, MNEMONICS
from netlab.tui.models import ContentExplorerState, MnemonicOverlayState
from netlab.tui.screens.base import NetLabScreen
from netlab.tui.theme import DEFAULT_PALETTE, Palette


def render_mnemonics(palette: Palette) -> str:
    parts = [
        palette.h1("🧠 OSI Layer Mnemonics"),
        "",
        "Popular phrases to remember the OSI layers (Physical → Application):",
        "",
    ]
    for index, mnemonic in enumerate(MNEMONICS, start=1):
        line = f"{index}. {mnemonic}"
        parts.append(palette.highlight(line) if index == 1 else escape(line))
        parts.append("")

    parts.append(palette.h2("Layer Mapping"))
    for letter, name, number in MNEMONIC_MAPPING:
        parts.append(palette.code(f"{letter} - {name:<13} (Layer {number})"))
    parts.extend(["", palette.muted_text("Press 'm' to return to the layer explorer")])
    return "\n".join(parts)


class MnemonicScreen(NetLabScreen):
    """Static mnemonic content over the explorer."""

    BINDINGS = [
        ("m", "close", "Back"),
        ("escape", "close", "Back"),
    ]

    DEFAULT_CSS = """
    MnemonicScreen #mnemonics {
        border: round $primary;
        padding: 1 2;
        margin: 0 1;
        height: 1fr;
    }
    """

    def __init__(
        self,
        explorer_state: ContentExplorerState,
        palette: Palette = DEFAULT_PALETTE,
    ) -> None:
        super().__init__(palette)
        self.state = MnemonicOverlayState(explorer=explorer_state)

    def compose_body(self) -> ComposeResult:
        with VerticalScroll(id="mnemonics"):
            yield Static(render_mnemonics(self.palette), id="mnemonic-text")

    def action_close(self) -> None:
        self.dismiss(None)
