"""Common behaviour for every NetLab screen."""

from __future__ import annotations

from typing import TYPE_CHECKING, cast

from textual import events
from textual.app import ComposeResult
from textual.containers import Vertical
from textual.screen import Screen
from textual.widgets import Footer, Header, Static

from netlab.tui.models import PaneLayout, ScreenState, compute_layout
from netlab.tui.theme import DEFAULT_PALETTE, Palette

if TYPE_CHECKING:
    from netlab.tui.app import NetLabApp


class NetLabScreen(Screen):
    """Screen that owns one ScreenState and reacts to terminal size.

    Subclasses yield their widgets from ``compose_body``. Below the
    minimum terminal size only the too-small warning is displayed.
    """

    DEFAULT_CSS = """
    NetLabScreen #too-small {
        width: 100%;
        height: 100%;
        content-align: center middle;
        text-style: bold;
        color: $warning;
    }

    NetLabScreen #body {
        height: 1fr;
    }
    """

    state: ScreenState

    def __init__(self, palette: Palette = DEFAULT_PALETTE, **kwargs) -> None:
        super().__init__(**kwargs)
        self.palette = palette

    @property
    def netlab(self) -> "NetLabApp":
        return cast("NetLabApp", self.app)

    def compose(self) -> ComposeResult:
        """Compose the header, body and footer around the too-small warning."""
        yield Header()
        yield Static("", id="too-small", markup=False)
        with Vertical(id="body"):
            yield from self.compose_body()
        yield Footer()

    def compose_body(self) -> ComposeResult:
        yield from ()

    def on_mount(self) -> None:
        self.apply_size(self.app.size.width, self.app.size.height)

    def on_screen_resume(self) -> None:
        self.netlab.current_state = self.state
        self.apply_size(self.app.size.width, self.app.size.height)

    def on_resize(self, event: events.Resize) -> None:
        self.apply_size(event.size.width, event.size.height)

    def apply_size(self, width: int, height: int) -> None:
        """Recompute pane sizes and swap between the body and the warning."""
        if not self.is_mounted:
            return
        settings = self.netlab.settings
        layout = compute_layout(width, height, settings.min_width, settings.min_height)
        self.state.layout = layout

        warning = self.query_one("#too-small", Static)
        warning.update(layout.message)
        warning.display = layout.too_small
        for widget in self.query("#body, Header, Footer"):
            widget.display = not layout.too_small

        if not layout.too_small:
            self.apply_pane_layout(layout)

    def apply_pane_layout(self, layout: PaneLayout) -> None:
        """Resize panes for a usable terminal. Override in subclasses."""
