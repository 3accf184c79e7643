"""Two-pane explorer for a module's topics."""

from __future__ import annotations

from typing import Optional

from rich.markup import escape
from textual.app import ComposeResult
from textual.containers import Horizontal, VerticalScroll
from textual.widgets import OptionList, Static
from textual.widgets.option_list import Option

from netlab.content import KUBERNETES_CONTEXT, ModuleContent, OSILayer
from netlab.tui.models import ContentExplorerState, PaneLayout
from netlab.tui.screens.base import NetLabScreen
from netlab.tui.theme import DEFAULT_PALETTE, Palette

# Dismiss result asking the app to open the module's lab.
LAB_ADVANCE = "lab"


def _bullets(items) -> str:
    return "\n".join(f"• {escape(item)}" for item in items)


def render_layer_detail(layer: OSILayer, palette: Palette) -> str:
    """Markup for the detail pane of one OSI layer."""
    parts = [
        palette.h2(layer.title),
        "",
        escape(layer.description),
        "",
        palette.h3("Function"),
        escape(layer.function),
        "",
        palette.h3("Common Protocols"),
        _bullets(layer.protocols),
        "",
        palette.h3("Real-World Analogy"),
        palette.highlight(layer.analogy),
        "",
        palette.h3("Header Information"),
        escape(layer.header_type),
        "",
        palette.h3("Useful CLI Tools"),
        palette.code(", ".join(layer.cli_tools)),
        "",
        palette.h3("Examples"),
        _bullets(layer.examples),
        "",
        palette.h3("Learn More"),
        palette.muted_text("📖 " + layer.external_doc),
    ]
    context = KUBERNETES_CONTEXT.get(layer.number)
    if context:
        parts.extend(["", palette.h3("☸️ Kubernetes Context"), escape(context)])
    return "\n".join(parts)


class ContentExplorerScreen(NetLabScreen):
    """Topic list on the left, details of the selected topic on the right.

    Dismisses with LAB_ADVANCE when the user asks for the module's lab,
    or None when they back out.
    """

    BINDINGS = [
        ("j", "cursor_down", "Down"),
        ("k", "cursor_up", "Up"),
        ("m", "mnemonic", "Mnemonic"),
        ("v", "lab", "Packet lab"),
        ("escape", "back", "Back"),
    ]

    DEFAULT_CSS = """
    ContentExplorerScreen #breadcrumb {
        color: $text-muted;
        padding: 0 1;
    }

    ContentExplorerScreen #panes {
        height: 1fr;
    }

    ContentExplorerScreen #topics {
        width: 25;
        height: 100%;
        border: round $primary;
    }

    ContentExplorerScreen #detail {
        width: 1fr;
        height: 100%;
        border: round $primary;
        padding: 0 1;
        margin-left: 1;
    }
    """

    def __init__(
        self,
        content: ModuleContent,
        palette: Palette = DEFAULT_PALETTE,
        state: Optional[ContentExplorerState] = None,
    ) -> None:
        super().__init__(palette)
        self.content = content
        self.state = state or ContentExplorerState(
            module_id=content.module_id,
            topic_count=len(content.topics),
        )

    def compose_body(self) -> ComposeResult:
        """Compose the two panes."""
        yield Static(self.content.breadcrumb, id="breadcrumb", markup=False)
        with Horizontal(id="panes"):
            yield OptionList(
                *(
                    Option(escape(f"{topic.title}\n  {topic.function}"), id=str(topic.number))
                    for topic in self.content.topics
                ),
                id="topics",
            )
            with VerticalScroll(id="detail"):
                yield Static("", id="detail-text")

    def on_mount(self) -> None:
        super().on_mount()
        self.title = self.content.title
        self.show_detail()
        topics = self.query_one("#topics", OptionList)
        topics.highlighted = self.state.selected
        topics.focus()
        if self.state.scroll_offset:
            detail = self.query_one("#detail", VerticalScroll)
            self.call_after_refresh(
                detail.scroll_to, y=self.state.scroll_offset, animate=False
            )

    def apply_pane_layout(self, layout: PaneLayout) -> None:
        self.query_one("#topics", OptionList).styles.width = layout.list_width

    @property
    def selected_topic(self) -> OSILayer:
        return self.content.topics[self.state.selected]

    def show_detail(self) -> None:
        """Regenerate the detail pane for the selected topic."""
        self.query_one("#detail-text", Static).update(
            render_layer_detail(self.selected_topic, self.palette)
        )

    def on_option_list_option_highlighted(self, event: OptionList.OptionHighlighted) -> None:
        if self.state.select(event.option_index):
            self.show_detail()
            self.query_one("#detail", VerticalScroll).scroll_home(animate=False)

    def action_cursor_down(self) -> None:
        self.query_one("#topics", OptionList).action_cursor_down()

    def action_cursor_up(self) -> None:
        self.query_one("#topics", OptionList).action_cursor_up()

    def action_mnemonic(self) -> None:
        """Show the mnemonic overlay; returning keeps selection and scroll."""
        from netlab.tui.screens.mnemonic import MnemonicScreen

        self.state.scroll_offset = int(self.query_one("#detail", VerticalScroll).scroll_y)
        self.app.push_screen(MnemonicScreen(self.state, self.palette))

    def action_lab(self) -> None:
        if not self.content.has_lab:
            self.notify("This module has no lab yet.", severity="warning")
            return
        self.state.scroll_offset = int(self.query_one("#detail", VerticalScroll).scroll_y)
        self.dismiss(LAB_ADVANCE)

    def action_back(self) -> None:
        self.dismiss(None)
