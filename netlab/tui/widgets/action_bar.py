"""Row of keyboard-selectable actions."""

from __future__ import annotations

from rich.text import Text
from textual.widgets import Static


class ActionBar(Static):
    """Horizontal list of action labels with one of them focused.

    The owning screen keeps the focus index in its state and calls
    ``show`` whenever it changes; the bar itself holds no selection.
    """

    DEFAULT_CSS = """
    ActionBar {
        height: 1;
        width: 100%;
        content-align: center middle;
        margin-top: 1;
    }
    """

    def __init__(
        self,
        *,
        accent: str = "#00D4FF",
        id: str | None = None,
        classes: str | None = None,
    ) -> None:
        super().__init__(id=id, classes=classes)
        self.accent = accent
        self.labels: list[str] = []
        self.focused = 0

    def show(self, labels: list[str], focused: int) -> None:
        """Display labels, highlighting the focused one."""
        self.labels = list(labels)
        self.focused = focused

        text = Text()
        for index, label in enumerate(self.labels):
            if index:
                text.append("   ")
            if index == focused:
                text.append(f" {label} ", style=f"bold #0F172A on {self.accent}")
            else:
                text.append(f" {label} ", style="bold")
        self.update(text)
