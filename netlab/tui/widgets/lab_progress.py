"""Progress bar for a running lab workflow."""

from __future__ import annotations

from rich.text import Text
from textual.reactive import reactive
from textual.widgets import Static

BAR_WIDTH = 25


def render_bar(percent: float, width: int = BAR_WIDTH) -> str:
    """Text bar such as "[██████░░░░] 60%"."""
    percent = max(0.0, min(100.0, percent))
    filled = int(percent / 100 * width)
    return "[" + "█" * filled + "░" * (width - filled) + f"] {percent:.0f}%"


class LabProgress(Static):
    """Progress indicator for the lab setup script.

    Shows the estimated completion of the current run as a fixed-width bar.
    """

    DEFAULT_CSS = """
    LabProgress {
        height: 1;
        width: 100%;
        content-align: center middle;
        text-style: bold;
        color: $primary;
    }
    """

    progress: reactive[float] = reactive(0.0)

    def __init__(
        self,
        *,
        id: str | None = None,
        classes: str | None = None,
    ) -> None:
        super().__init__(id=id, classes=classes, markup=False)

    def render(self) -> Text:
        """Render the progress bar."""
        return Text(render_bar(self.progress))

    def set_progress(self, percent: float) -> None:
        """Set the displayed progress.

        Args:
            percent: Estimated completion, 0 to 100
        """
        self.progress = max(0.0, min(100.0, percent))
