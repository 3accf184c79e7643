"""Colour palette for NetLab screens.

Screens receive a Palette from the app and build Rich markup with it.
Nothing here is mutable and nothing is global.
"""

from __future__ import annotations

from dataclasses import dataclass

from rich.markup import escape


@dataclass(frozen=True)
class Palette:
    """Read-only colours used by every screen."""

    primary: str = "#00D4FF"
    secondary: str = "#7C3AED"
    accent: str = "#F59E0B"
    success: str = "#10B981"
    warning: str = "#F59E0B"
    error: str = "#EF4444"
    info: str = "#3B82F6"
    text: str = "#F8FAFC"
    muted: str = "#94A3B8"
    dim: str = "#64748B"
    background: str = "#0F172A"

    def h1(self, text: str) -> str:
        return f"[bold {self.primary}]{escape(text)}[/]"

    def h2(self, text: str) -> str:
        return f"[bold {self.secondary}]{escape(text)}[/]"

    def h3(self, text: str) -> str:
        return f"[bold {self.accent}]{escape(text)}[/]"

    def muted_text(self, text: str) -> str:
        return f"[{self.muted}]{escape(text)}[/]"

    def code(self, text: str) -> str:
        return f"[{self.primary}]{escape(text)}[/]"

    def highlight(self, text: str) -> str:
        return f"[bold {self.background} on {self.accent}] {escape(text)} [/]"

    def ok(self, text: str) -> str:
        return f"[bold {self.success}]{escape(text)}[/]"

    def warn(self, text: str) -> str:
        return f"[bold {self.warning}]{escape(text)}[/]"

    def fail(self, text: str) -> str:
        return f"[bold {self.error}]{escape(text)}[/]"

    def badge(self, status: str) -> str:
        """Menu badge for a module status."""
        colour = {
            "ready": self.success,
            "wip": self.warning,
        }.get(status, self.dim)
        return f"[bold {colour}]{status.upper()}[/]"


DEFAULT_PALETTE = Palette()
