"""Shared fixtures for TUI tests."""

from __future__ import annotations

from pathlib import Path
from typing import Callable

import pytest

from netlab.lib.dependencies import DependencyVerifier, ToolSpec
from netlab.lib.orchestrator import LabOrchestrator
from netlab.tui.app import NetLabApp
from netlab.tui.settings import NetLabSettings

MISSING_TOOL = ToolSpec(
    name="ghost-tool",
    command="netlab-test-no-such-tool",
    install_hints={"linux": "apt-get install ghost-tool"},
)


@pytest.fixture
def satisfied_verifier() -> DependencyVerifier:
    """Verifier for which every module has nothing to install."""
    return DependencyVerifier(registry=(), requirements={}, os_name="linux")


@pytest.fixture
def missing_verifier() -> DependencyVerifier:
    """Verifier for which the OSI module lacks one tool."""
    return DependencyVerifier(
        registry=(MISSING_TOOL,),
        requirements={"01-osi-model": ("ghost-tool",)},
        os_name="linux",
    )


@pytest.fixture
def make_app(
    tmp_path: Path,
    satisfied_verifier: DependencyVerifier,
    make_orchestrator: Callable[..., LabOrchestrator],
) -> Callable[..., NetLabApp]:
    """Build an app rooted at tmp_path with injectable collaborators."""

    def _make(
        start_module: str | None = None,
        verifier: DependencyVerifier | None = None,
        orchestrator: LabOrchestrator | None = None,
    ) -> NetLabApp:
        return NetLabApp(
            NetLabSettings(),
            start_module=start_module,
            project_root=tmp_path,
            verifier=verifier or satisfied_verifier,
            orchestrator=orchestrator or make_orchestrator(),
        )

    return _make
