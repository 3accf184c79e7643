"""Shared fixtures for NetLab tests."""

from __future__ import annotations

from pathlib import Path
from typing import Callable

import pytest

from netlab.lib.orchestrator import LabOrchestrator

ScriptFactory = Callable[..., Path]


@pytest.fixture
def make_script(tmp_path: Path) -> ScriptFactory:
    """Write an executable /bin/sh lab script into tmp_path.

    The body receives the workflow mode as $1.
    """

    def _make(body: str, name: str = "k8s_lab.sh") -> Path:
        script = tmp_path / name
        script.write_text("#!/bin/sh\n" + body + "\n", encoding="utf-8")
        script.chmod(0o755)
        return script

    return _make


@pytest.fixture
def capture_file(tmp_path: Path) -> Path:
    """Where fake labs are expected to leave their packet capture."""
    return tmp_path / "assets" / "https-nginx.pcap"


@pytest.fixture
def make_orchestrator(tmp_path: Path, capture_file: Path) -> Callable[..., LabOrchestrator]:
    """Build an orchestrator rooted at tmp_path."""

    def _make(script: Path | str = "k8s_lab.sh", timeout: float = 30.0) -> LabOrchestrator:
        return LabOrchestrator(
            entry_point=script,
            artifact=capture_file,
            logs_dir="logs",
            timeout=timeout,
            cwd=tmp_path,
        )

    return _make


@pytest.fixture
def create_capture(capture_file: Path) -> Path:
    """Pre-create the capture file as a successful setup would."""
    capture_file.parent.mkdir(parents=True, exist_ok=True)
    capture_file.write_bytes(b"\xd4\xc3\xb2\xa1")
    return capture_file
