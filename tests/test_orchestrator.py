"""Tests for netlab/lib/orchestrator.py - lab script supervision."""

from __future__ import annotations

import asyncio
import os
import time
from datetime import datetime
from pathlib import Path
from typing import List, Tuple

import pytest

from netlab.lib.errors import ExportError, MissingEntryPointError, WorkflowError
from netlab.lib.orchestrator import (
    CLEANUP_WARNING,
    EventKind,
    LabOrchestrator,
    OutputEvent,
    WorkflowMode,
    WorkflowPhase,
    WorkflowRun,
)
from netlab.lib.patterns import ErrorCategory, ErrorReport

MARKER_SCRIPT = """
echo "Checking prerequisites..."
echo "Cluster netlab-osi created successfully"
echo "Lab setup completed!"
"""


async def _collect(orchestrator: LabOrchestrator, mode: str = "setup") -> Tuple[WorkflowRun, List[OutputEvent]]:
    run = orchestrator.launch(mode)
    assert run is not None
    events = [event async for event in orchestrator.stream_events()]
    return run, events


def _process_gone(pid: int, wait: float = 3.0) -> bool:
    """True once pid has exited. A zombie awaiting its reaper counts as exited."""
    deadline = time.monotonic() + wait
    while time.monotonic() < deadline:
        try:
            os.kill(pid, 0)
        except ProcessLookupError:
            return True
        try:
            state = Path(f"/proc/{pid}/stat").read_text().rsplit(")", 1)[-1].split()[0]
        except (OSError, IndexError):
            state = ""
        if state == "Z":
            return True
        time.sleep(0.05)
    return False


class TestWorkflowRun:
    """Tests for folding events into a run."""

    def test_line_events_append_and_raise_progress(self) -> None:
        """Lines are logged and progress follows the highest milestone."""
        run = WorkflowRun(mode=WorkflowMode.SETUP, phase=WorkflowPhase.STREAMING)
        run.apply(OutputEvent.line_event("Deploying nginx"))
        run.apply(OutputEvent.line_event("Checking prerequisites"))
        assert run.output_log == ["Deploying nginx", "Checking prerequisites"]
        assert run.progress == 40.0

    def test_success_sets_full_progress(self) -> None:
        """A successful terminal event completes the bar."""
        run = WorkflowRun(mode=WorkflowMode.SETUP, phase=WorkflowPhase.STREAMING)
        run.apply(OutputEvent.finished(success=True, exit_code=0))
        assert run.phase is WorkflowPhase.SUCCEEDED
        assert run.progress == 100.0

    def test_failure_appends_report(self) -> None:
        """A failed run shows the message and remediation after a blank line."""
        report = ErrorReport(ErrorCategory.NETWORK, "🌐 Network", "line one\nline two")
        run = WorkflowRun(mode=WorkflowMode.SETUP, phase=WorkflowPhase.STREAMING)
        run.apply(OutputEvent.line_event("network unreachable"))
        run.apply(OutputEvent.finished(success=False, error=report, exit_code=1))
        assert run.output_log == ["network unreachable", "", "🌐 Network", "line one", "line two"]
        assert run.last_error is report

    def test_events_after_terminal_are_ignored(self) -> None:
        """Nothing changes once the run is finished."""
        run = WorkflowRun(mode=WorkflowMode.SETUP, phase=WorkflowPhase.STREAMING)
        run.apply(OutputEvent.finished(success=True))
        run.apply(OutputEvent.line_event("late line"))
        assert run.output_log == []

    def test_raise_for_status(self) -> None:
        """Failed runs raise WorkflowError carrying the report."""
        report = ErrorReport(ErrorCategory.GENERIC, "❌ failed", "")
        run = WorkflowRun(mode=WorkflowMode.SETUP, phase=WorkflowPhase.STREAMING)
        run.apply(OutputEvent.finished(success=False, error=report))
        with pytest.raises(WorkflowError) as exc_info:
            run.raise_for_status()
        assert exc_info.value.report is report

    def test_raise_for_status_on_success(self) -> None:
        """Succeeded runs do not raise."""
        run = WorkflowRun(mode=WorkflowMode.CAPTURE, phase=WorkflowPhase.STREAMING)
        run.apply(OutputEvent.finished(success=True))
        run.raise_for_status()


class TestLaunch:
    """Tests for running fake lab scripts end to end."""

    def test_clean_setup_run(self, make_script, make_orchestrator, create_capture) -> None:
        """Three marker lines and exit 0 end Succeeded at 100% with 3 log lines."""
        make_script(MARKER_SCRIPT)
        run, events = asyncio.run(_collect(make_orchestrator()))

        assert run.phase is WorkflowPhase.SUCCEEDED
        assert run.progress == 100.0
        assert len(run.output_log) == 3
        assert [e.kind for e in events] == [EventKind.LINE] * 3 + [EventKind.FINISHED]

    def test_terminal_event_is_last(self, make_script, make_orchestrator, create_capture) -> None:
        """Exactly one terminal event is delivered, after every line."""
        make_script(MARKER_SCRIPT)
        _, events = asyncio.run(_collect(make_orchestrator()))
        assert sum(1 for e in events if e.is_terminal) == 1
        assert events[-1].is_terminal

    def test_progress_never_decreases(self, make_script, make_orchestrator, create_capture) -> None:
        """Progress over every prefix of the output is non-decreasing."""
        make_script(
            """
echo "Deploying nginx"
echo "Checking prerequisites"
echo "Creating cluster netlab-osi"
echo "Starting packet capture"
echo "Making HTTP request"
echo "Deploying busybox"
echo "Lab setup completed"
"""
        )
        orchestrator = make_orchestrator()

        async def scenario() -> List[float]:
            run = orchestrator.launch("setup")
            assert run is not None
            seen = []
            async for _event in orchestrator.stream_events():
                seen.append(run.progress)
            return seen

        seen = asyncio.run(scenario())
        assert seen == sorted(seen)
        assert seen[-1] == 100.0

    def test_passes_mode_and_cwd(self, tmp_path: Path, make_script, make_orchestrator) -> None:
        """The script gets the mode as its argument and runs in the project root."""
        make_script('echo "mode=$1"\npwd')
        run, _ = asyncio.run(_collect(make_orchestrator(), "cleanup"))
        assert run.output_log[0] == "mode=cleanup"
        assert Path(run.output_log[1]).resolve() == tmp_path.resolve()

    def test_ansi_and_blank_lines_are_cleaned(self, make_script, make_orchestrator) -> None:
        """Colour codes are stripped and empty lines dropped."""
        make_script(r'printf "\033[0;32m[INFO]\033[0m ready\n\n   \n"')
        run, _ = asyncio.run(_collect(make_orchestrator(), "cleanup"))
        assert run.output_log == ["[INFO] ready"]

    def test_second_launch_is_rejected(self, tmp_path: Path, make_script, make_orchestrator) -> None:
        """A launch while streaming returns None and spawns nothing."""
        spawns = tmp_path / "spawns.txt"
        make_script(f'echo spawn >> "{spawns}"\necho working\nsleep 0.2')
        orchestrator = make_orchestrator()

        async def scenario() -> None:
            first = orchestrator.launch("cleanup")
            assert first is not None
            assert orchestrator.launch("setup") is None
            assert orchestrator.launch("cleanup") is None
            async for _event in orchestrator.stream_events():
                pass
            assert orchestrator.run is first

        asyncio.run(scenario())
        assert spawns.read_text().splitlines() == ["spawn"]

    def test_relaunch_after_finish(self, make_script, make_orchestrator) -> None:
        """A new run may start once the previous one has finished."""
        make_script("echo again")
        orchestrator = make_orchestrator()

        async def scenario() -> Tuple[WorkflowRun, WorkflowRun]:
            first, _ = await _collect(orchestrator, "cleanup")
            second, _ = await _collect(orchestrator, "cleanup")
            return first, second

        first, second = asyncio.run(scenario())
        assert first is not second
        assert second.output_log == ["again"]


class TestOutcomes:
    """Tests for how a finished script is judged."""

    def test_cleanup_failure_still_succeeds(self, make_script, make_orchestrator) -> None:
        """Cleanup with a non-zero exit ends Succeeded with a warning."""
        make_script('echo "deleting cluster"\nexit 3')
        run, events = asyncio.run(_collect(make_orchestrator(), "cleanup"))

        assert run.phase is WorkflowPhase.SUCCEEDED
        assert run.warnings is True
        assert run.exit_code == 3
        assert run.output_log[-1] == CLEANUP_WARNING
        assert events[-1].success is True

    def test_cleanup_clean_exit_has_no_warning(self, make_script, make_orchestrator) -> None:
        """Cleanup exit 0 adds nothing to the log."""
        make_script('echo "deleting cluster"')
        run, _ = asyncio.run(_collect(make_orchestrator(), "cleanup"))
        assert run.warnings is False
        assert run.output_log == ["deleting cluster"]

    def test_failure_is_classified(self, make_script, make_orchestrator) -> None:
        """Non-zero setup exits are classified from the output."""
        make_script('echo "docker: command not found" >&2\nexit 127')
        run, _ = asyncio.run(_collect(make_orchestrator()))

        assert run.phase is WorkflowPhase.FAILED
        assert run.exit_code == 127
        assert run.last_error is not None
        assert run.last_error.category is ErrorCategory.MISSING_DEPENDENCY
        assert "docker: command not found" in run.output_log

    def test_unrecognized_failure_names_exit_status(self, make_script, make_orchestrator) -> None:
        """Unmatched output gives a generic report with the exit status."""
        make_script('echo "something odd"\nexit 4')
        run, _ = asyncio.run(_collect(make_orchestrator(), "capture"))
        assert run.last_error.category is ErrorCategory.GENERIC
        assert "exit status 4" in run.last_error.user_message

    def test_missing_capture_fails_setup(self, make_script, make_orchestrator) -> None:
        """Exit 0 without the capture file is a failure."""
        make_script('echo "Lab setup completed"')
        run, _ = asyncio.run(_collect(make_orchestrator()))
        assert run.phase is WorkflowPhase.FAILED
        assert run.last_error.category is ErrorCategory.ARTIFACT_MISSING

    def test_script_creating_capture_succeeds(self, make_script, make_orchestrator, capture_file: Path) -> None:
        """A capture written by the script itself counts."""
        make_script(f'mkdir -p "{capture_file.parent}"\ntouch "{capture_file}"\necho done')
        run, _ = asyncio.run(_collect(make_orchestrator(), "capture"))
        assert run.phase is WorkflowPhase.SUCCEEDED

    def test_missing_entry_point(self, make_orchestrator) -> None:
        """A missing script yields one terminal event and never spawns."""
        orchestrator = make_orchestrator("scripts/does-not-exist.sh")
        run, events = asyncio.run(_collect(orchestrator))

        assert len(events) == 1
        assert events[0].is_terminal
        assert events[0].success is False
        assert run.phase is WorkflowPhase.FAILED
        assert run.last_error.category is ErrorCategory.MISSING_ENTRY_POINT
        assert "scripts/does-not-exist.sh" in run.last_error.user_message
        assert orchestrator.is_streaming is False

    def test_not_executable(self, tmp_path: Path, make_orchestrator) -> None:
        """A script without the execute bit is a permission failure."""
        script = tmp_path / "k8s_lab.sh"
        script.write_text("#!/bin/sh\necho hi\n", encoding="utf-8")
        script.chmod(0o644)
        run, events = asyncio.run(_collect(make_orchestrator()))
        assert len(events) == 1
        assert run.last_error.category is ErrorCategory.PERMISSION

    def test_timeout_kills_script(self, make_script, make_orchestrator) -> None:
        """A script running past the timeout is stopped and reported."""
        make_script('echo "Checking prerequisites"\nexec sleep 30')
        run, events = asyncio.run(_collect(make_orchestrator(timeout=0.5)))

        assert run.phase is WorkflowPhase.FAILED
        assert run.last_error.category is ErrorCategory.TIMEOUT
        assert run.output_log[0] == "Checking prerequisites"
        assert events[-1].is_terminal

    def test_cancel_delivers_terminal_event(self, make_script, make_orchestrator) -> None:
        """Cancelling mid-run still ends the stream with a terminal event."""
        make_script('echo "Checking prerequisites"\nexec sleep 30')
        orchestrator = make_orchestrator()

        async def scenario() -> Tuple[WorkflowRun, List[OutputEvent]]:
            run = orchestrator.launch("setup")
            assert run is not None
            events = []
            async for event in orchestrator.stream_events():
                events.append(event)
                if event.kind is EventKind.LINE:
                    orchestrator.cancel()
            return run, events

        run, events = asyncio.run(scenario())
        assert events[-1].is_terminal
        assert run.phase is WorkflowPhase.FAILED
        assert run.last_error.category is ErrorCategory.CANCELLED

    def test_timeout_kills_background_children(self, make_script, make_orchestrator) -> None:
        """The timeout holds even when the script's children keep its output open."""
        make_script('echo "Checking prerequisites"\nsleep 30')
        started = time.monotonic()
        run, events = asyncio.run(_collect(make_orchestrator(timeout=0.5)))

        assert time.monotonic() - started < 10
        assert run.last_error.category is ErrorCategory.TIMEOUT
        assert events[-1].is_terminal

    def test_cancel_kills_background_children(self, tmp_path: Path, make_script, make_orchestrator) -> None:
        """Cancelling stops processes the script started, not just the script."""
        make_script('sleep 30 &\necho $! > child.pid\necho "Checking prerequisites"\nwait')
        orchestrator = make_orchestrator()

        async def scenario() -> WorkflowRun:
            run = orchestrator.launch("setup")
            assert run is not None
            async for event in orchestrator.stream_events():
                if event.kind is EventKind.LINE:
                    orchestrator.cancel()
            return run

        run = asyncio.run(scenario())
        assert run.last_error.category is ErrorCategory.CANCELLED
        child = int((tmp_path / "child.pid").read_text().strip())
        assert _process_gone(child)


class TestExportLog:
    """Tests for writing the output log to disk."""

    def test_read_back_matches_output(self, tmp_path: Path, make_script, make_orchestrator) -> None:
        """The exported file equals the output lines joined by newlines."""
        make_script('echo "first"\necho "second"\nexit 2')
        orchestrator = make_orchestrator()
        run, _ = asyncio.run(_collect(orchestrator, "cleanup"))

        path = orchestrator.export_log(now=datetime(2024, 3, 5, 14, 30, 9))

        assert path == tmp_path / "logs" / "netlab-lab-output_2024-03-05_14-30-09.txt"
        assert path.read_text(encoding="utf-8") == "\n".join(run.output_log)

    def test_export_during_run(self, make_script, make_orchestrator) -> None:
        """Exporting mid-run writes the lines received so far."""
        make_script('echo "Checking prerequisites..."\nexec sleep 30')
        orchestrator = make_orchestrator()

        async def scenario() -> Path:
            assert orchestrator.launch("setup") is not None
            exported = None
            async for event in orchestrator.stream_events():
                if event.kind is EventKind.LINE:
                    exported = orchestrator.export_log()
                    orchestrator.cancel()
            return exported

        path = asyncio.run(scenario())
        assert path.read_text(encoding="utf-8") == "Checking prerequisites..."

    def test_nothing_to_export(self, make_orchestrator) -> None:
        """Exporting before any run raises ExportError."""
        with pytest.raises(ExportError, match="No lab output"):
            make_orchestrator().export_log()

    def test_unwritable_directory(self, tmp_path: Path, make_script, make_orchestrator) -> None:
        """A logs path blocked by a file raises ExportError with the path."""
        make_script('echo "line"')
        orchestrator = make_orchestrator()
        asyncio.run(_collect(orchestrator, "cleanup"))
        (tmp_path / "logs").write_text("not a directory", encoding="utf-8")

        with pytest.raises(ExportError) as exc_info:
            orchestrator.export_log()
        assert "path" in exc_info.value.details


class TestPaths:
    """Tests for resolving the script and capture paths."""

    def test_require_entry_point_missing(self, make_orchestrator) -> None:
        """A missing script raises MissingEntryPointError with the resolved path."""
        with pytest.raises(MissingEntryPointError) as exc_info:
            make_orchestrator("nope.sh").require_entry_point()
        assert exc_info.value.path.endswith("nope.sh")

    def test_relative_paths_resolve_against_cwd(self, tmp_path: Path, make_script, make_orchestrator) -> None:
        """Relative script paths are found under the project root."""
        make_script("echo hi")
        assert make_orchestrator("k8s_lab.sh").require_entry_point() == tmp_path / "k8s_lab.sh"

    def test_artifact_ready(self, make_orchestrator, create_capture: Path) -> None:
        """The capture check looks at the configured file."""
        orchestrator = make_orchestrator()
        assert orchestrator.artifact_path == create_capture
        assert orchestrator.artifact_ready() is True
