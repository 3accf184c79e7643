"""Asynchronous runner for the lab workflow script.

The orchestrator owns at most one WorkflowRun at a time. A launch spawns
``<entry_point> <mode>`` and starts a reader task that turns the child's
combined stdout/stderr into OutputEvents on an asyncio.Queue. The UI
consumes them through ``stream_events()``, which is also the only place
a run is mutated after launch.

Example:
    orchestrator = LabOrchestrator("./scripts/k8s_lab.sh", "modules/01-osi-model/assets/https-nginx.pcap")
    orchestrator.launch("setup")
    async for event in orchestrator.stream_events():
        ...
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import os
import signal
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import AsyncIterator, List, Optional, Union

from rich.text import Text

from netlab.lib.errors import ExportError, MissingEntryPointError, WorkflowError
from netlab.lib.observability import PhaseTimer
from netlab.lib.patterns import (
    ErrorReport,
    artifact_missing_report,
    cancelled_report,
    classify_failure,
    classify_spawn_error,
    estimate_progress,
    missing_entry_point_report,
    timeout_report,
)

logger = logging.getLogger(__name__)

__all__ = [
    "DEFAULT_WORKFLOW_TIMEOUT",
    "CLEANUP_WARNING",
    "EventKind",
    "LabOrchestrator",
    "OutputEvent",
    "WorkflowMode",
    "WorkflowPhase",
    "WorkflowRun",
]

DEFAULT_WORKFLOW_TIMEOUT = 900.0
CLEANUP_WARNING = "⚠️ Cleanup completed with warnings"
LOG_EXPORT_PREFIX = "netlab-lab-output_"
LOG_TIMESTAMP_FORMAT = "%Y-%m-%d_%H-%M-%S"


class WorkflowMode(str, Enum):
    """Argument passed to the lab script."""

    SETUP = "setup"
    CLEANUP = "cleanup"
    CAPTURE = "capture"


class WorkflowPhase(str, Enum):
    NOT_STARTED = "not_started"
    STREAMING = "streaming"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class EventKind(str, Enum):
    LINE = "line"
    FINISHED = "finished"


@dataclass(frozen=True)
class OutputEvent:
    """One output line, or the terminal event of a run."""

    kind: EventKind
    line: str = ""
    success: bool = False
    output: str = ""
    error: Optional[ErrorReport] = None
    exit_code: Optional[int] = None
    warnings: bool = False

    @classmethod
    def line_event(cls, line: str) -> "OutputEvent":
        return cls(kind=EventKind.LINE, line=line)

    @classmethod
    def finished(
        cls,
        *,
        success: bool,
        output: str = "",
        error: Optional[ErrorReport] = None,
        exit_code: Optional[int] = None,
        warnings: bool = False,
    ) -> "OutputEvent":
        return cls(
            kind=EventKind.FINISHED,
            success=success,
            output=output,
            error=error,
            exit_code=exit_code,
            warnings=warnings,
        )

    @property
    def is_terminal(self) -> bool:
        return self.kind is EventKind.FINISHED


@dataclass
class WorkflowRun:
    """State of one lab script invocation."""

    mode: WorkflowMode
    phase: WorkflowPhase = WorkflowPhase.NOT_STARTED
    progress: float = 0.0
    output_log: List[str] = field(default_factory=list)
    last_error: Optional[ErrorReport] = None
    exit_code: Optional[int] = None
    warnings: bool = False

    @property
    def streaming(self) -> bool:
        return self.phase is WorkflowPhase.STREAMING

    @property
    def finished(self) -> bool:
        return self.phase in (WorkflowPhase.SUCCEEDED, WorkflowPhase.FAILED)

    @property
    def succeeded(self) -> bool:
        return self.phase is WorkflowPhase.SUCCEEDED

    def apply(self, event: OutputEvent) -> None:
        """Fold one event into the run. Events after the terminal one are ignored."""
        if self.finished:
            return

        if not event.is_terminal:
            self.output_log.append(event.line)
            estimate = estimate_progress(event.line)
            if estimate is not None and estimate > self.progress:
                self.progress = estimate
            return

        self.exit_code = event.exit_code
        self.warnings = event.warnings
        if event.success:
            self.phase = WorkflowPhase.SUCCEEDED
            self.progress = 100.0
            if event.warnings:
                self.output_log.extend(["", CLEANUP_WARNING])
        else:
            self.phase = WorkflowPhase.FAILED
            self.last_error = event.error
            if event.error is not None:
                self.output_log.extend(_report_lines(event.error))

    def raise_for_status(self) -> None:
        """Raise WorkflowError if the run failed."""
        if self.phase is WorkflowPhase.FAILED and self.last_error is not None:
            raise WorkflowError(self.last_error)


def _report_lines(report: ErrorReport) -> List[str]:
    return ["", report.user_message, *report.remediation.splitlines()]


def _clean_line(raw: bytes) -> str:
    # The lab script colours its [INFO]/[ERROR] prefixes.
    return Text.from_ansi(raw.decode("utf-8", errors="replace")).plain.rstrip()


class LabOrchestrator:
    """Launches and supervises the lab workflow script.

    Args:
        entry_point: Path to the lab script, relative to ``cwd`` unless absolute
        artifact: Capture file whose existence confirms a successful setup
        logs_dir: Directory for exported output logs
        timeout: Seconds before a running script is killed
        cwd: Working directory for the script and relative paths
    """

    def __init__(
        self,
        entry_point: Union[str, Path],
        artifact: Union[str, Path],
        logs_dir: Union[str, Path] = "logs",
        timeout: float = DEFAULT_WORKFLOW_TIMEOUT,
        cwd: Optional[Union[str, Path]] = None,
    ) -> None:
        self.cwd = Path(cwd) if cwd else Path.cwd()
        self.entry_point = Path(entry_point)
        self.artifact = Path(artifact)
        self.logs_dir = Path(logs_dir)
        self.timeout = timeout

        self.run: Optional[WorkflowRun] = None
        self._queue: Optional[asyncio.Queue[OutputEvent]] = None
        self._reader: Optional[asyncio.Task[None]] = None
        self._process: Optional[asyncio.subprocess.Process] = None
        self._terminal_sent = False

    def _resolve(self, path: Path) -> Path:
        return path if path.is_absolute() else self.cwd / path

    @property
    def is_streaming(self) -> bool:
        return self.run is not None and self.run.streaming

    @property
    def artifact_path(self) -> Path:
        return self._resolve(self.artifact)

    def artifact_ready(self) -> bool:
        """Whether the lab's packet capture exists."""
        return self.artifact_path.exists()

    def require_entry_point(self) -> Path:
        """Resolve the lab script path.

        Raises:
            MissingEntryPointError: The script does not exist.
        """
        entry = self._resolve(self.entry_point)
        if not entry.exists():
            raise MissingEntryPointError(f"Lab script not found: {entry}", path=str(entry))
        return entry

    def launch(self, mode: Union[str, WorkflowMode]) -> Optional[WorkflowRun]:
        """Start a workflow run. Must be called from a running event loop.

        Returns:
            The new run, or None if a run is already streaming.
        """
        if self.is_streaming:
            logger.info("Ignoring launch of %s: a lab run is already streaming", mode)
            return None

        mode = WorkflowMode(mode)
        queue: asyncio.Queue[OutputEvent] = asyncio.Queue()
        self._queue = queue
        self._terminal_sent = False

        try:
            entry = self.require_entry_point()
        except MissingEntryPointError as exc:
            report = missing_entry_point_report(str(self.entry_point))
            logger.error("%s", exc.message)
            self.run = WorkflowRun(
                mode=mode,
                phase=WorkflowPhase.FAILED,
                output_log=_report_lines(report)[1:],
                last_error=report,
            )
            self._send_terminal(queue, OutputEvent.finished(success=False, error=report))
            return self.run

        self.run = WorkflowRun(mode=mode, phase=WorkflowPhase.STREAMING)
        logger.info("Launching lab script %s %s", entry, mode.value)
        self._reader = asyncio.create_task(self._supervise(entry, mode, queue))
        self._reader.add_done_callback(lambda task: self._on_reader_done(task, queue))
        return self.run

    async def stream_events(self) -> AsyncIterator[OutputEvent]:
        """Deliver the current run's events in order, applying each to the run.

        Stops after the terminal event.
        """
        queue, run = self._queue, self.run
        if queue is None or run is None:
            return
        while True:
            event = await queue.get()
            run.apply(event)
            yield event
            if event.is_terminal:
                break

    def cancel(self) -> None:
        """Kill the running script, if any. The run still gets a terminal event."""
        if self._process is not None:
            self._kill(self._process)
        if self._reader is not None and not self._reader.done():
            logger.info("Cancelling lab run")
            self._reader.cancel()

    def export_log(self, now: Optional[datetime] = None) -> Path:
        """Write a snapshot of the run's output to the logs directory.

        Raises:
            ExportError: There is no output, or the file cannot be written.
        """
        lines = list(self.run.output_log) if self.run is not None else []
        if not lines:
            raise ExportError(
                "No lab output to export",
                suggestion="Run the lab first with 'r'",
            )

        logs_dir = self._resolve(self.logs_dir)
        stamp = (now or datetime.now()).strftime(LOG_TIMESTAMP_FORMAT)
        path = logs_dir / f"{LOG_EXPORT_PREFIX}{stamp}.txt"
        try:
            logs_dir.mkdir(parents=True, exist_ok=True)
            path.write_text("\n".join(lines), encoding="utf-8")
        except OSError as exc:
            raise ExportError(
                "Failed to write lab output log",
                path=str(path),
                cause=exc,
            ) from exc

        logger.info("Exported %d lines of lab output to %s", len(lines), path)
        return path

    def _send_terminal(self, queue: asyncio.Queue[OutputEvent], event: OutputEvent) -> None:
        if self._terminal_sent:
            return
        self._terminal_sent = True
        queue.put_nowait(event)

    def _on_reader_done(self, task: asyncio.Task[None], queue: asyncio.Queue[OutputEvent]) -> None:
        # A reader cancelled before it ever ran never reaches its own handler.
        if task.cancelled():
            self._send_terminal(queue, OutputEvent.finished(success=False, error=cancelled_report()))
        elif task.exception() is not None:
            exc = task.exception()
            logger.error("Lab reader task crashed: %s", exc, exc_info=exc)
            report = classify_failure(str(exc), None)
            self._send_terminal(queue, OutputEvent.finished(success=False, error=report))

    @staticmethod
    def _kill(process: asyncio.subprocess.Process) -> None:
        # The script leads its own session; killing the group also stops
        # children it started, which may outlive it and hold its output open.
        if os.name == "posix" and hasattr(os, "killpg"):
            with contextlib.suppress(ProcessLookupError, PermissionError):
                os.killpg(process.pid, signal.SIGKILL)
                return
        if process.returncode is None:
            with contextlib.suppress(ProcessLookupError):
                process.kill()

    async def _supervise(
        self,
        entry: Path,
        mode: WorkflowMode,
        queue: asyncio.Queue[OutputEvent],
    ) -> None:
        timer = PhaseTimer(f"lab {mode.value}")
        lines: List[str] = []

        try:
            process = await asyncio.create_subprocess_exec(
                str(entry),
                mode.value,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.STDOUT,
                cwd=str(self.cwd),
                start_new_session=True,
            )
        except OSError as exc:
            logger.error("Could not start lab script %s: %s", entry, exc)
            report = classify_spawn_error(exc, str(self.entry_point))
            self._send_terminal(queue, OutputEvent.finished(success=False, error=report))
            return

        self._process = process
        try:
            exit_code = await asyncio.wait_for(
                self._pump(process, lines, queue), timeout=self.timeout
            )
        except asyncio.TimeoutError:
            logger.error("Lab %s timed out after %.0fs", mode.value, self.timeout)
            self._kill(process)
            await process.wait()
            output = "\n".join(lines)
            event = OutputEvent.finished(
                success=False,
                output=output,
                error=timeout_report(self.timeout, output),
                exit_code=process.returncode,
            )
        except asyncio.CancelledError:
            self._kill(process)
            self._send_terminal(
                queue,
                OutputEvent.finished(success=False, error=cancelled_report("\n".join(lines))),
            )
            raise
        else:
            event = self._completion_event(mode, exit_code, "\n".join(lines))
        finally:
            self._process = None

        timer.stop()
        logger.info(
            "Lab %s finished in %.1fs (exit=%s, success=%s)",
            mode.value,
            timer.duration,
            event.exit_code,
            event.success,
        )
        self._send_terminal(queue, event)

    @staticmethod
    async def _pump(
        process: asyncio.subprocess.Process,
        lines: List[str],
        queue: asyncio.Queue[OutputEvent],
    ) -> int:
        assert process.stdout is not None
        async for raw in process.stdout:
            line = _clean_line(raw)
            if not line.strip():
                continue
            lines.append(line)
            queue.put_nowait(OutputEvent.line_event(line))
        return await process.wait()

    def _completion_event(self, mode: WorkflowMode, exit_code: int, output: str) -> OutputEvent:
        if mode is WorkflowMode.CLEANUP:
            if exit_code != 0:
                logger.warning("Lab cleanup exited with status %d", exit_code)
            return OutputEvent.finished(
                success=True,
                output=output,
                exit_code=exit_code,
                warnings=exit_code != 0,
            )

        if exit_code != 0:
            report = classify_failure(output, exit_code, mode.value)
            logger.warning("Lab %s failed: %s", mode.value, report.category.value)
            return OutputEvent.finished(
                success=False, output=output, error=report, exit_code=exit_code
            )

        if not self.artifact_ready():
            logger.warning("Lab %s exited 0 but %s is missing", mode.value, self.artifact)
            return OutputEvent.finished(
                success=False,
                output=output,
                error=artifact_missing_report(str(self.artifact), output),
                exit_code=exit_code,
            )

        return OutputEvent.finished(success=True, output=output, exit_code=exit_code)
