"""Output interpretation for the lab workflow script.

Two ordered tables drive everything here:

- PROGRESS_MARKERS maps milestone lines printed by the lab script to a
  percentage complete.
- FAULT_SIGNATURES maps the combined output of a failed run to an
  ErrorReport with a short message and remediation steps.

Both tables are scanned top to bottom and the first matching entry wins,
so the order of entries is part of their meaning.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

__all__ = [
    "ErrorCategory",
    "ErrorReport",
    "ProgressMarker",
    "FaultSignature",
    "PROGRESS_MARKERS",
    "FAULT_SIGNATURES",
    "estimate_progress",
    "classify_failure",
    "classify_spawn_error",
    "missing_entry_point_report",
    "timeout_report",
    "artifact_missing_report",
    "cancelled_report",
]

Predicate = Callable[[str], bool]


class ErrorCategory(str, Enum):
    """Why a workflow run failed."""

    MISSING_ENTRY_POINT = "missing_entry_point"
    MISSING_DEPENDENCY = "missing_dependency"
    PERMISSION = "permission"
    RESOURCE_EXHAUSTION = "resource_exhaustion"
    NETWORK = "network"
    DAEMON_NOT_RUNNING = "daemon_not_running"
    TIMEOUT = "timeout"
    ARTIFACT_MISSING = "artifact_missing"
    CANCELLED = "cancelled"
    GENERIC = "generic"


@dataclass(frozen=True)
class ErrorReport:
    """Classified failure of one workflow run."""

    category: ErrorCategory
    user_message: str
    remediation: str
    raw_output: str = ""


def _has_any(*needles: str) -> Predicate:
    return lambda text: any(needle in text for needle in needles)


def _has_all(*needles: str) -> Predicate:
    return lambda text: all(needle in text for needle in needles)


def _either(*predicates: Predicate) -> Predicate:
    return lambda text: any(predicate(text) for predicate in predicates)


# ---------------------------------------------------------------------------
# Progress estimation
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ProgressMarker:
    """A milestone line and the percentage it represents."""

    name: str
    matches: Predicate
    percent: float


PROGRESS_MARKERS: tuple[ProgressMarker, ...] = (
    ProgressMarker(
        "prerequisites",
        _has_any("checking prerequisites", "checking docker"),
        5.0,
    ),
    ProgressMarker("cluster_create", _has_all("creating", "cluster"), 15.0),
    ProgressMarker(
        "cluster_ready",
        _has_all("cluster", "created successfully"),
        30.0,
    ),
    ProgressMarker("nginx_deploy", _has_any("deploying nginx"), 40.0),
    ProgressMarker("nginx_ready", _has_any("nginx deployed successfully"), 55.0),
    ProgressMarker("busybox_deploy", _has_any("deploying busybox"), 65.0),
    ProgressMarker(
        "busybox_ready",
        _has_any("busybox pod deployed successfully"),
        75.0,
    ),
    ProgressMarker(
        "capture_setup",
        _has_any("setting up packet capture", "installing tcpdump"),
        80.0,
    ),
    ProgressMarker("capture_start", _has_any("starting packet capture"), 85.0),
    ProgressMarker("http_request", _has_any("making http request"), 90.0),
    ProgressMarker(
        "capture_copy",
        _has_any("copying packet capture", "packet capture saved"),
        95.0,
    ),
    ProgressMarker(
        "complete",
        _either(_has_any("lab setup completed"), _has_all("success", "capture")),
        100.0,
    ),
)


def estimate_progress(line: str) -> Optional[float]:
    """Return the percentage a line represents, or None if it is not a milestone.

    Matching is case-insensitive. Callers keep the running maximum.
    """
    text = line.lower()
    for marker in PROGRESS_MARKERS:
        if marker.matches(text):
            return marker.percent
    return None


# ---------------------------------------------------------------------------
# Failure classification
# ---------------------------------------------------------------------------

_TROUBLESHOOT_TAIL = (
    "\n• Run 'netlab doctor' to check all dependencies"
    "\n• Check the raw output below for specific error details"
)


@dataclass(frozen=True)
class FaultSignature:
    """A recognizable failure in lab script output."""

    category: ErrorCategory
    matches: Predicate
    user_message: str
    remediation: str


def _tool_missing(tool: str) -> Predicate:
    return _has_any(
        f"{tool}: command not found",
        f"{tool}: not found",
        f"{tool} not found",
        f"{tool} is not installed",
    )


FAULT_SIGNATURES: tuple[FaultSignature, ...] = (
    # A required tool is missing
    FaultSignature(
        ErrorCategory.MISSING_DEPENDENCY,
        _has_any("missing required dependencies"),
        "🧰 Required tools are missing",
        "The lab script could not find the tools it needs.\n"
        "• macOS: 'brew install docker kind kubernetes-cli tcpdump wireshark'\n"
        "• Linux: Use your package manager to install the listed tools\n"
        "• Run 'netlab doctor' to see exactly what is missing",
    ),
    FaultSignature(
        ErrorCategory.MISSING_DEPENDENCY,
        _tool_missing("docker"),
        "🐳 Docker is not installed",
        "Please install Docker:\n"
        "• macOS: Download Docker Desktop from docker.com\n"
        "• Linux: Run 'curl -fsSL https://get.docker.com | sh'\n"
        "• Then restart your terminal",
    ),
    FaultSignature(
        ErrorCategory.MISSING_DEPENDENCY,
        _tool_missing("kind"),
        "☸️  kind is not installed",
        "Please install kind:\n"
        "• macOS: 'brew install kind'\n"
        "• Linux: 'curl -Lo ./kind https://kind.sigs.k8s.io/dl/v0.20.0/kind-linux-amd64'\n"
        "• Then: 'chmod +x ./kind && sudo mv ./kind /usr/local/bin/kind'",
    ),
    FaultSignature(
        ErrorCategory.MISSING_DEPENDENCY,
        _tool_missing("kubectl"),
        "☸️  kubectl is not installed",
        "Please install kubectl:\n"
        "• macOS: 'brew install kubectl'\n"
        "• Linux: Follow kubernetes.io/docs/tasks/tools/install-kubectl-linux/",
    ),
    FaultSignature(
        ErrorCategory.MISSING_DEPENDENCY,
        _tool_missing("tcpdump"),
        "📡 tcpdump is not installed",
        "Please install tcpdump:\n"
        "• macOS: 'brew install tcpdump'\n"
        "• Linux: 'sudo apt-get install tcpdump' or 'sudo yum install tcpdump'",
    ),
    FaultSignature(
        ErrorCategory.MISSING_DEPENDENCY,
        _tool_missing("tshark"),
        "📡 tshark is not installed",
        "Please install Wireshark (includes tshark):\n"
        "• macOS: 'brew install wireshark'\n"
        "• Linux: 'sudo apt-get install tshark' or 'sudo yum install wireshark'",
    ),
    # Permission problems outside of Docker
    FaultSignature(
        ErrorCategory.PERMISSION,
        lambda text: "permission denied" in text and "docker" not in text,
        "🔒 Permission denied",
        "This usually means:\n"
        "• The lab script is not executable\n"
        "• Insufficient privileges\n\n"
        "Try:\n"
        "• Run 'chmod +x ./scripts/k8s_lab.sh'\n"
        "• Check if you need sudo for certain operations",
    ),
    # Disk and resource exhaustion
    FaultSignature(
        ErrorCategory.RESOURCE_EXHAUSTION,
        _has_any("no space left", "disk full"),
        "💾 Insufficient disk space",
        "Please:\n"
        "• Free up disk space (at least 2GB recommended)\n"
        "• Clean up Docker: 'docker system prune -a'\n"
        "• Remove unused kind clusters: 'kind get clusters' then "
        "'kind delete cluster --name <cluster>'",
    ),
    # Network connectivity
    FaultSignature(
        ErrorCategory.NETWORK,
        lambda text: "network" in text and ("unreachable" in text or "timeout" in text),
        "🌐 Network connectivity issue",
        "This usually means:\n"
        "• No internet connection for downloading images\n"
        "• Corporate firewall blocking Docker registry\n"
        "• DNS resolution issues\n\n"
        "Try:\n"
        "• Check internet connectivity\n"
        "• Configure Docker to use corporate proxy if needed",
    ),
    # Docker daemon not running or unreachable
    FaultSignature(
        ErrorCategory.DAEMON_NOT_RUNNING,
        _has_any("docker failed to start"),
        "🐳 Docker startup failed",
        "Docker could not be started automatically.\n"
        "Please:\n"
        "• Start Docker Desktop manually (macOS)\n"
        "• Run 'sudo systemctl start docker' (Linux)\n"
        "• Wait for Docker to be fully ready\n"
        "• Then try the lab again",
    ),
    FaultSignature(
        ErrorCategory.DAEMON_NOT_RUNNING,
        lambda text: "docker" in text
        and ("permission denied" in text or "cannot connect" in text or "is not running" in text),
        "🐳 Docker connection issue",
        "The Docker daemon is not reachable.\n"
        "• Start Docker Desktop manually (macOS)\n"
        "• Run 'sudo systemctl start docker' (Linux)\n"
        "• Add your user to the docker group: 'sudo usermod -aG docker $USER'",
    ),
    # Cluster creation failing for any other reason is almost always resources
    FaultSignature(
        ErrorCategory.RESOURCE_EXHAUSTION,
        _has_all("creating cluster", "failed"),
        "☸️  Failed to create kind cluster",
        "This usually means:\n"
        "• Docker is not running properly\n"
        "• Insufficient system resources\n"
        "• Port conflicts\n\n"
        "Try:\n"
        "• Restart Docker\n"
        "• Free up disk space\n"
        "• Run 'kind delete cluster --name netlab-osi' to clean up",
    ),
)


def classify_failure(output: str, exit_code: Optional[int], mode: str = "setup") -> ErrorReport:
    """Classify a failed run from its combined output.

    Args:
        output: Everything the script printed, stdout and stderr combined
        exit_code: The script's exit status
        mode: Workflow mode, used in the generic message

    Returns:
        The report of the first matching signature, or a generic report
        that names the exit status.
    """
    text = output.lower()
    for signature in FAULT_SIGNATURES:
        if signature.matches(text):
            return ErrorReport(
                category=signature.category,
                user_message=signature.user_message,
                remediation=signature.remediation,
                raw_output=output,
            )

    return ErrorReport(
        category=ErrorCategory.GENERIC,
        user_message=f"❌ Lab {mode} script failed (exit status {exit_code})",
        remediation=(
            "The lab script encountered an error. Common solutions:"
            f"\n• Try running './scripts/k8s_lab.sh {mode}' manually for detailed output"
            "\n• Make sure Docker is running and you have sufficient resources"
            + _TROUBLESHOOT_TAIL
        ),
        raw_output=output,
    )


def classify_spawn_error(exc: OSError, entry_point: str) -> ErrorReport:
    """Classify an OSError raised while starting the lab script."""
    if isinstance(exc, PermissionError):
        return ErrorReport(
            category=ErrorCategory.PERMISSION,
            user_message="🔒 Permission denied",
            remediation=f"The lab script is not executable.\nTry:\n• Run 'chmod +x {entry_point}'",
            raw_output=str(exc),
        )
    return ErrorReport(
        category=ErrorCategory.GENERIC,
        user_message=f"❌ Could not start lab script: {exc.strerror or exc}",
        remediation="Check that the lab script is a valid executable." + _TROUBLESHOOT_TAIL,
        raw_output=str(exc),
    )


def missing_entry_point_report(entry_point: str) -> ErrorReport:
    return ErrorReport(
        category=ErrorCategory.MISSING_ENTRY_POINT,
        user_message=f"❌ Lab script not found: {entry_point}",
        remediation=(
            "Troubleshooting:\n"
            "• Make sure you're running NetLab from the project root directory\n"
            "• Check that the scripts directory exists: 'ls -la scripts/'"
        ),
    )


def timeout_report(timeout: float, output: str = "") -> ErrorReport:
    return ErrorReport(
        category=ErrorCategory.TIMEOUT,
        user_message=f"⏱️  Lab script did not finish within {timeout:g} seconds",
        remediation=(
            "The script was stopped.\n"
            "• Check Docker and cluster health with 'kind get clusters'\n"
            "• Raise workflow_timeout in .netlab.yaml if your machine is slow"
            + _TROUBLESHOOT_TAIL
        ),
        raw_output=output,
    )


def artifact_missing_report(artifact: str, output: str = "") -> ErrorReport:
    return ErrorReport(
        category=ErrorCategory.ARTIFACT_MISSING,
        user_message="❌ Lab setup finished but the packet capture was not created",
        remediation=(
            f"Expected capture file: {artifact}\n"
            "• Press 'a' to re-run the capture step\n"
            "• Or press 'c' to clean up and 'r' to run setup again"
            + _TROUBLESHOOT_TAIL
        ),
        raw_output=output,
    )


def cancelled_report(output: str = "") -> ErrorReport:
    return ErrorReport(
        category=ErrorCategory.CANCELLED,
        user_message="⏹️  Lab run cancelled",
        remediation="Press 'c' to clean up any partially created resources.",
        raw_output=output,
    )
