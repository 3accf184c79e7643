"""External tool verification for NetLab modules.

Each module declares the command-line tools its labs need. Before a
module opens, the verifier runs every tool's version check with a bounded
timeout and reports one ToolStatus per tool:

- SATISFIED: the version check ran and exited 0
- MISSING: the executable could not be located
- PROBE_ERROR: anything else (non-zero exit, timeout, permission error)

PROBE_ERROR gates exactly like MISSING but is reported separately so the
user can tell "not installed" from "installed but broken".
"""

from __future__ import annotations

import functools
import logging
import platform
import subprocess
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Mapping, Optional, Sequence

from rich.console import Console
from rich.markup import escape

from netlab.lib.errors import ProbeError

logger = logging.getLogger(__name__)

__all__ = [
    "DEFAULT_PROBE_TIMEOUT",
    "MODULE_REQUIREMENTS",
    "TOOL_REGISTRY",
    "DependencyVerifier",
    "ToolSpec",
    "ToolState",
    "ToolStatus",
    "detect_os",
    "run_doctor",
]

DEFAULT_PROBE_TIMEOUT = 5.0


class ToolState(str, Enum):
    """Outcome of probing a single tool."""

    SATISFIED = "satisfied"
    MISSING = "missing"
    PROBE_ERROR = "error"


@dataclass(frozen=True)
class ToolSpec:
    """A registered external tool and how to check for it."""

    name: str
    command: str
    args: tuple[str, ...] = ("--version",)
    required: bool = False
    description: str = ""
    install_hints: Mapping[str, str] = field(default_factory=dict)

    def hint_for(self, os_name: str) -> Optional[str]:
        """Return the install hint for an OS, if one is known."""
        return self.install_hints.get(os_name)


@dataclass(frozen=True)
class ToolStatus:
    """Result of one probe. Immutable once produced."""

    name: str
    state: ToolState
    raw_output: str = ""
    remediation: Optional[str] = None
    required: bool = True

    @property
    def satisfied(self) -> bool:
        return self.state is ToolState.SATISFIED


TOOL_REGISTRY: tuple[ToolSpec, ...] = (
    ToolSpec(
        name="Docker",
        command="docker",
        args=("--version",),
        required=True,
        description="Docker for containerized network experiments",
        install_hints={
            "darwin": "brew install --cask docker",
            "linux": "curl -fsSL https://get.docker.com | sh",
        },
    ),
    ToolSpec(
        name="kubectl",
        command="kubectl",
        args=("version", "--client"),
        description="Kubernetes CLI for cluster networking modules",
        install_hints={
            "darwin": "brew install kubectl",
            "linux": (
                'curl -LO "https://dl.k8s.io/release/$(curl -L -s '
                'https://dl.k8s.io/release/stable.txt)/bin/linux/amd64/kubectl"'
            ),
        },
    ),
    ToolSpec(
        name="kind",
        command="kind",
        args=("version",),
        description="Kubernetes in Docker for local cluster setup",
        install_hints={
            "darwin": "brew install kind",
            "linux": (
                "curl -Lo ./kind https://kind.sigs.k8s.io/dl/v0.20.0/kind-linux-amd64"
                " && chmod +x ./kind && sudo mv ./kind /usr/local/bin/kind"
            ),
        },
    ),
    ToolSpec(
        name="tcpdump",
        command="tcpdump",
        args=("--version",),
        description="Network packet analyzer for traffic inspection",
        install_hints={
            "darwin": "brew install tcpdump",
            "linux": "sudo apt-get install tcpdump",
        },
    ),
    ToolSpec(
        name="tshark",
        command="tshark",
        args=("--version",),
        description="Wireshark command-line packet analyzer for the OSI lab",
        install_hints={
            "darwin": "brew install wireshark",
            "linux": "sudo apt-get install tshark",
        },
    ),
    ToolSpec(
        name="ip",
        command="ip",
        args=("-V",),
        description="Network configuration tool (Linux)",
        install_hints={"linux": "sudo apt-get install iproute2"},
    ),
    ToolSpec(
        name="iptables",
        command="iptables",
        args=("--version",),
        description="Firewall administration tool (Linux)",
        install_hints={"linux": "sudo apt-get install iptables"},
    ),
)

# What each module actually needs, in display order.
MODULE_REQUIREMENTS: Mapping[str, tuple[str, ...]] = {
    "01-osi-model": ("Docker", "kubectl", "kind", "tcpdump", "tshark"),
    "02-tcp-ip": ("tcpdump", "tshark"),
    "03-subnetting": ("ip",),
    "04-routing": ("ip", "iptables"),
    "05-k8s-networking": ("Docker", "kubectl", "kind"),
    "06-cni": ("Docker", "kubectl", "kind"),
    "07-service-mesh": ("Docker", "kubectl", "kind"),
}


@functools.lru_cache(maxsize=1)
def detect_os() -> str:
    """Identify the host OS once: "darwin", "linux", "windows" or "unknown"."""
    system = platform.system().lower()
    if system in ("darwin", "linux", "windows"):
        return system
    return "unknown"


def _run_version_check(spec: ToolSpec, timeout: float) -> str:
    """Run a tool's version command and return its trimmed stdout.

    Raises:
        FileNotFoundError: The executable is not on PATH.
        ProbeError: The command ran but failed, or did not finish in time.
    """
    cmd = [spec.command, *spec.args]
    try:
        completed = subprocess.run(
            cmd,
            capture_output=True,
            text=True,
            timeout=timeout,
            check=True,
        )
    # Missing executables are reported by the caller, not as ProbeError.
    except FileNotFoundError:
        raise
    except subprocess.TimeoutExpired as exc:
        raise ProbeError(
            f"{spec.name} did not answer within {timeout:g}s",
            tool=spec.name,
            cause=exc,
        ) from exc
    except subprocess.CalledProcessError as exc:
        output = (exc.stderr or exc.stdout or "").strip()
        raise ProbeError(
            f"{spec.name} exited with status {exc.returncode}",
            tool=spec.name,
            cause=exc,
            details={"output": output} if output else None,
        ) from exc
    except OSError as exc:
        raise ProbeError(
            f"{spec.name} could not be started",
            tool=spec.name,
            cause=exc,
        ) from exc
    return completed.stdout.strip()


class DependencyVerifier:
    """Probes the tools a module requires.

    The registry and requirement table are injectable so tests can
    describe tools that are guaranteed not to exist.
    """

    def __init__(
        self,
        registry: Iterable[ToolSpec] = TOOL_REGISTRY,
        requirements: Mapping[str, Sequence[str]] = MODULE_REQUIREMENTS,
        timeout: float = DEFAULT_PROBE_TIMEOUT,
        os_name: Optional[str] = None,
    ) -> None:
        self.tools = {spec.name: spec for spec in registry}
        self.requirements = requirements
        self.timeout = timeout
        self._os_name = os_name

    @property
    def os_name(self) -> str:
        return self._os_name or detect_os()

    def probe_tool(self, spec: ToolSpec) -> ToolStatus:
        """Probe one tool. Never raises."""
        try:
            output = _run_version_check(spec, self.timeout)
        except FileNotFoundError:
            logger.debug("Tool %s not found on PATH", spec.name)
            state, output = ToolState.MISSING, ""
        except ProbeError as exc:
            logger.warning("Probe for %s failed: %s", spec.name, exc.message)
            state, output = ToolState.PROBE_ERROR, str(exc)
        else:
            state = ToolState.SATISFIED

        remediation = None
        if state is not ToolState.SATISFIED:
            remediation = spec.hint_for(self.os_name)

        return ToolStatus(
            name=spec.name,
            state=state,
            raw_output=output,
            remediation=remediation,
            required=spec.required,
        )

    def probe(self, module_id: str) -> tuple[list[ToolStatus], bool]:
        """Probe every tool a module requires.

        Returns:
            The statuses in requirement order, and whether all are satisfied.
            A module without declared requirements returns ([], True).
        """
        statuses: list[ToolStatus] = []
        for tool_name in self.requirements.get(module_id, ()):
            spec = self.tools.get(tool_name)
            if spec is None:
                logger.warning(
                    "Module %s requires unregistered tool %s", module_id, tool_name
                )
                continue
            statuses.append(self.probe_tool(spec))

        all_satisfied = all(status.satisfied for status in statuses)
        logger.info(
            "Dependency check for %s: %d tools, all satisfied=%s",
            module_id,
            len(statuses),
            all_satisfied,
        )
        return statuses, all_satisfied

    def probe_all(self) -> list[ToolStatus]:
        """Probe every registered tool once."""
        return [self.probe_tool(spec) for spec in self.tools.values()]

    def generate_remediation(self, statuses: Iterable[ToolStatus]) -> str:
        """Build the installation guide for every unsatisfied tool.

        Tools without a hint for the current OS are still listed, but get
        no per-tool install line.
        """
        unsatisfied = [status for status in statuses if not status.satisfied]
        if not unsatisfied:
            return ""

        lines = [f"Detected OS: {self.os_name}", ""]

        missing = [s.name for s in unsatisfied if s.state is ToolState.MISSING]
        broken = [s.name for s in unsatisfied if s.state is ToolState.PROBE_ERROR]
        if missing:
            lines.append("Missing tools: " + ", ".join(missing))
        if broken:
            lines.append("Tools that failed their version check: " + ", ".join(broken))
        lines.append("")

        without_hint = []
        for status in unsatisfied:
            if status.remediation:
                lines.append(f"• {status.name}:")
                lines.append(f"  {status.remediation}")
                lines.append("")
            else:
                without_hint.append(status.name)

        if without_hint:
            lines.append(
                f"No install hint for {self.os_name}: " + ", ".join(without_hint)
            )
            lines.append("")

        lines.append(
            "After installation, choose 'Check Again' or run 'netlab doctor' to verify."
        )
        return "\n".join(lines)


def run_doctor(console: Console, verifier: Optional[DependencyVerifier] = None) -> int:
    """Probe every registered tool and print a diagnostics report.

    Returns:
        0 when every required tool is satisfied, 1 otherwise.
    """
    verifier = verifier or DependencyVerifier()

    console.print("[bold blue]🔍 NetLab Environment Diagnostics[/bold blue]")
    console.print()

    required_ok = True
    optional_missing: list[str] = []

    for status in verifier.probe_all():
        if status.satisfied:
            first_line = status.raw_output.splitlines()[0] if status.raw_output else ""
            console.print(f"[bold green]✓[/bold green] {status.name}: {escape(first_line)}")
        elif status.state is ToolState.PROBE_ERROR:
            console.print(f"[bold red]✗[/bold red] {status.name}: Error running command")
            if status.required:
                required_ok = False
        elif status.required:
            console.print(f"[bold red]✗[/bold red] {status.name}: REQUIRED - Not found")
            required_ok = False
        else:
            console.print(f"[bold yellow]⚠[/bold yellow] {status.name}: Optional - Not found")
            optional_missing.append(status.name)

    console.print()

    if required_ok and not optional_missing:
        console.print("[bold green]🎉 All systems go! NetLab is ready to run.[/bold green]")
    elif required_ok:
        console.print("[bold green]✅ Core requirements met![/bold green]")
        console.print(
            "[bold yellow]⚠️  Optional tools missing: "
            + ", ".join(optional_missing)
            + "[/bold yellow]"
        )
        console.print("   Some advanced modules may have limited functionality.")
    else:
        console.print("[bold red]❌ Missing required dependencies![/bold red]")
        console.print("   Please install the missing tools and run 'netlab doctor' again.")

    return 0 if required_ok else 1
