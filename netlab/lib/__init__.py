"""Terminal-independent building blocks: tool probes, lab supervision, output patterns."""

from netlab.lib.dependencies import (
    MODULE_REQUIREMENTS,
    TOOL_REGISTRY,
    DependencyVerifier,
    ToolSpec,
    ToolState,
    ToolStatus,
    run_doctor,
)
from netlab.lib.errors import (
    ExportError,
    MissingEntryPointError,
    NetLabError,
    ProbeError,
    UnknownModuleError,
    WorkflowError,
)
from netlab.lib.orchestrator import (
    LabOrchestrator,
    OutputEvent,
    WorkflowMode,
    WorkflowPhase,
    WorkflowRun,
)
from netlab.lib.patterns import ErrorCategory, ErrorReport, classify_failure, estimate_progress

__all__ = [
    "MODULE_REQUIREMENTS",
    "TOOL_REGISTRY",
    "DependencyVerifier",
    "ToolSpec",
    "ToolState",
    "ToolStatus",
    "run_doctor",
    "ExportError",
    "MissingEntryPointError",
    "NetLabError",
    "ProbeError",
    "UnknownModuleError",
    "WorkflowError",
    "LabOrchestrator",
    "OutputEvent",
    "WorkflowMode",
    "WorkflowPhase",
    "WorkflowRun",
    "ErrorCategory",
    "ErrorReport",
    "classify_failure",
    "estimate_progress",
]
