"""Structured exception hierarchy for NetLab.

Provides specific exception types for the failure modes of dependency
probing, lab workflow orchestration and log export, with context for
troubleshooting.
"""

from __future__ import annotations

from typing import Any, Dict, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from netlab.lib.patterns import ErrorReport

__all__ = [
    "NetLabError",
    "ProbeError",
    "MissingEntryPointError",
    "WorkflowError",
    "ExportError",
    "UnknownModuleError",
]


class NetLabError(Exception):
    """Base exception for all NetLab errors.

    Provides structured error information for debugging.
    """

    def __init__(
        self,
        message: str,
        *,
        details: Optional[Dict[str, Any]] = None,
        suggestion: Optional[str] = None,
    ) -> None:
        self.message = message
        self.details = details or {}
        self.suggestion = suggestion

        parts = [message]

        if details:
            detail_lines = [f"  {k}: {v}" for k, v in details.items()]
            parts.append("\nDetails:")
            parts.extend(detail_lines)

        if suggestion:
            parts.append(f"\nSuggestion: {suggestion}")

        super().__init__("\n".join(parts) if len(parts) > 1 else message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for structured logging."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
            "suggestion": self.suggestion,
        }


class ProbeError(NetLabError):
    """A tool's version check failed for a reason other than absence.

    Raised by the probe runner and converted into a ToolStatus by the
    dependency verifier; it never reaches the UI as an exception.
    """

    def __init__(
        self,
        message: str,
        *,
        tool: Optional[str] = None,
        cause: Optional[BaseException] = None,
        **kwargs: Any,
    ) -> None:
        self.tool = tool
        self.cause = cause

        details = kwargs.pop("details", None) or {}
        if tool:
            details["tool"] = tool
        if cause:
            details["cause"] = str(cause)
            details["cause_type"] = type(cause).__name__

        super().__init__(message, details=details, **kwargs)


class MissingEntryPointError(NetLabError):
    """The lab workflow script does not exist."""

    def __init__(
        self,
        message: str,
        *,
        path: Optional[str] = None,
        **kwargs: Any,
    ) -> None:
        self.path = path

        details = kwargs.pop("details", None) or {}
        if path:
            details["path"] = path

        suggestion = kwargs.pop("suggestion", None)
        if not suggestion:
            suggestion = (
                "Run NetLab from the project root directory so the lab "
                "script can be found."
            )

        super().__init__(message, details=details, suggestion=suggestion, **kwargs)


class WorkflowError(NetLabError):
    """A lab workflow run failed.

    Wraps the classified ErrorReport. Raised by WorkflowRun.raise_for_status
    when a finished run is checked.
    """

    def __init__(
        self,
        report: "ErrorReport",
        **kwargs: Any,
    ) -> None:
        self.report = report

        details = kwargs.pop("details", None) or {}
        details["category"] = report.category.value

        super().__init__(
            report.user_message,
            details=details,
            suggestion=report.remediation,
            **kwargs,
        )


class ExportError(NetLabError):
    """The lab output log could not be exported.

    Raised when the logs directory cannot be created, the file cannot be
    written, or there is no output to export.
    """

    def __init__(
        self,
        message: str,
        *,
        path: Optional[str] = None,
        cause: Optional[BaseException] = None,
        **kwargs: Any,
    ) -> None:
        self.path = path
        self.cause = cause

        details = kwargs.pop("details", None) or {}
        if path:
            details["path"] = path
        if cause:
            details["cause"] = str(cause)

        super().__init__(message, details=details, **kwargs)


class UnknownModuleError(NetLabError):
    """A module id was requested that is not in the catalog."""

    def __init__(
        self,
        module_id: str,
        *,
        known: Optional[list[str]] = None,
        **kwargs: Any,
    ) -> None:
        self.module_id = module_id
        self.known = known or []

        suggestion = kwargs.pop("suggestion", None)
        if not suggestion and self.known:
            suggestion = "Known modules: " + ", ".join(self.known)

        super().__init__(
            f"Unknown module: {module_id}",
            suggestion=suggestion,
            **kwargs,
        )
