"""Command line entry point for NetLab.

Usage:
    netlab start                 # Open the module menu
    netlab module 01-osi-model   # Go straight to one module
    netlab doctor                # Check the lab tooling and exit
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from rich.console import Console

from netlab import __version__
from netlab.lib.errors import UnknownModuleError
from netlab.lib.observability import setup_logging
from netlab.tui.constants import get_module, module_ids
from netlab.tui.settings import NetLabSettings

logger = logging.getLogger(__name__)

WELCOME = """\
NetLab - interactive networking labs

Run 'netlab start' to open the module menu,
'netlab module <id>' to open one module, or
'netlab doctor' to check that the lab tools are installed."""


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="netlab",
        description="Interactive networking labs in the terminal",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    # Browse all modules
    netlab start

    # Open the OSI model module directly
    netlab module 01-osi-model

    # Check Docker, kind, kubectl and friends
    netlab doctor

    # Keep a debug log of a session
    netlab -v --log-file logs/netlab.log start
        """,
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )
    parser.add_argument(
        "--json-log",
        action="store_true",
        help="Output logs in JSON format (for log aggregation systems)",
    )
    parser.add_argument(
        "--log-file",
        help="Write logs to a file (the interface itself never logs to the terminal)",
    )

    subparsers = parser.add_subparsers(dest="command")
    subparsers.add_parser("start", help="Open the module menu")
    module_parser = subparsers.add_parser("module", help="Open a single module")
    module_parser.add_argument("module_id", help="Module id, e.g. 01-osi-model")
    subparsers.add_parser("doctor", help="Check lab tooling and exit")
    return parser


def validate_module_id(module_id: str) -> str:
    """Return the id unchanged, or raise UnknownModuleError."""
    if get_module(module_id) is None:
        raise UnknownModuleError(module_id, known=module_ids())
    return module_id


def run_tui(settings: NetLabSettings, start_module: Optional[str], project_root: Path) -> int:
    """Run the Textual app; returns the process exit status."""
    from netlab.tui.app import NetLabApp

    app = NetLabApp(settings, start_module=start_module, project_root=project_root)
    try:
        result = app.run()
    except Exception:
        logger.exception("Could not start the terminal interface")
        return 1
    return result or 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        print(WELCOME)
        return 0

    if args.command == "doctor":
        setup_logging(verbose=args.verbose, json_format=args.json_log, log_file=args.log_file)
        from netlab.lib.dependencies import DependencyVerifier, run_doctor

        settings = NetLabSettings.load()
        return run_doctor(Console(), DependencyVerifier(timeout=settings.probe_timeout))

    start_module: Optional[str] = None
    if args.command == "module":
        try:
            start_module = validate_module_id(args.module_id)
        except UnknownModuleError as e:
            print(f"Error: {e.message}", file=sys.stderr)
            if e.suggestion:
                print(f"  {e.suggestion}", file=sys.stderr)
            return 2

    setup_logging(
        verbose=args.verbose,
        json_format=args.json_log,
        log_file=args.log_file,
        console=False,
    )
    project_root = Path.cwd()
    settings = NetLabSettings.load(project_root)
    logger.debug("Loaded settings: %s", settings)
    return run_tui(settings, start_module, project_root)


if __name__ == "__main__":
    sys.exit(main())
