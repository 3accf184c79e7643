"""Run the TUI as a module.

Usage:
    python -m netlab.tui                 # Module menu
    python -m netlab.tui 01-osi-model    # Open one module
"""

from __future__ import annotations

import sys

from netlab.__main__ import main as cli_main


def main() -> int:
    args = sys.argv[1:]
    if args and not args[0].startswith("-"):
        return cli_main(["module", *args])
    return cli_main([*args, "start"])


if __name__ == "__main__":
    sys.exit(main())
