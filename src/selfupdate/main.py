from __future__ import annotations

"""
Main Entry Point.

Routes execution to the CLI controller and reports unexpected crashes with
their stack trace instead of a bare interpreter dump.
"""

import logging
import os
import sys
import traceback

# Allow running this file directly from a source checkout
BASE_DIR = os.path.dirname(os.path.abspath(__file__))
if not getattr(sys, "frozen", False):
    SRC_DIR = os.path.dirname(BASE_DIR)
    if SRC_DIR not in sys.path:
        sys.path.insert(0, SRC_DIR)


def main() -> int:
    """
    Run the CLI and convert unexpected exceptions into exit code 1.

    Returns:
        int: Process exit code.
    """
    try:
        from selfupdate.interface.cli.app import main as cli_main
        return cli_main()
    except Exception as e:
        stack_trace = "".join(traceback.format_exception(type(e), e, e.__traceback__))
        logging.getLogger("selfupdate.supervisor").critical(f"FATAL EXCEPTION: {e}\n{stack_trace}")
        print("CRITICAL ERROR (SELFUPDATE CLI)", file=sys.stderr)
        print(stack_trace, file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
