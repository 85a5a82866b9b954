from __future__ import annotations

"""
CLI Argument Definition and Mapping.

Defines the command-line schema and translates the parsed namespace into
configuration overrides understood by selfupdate.domain.config.
"""

import argparse
from typing import Any, Dict, List, Optional

from selfupdate.core.platform import FORMAT_AUTO, SUPPORTED_FORMATS
from selfupdate.infra.logging import get_default_log_path
from selfupdate.infra.network import DEFAULT_TIMEOUT

# -----------------------------------------------------------------------------
# ARGUMENT DEFINITION
# -----------------------------------------------------------------------------

def build_parser() -> argparse.ArgumentParser:
    """
    Construct the argument parser for the selfupdate CLI.

    Returns:
        argparse.ArgumentParser: Configured parser instance.
    """
    p = argparse.ArgumentParser(
        prog="selfupdate",
        description="Replace an installed executable with a version from an artifact store.",
    )

    # --- Configuration sources ---
    p.add_argument(
        "-c", "--config",
        dest="config_file",
        default=None,
        help="JSON file with update settings; flags override its values.",
    )

    # --- Artifact identity ---
    p.add_argument("--cmd-name", dest="cmd_name", default=None, help="Command (executable) name.")
    p.add_argument("--base-url", dest="bin_url", default=None, help="Base URL of the artifact store.")
    p.add_argument("--version", dest="version", default=None, help="Version to install.")
    p.add_argument(
        "--format",
        dest="archive_format",
        choices=(FORMAT_AUTO,) + SUPPORTED_FORMATS,
        default=None,
        help="Archive format; 'auto' picks zip on Windows, tar.gz elsewhere.",
    )
    p.add_argument("--os", dest="os", default=None, help="Override the target operating system.")
    p.add_argument("--arch", dest="arch", default=None, help="Override the target architecture.")

    # --- Installation ---
    p.add_argument(
        "-t", "--target",
        dest="target",
        default=None,
        help="Executable to replace (default: <install-dir>/<cmd-name>).",
    )
    p.add_argument("--install-dir", dest="install_dir", default=None, help="Installation directory.")
    p.add_argument(
        "--extra",
        dest="extra_files",
        default=None,
        help="Comma-separated auxiliary files to replace next to the executable.",
    )
    p.add_argument("--staging-root", dest="staging_root", default=None, help="Parent for staging directories.")
    p.add_argument(
        "--timeout",
        type=float,
        default=DEFAULT_TIMEOUT,
        help="HTTP timeout in seconds.",
    )

    # --- Queries ---
    p.add_argument(
        "--print-platform",
        action="store_true",
        help="Print the platform triple and artifact name, then exit.",
    )
    p.add_argument(
        "--shared-lib",
        dest="shared_lib",
        default=None,
        metavar="NAME",
        help="Print the shared library artifact name and format for NAME, then exit.",
    )

    # --- Output and diagnostics ---
    p.add_argument("--json", dest="json_output", action="store_true", help="Print the result as JSON.")
    p.add_argument("--debug", action="store_true", help="Elevate logging verbosity to DEBUG.")
    p.add_argument(
        "--log-file",
        dest="log_file",
        nargs="?",
        const=get_default_log_path(),
        default=None,
        help="Also write logs to a rotating file (default location if no path).",
    )

    return p

# -----------------------------------------------------------------------------
# ARGUMENT MAPPING
# -----------------------------------------------------------------------------

def args_to_overrides(args: argparse.Namespace) -> Dict[str, Any]:
    """
    Translate the argparse Namespace into configuration overrides.

    Args:
        args: Parsed command-line arguments.

    Returns:
        Dict[str, Any]: Overrides; unset flags map to None.
    """
    return {
        "cmd_name": args.cmd_name,
        "bin_url": args.bin_url,
        "version": args.version,
        "archive_format": args.archive_format,
        "install_dir": args.install_dir,
        "extra_files": _split_csv(args.extra_files),
        "staging_root": args.staging_root,
        "os": args.os,
        "arch": args.arch,
    }

# -----------------------------------------------------------------------------
# HELPERS
# -----------------------------------------------------------------------------

def _split_csv(value: Optional[str]) -> Optional[List[str]]:
    """Convert a comma-separated string into a list of stripped items."""
    if value is None:
        return None
    parts = [x.strip() for x in value.split(",")]
    return [x for x in parts if x]
