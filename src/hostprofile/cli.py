#!/usr/bin/env python3
"""
Host Profile CLI

Print CPU topology, kernel identity, compilers and accelerator support of
this machine.

Examples:
    hostprofile                         # JSON on stdout
    hostprofile --format text           # human-readable summary
    hostprofile --format yaml -o host.yaml
    hostprofile --strict -v             # fail on the first probe error, show progress
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .config import ProbeConfig
from .errors import ProbeError
from .formatter import FORMATS, render
from .logging import LogConfig, ProfileLogger
from .profile import all_profile


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='hostprofile',
        description="Host CPU / toolchain profiler",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__
    )
    parser.add_argument("--format", "-f", choices=FORMATS, default='json',
                        help="Output format (default: json)")
    parser.add_argument("--output", "-o", type=str, default=None,
                        help="Write the report to a file instead of stdout")
    parser.add_argument("--timeout", type=float, default=None,
                        help="Seconds allowed per external command (default: 10)")
    parser.add_argument("--cuda-root", type=str, default=None,
                        help="CUDA installation prefix (default: /usr/local/cuda)")
    parser.add_argument("--strict", action="store_true",
                        help="Fail on the first probe error instead of reporting unknown")
    parser.add_argument("--verbose", "-v", action="count", default=0,
                        help="Log progress to stderr (-vv for command-level detail)")
    parser.add_argument("--log-file", type=str, default=None,
                        help="Also write a debug log to this file")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    console_level = {0: logging.WARNING, 1: logging.INFO}.get(args.verbose, logging.DEBUG)
    log_config = LogConfig(
        console_level=console_level,
        log_file=Path(args.log_file) if args.log_file else None,
    )

    config = ProbeConfig.from_env()
    if args.timeout is not None:
        config.command_timeout = args.timeout
    if args.cuda_root:
        config.cuda_root = Path(args.cuda_root)
    if args.strict:
        config.strict = True

    with ProfileLogger(log_config) as log:
        try:
            report = all_profile(config=config)
        except ProbeError as e:
            log.debug(f"strict mode: {e}")
            print(f"✗ Profiling failed: {e}", file=sys.stderr)
            return 1

        output = render(report, args.format)
        if not output.endswith("\n"):
            output += "\n"

        if args.output:
            path = Path(args.output)
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(output)
            log.info(f"Report written to {path}")
        else:
            sys.stdout.write(output)

    return 0


if __name__ == "__main__":
    sys.exit(main())
