#!/usr/bin/python3
# -*- coding: utf-8 -*-
"""
Main script for JS Inliner

Runs the script inlining stage over a build output directory.

Usage:
    python main.py                              # Inline scripts in ./dist
    python main.py <output_dir>                 # Inline scripts in <output_dir>
    python main.py <output_dir> "<params>"      # e.g. "minify=true;inlineAll=true"
    python main.py --list <output_dir>          # List HTML files that would be visited

Options (accepted anywhere on the command line):
    --log-level <LEVEL>                         # DEBUG, INFO, WARNING, ERROR or CRITICAL
    --log-file <path>                           # Also write a detailed log to <path>
"""

import json
import sys

from core.exceptions import JsInlineError, ValidationError
from core.logging_config import (
    get_logger,
    set_log_level,
    enable_file_logging,
    disable_file_logging,
    LOG_LEVELS
)
from js_inliner import inlineScripts, listHtmlFiles

logger = get_logger(__name__)


def print_banner():
    """Print application banner"""
    print("=" * 70)
    print(" JS Inliner - Build Output Script Inlining")
    print(" Version 1.0")
    print("=" * 70)
    print()


def print_report(report):
    """Print a run report as JSON followed by a one-line summary"""
    print(json.dumps(report, indent=2, ensure_ascii=False))
    if report.get('status') == 'skipped':
        print("\nNothing to do: output directory not found.")
        return
    print(
        f"\n{report['scriptsInlined']} script(s) inlined into "
        f"{len(report['filesModified'])} of {report['htmlFiles']} HTML file(s)"
    )
    if report['unresolved']:
        print(f"{len(report['unresolved'])} reference(s) could not be resolved")


def pop_option(args, name):
    """Remove '<name> <value>' from args and return the value, or None if absent"""
    if name not in args:
        return None
    index = args.index(name)
    if index + 1 >= len(args):
        raise ValidationError(name, "A value is required")
    value = args[index + 1]
    del args[index:index + 2]
    return value


def run_command(args):
    """Dispatch the remaining positional arguments"""
    if args and args[0] == '--list':
        if len(args) < 2:
            print("Usage: python main.py --list <output_dir>")
            return 2
        print(json.dumps(listHtmlFiles(args[1]), indent=2, ensure_ascii=False))
        return 0

    if args and args[0] in ('-h', '--help'):
        print(__doc__)
        return 0

    output_dir = args[0] if args else None
    params = args[1] if len(args) > 1 else ''

    print_banner()
    report = inlineScripts(output_dir, params)
    print_report(report)
    return 0


def main(argv=None):
    """Main entry point"""
    args = list(sys.argv[1:] if argv is None else argv)

    try:
        log_level = pop_option(args, '--log-level')
        log_file = pop_option(args, '--log-file')

        if log_level is not None:
            if log_level.upper() not in LOG_LEVELS:
                raise ValidationError('--log-level', f"Must be one of: {', '.join(LOG_LEVELS)}")
            set_log_level(log_level)

        if log_file is None:
            return run_command(args)

        enable_file_logging(log_file)
        try:
            return run_command(args)
        finally:
            disable_file_logging()

    except JsInlineError as e:
        logger.error(f"Error: {e}")
        print(f"Error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
