"""
CLI package for imgphash.

Provides the command-line interface for fingerprinting images and comparing
fingerprints.

Public API:
- main: Entry point for CLI execution
- CLIOrchestrator: CLI workflow orchestration class
"""

from __future__ import annotations

from .orchestrator import CLIOrchestrator, setup_logging
from .arg_parser import create_parser, parse_arguments
from .reporting import format_hash_line, print_hash_results, print_comparison


def main(argv=None) -> int:
    """
    Main entry point for the CLI.

    Returns:
        Exit code (0 for success, 1 for error)

    Examples:
        >>> # Called from __main__.py
        >>> exit_code = main()
        >>> sys.exit(exit_code)
    """
    orchestrator = CLIOrchestrator()
    return orchestrator.run(argv)


__all__ = [
    'main',
    'CLIOrchestrator',
    'setup_logging',
    'create_parser',
    'parse_arguments',
    'format_hash_line',
    'print_hash_results',
    'print_comparison',
]
