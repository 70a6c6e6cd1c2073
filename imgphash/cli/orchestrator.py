"""
CLI workflow orchestration for imgphash.

Provides the CLIOrchestrator class that parses arguments, sets up logging and
dispatches to the selected subcommand.
"""

from __future__ import annotations

import logging

from ..errors import MalformedFingerprint
from ..fingerprint import decode_strict, hamming_distance, hash_files
from ..user_config import get_user_config
from .arg_parser import parse_arguments
from .reporting import print_comparison, print_hash_results


def setup_logging(verbose: bool = False) -> logging.Logger:
    """
    Configure logging for the CLI.

    Args:
        verbose: Enable verbose (DEBUG level) logging

    Returns:
        Configured logger instance
    """
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(levelname)s - %(message)s',
        datefmt='%H:%M:%S'
    )
    return logging.getLogger(__name__)


class CLIOrchestrator:
    """
    Orchestrates a single CLI invocation.

    Each command returns a process exit code: 0 on success, 1 when any image
    could not be hashed.
    """

    def __init__(self):
        """Initialize the orchestrator."""
        self.logger = None
        self.args = None

    def run(self, argv=None) -> int:
        """
        Execute the CLI workflow.

        Args:
            argv: Argument list (default: sys.argv)

        Returns:
            Exit code
        """
        self.args = parse_arguments(argv)
        self.logger = setup_logging(self.args.verbose)

        commands = {
            'hash': self._hash_command,
            'distance': self._distance_command,
            'compare': self._compare_command,
        }
        return commands[self.args.command]()

    def _hash_command(self) -> int:
        results = hash_files(
            self.args.paths,
            max_workers=self.args.workers,
            show_progress=not self.args.no_progress,
            logger=self.logger if len(self.args.paths) > 1 else None,
        )
        print_hash_results(results)
        return 0 if all(r.ok for r in results) else 1

    def _distance_command(self) -> int:
        for value in (self.args.a, self.args.b):
            try:
                decode_strict(value)
            except MalformedFingerprint as e:
                self.logger.warning(f"{e}; treating it as 0")
        print(hamming_distance(self.args.a, self.args.b))
        return 0

    def _compare_command(self) -> int:
        threshold = self.args.threshold
        if threshold is None:
            threshold = get_user_config().default_threshold

        results = hash_files(
            [self.args.image_a, self.args.image_b],
            max_workers=2,
            show_progress=False,
        )
        by_path = {r.path: r for r in results}
        a = by_path[str(self.args.image_a)]
        b = by_path[str(self.args.image_b)]

        if not (a.ok and b.ok):
            for failed in (a, b):
                if not failed.ok:
                    self.logger.error(f"Could not hash {failed.path}: {failed.detail}")
            return 1

        print_comparison(a, b, hamming_distance(a.encoded, b.encoded), threshold)
        return 0


__all__ = ['CLIOrchestrator', 'setup_logging']
