"""
Argument parsing for the CLI interface.

Provides functions to create and configure the argument parser for the
imgphash command-line interface.
"""

from __future__ import annotations

import argparse
from pathlib import Path

from ..config import FINGERPRINT_BITS


def _threshold(value: str) -> int:
    threshold = int(value)
    if not 0 <= threshold <= FINGERPRINT_BITS:
        raise argparse.ArgumentTypeError(f"must be between 0 and {FINGERPRINT_BITS}")
    return threshold


def _workers(value: str) -> int:
    workers = int(value)
    if workers < 1:
        raise argparse.ArgumentTypeError("must be at least 1")
    return workers


def create_parser() -> argparse.ArgumentParser:
    """
    Create and configure the argument parser for the CLI.

    Returns:
        Configured ArgumentParser instance with hash, distance and compare
        subcommands
    """
    parser = argparse.ArgumentParser(
        prog='imgphash',
        description='Compute and compare 64-bit perceptual image fingerprints',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s hash photo1.jpg photo2.png
      Print the decimal fingerprint of each image

  %(prog)s distance 17361170839460134936 17361170839460134937
      Hamming distance between two fingerprints (0-64)

  %(prog)s compare photo1.jpg photo2.jpg --threshold 5
      Hash both images and report whether they are similar

Fingerprints are printed as decimal strings; "0" means the image could not
be hashed.
        """
    )

    parser.add_argument(
        '-v', '--verbose',
        action='store_true',
        help='Verbose output'
    )

    subparsers = parser.add_subparsers(dest='command', metavar='COMMAND')
    subparsers.required = True

    hash_parser = subparsers.add_parser('hash', help='Fingerprint one or more images')
    hash_parser.add_argument(
        'paths',
        type=Path,
        nargs='+',
        help='Image files to fingerprint'
    )
    hash_parser.add_argument(
        '-w', '--workers',
        type=_workers,
        default=None,
        help='Number of worker threads. Default: from user config'
    )
    hash_parser.add_argument(
        '--no-progress',
        action='store_true',
        help='Disable progress bars (useful for piping output)'
    )

    distance_parser = subparsers.add_parser(
        'distance', help='Hamming distance between two decimal fingerprints'
    )
    distance_parser.add_argument('a', help='First fingerprint')
    distance_parser.add_argument('b', help='Second fingerprint')

    compare_parser = subparsers.add_parser('compare', help='Fingerprint and compare two images')
    compare_parser.add_argument('image_a', type=Path, help='First image')
    compare_parser.add_argument('image_b', type=Path, help='Second image')
    compare_parser.add_argument(
        '-t', '--threshold',
        type=_threshold,
        default=None,
        help=f'Similarity threshold (0-{FINGERPRINT_BITS}, lower=stricter). Default: from user config'
    )

    return parser


def parse_arguments(argv=None) -> argparse.Namespace:
    """
    Parse command-line arguments.

    Args:
        argv: List of argument strings (default: sys.argv)

    Returns:
        Parsed arguments as Namespace object

    Examples:
        >>> args = parse_arguments(['compare', 'a.jpg', 'b.jpg', '--threshold', '5'])
        >>> args.threshold
        5
    """
    parser = create_parser()
    return parser.parse_args(argv)


__all__ = [
    'create_parser',
    'parse_arguments',
]
