"""
Result formatting and display for the CLI interface.
"""

from __future__ import annotations

from ..models import HashResult


def format_hash_line(result: HashResult) -> str:
    """
    Format one hashing result as '<fingerprint>  <path>'.

    Failures keep the "0" fingerprint and gain a trailing reason.
    """
    line = f"{result.encoded}  {result.path}"
    if not result.ok:
        line += f"  # {result.detail}"
    return line


def print_hash_results(results: list[HashResult]) -> None:
    """Print results sorted by path."""
    for result in sorted(results, key=lambda r: r.path):
        print(format_hash_line(result))


def print_comparison(a: HashResult, b: HashResult, distance: int, threshold: int) -> None:
    """
    Print a two-image comparison.

    Args:
        a: Result for the first image
        b: Result for the second image
        distance: Hamming distance between the fingerprints
        threshold: Similarity threshold used
    """
    print(format_hash_line(a))
    print(format_hash_line(b))
    verdict = "similar" if distance <= threshold else "different"
    print(f"Distance: {distance} (threshold {threshold}) -> {verdict}")


__all__ = [
    'format_hash_line',
    'print_hash_results',
    'print_comparison',
]
