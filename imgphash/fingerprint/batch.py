"""
Batch hashing for the fingerprint package.

Hashes many files through a JobDispatcher driven by a private event loop,
with progress bar and callback support.
"""

from __future__ import annotations

import asyncio
import logging
import os
from pathlib import Path
from typing import Optional, Callable, Any, Iterable

from ..errors import ImageHashError
from ..models import HashResult
from .dependencies import HAS_TQDM, _tqdm_class
from .dispatcher import JobDispatcher


async def _hash_all(
    filepaths: list[str],
    max_workers: Optional[int],
    progress_callback: Optional[Callable[[int, int], None]],
    pbar: Optional[Any],
) -> list[HashResult]:
    loop = asyncio.get_running_loop()
    all_done = loop.create_future()
    results: list[HashResult] = []
    total = len(filepaths)

    def make_handler(path: str) -> Callable[[Optional[ImageHashError], str], None]:
        def _on_done(error: Optional[ImageHashError], encoded: str) -> None:
            results.append(HashResult.from_completion(path, error, encoded))
            if len(results) == total and not all_done.done():
                all_done.set_result(None)

            if pbar is not None:
                pbar.update(1)
            if progress_callback:
                progress_callback(len(results), total)
        return _on_done

    async with JobDispatcher(max_workers=max_workers) as dispatcher:
        for path in filepaths:
            dispatcher.submit(path, make_handler(path))
        await all_done

    return results


def hash_files(
    filepaths: Iterable[str | Path],
    max_workers: Optional[int] = None,
    progress_callback: Optional[Callable[[int, int], None]] = None,
    show_progress: bool = True,
    logger: Optional[logging.Logger] = None,
) -> list[HashResult]:
    """
    Hash multiple images in parallel.

    Must not be called from inside a running event loop; use
    JobDispatcher directly there.

    Args:
        filepaths: Image paths to hash
        max_workers: Number of worker threads (default from user config)
        progress_callback: Optional callback(done, total) after each file
        show_progress: Whether to show a tqdm progress bar
        logger: Optional logger for status messages

    Returns:
        One HashResult per path, in completion order
    """
    paths = [os.fspath(p) for p in filepaths]
    if not paths:
        return []

    pbar: Optional[Any] = None
    if HAS_TQDM and show_progress and _tqdm_class is not None:
        pbar = _tqdm_class(
            total=len(paths),
            desc="Hashing images",
            unit="img",
            ncols=80,
        )

    try:
        results = asyncio.run(_hash_all(paths, max_workers, progress_callback, pbar))
    finally:
        if pbar is not None:
            pbar.close()

    if logger:
        failed = sum(1 for r in results if not r.ok)
        logger.info(f"Hashed {len(results) - failed:,} of {len(results):,} images ({failed:,} failed)")

    return results


__all__ = ['hash_files']
