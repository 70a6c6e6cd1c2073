"""
Asynchronous job dispatch for the fingerprint package.

Hashing runs on a bounded thread pool so an asyncio event loop never blocks
on image decoding. Worker threads only ever see a job id and a path; results
travel back as messages posted with loop.call_soon_threadsafe(), and the
completion handler is looked up and invoked on the loop thread.
"""

from __future__ import annotations

import asyncio
import functools
import itertools
import threading
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Any, Callable, Optional

from ..errors import ImageHashError, InvalidArgument
from ..models import HashResult, Job, JobState
from ..user_config import get_user_config
from .computer import compute_result
from .dependencies import _logger

CompletionHandler = Callable[[Optional[ImageHashError], str], Any]


class JobDispatcher:
    """
    Runs the hash computer on worker threads and reports back on an event loop.

    Each handler is called exactly once as handler(error, encoded), where
    error is None on success or a FileUnavailable / TransformFault instance,
    and encoded is the decimal fingerprint ("0" on failure). Handlers fire in
    completion order, not submission order. Jobs cannot be cancelled and
    have no timeout.

    submit() must be called from the event loop's own thread.

    Usage:
        async def main():
            async with JobDispatcher(max_workers=4) as dispatcher:
                dispatcher.submit("a.jpg", lambda err, value: print(err, value))
                print(await dispatcher.hash_file("b.jpg"))
    """

    def __init__(
        self,
        max_workers: Optional[int] = None,
        loop: Optional[asyncio.AbstractEventLoop] = None,
    ):
        """
        Initialize the dispatcher.

        Args:
            max_workers: Worker thread count (default from user config)
            loop: Event loop that receives completions. When omitted, the loop
                  running at each submit() call is used.
        """
        if max_workers is None:
            max_workers = get_user_config().default_workers
        if max_workers < 1:
            raise ValueError(f"max_workers must be at least 1, got {max_workers}")

        self.max_workers = max_workers
        self._loop = loop
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers,
            thread_name_prefix='imgphash-worker',
        )
        # Jobs and the loop each one reports to; workers only ever remove entries
        self._pending: dict[int, Job] = {}
        self._job_loops: dict[int, asyncio.AbstractEventLoop] = {}
        self._lock = threading.Lock()
        self._ids = itertools.count(1)
        self._closed = False

    @property
    def pending(self) -> int:
        """Number of submitted jobs whose handler has not run yet."""
        self._purge_closed_loops()
        with self._lock:
            return len(self._pending)

    @property
    def closed(self) -> bool:
        return self._closed

    def _resolve_loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is not None:
            return self._loop
        try:
            return asyncio.get_running_loop()
        except RuntimeError:
            raise RuntimeError(
                "JobDispatcher.submit() needs a running event loop "
                "or a loop passed to the constructor"
            ) from None

    def submit(self, path: str | Path, handler: CompletionHandler) -> int:
        """
        Schedule hashing of path and report the outcome to handler.

        Args:
            path: Image file to hash
            handler: Callable invoked once as handler(error, encoded)

        Returns:
            Job id

        Raises:
            InvalidArgument: If handler is missing or not callable. Nothing is
                             scheduled in that case.
            RuntimeError: If the dispatcher is closed or no loop is available
        """
        if not callable(handler):
            raise InvalidArgument("Completion handler is required and must be callable")
        return self._submit(path, handler, self._resolve_loop())

    def _submit(
        self,
        path: str | Path,
        handler: CompletionHandler,
        loop: asyncio.AbstractEventLoop,
    ) -> int:
        if self._closed:
            raise RuntimeError("Cannot submit to a closed JobDispatcher")
        self._purge_closed_loops()

        job = Job(id=next(self._ids), path=path, handler=handler)
        with self._lock:
            self._pending[job.id] = job
            self._job_loops[job.id] = loop
        job.state = JobState.SCHEDULED
        try:
            self._executor.submit(self._work, loop, job.id, job.path)
        except RuntimeError:
            # Executor shut down between the closed check and here
            self._release(job.id)
            raise
        _logger.debug(f"Scheduled job {job.id} for {path}")
        return job.id

    def _release(self, job_id: int) -> Optional[Job]:
        with self._lock:
            self._job_loops.pop(job_id, None)
            return self._pending.pop(job_id, None)

    def _purge_closed_loops(self) -> None:
        """Release jobs whose event loop closed before their result arrived."""
        with self._lock:
            stale = [job_id for job_id, loop in self._job_loops.items() if loop.is_closed()]
        for job_id in stale:
            if self._release(job_id) is not None:
                _logger.warning(f"Released job {job_id}: its event loop closed before delivery")

    def _work(self, loop: asyncio.AbstractEventLoop, job_id: int, path: str | Path) -> None:
        """Worker thread body. Only posts messages back to the loop."""
        try:
            loop.call_soon_threadsafe(self._mark_running, job_id)
            result = compute_result(path)
            loop.call_soon_threadsafe(self._deliver, job_id, result)
        except RuntimeError as e:
            # The loop was closed before the job finished; nobody is left to notify
            self._release(job_id)
            _logger.warning(f"Dropping result of job {job_id} for {path}: {e}")

    def _mark_running(self, job_id: int) -> None:
        with self._lock:
            job = self._pending.get(job_id)
        if job is not None:
            job.state = JobState.RUNNING

    def _deliver(self, job_id: int, result: HashResult) -> None:
        """Runs on the loop thread: invoke the handler once and release the job."""
        job = self._release(job_id)
        if job is None:
            return
        job.result = result
        job.state = JobState.COMPLETED
        _logger.debug(f"Job {job_id} completed for {job.path} (ok={result.ok})")
        # An exception from the handler propagates to the loop's exception
        # handler; the job has already been released.
        job.handler(result.exception(), result.encoded)

    async def hash_file(self, path: str | Path) -> str:
        """
        Hash path on a worker thread and await the encoded fingerprint.

        Raises:
            FileUnavailable: If the file is missing or unreadable
            TransformFault: If decoding or hashing failed
        """
        loop = asyncio.get_running_loop()
        future = loop.create_future()

        def _on_done(error: Optional[ImageHashError], encoded: str) -> None:
            if future.cancelled():
                return
            if error is not None:
                future.set_exception(error)
            else:
                future.set_result(encoded)

        self._submit(path, _on_done, loop)
        return await future

    def close(self, wait: bool = True) -> None:
        """
        Stop accepting jobs and shut the thread pool down.

        Already scheduled jobs still run and their handlers still fire once
        the event loop gets control again. Never pass wait=True on an event
        loop thread; use aclose() there.
        """
        self._closed = True
        self._executor.shutdown(wait=wait)

    async def aclose(self) -> None:
        """
        Stop accepting jobs and wait for scheduled ones without blocking the loop.

        Handlers of jobs reporting to the running loop have fired by the time
        this returns.
        """
        self._closed = True
        loop = asyncio.get_running_loop()
        await loop.run_in_executor(None, functools.partial(self._executor.shutdown, wait=True))
        # Deliveries posted by the last workers are queued ahead of this wakeup
        await asyncio.sleep(0)

    def __enter__(self) -> 'JobDispatcher':
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            self.close(wait=True)
        else:
            # Waiting here would stall the loop that has to run the handlers
            self.close(wait=False)

    async def __aenter__(self) -> 'JobDispatcher':
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()


_default_dispatcher: Optional[JobDispatcher] = None
_default_lock = threading.Lock()


def get_dispatcher() -> JobDispatcher:
    """Get the shared JobDispatcher, creating it on first use."""
    global _default_dispatcher
    with _default_lock:
        if _default_dispatcher is None or _default_dispatcher.closed:
            _default_dispatcher = JobDispatcher()
        return _default_dispatcher


__all__ = ['CompletionHandler', 'JobDispatcher', 'get_dispatcher']
