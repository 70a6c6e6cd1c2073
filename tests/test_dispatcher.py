"""
Tests for the asynchronous job dispatcher.
"""

import asyncio
import time
import threading

import pytest

from imgphash.errors import FileUnavailable, InvalidArgument, TransformFault
from imgphash.fingerprint import dispatcher as dispatcher_module
from imgphash.fingerprint.computer import compute
from imgphash.fingerprint.dispatcher import JobDispatcher, get_dispatcher
from imgphash.models import HashResult, JobState


async def collect(dispatcher, paths, timeout=30):
    """Submit every path and wait until each handler has fired."""
    loop = asyncio.get_running_loop()
    calls = []
    all_done = loop.create_future()

    def make_handler(path):
        def handler(error, encoded):
            calls.append((path, error, encoded))
            if len(calls) == len(paths) and not all_done.done():
                all_done.set_result(None)
        return handler

    for path in paths:
        dispatcher.submit(path, make_handler(path))
    await asyncio.wait_for(all_done, timeout)
    # Leave room for a duplicate invocation to show up
    await asyncio.sleep(0.05)
    return calls


def run_collect(paths, max_workers=4):
    async def main():
        async with JobDispatcher(max_workers=max_workers) as dispatcher:
            calls = await collect(dispatcher, paths)
            return calls, dispatcher.pending
    return asyncio.run(main())


class TestSubmit:
    """Test JobDispatcher.submit."""

    def test_valid_image(self, sample_images):
        calls, pending = run_collect([sample_images['gradient']])
        assert len(calls) == 1
        _, error, encoded = calls[0]
        assert error is None
        assert encoded == compute(sample_images['gradient'])
        assert pending == 0

    def test_missing_file_reports_error_once(self, sample_images):
        calls, _ = run_collect([sample_images['missing']])
        assert len(calls) == 1
        _, error, encoded = calls[0]
        assert isinstance(error, FileUnavailable)
        assert error.path == sample_images['missing']
        assert encoded == "0"

    def test_corrupted_file_reports_transform_fault(self, sample_images):
        calls, _ = run_collect([sample_images['corrupted']])
        _, error, encoded = calls[0]
        assert isinstance(error, TransformFault)
        assert encoded == "0"

    def test_many_jobs(self, noise_images):
        calls, pending = run_collect(noise_images, max_workers=3)
        assert len(calls) == len(noise_images)
        assert sorted(path for path, _, _ in calls) == sorted(noise_images)
        for _, error, encoded in calls:
            assert error is None
            assert encoded != ""
            assert encoded.isdigit()
        assert len({encoded for _, _, encoded in calls}) > 1
        assert pending == 0

    def test_identical_files_zero_distance(self, sample_images):
        from imgphash.fingerprint.distance import hamming_distance

        calls, _ = run_collect([sample_images['gradient'], sample_images['gradient_copy']])
        values = {path: encoded for path, _, encoded in calls}
        a = values[sample_images['gradient']]
        b = values[sample_images['gradient_copy']]
        assert a == b
        assert hamming_distance(a, b) == 0

    @pytest.mark.parametrize("handler", [None, "callback", 42])
    def test_invalid_handler_fails_synchronously(self, sample_images, handler):
        with JobDispatcher(max_workers=1) as dispatcher:
            with pytest.raises(InvalidArgument):
                dispatcher.submit(sample_images['gradient'], handler)
            assert dispatcher.pending == 0

    def test_invalid_argument_is_a_type_error(self, sample_images):
        with JobDispatcher(max_workers=1) as dispatcher:
            with pytest.raises(TypeError):
                dispatcher.submit(sample_images['gradient'], None)

    def test_submit_without_loop_raises(self, sample_images):
        with JobDispatcher(max_workers=1) as dispatcher:
            with pytest.raises(RuntimeError):
                dispatcher.submit(sample_images['gradient'], lambda error, encoded: None)
            assert dispatcher.pending == 0

    def test_submit_after_close_raises(self, sample_images):
        async def main():
            dispatcher = JobDispatcher(max_workers=1)
            dispatcher.close()
            with pytest.raises(RuntimeError, match="closed"):
                dispatcher.submit(sample_images['gradient'], lambda error, encoded: None)
            assert dispatcher.closed

        asyncio.run(main())

    def test_job_lifecycle(self, sample_images):
        async def main():
            loop = asyncio.get_running_loop()
            done = loop.create_future()
            async with JobDispatcher(max_workers=1) as dispatcher:
                job_id = dispatcher.submit(
                    sample_images['gradient'],
                    lambda error, encoded: done.set_result(encoded),
                )
                state = dispatcher._pending[job_id].state
                pending_before = dispatcher.pending
                await asyncio.wait_for(done, 30)
                return job_id, state, pending_before, dispatcher.pending

        job_id, state, pending_before, pending_after = asyncio.run(main())
        assert job_id >= 1
        assert state is JobState.SCHEDULED
        assert pending_before == 1
        assert pending_after == 0

    def test_explicit_loop(self, sample_images):
        loop = asyncio.new_event_loop()
        try:
            dispatcher = JobDispatcher(max_workers=1, loop=loop)
            future = loop.create_future()
            dispatcher.submit(
                sample_images['missing'],
                lambda error, encoded: future.set_result((error, encoded)),
            )
            error, encoded = loop.run_until_complete(asyncio.wait_for(future, 30))
            dispatcher.close()
        finally:
            loop.close()
        assert isinstance(error, FileUnavailable)
        assert encoded == "0"

    def test_handler_runs_on_loop_thread(self, sample_images):
        async def main():
            loop = asyncio.get_running_loop()
            done = loop.create_future()
            async with JobDispatcher(max_workers=1) as dispatcher:
                dispatcher.submit(
                    sample_images['gradient'],
                    lambda error, encoded: done.set_result(threading.get_ident()),
                )
                return await asyncio.wait_for(done, 30)

        assert asyncio.run(main()) == threading.get_ident()


class TestCompletion:
    """Test delivery semantics using a stubbed hash computer."""

    def test_handlers_fire_in_completion_order(self, monkeypatch):
        release_slow = threading.Event()

        def fake_compute(path):
            if path == 'slow':
                release_slow.wait(10)
            return HashResult.success(path, 5)

        monkeypatch.setattr(dispatcher_module, 'compute_result', fake_compute)
        order = []

        async def main():
            loop = asyncio.get_running_loop()
            finished = loop.create_future()

            def handler_for(name):
                def handler(error, encoded):
                    order.append(name)
                    if name == 'fast':
                        release_slow.set()
                    if len(order) == 2:
                        finished.set_result(None)
                return handler

            async with JobDispatcher(max_workers=2) as dispatcher:
                dispatcher.submit('slow', handler_for('slow'))
                dispatcher.submit('fast', handler_for('fast'))
                await asyncio.wait_for(finished, 10)

        asyncio.run(main())
        assert order == ['fast', 'slow']

    def test_zero_fingerprint_is_not_an_error(self, monkeypatch):
        monkeypatch.setattr(
            dispatcher_module, 'compute_result', lambda path: HashResult.success(path, 0)
        )

        async def main():
            async with JobDispatcher(max_workers=1) as dispatcher:
                return await collect(dispatcher, ['zero.png'])

        calls = asyncio.run(main())
        assert calls == [('zero.png', None, "0")]

    def test_raising_handler_does_not_break_other_jobs(self, sample_images):
        loop_errors = []

        async def main():
            loop = asyncio.get_running_loop()
            loop.set_exception_handler(
                lambda loop, context: loop_errors.append(context.get('exception'))
            )

            def broken(error, encoded):
                raise ValueError("handler bug")

            async with JobDispatcher(max_workers=2) as dispatcher:
                dispatcher.submit(sample_images['gradient'], broken)
                calls = await collect(dispatcher, [sample_images['checkerboard']])
                for _ in range(500):
                    if dispatcher.pending == 0:
                        break
                    await asyncio.sleep(0.01)
                return calls, dispatcher.pending

        calls, pending = asyncio.run(main())
        assert len(calls) == 1
        assert calls[0][1] is None
        assert pending == 0
        assert any(isinstance(e, ValueError) for e in loop_errors)


class TestHashFile:
    """Test the awaitable JobDispatcher.hash_file."""

    def test_success(self, sample_images):
        async def main():
            async with JobDispatcher(max_workers=1) as dispatcher:
                return await dispatcher.hash_file(sample_images['checkerboard'])

        assert asyncio.run(main()) == compute(sample_images['checkerboard'])

    def test_missing_file_raises(self, sample_images):
        async def main():
            async with JobDispatcher(max_workers=1) as dispatcher:
                await dispatcher.hash_file(sample_images['missing'])

        with pytest.raises(FileUnavailable):
            asyncio.run(main())

    def test_corrupted_file_raises(self, sample_images):
        async def main():
            async with JobDispatcher(max_workers=1) as dispatcher:
                await dispatcher.hash_file(sample_images['corrupted'])

        with pytest.raises(TransformFault):
            asyncio.run(main())

    def test_gather(self, noise_images):
        async def main():
            async with JobDispatcher(max_workers=4) as dispatcher:
                return await asyncio.gather(*(dispatcher.hash_file(p) for p in noise_images))

        assert asyncio.run(main()) == [compute(p) for p in noise_images]


class TestConstruction:
    """Test dispatcher construction and the shared instance."""

    def test_workers_from_user_config(self, monkeypatch):
        monkeypatch.setenv('IMGPHASH_WORKERS', '3')
        with JobDispatcher() as dispatcher:
            assert dispatcher.max_workers == 3

    def test_rejects_zero_workers(self):
        with pytest.raises(ValueError):
            JobDispatcher(max_workers=0)

    def test_shared_dispatcher(self):
        first = get_dispatcher()
        assert get_dispatcher() is first
        first.close()
        replacement = get_dispatcher()
        assert replacement is not first
        assert not replacement.closed


def slow_compute(delay):
    """Stub hash computer that takes `delay` seconds per file."""
    def fake_compute(path):
        time.sleep(delay)
        return HashResult.success(path, 1)
    return fake_compute


class TestJobStates:
    """Test the job state machine as seen from the event loop."""

    def test_running_then_completed_before_handler(self, monkeypatch):
        release = threading.Event()

        def blocked_compute(path):
            release.wait(10)
            return HashResult.success(path, 9)

        monkeypatch.setattr(dispatcher_module, 'compute_result', blocked_compute)
        seen = {}

        async def main():
            loop = asyncio.get_running_loop()
            done = loop.create_future()
            async with JobDispatcher(max_workers=1) as dispatcher:
                def handler(error, encoded):
                    seen['in_handler'] = job.state
                    seen['result'] = job.result
                    seen['pending'] = dispatcher.pending
                    done.set_result(encoded)

                job_id = dispatcher.submit('blocked.png', handler)
                job = dispatcher._pending[job_id]
                seen['scheduled'] = job.state
                try:
                    for _ in range(500):
                        if job.state is JobState.RUNNING:
                            break
                        await asyncio.sleep(0.01)
                    seen['while_blocked'] = job.state
                finally:
                    release.set()
                return await asyncio.wait_for(done, 10)

        assert asyncio.run(main()) == "9"
        assert seen['scheduled'] is JobState.SCHEDULED
        assert seen['while_blocked'] is JobState.RUNNING
        assert seen['in_handler'] is JobState.COMPLETED
        assert seen['result'] == HashResult.success('blocked.png', 9)
        assert seen['pending'] == 0


class TestShutdown:
    """Test that leaving a dispatcher never stalls the event loop."""

    def _run_with_ticker(self, exit_async):
        calls = []

        async def main():
            loop = asyncio.get_running_loop()
            stop = asyncio.Event()
            gaps = []

            async def ticker():
                last = loop.time()
                while not stop.is_set():
                    await asyncio.sleep(0.02)
                    now = loop.time()
                    gaps.append(now - last)
                    last = now

            task = asyncio.create_task(ticker())
            await asyncio.sleep(0.05)

            if exit_async:
                async with JobDispatcher(max_workers=1) as dispatcher:
                    dispatcher.submit('slow.png', lambda error, encoded: calls.append(encoded))
            else:
                with JobDispatcher(max_workers=1) as dispatcher:
                    dispatcher.submit('slow.png', lambda error, encoded: calls.append(encoded))
            delivered_at_exit = list(calls)

            for _ in range(200):
                if calls:
                    break
                await asyncio.sleep(0.01)
            stop.set()
            await task
            return max(gaps), delivered_at_exit

        longest_gap, delivered_at_exit = asyncio.run(main())
        return longest_gap, delivered_at_exit, calls

    def test_async_exit_waits_without_blocking(self, monkeypatch):
        monkeypatch.setattr(dispatcher_module, 'compute_result', slow_compute(0.5))
        longest_gap, delivered_at_exit, calls = self._run_with_ticker(exit_async=True)
        assert longest_gap < 0.3
        assert delivered_at_exit == ["1"]
        assert calls == ["1"]

    def test_sync_exit_inside_loop_does_not_block(self, monkeypatch):
        monkeypatch.setattr(dispatcher_module, 'compute_result', slow_compute(0.5))
        longest_gap, delivered_at_exit, calls = self._run_with_ticker(exit_async=False)
        assert longest_gap < 0.3
        assert delivered_at_exit == []
        assert calls == ["1"]

    def test_aclose_rejects_new_jobs(self):
        async def main():
            dispatcher = JobDispatcher(max_workers=1)
            await dispatcher.aclose()
            with pytest.raises(RuntimeError, match="closed"):
                dispatcher.submit('a.png', lambda error, encoded: None)

        asyncio.run(main())

    def test_job_released_when_its_loop_closes_first(self, monkeypatch):
        monkeypatch.setattr(dispatcher_module, 'compute_result', slow_compute(0.3))
        calls = []
        dispatcher = JobDispatcher(max_workers=1)

        async def main():
            return dispatcher.submit('late.png', lambda error, encoded: calls.append(encoded))

        try:
            job_id = asyncio.run(main())
            time.sleep(0.6)
            assert job_id not in dispatcher._pending
            assert dispatcher.pending == 0
        finally:
            dispatcher.close()
        assert calls == []
