"""
Unit tests for the worker thread pool.
"""

import threading
import time

import pytest

from userapi.core.thread_pool import ThreadPool


class TestThreadPool:

    def test_submit_before_start(self):
        with pytest.raises(RuntimeError):
            ThreadPool(min_workers=1, max_workers=1).submit(lambda: None)

    def test_runs_tasks(self):
        pool = ThreadPool(min_workers=2, max_workers=4)
        pool.start()
        done = threading.Event()
        results = []

        def work(value):
            results.append(value)
            if len(results) == 5:
                done.set()

        try:
            for i in range(5):
                assert pool.submit(work, args=(i,))
            assert done.wait(timeout=5)
        finally:
            pool.shutdown(wait=True, timeout=5)

        assert sorted(results) == [0, 1, 2, 3, 4]
        assert pool.worker_count == 0

    def test_full_queue_rejects(self):
        pool = ThreadPool(min_workers=1, max_workers=1, queue_size=1)
        pool.start()
        release = threading.Event()
        started = threading.Event()

        def block():
            started.set()
            release.wait(timeout=5)

        try:
            assert pool.submit(block)
            assert started.wait(timeout=5)
            assert pool.submit(block)          # waits in the queue
            assert pool.submit(block) is False  # queue full
        finally:
            release.set()
            pool.shutdown(wait=True, timeout=5)

    def test_failing_task_does_not_kill_worker(self):
        pool = ThreadPool(min_workers=1, max_workers=1)
        pool.start()
        done = threading.Event()

        def fail():
            raise RuntimeError("boom")

        try:
            pool.submit(fail)
            pool.submit(done.set)
            assert done.wait(timeout=5)
        finally:
            pool.shutdown(wait=True, timeout=5)

        assert pool.worker_count == 0

    def test_expired_task_calls_on_expire_instead(self):
        pool = ThreadPool(min_workers=1, max_workers=1)
        pool.start()
        release = threading.Event()
        started = threading.Event()
        expired = threading.Event()
        ran = []

        def block():
            started.set()
            release.wait(timeout=5)

        try:
            assert pool.submit(block)
            assert started.wait(timeout=5)
            assert pool.submit(ran.append, args=("late",), timeout=0.01, on_expire=expired.set)
            time.sleep(0.1)
            release.set()
            assert expired.wait(timeout=5)
        finally:
            release.set()
            pool.shutdown(wait=True, timeout=5)

        assert ran == []

    def test_on_expire_not_called_for_prompt_task(self):
        pool = ThreadPool(min_workers=1, max_workers=1)
        pool.start()
        done = threading.Event()
        expired = []

        try:
            assert pool.submit(done.set, timeout=5, on_expire=lambda: expired.append(True))
            assert done.wait(timeout=5)
        finally:
            pool.shutdown(wait=True, timeout=5)

        assert expired == []
