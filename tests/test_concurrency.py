from concurrent.futures import ThreadPoolExecutor
import threading
import time

import pytest

from gaevo.utils.concurrency import Concurrency, _partition, create_executor


def test_create_executor_is_serial_for_one_worker():
    assert create_executor(None) is None
    assert create_executor(1) is None
    executor = create_executor(3)
    assert executor is not None
    executor.shutdown()


def test_partition_covers_range():
    bounds = _partition(10, 3)
    assert bounds[0] == 0 and bounds[-1] == 10
    assert bounds == sorted(bounds)
    assert _partition(2, 8) == [0, 1, 2]


def test_serial_scope_runs_inline():
    thread_ids = []
    with Concurrency() as concurrency:
        assert concurrency.is_serial
        future = concurrency.submit(lambda: thread_ids.append(threading.get_ident()) or 5)
    assert future.result() == 5
    assert thread_ids == [threading.get_ident()]


@pytest.mark.parametrize("workers", [None, 4])
def test_execute_all_runs_every_task_once(workers):
    slots = [0] * 100
    executor = ThreadPoolExecutor(max_workers=workers) if workers else None

    def task(i):
        slots[i] += 1

    with Concurrency.start(executor) as concurrency:
        concurrency.execute_all([lambda i=i: task(i) for i in range(100)])

    assert slots == [1] * 100
    if executor is not None:
        executor.shutdown()


def test_scope_joins_all_tasks_before_exit():
    finished = []
    with ThreadPoolExecutor(max_workers=2) as pool:
        with Concurrency(pool) as concurrency:
            for i in range(4):
                concurrency.execute(lambda i=i: (time.sleep(0.02), finished.append(i)))
        assert sorted(finished) == [0, 1, 2, 3]


def test_task_failure_is_reraised_after_join():
    finished = []

    def fail():
        raise KeyError("task")

    with ThreadPoolExecutor(max_workers=2) as pool:
        with pytest.raises(KeyError):
            with Concurrency(pool) as concurrency:
                concurrency.execute(fail)
                concurrency.execute(lambda: (time.sleep(0.05), finished.append(1)))
    assert finished == [1]


def test_body_failure_takes_precedence_and_still_joins():
    finished = []

    def fail():
        raise KeyError("task")

    with ThreadPoolExecutor(max_workers=2) as pool:
        with pytest.raises(ValueError, match="body"):
            with Concurrency(pool) as concurrency:
                concurrency.execute(fail)
                concurrency.execute(lambda: (time.sleep(0.05), finished.append(1)))
                raise ValueError("body")
    assert finished == [1]


def test_closed_scope_rejects_tasks():
    concurrency = Concurrency()
    concurrency.close()
    with pytest.raises(RuntimeError):
        concurrency.submit(print)


def test_serial_interrupt_stops_remaining_tasks():
    ran = []

    def interrupt():
        raise KeyboardInterrupt

    with pytest.raises(KeyboardInterrupt):
        with Concurrency() as concurrency:
            concurrency.execute_all(
                [interrupt, lambda: ran.append("second"), lambda: ran.append("third")]
            )
    assert ran == []
