"""
Fan-out/fan-in execution of one assembly stage.

The work items 0..count-1 (elements, nodes or boundary elements) are split
into P contiguous ranges, one per producer thread. Producers compute their
items independently and send ``(index, message)`` pairs over a queue
bounded to P entries. A single consumer thread takes every message and
applies it to the shared state (the global matrix, the load vector, the
result table), so that state needs no locking.

    producer 0 --\
    producer 1 ----> data queue (maxsize P) --> consumer --> K, f
    ...          /
    producer P-1

Every producer reports exactly once on an error queue (None on success).
The first error cancels the stage: the remaining producers stop at their
next item, the consumer is released and the error is re-raised in the
calling thread with its original traceback. The consumer finishes when it
has received ``count`` messages.

Usage:
    run_stage("Building a global stiffness matrix", mesh.n_elements,
              num_threads, produce=element_matrix, consume=scatter)
"""

import logging
import queue
import threading
import time

from tqdm import tqdm

from ..errors import FEMError

log = logging.getLogger(__name__)

_POLL = 0.05
_STOP = object()


def partition(count, parts):
    """P contiguous [begin, end) ranges covering 0..count-1."""
    return [(i * count // parts, (i + 1) * count // parts) for i in range(parts)]


def run_stage(description, count, num_threads, produce, consume, verbose=True):
    """
    Run ``produce`` over 0..count-1 in worker threads, ``consume`` in one thread.

    Parameters
    ----------
    description : str
        Progress bar label.
    count : int
        Number of work items.
    num_threads : int
        Number of producer threads (capped at ``count``).
    produce : callable
        ``produce(index) -> message``. Must not modify shared state.
    consume : callable
        ``consume(index, message)``. Only ever called from the consumer
        thread, one message at a time.
    verbose : bool, optional
        Show a tqdm progress bar.

    Raises
    ------
    Exception
        The first exception raised by a producer, or the exception raised
        by the consumer.
    """
    if count <= 0:
        return
    parts = max(1, min(int(num_threads), count))
    data = queue.Queue(maxsize=parts)
    errors = queue.Queue(maxsize=parts)
    cancel = threading.Event()
    done = threading.Event()
    state = {"received": 0, "error": None}

    def send(item):
        while not cancel.is_set():
            try:
                data.put(item, timeout=_POLL)
                return True
            except queue.Full:
                continue
        return False

    def producer(begin, end):
        error = None
        try:
            for index in range(begin, end):
                if cancel.is_set():
                    break
                if not send((index, produce(index))):
                    break
        except Exception as exc:
            error = exc
        finally:
            errors.put(error)

    def consumer():
        try:
            with tqdm(total=count, desc=description, disable=not verbose) as bar:
                while state["received"] < count:
                    item = data.get()
                    if item is _STOP:
                        return
                    consume(*item)
                    state["received"] += 1
                    bar.update(1)
        except Exception as exc:
            state["error"] = exc
            cancel.set()
        finally:
            done.set()

    start = time.perf_counter()
    consumer_thread = threading.Thread(target=consumer, name="consumer", daemon=True)
    producers = [
        threading.Thread(target=producer, args=bounds, name=f"producer-{i}", daemon=True)
        for i, bounds in enumerate(partition(count, parts))
    ]
    consumer_thread.start()
    for t in producers:
        t.start()

    first_error = None
    for _ in range(parts):
        error = errors.get()
        if error is not None and first_error is None:
            first_error = error
            cancel.set()
    for t in producers:
        t.join()

    # all producers are gone; release the consumer if it is still waiting
    while not done.is_set():
        try:
            data.put(_STOP, timeout=_POLL)
            break
        except queue.Full:
            continue
    consumer_thread.join()

    if first_error is not None:
        raise first_error
    if state["error"] is not None:
        raise state["error"]
    if state["received"] != count:
        raise FEMError(f"{description}: {state['received']} of {count} items processed")
    log.debug("%s: %d items, %d threads, %.3f s",
              description, count, parts, time.perf_counter() - start)
