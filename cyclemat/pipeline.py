"""Concurrent multiply pipeline.

One multiplication is decomposed into scalar pairs that flow through three
bounded channels:

    encoder --(left_in, right_in)--> worker pool --(out)--> assembler

The encoder walks ``left`` row-major and, for every ``left[i][j]``, walks row
``j`` of ``right``, sending ``(i, j, left[i][j])`` and ``(j, k, right[j][k])`` in
lockstep.  A worker always pulls one message from *each* input channel under a
shared pairing lock, so the n-th left message is always matched with the n-th
right message regardless of how many workers run.  Products are tagged with the
left row index and the right column index; the contraction index is dropped.

Channels are sized to the exact number of messages that will ever transit them.
The encoder runs in the caller's thread, so a send that would block is a sizing
bug and raises ``ChannelFullError`` rather than deadlocking.

Accumulation is integer addition only.  Workers may finish in any order and the
assembled matrix is still bit-identical from run to run.
"""

from __future__ import annotations

import math
import queue
import threading
from typing import TYPE_CHECKING, Iterator, List, NamedTuple, Optional, Sequence, Tuple

from .errors import ChannelClosedError, ChannelFullError

if TYPE_CHECKING:
    from .matrix import Matrix
    from .trace import PipelineTraceLogger


class Element(NamedTuple):
    row_index: int
    col_index: int
    value: int


Batch = List[Element]

_CLOSED = object()


class Channel:
    """Bounded FIFO with close semantics.

    ``receive`` returns ``(item, True)`` while data is pending and
    ``(None, False)`` once the channel is closed and drained.  Every reader
    observes the close, not only the first one.
    """

    def __init__(self, capacity: int):
        if int(capacity) < 1:
            raise ValueError("channel capacity must be >= 1")
        self.capacity = int(capacity)
        # +1 slot reserved for the close marker
        self._q: queue.Queue = queue.Queue(maxsize=self.capacity + 1)
        self._lock = threading.Lock()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def send(self, item) -> None:
        with self._lock:
            if self._closed:
                raise ChannelClosedError("send on closed channel")
            if self._q.qsize() >= self.capacity:
                raise ChannelFullError(
                    f"channel full (capacity={self.capacity}); sender would block"
                )
            self._q.put_nowait(item)

    def close(self) -> None:
        with self._lock:
            if self._closed:
                raise ChannelClosedError("close of closed channel")
            self._closed = True
            self._q.put_nowait(_CLOSED)

    def receive(self) -> Tuple[Optional[Batch], bool]:
        item = self._q.get()
        if item is _CLOSED:
            self._q.put_nowait(_CLOSED)
            return None, False
        return item, True

    def __iter__(self) -> Iterator[Batch]:
        while True:
            item, ok = self.receive()
            if not ok:
                return
            yield item


def channel_capacity(rows: int, inner: int, cols: int, batch_size: int = 1) -> int:
    """Number of messages one multiply sends per channel: ceil(R*C*K / batch)."""
    if int(batch_size) < 1:
        raise ValueError("batch_size must be >= 1")
    pairs = int(rows) * int(inner) * int(cols)
    return max(1, math.ceil(pairs / int(batch_size)))


def encode_pairs(
    left: Sequence[Sequence[int]], right: Sequence[Sequence[int]]
) -> Iterator[Tuple[Element, Element]]:
    for i, left_row in enumerate(left):
        for j, first in enumerate(left_row):
            for k, second in enumerate(right[j]):
                yield Element(i, j, first), Element(j, k, second)


def feed_channels(
    left: Sequence[Sequence[int]],
    right: Sequence[Sequence[int]],
    left_in: Channel,
    right_in: Channel,
    *,
    batch_size: int = 1,
) -> int:
    """Send every encoded pair in lockstep batches, then close both channels.

    The channels are closed even when encoding fails so that workers exit.
    Returns the number of messages sent on each channel.
    """
    sent = 0
    lbatch: Batch = []
    rbatch: Batch = []
    try:
        for a, b in encode_pairs(left, right):
            lbatch.append(a)
            rbatch.append(b)
            if len(lbatch) >= batch_size:
                left_in.send(lbatch)
                right_in.send(rbatch)
                sent += 1
                lbatch, rbatch = [], []
        if lbatch:
            left_in.send(lbatch)
            right_in.send(rbatch)
            sent += 1
    finally:
        left_in.close()
        right_in.close()
    return sent


class ProductPipeline:
    """Pool of worker threads turning paired batches into tagged products.

    The output channel is closed exactly once, by the last worker to stop.
    A worker failure stops that worker; ``check()`` re-raises the first one.
    """

    def __init__(
        self,
        left_in: Channel,
        right_in: Channel,
        out: Channel,
        *,
        workers: int = 1,
        tracer: Optional["PipelineTraceLogger"] = None,
        multiply_id: int = 0,
    ):
        if int(workers) < 1:
            raise ValueError("workers must be >= 1")
        self.left_in = left_in
        self.right_in = right_in
        self.out = out
        self.workers = int(workers)
        self.tracer = tracer
        self.multiply_id = int(multiply_id)
        self._pair_lock = threading.Lock()
        self._state_lock = threading.Lock()
        self._active = 0
        self._errors: list[Exception] = []
        self._threads: list[threading.Thread] = []

    def start(self) -> None:
        if self._threads:
            raise RuntimeError("pipeline already started")
        self._active = self.workers
        for wid in range(self.workers):
            t = threading.Thread(
                target=self._run_worker,
                args=(wid,),
                name=f"cyclemat-worker-{self.multiply_id}-{wid}",
                daemon=True,
            )
            self._threads.append(t)
            t.start()

    def join(self) -> None:
        for t in self._threads:
            t.join()

    def check(self) -> None:
        if self._errors:
            raise self._errors[0]

    def _pull_pair(self) -> Tuple[Optional[Batch], Optional[Batch]]:
        with self._pair_lock:
            lbatch, lok = self.left_in.receive()
            rbatch, rok = self.right_in.receive()
        if not (lok and rok):
            return None, None
        return lbatch, rbatch

    def _run_worker(self, worker_id: int) -> None:
        messages = 0
        products = 0
        try:
            while True:
                lbatch, rbatch = self._pull_pair()
                if lbatch is None or rbatch is None:
                    break
                if len(lbatch) != len(rbatch):
                    raise RuntimeError(
                        f"unpaired batch: {len(lbatch)} left vs {len(rbatch)} right elements"
                    )
                out_batch = [
                    Element(x.row_index, y.col_index, x.value * y.value)
                    for x, y in zip(lbatch, rbatch)
                ]
                self.out.send(out_batch)
                messages += 1
                products += len(out_batch)
        except Exception as exc:
            with self._state_lock:
                self._errors.append(exc)
        finally:
            self._finish_worker(worker_id, messages, products)

    def _finish_worker(self, worker_id: int, messages: int, products: int) -> None:
        try:
            if self.tracer is not None:
                self.tracer.log(
                    multiply_id=self.multiply_id,
                    worker_id=worker_id,
                    event="worker_done",
                    messages=messages,
                    products=products,
                )
        except Exception as exc:
            with self._state_lock:
                self._errors.append(exc)
        finally:
            # the last worker out closes the output, whatever the tracer did
            with self._state_lock:
                self._active -= 1
                last = self._active == 0
            if last:
                self.out.close()


def assemble(out: Channel, result: "Matrix") -> int:
    """Drain ``out`` into ``result.entries``; returns the number of products summed."""
    entries = result.entries
    n = 0
    for batch in out:
        for el in batch:
            entries[el.row_index][el.col_index] += el.value
            n += 1
    return n


def pipelined_multiply(
    left: "Matrix",
    right: "Matrix",
    result: "Matrix",
    *,
    workers: int = 1,
    batch_size: int = 1,
    tracer: Optional["PipelineTraceLogger"] = None,
    multiply_id: int = 0,
) -> "Matrix":
    """Run one full encode / multiply / assemble cycle into ``result``.

    Blocks until every product has been accumulated and all workers have
    exited; no partial result is visible before that.
    """
    capacity = channel_capacity(left.rows, left.columns, right.columns, batch_size)
    left_in, right_in, out = Channel(capacity), Channel(capacity), Channel(capacity)

    if tracer is not None:
        tracer.log(multiply_id=multiply_id, worker_id=-1, event="multiply_begin",
                   messages=capacity, products=0)

    pipeline = ProductPipeline(
        left_in, right_in, out, workers=workers, tracer=tracer, multiply_id=multiply_id
    )
    pipeline.start()
    try:
        messages = feed_channels(
            left.entries, right.entries, left_in, right_in, batch_size=batch_size
        )
        products = assemble(out, result)
    finally:
        pipeline.join()
    pipeline.check()

    if tracer is not None:
        tracer.log(multiply_id=multiply_id, worker_id=-1, event="multiply_end",
                   messages=messages, products=products)
    return result
