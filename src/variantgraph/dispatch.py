"""Asynchronous fan-out of decoded records to subscribers.

Each subscriber gets a lane: a FIFO of records waiting for that subscriber
plus at most one drain task running on the shared worker pool. A lane only
schedules a new drain task when none is active, so one subscriber never sees
two records at once and always sees them in publish order, while different
subscribers progress independently on up to ``worker_count`` threads.

Lanes are unbounded (``QueuePolicy.UNBOUNDED``): ``publish`` never blocks, and
if the producer outruns the slowest subscriber that lane keeps growing.
"""

from __future__ import annotations

import concurrent.futures as futures
import logging
import threading
from collections import deque
from collections.abc import Iterable

from variantgraph.config import QueuePolicy
from variantgraph.errors import DeliveryError, DrainInterruptedError, PoolTimeoutError
from variantgraph.models import AnnotationRecord
from variantgraph.subscribers.base import RecordSubscriber

LOGGER = logging.getLogger("variantgraph.dispatch")

_PRUNE_THRESHOLD = 1024


class _Lane:
    """Serial delivery queue for one subscriber."""

    def __init__(self, subscriber: RecordSubscriber) -> None:
        self.subscriber = subscriber
        self.delivered = 0
        self.failure: Exception | None = None
        self._pending: deque[AnnotationRecord] = deque()
        self._lock = threading.Lock()
        self._scheduled = False

    def offer(self, record: AnnotationRecord) -> bool:
        """Queue ``record``; return True when the caller must schedule a drain."""

        with self._lock:
            if self.failure is not None:
                return False
            self._pending.append(record)
            if self._scheduled:
                return False
            self._scheduled = True
            return True

    def drain(self) -> None:
        while True:
            with self._lock:
                if not self._pending:
                    self._scheduled = False
                    return
                record = self._pending.popleft()

            try:
                self.subscriber.on_record(record)
            except Exception as exc:
                with self._lock:
                    self.failure = exc
                    self._pending.clear()
                    self._scheduled = False
                raise
            self.delivered += 1

    def backlog(self) -> int:
        with self._lock:
            return len(self._pending)


class DispatchBus:
    """Broadcast every published record to every subscriber exactly once."""

    def __init__(
        self,
        subscribers: Iterable[RecordSubscriber],
        *,
        worker_count: int = 10,
        queue_policy: QueuePolicy = QueuePolicy.UNBOUNDED,
        logger: logging.Logger | None = None,
    ) -> None:
        if queue_policy is not QueuePolicy.UNBOUNDED:
            raise ValueError(f"Unsupported queue policy: {queue_policy}")

        self.logger = logger or LOGGER
        self.queue_policy = queue_policy
        self.published = 0
        self._lanes = [_Lane(subscriber) for subscriber in subscribers]
        self._executor = futures.ThreadPoolExecutor(
            max_workers=worker_count,
            thread_name_prefix="variantgraph-dispatch",
        )
        self._tasks: dict[futures.Future, _Lane] = {}
        self._accepting = True

    @property
    def accepting(self) -> bool:
        return self._accepting

    def publish(self, record: AnnotationRecord) -> None:
        """Queue ``record`` for every subscriber and return immediately.

        Raises :class:`DeliveryError` as soon as any subscriber has failed, so
        the producer stops feeding a run that is already lost.
        """

        if not self._accepting:
            raise RuntimeError("Dispatch bus no longer accepts records")
        self.raise_for_failure()

        for lane in self._lanes:
            if lane.offer(record):
                self._tasks[self._executor.submit(lane.drain)] = lane

        self.published += 1
        if len(self._tasks) >= _PRUNE_THRESHOLD:
            self._tasks = {task: lane for task, lane in self._tasks.items() if not task.done()}

    def stop(self) -> None:
        """Refuse further publishes and further pool submissions."""

        if not self._accepting:
            return
        self._accepting = False
        self._executor.shutdown(wait=False)

    def drain(self, timeout: float) -> None:
        """Wait up to ``timeout`` seconds for every queued delivery to finish.

        Raises :class:`PoolTimeoutError` if deliveries are still running when
        the timeout expires, and :class:`DeliveryError` if any subscriber
        failed.
        """

        self.stop()
        try:
            _, not_done = futures.wait(list(self._tasks), timeout=timeout)
        except KeyboardInterrupt as exc:
            self._executor.shutdown(wait=False, cancel_futures=True)
            raise DrainInterruptedError("Interrupted while waiting for deliveries to drain") from exc

        if not_done:
            self._executor.shutdown(wait=False, cancel_futures=True)
            busy = ", ".join(
                sorted({self._tasks[task].subscriber.name for task in not_done})
            )
            raise PoolTimeoutError(
                f"Deliveries did not drain within {timeout:.1f}s; "
                f"{len(not_done)} lane task(s) still running: {busy}"
            )

        self._tasks.clear()
        self.raise_for_failure()
        self.logger.info(
            "Dispatch drained: %d records delivered to %d subscribers",
            self.published,
            len(self._lanes),
        )

    def raise_for_failure(self) -> None:
        for lane in self._lanes:
            if lane.failure is not None:
                raise DeliveryError(
                    f"Subscriber {lane.subscriber.name} failed: {lane.failure}"
                ) from lane.failure

    def delivered_counts(self) -> dict[str, int]:
        """Records delivered so far, per subscriber name."""

        return {lane.subscriber.name: lane.delivered for lane in self._lanes}
