import _thread
import random
import sys
import threading
import time
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT / "src"))

from variantgraph.dispatch import DispatchBus  # noqa: E402
from variantgraph.errors import DeliveryError, DrainInterruptedError, PoolTimeoutError  # noqa: E402
from variantgraph.models import AnnotationRecord  # noqa: E402
from variantgraph.subscribers.base import RecordSubscriber  # noqa: E402


def _record(index: int) -> AnnotationRecord:
    return AnnotationRecord(variant_id=f"rs{index}", chrom="1", pos=index + 1, ref="A", alt="G")


class RecordingSubscriber(RecordSubscriber):
    def __init__(self, name: str, jitter: bool = False) -> None:
        self.name = name
        self.jitter = jitter
        self.seen: list[str] = []
        self.active = 0
        self.max_active = 0
        self._guard = threading.Lock()

    def on_record(self, record: AnnotationRecord) -> None:
        with self._guard:
            self.active += 1
            self.max_active = max(self.max_active, self.active)
        if self.jitter:
            time.sleep(random.random() / 5000)
        self.seen.append(record.variant_id)
        with self._guard:
            self.active -= 1

    def close(self) -> None:
        pass


class BlockingSubscriber(RecordingSubscriber):
    def __init__(self, name: str, release: threading.Event) -> None:
        super().__init__(name)
        self.release = release

    def on_record(self, record: AnnotationRecord) -> None:
        self.release.wait(timeout=30)
        super().on_record(record)


class InterruptingSubscriber(RecordingSubscriber):
    def __init__(self, name: str, release: threading.Event) -> None:
        super().__init__(name)
        self.release = release

    def on_record(self, record: AnnotationRecord) -> None:
        if not self.seen:
            time.sleep(0.5)
            _thread.interrupt_main()
            self.release.wait(timeout=30)
        super().on_record(record)


class FailingSubscriber(RecordingSubscriber):
    def __init__(self, name: str, fail_at: int) -> None:
        super().__init__(name)
        self.fail_at = fail_at

    def on_record(self, record: AnnotationRecord) -> None:
        if len(self.seen) == self.fail_at:
            raise OSError("disk full")
        super().on_record(record)


def test_every_subscriber_receives_every_record_once_in_publish_order() -> None:
    subscribers = [RecordingSubscriber(f"sub{index}", jitter=True) for index in range(5)]
    bus = DispatchBus(subscribers, worker_count=2)

    for index in range(500):
        bus.publish(_record(index))
    bus.drain(timeout=30)

    expected = [f"rs{index}" for index in range(500)]
    for subscriber in subscribers:
        assert subscriber.seen == expected
        assert subscriber.max_active == 1
    assert bus.published == 500
    assert bus.delivered_counts() == {f"sub{index}": 500 for index in range(5)}


def test_publish_does_not_wait_for_slow_subscribers() -> None:
    release = threading.Event()
    slow = BlockingSubscriber("slow", release)
    fast = RecordingSubscriber("fast")
    bus = DispatchBus([slow, fast], worker_count=4)

    try:
        for index in range(1000):
            bus.publish(_record(index))
        assert slow.seen == []
    finally:
        release.set()

    bus.drain(timeout=30)
    assert len(slow.seen) == 1000
    assert fast.seen == slow.seen


def test_drain_timeout_is_fatal() -> None:
    release = threading.Event()
    bus = DispatchBus([BlockingSubscriber("stuck", release)], worker_count=1)
    bus.publish(_record(0))

    try:
        with pytest.raises(PoolTimeoutError, match="stuck"):
            bus.drain(timeout=0.1)
    finally:
        release.set()


def test_subscriber_failure_surfaces_as_delivery_error() -> None:
    failing = FailingSubscriber("failing", fail_at=3)
    healthy = RecordingSubscriber("healthy")
    bus = DispatchBus([failing, healthy], worker_count=2)

    with pytest.raises(DeliveryError, match="failing") as excinfo:
        for index in range(50):
            bus.publish(_record(index))
        bus.drain(timeout=30)

    assert isinstance(excinfo.value.__cause__, OSError)
    assert failing.seen == ["rs0", "rs1", "rs2"]


def test_publish_after_stop_is_rejected() -> None:
    bus = DispatchBus([RecordingSubscriber("only")])
    bus.stop()

    assert not bus.accepting
    with pytest.raises(RuntimeError):
        bus.publish(_record(0))
    bus.drain(timeout=1)


def test_interrupt_during_drain_raises_drain_interrupted_error() -> None:
    release = threading.Event()
    subscriber = InterruptingSubscriber("interrupting", release)
    bus = DispatchBus([subscriber], worker_count=1)
    bus.publish(_record(0))

    try:
        with pytest.raises(DrainInterruptedError) as excinfo:
            bus.drain(timeout=30)
    finally:
        release.set()

    assert isinstance(excinfo.value.__cause__, KeyboardInterrupt)
    assert not bus.accepting
