"""Ordered shutdown of the dispatch bus and its subscribers."""

from __future__ import annotations

import logging

from variantgraph.dispatch import DispatchBus
from variantgraph.errors import DeliveryError
from variantgraph.registry import SubscriberRegistry
from variantgraph.subscribers.base import RecordSubscriber

LOGGER = logging.getLogger("variantgraph.shutdown")


class ShutdownCoordinator:
    """Stop publishing, drain deliveries, then close subscribers in order.

    A drain timeout is fatal and leaves subscribers open: closing files while
    a worker may still be writing to them would only hide the failure.
    """

    def __init__(
        self,
        bus: DispatchBus,
        registry: SubscriberRegistry,
        *,
        drain_timeout_seconds: float = 600.0,
        logger: logging.Logger | None = None,
    ) -> None:
        self.bus = bus
        self.registry = registry
        self.drain_timeout_seconds = drain_timeout_seconds
        self.logger = logger or LOGGER

    def shutdown(self) -> None:
        """Run the full sequence; raises the first drain or close failure."""

        self.bus.stop()
        self.logger.info(
            "Waiting up to %.0fs for %d published records to drain",
            self.drain_timeout_seconds,
            self.bus.published,
        )
        try:
            self.bus.drain(self.drain_timeout_seconds)
        except DeliveryError:
            self._close_subscribers()
            raise

        failures = self._close_subscribers()
        if failures:
            raise failures[0]

    def abort(self) -> None:
        """Best-effort drain and close after the producer failed.

        Errors raised here are logged, not raised, so the producer's failure
        stays the one that reaches the caller.
        """

        self.bus.stop()
        try:
            self.bus.drain(self.drain_timeout_seconds)
        except DeliveryError as exc:
            self.logger.error("Delivery failed while aborting run: %s", exc)
        except Exception as exc:
            self.logger.error("Could not drain deliveries while aborting run: %s", exc)
            return
        self._close_subscribers()

    def _close_subscribers(self) -> list[Exception]:
        failures: list[Exception] = []
        for subscriber in self.registry:
            error = _close_quietly(subscriber)
            if error is not None:
                self.logger.error("Failed to close subscriber %s: %s", subscriber.name, error)
                failures.append(error)
        return failures


def _close_quietly(subscriber: RecordSubscriber) -> Exception | None:
    try:
        subscriber.close()
    except Exception as exc:
        return exc
    return None
