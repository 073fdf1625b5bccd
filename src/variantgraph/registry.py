"""Fixed, ordered registry of subscribers for one run."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator

from variantgraph.config import OutputLayout
from variantgraph.subscribers import (
    ConsequenceTermSubscriber,
    GeneticVariantSubscriber,
    GeneticVariantToTranscriptVariantSubscriber,
    GeneToGeneticVariantSubscriber,
    RecordSubscriber,
    TranscriptToTranscriptVariantSubscriber,
    TranscriptVariantSubscriber,
)

SubscriberFactory = Callable[..., RecordSubscriber]

DEFAULT_SUBSCRIBER_FACTORIES: tuple[SubscriberFactory, ...] = (
    GeneToGeneticVariantSubscriber,
    GeneticVariantSubscriber,
    TranscriptVariantSubscriber,
    GeneticVariantToTranscriptVariantSubscriber,
    TranscriptToTranscriptVariantSubscriber,
    ConsequenceTermSubscriber,
)


class SubscriberRegistry:
    """Ordered subscriber list that is frozen once a run starts publishing."""

    def __init__(self) -> None:
        self._subscribers: list[RecordSubscriber] = []
        self._frozen = False

    def register(self, subscriber: RecordSubscriber) -> None:
        """Append a subscriber; names must be unique within the registry."""

        if self._frozen:
            raise RuntimeError("Subscriber registry is frozen; the run has already started")

        key = subscriber.name.strip().lower()
        if not key:
            raise ValueError("Subscriber name cannot be empty")
        if key in self.names():
            raise ValueError(f"Subscriber already registered: {subscriber.name}")
        self._subscribers.append(subscriber)

    def freeze(self) -> None:
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    def names(self) -> list[str]:
        """Return subscriber names in registration order."""

        return [subscriber.name.strip().lower() for subscriber in self._subscribers]

    def __iter__(self) -> Iterator[RecordSubscriber]:
        return iter(tuple(self._subscribers))

    def __len__(self) -> int:
        return len(self._subscribers)


def build_default_subscriber_registry(
    layout: OutputLayout,
    *,
    logger: logging.Logger | None = None,
    factories: tuple[SubscriberFactory, ...] = DEFAULT_SUBSCRIBER_FACTORIES,
) -> SubscriberRegistry:
    """Create one subscriber per output type, each owning its data file.

    If any subscriber cannot open its file, the ones already created are
    closed before the error propagates.
    """

    registry = SubscriberRegistry()
    try:
        for factory in factories:
            registry.register(factory(layout=layout, logger=logger))
    except Exception:
        for subscriber in registry:
            subscriber.close()
        raise
    return registry
