"""Annotation graph import orchestrator."""

from __future__ import annotations

import contextlib
import logging
from dataclasses import dataclass, field
from pathlib import Path

from variantgraph.adapters.annotation_json import AnnotationJsonAdapter
from variantgraph.config import ANNOTATION_OUTPUT_TYPES, OutputFileType, OutputLayout, RunSettings
from variantgraph.decoding import RecordDecoder
from variantgraph.dispatch import DispatchBus
from variantgraph.headers import HeaderGenerator
from variantgraph.registry import SubscriberRegistry, build_default_subscriber_registry
from variantgraph.shutdown import ShutdownCoordinator

LOGGER = logging.getLogger("variantgraph.pipeline")


@dataclass
class AnnotationRunReport:
    """Execution summary for one run."""

    input_files: int
    lines: int
    records: int
    deliveries: dict[str, int] = field(default_factory=dict)
    rows_written: dict[str, int] = field(default_factory=dict)
    header_files: list[Path] = field(default_factory=list)


class AnnotationParser:
    """Convert a folder of annotation JSON lines into graph import CSV files.

    Nodes: GeneticVariant, TranscriptVariant, ConsequenceTerm.
    Relationships: GeneToGeneticVariant, GeneticVariantToTranscriptVariant,
    TranscriptToTranscriptVariant.

    Scanning, reading, decoding and publishing run on the calling thread;
    subscribers consume on the dispatch pool. Any failure aborts the run and
    leaves already-written rows on disk.
    """

    def __init__(
        self,
        input_folder: str | Path,
        output_folder: str | Path,
        *,
        settings: RunSettings | None = None,
        decoder: RecordDecoder | None = None,
        registry: SubscriberRegistry | None = None,
        output_types: tuple[OutputFileType, ...] = ANNOTATION_OUTPUT_TYPES,
        logger: logging.Logger | None = None,
    ) -> None:
        self.input_folder = Path(input_folder)
        self.output_folder = Path(output_folder)
        self.settings = settings or RunSettings()
        self.logger = logger or LOGGER
        self.output_types = output_types
        self.layout = OutputLayout(self.output_folder, source_name=self.settings.source_name)
        self.adapter = AnnotationJsonAdapter(
            input_folder=self.input_folder,
            decoder=decoder,
            settings=self.settings,
            logger=self.logger.getChild("reader"),
        )
        self._registry = registry

    def execute(self) -> AnnotationRunReport:
        input_files = self.adapter.input_files()
        self.logger.info(
            "Annotation import start: input=%s output=%s files=%d",
            self.input_folder,
            self.output_folder,
            len(input_files),
        )

        registry = self._registry or build_default_subscriber_registry(
            self.layout, logger=self.logger.getChild("subscribers")
        )
        registry.freeze()

        bus = DispatchBus(
            registry,
            worker_count=self.settings.worker_count,
            queue_policy=self.settings.queue_policy,
            logger=self.logger.getChild("dispatch"),
        )
        coordinator = ShutdownCoordinator(
            bus,
            registry,
            drain_timeout_seconds=self.settings.drain_timeout_seconds,
            logger=self.logger.getChild("shutdown"),
        )

        try:
            with contextlib.closing(self.adapter.read(input_files)) as records:
                for record in records:
                    bus.publish(record)
        except Exception:
            coordinator.abort()
            raise

        coordinator.shutdown()
        header_files = HeaderGenerator(self.logger.getChild("headers")).generate_headers(
            self.output_folder, self.output_types
        )

        statistics = self.adapter.statistics
        self.logger.info(
            "Annotation import finished: files=%d lines=%d records=%d",
            statistics.files,
            statistics.lines,
            statistics.records,
        )
        return AnnotationRunReport(
            input_files=statistics.files,
            lines=statistics.lines,
            records=statistics.records,
            deliveries=bus.delivered_counts(),
            rows_written={
                subscriber.name: getattr(subscriber, "rows_written", 0) for subscriber in registry
            },
            header_files=header_files,
        )
