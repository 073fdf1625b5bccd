"""Canonical in-memory data models used by variantgraph."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class TranscriptConsequence:
    """Effect of a variant on one transcript."""

    transcript_id: str
    gene_id: str | None = None
    consequence_terms: tuple[str, ...] = ()
    impact: str | None = None
    hgvsc: str | None = None
    hgvsp: str | None = None
    biotype: str | None = None


@dataclass(frozen=True)
class AnnotationRecord:
    """Single decoded annotation line.

    Records are immutable so that the same instance can be handed to every
    subscriber concurrently.
    """

    variant_id: str
    chrom: str
    pos: int
    ref: str
    alt: str
    gene_id: str | None = None
    most_severe_consequence: str | None = None
    transcripts: tuple[TranscriptConsequence, ...] = field(default_factory=tuple)
    consequence_terms: tuple[str, ...] = field(default_factory=tuple)

    def gene_ids(self) -> tuple[str, ...]:
        """Distinct genes touched by the variant, owning gene first."""

        genes: list[str] = []
        candidates = [self.gene_id] + [item.gene_id for item in self.transcripts]
        for gene_id in candidates:
            if gene_id and gene_id not in genes:
                genes.append(gene_id)
        return tuple(genes)

    def transcript_variant_id(self, transcript: TranscriptConsequence) -> str:
        """Stable identifier for the variant as seen on ``transcript``."""

        return f"{self.variant_id}_{transcript.transcript_id}"
