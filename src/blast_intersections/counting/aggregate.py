"""Reduce each annotated gene's span of coverage to one count per genome."""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass

import structlog

from blast_intersections.counting.coverage import CoverageTrack
from blast_intersections.counting.missing import MissingAccessionTracker
from blast_intersections.counting.table import GeneCountTable
from blast_intersections.genomes.models import AnnotationRecord

logger = structlog.get_logger()


@dataclass
class GenomeSummary:
    """Counts gathered while aggregating one genome.

    Attributes:
        genome_name: Genome the summary belongs to
        genome_index: Column index of the genome
        annotation_count: Annotation records consumed
        gene_count: Distinct genes annotated in this genome
        missing_accessions: Accessions annotated but never hit
        total_count: Sum of all contributions made by this genome
    """
    genome_name: str
    genome_index: int
    annotation_count: int = 0
    gene_count: int = 0
    missing_accessions: int = 0
    total_count: int = 0


def aggregate_genome(
    annotations: Iterable[AnnotationRecord],
    coverage: Mapping[str, CoverageTrack],
    table: GeneCountTable,
    genome_index: int,
    tracker: MissingAccessionTracker,
    policy: str = "breadth",
) -> GenomeSummary:
    """Add one genome's per-gene contributions into the cross-genome table.

    Each annotation record contributes coverage.count(start, end, policy) for
    its accession. Records on accessions with no coverage contribute 0 and are
    reported through the tracker. Contributions for the same gene are summed,
    and every annotated gene gets a row even when its contribution is 0.

    Args:
        annotations: Single-pass stream of this genome's AnnotationRecords
        coverage: Accession -> coverage track for this genome
        table: Cross-genome table to write into
        genome_index: Column of this genome in the table
        tracker: Missing-accession tracker scoped to this genome
        policy: "breadth", "depth" or "hits"

    Returns:
        GenomeSummary for logging and provenance
    """
    summary = GenomeSummary(genome_name=tracker.genome_name, genome_index=genome_index)
    genes = set()

    for record in annotations:
        track = coverage.get(record.accession)
        if track is None:
            tracker.report(record.accession)
            amount = 0
        else:
            amount = track.count(record.start, record.end, policy)

        table.record(record.gene, genome_index, amount)

        summary.annotation_count += 1
        summary.total_count += amount
        genes.add(record.gene)

    summary.gene_count = len(genes)
    summary.missing_accessions = len(tracker)
    return summary
