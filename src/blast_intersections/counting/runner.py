"""Sequential per-genome counting run."""

from collections.abc import Iterable

import structlog

from blast_intersections.counting.aggregate import aggregate_genome
from blast_intersections.counting.coverage import build_coverage
from blast_intersections.counting.missing import MissingAccessionTracker
from blast_intersections.counting.table import GeneCountTable
from blast_intersections.genomes.models import Genome
from blast_intersections.persistence.provenance import ProvenanceTracker

logger = structlog.get_logger()


def count_gene_hits(
    genomes: Iterable[Genome],
    policy: str = "breadth",
    representation: str = "dense",
    provenance: ProvenanceTracker | None = None,
) -> GeneCountTable:
    """Count alignment coverage over every annotated gene of every genome.

    The genome sequence is materialized first so the table width (genome
    count) is fixed before any row exists. Genomes are then processed one at
    a time: the alignment stream is built into coverage tracks, the
    annotation stream is aggregated against them, and the tracks are
    dropped before the next genome starts.

    Args:
        genomes: Genomes in discovery order (fixes the column order)
        policy: "breadth", "depth" or "hits"
        representation: Coverage track layout, "dense" or "events"
        provenance: Optional tracker receiving one step per genome

    Returns:
        Completed GeneCountTable

    Raises:
        ParseError: If any genome's input is malformed (the run is aborted)
    """
    genomes = list(genomes)
    table = GeneCountTable([genome.name for genome in genomes])

    logger.info(
        "count_start",
        genome_count=len(genomes),
        policy=policy,
        representation=representation,
    )

    for genome_index, genome in enumerate(genomes):
        logger.info("genome_start", genome=genome.name, genome_index=genome_index)
        try:
            coverage = build_coverage(genome.alignments, representation)
            tracker = MissingAccessionTracker(genome.name)
            summary = aggregate_genome(
                genome.annotations,
                coverage,
                table,
                genome_index,
                tracker,
                policy,
            )
        except Exception:
            logger.error("genome_failed", genome=genome.name, genome_index=genome_index)
            raise

        accession_count = len(coverage)
        del coverage

        logger.info(
            "genome_complete",
            genome=genome.name,
            accessions_with_hits=accession_count,
            annotations=summary.annotation_count,
            genes=summary.gene_count,
            missing_accessions=summary.missing_accessions,
            total_count=summary.total_count,
        )

        if provenance is not None:
            provenance.record_step("count_genome", {
                "genome": genome.name,
                "genome_index": genome_index,
                "blast_path": str(genome.blast_path) if genome.blast_path else None,
                "gff_path": str(genome.gff_path) if genome.gff_path else None,
                "accessions_with_hits": accession_count,
                "annotations": summary.annotation_count,
                "genes": summary.gene_count,
                "missing_accessions": sorted(tracker.missing),
                "total_count": summary.total_count,
            })

    logger.info("count_complete", genome_count=len(genomes), gene_count=len(table))
    return table
