"""Coverage accumulation and cross-genome gene counting."""

from blast_intersections.counting.coverage import (
    TRACK_TYPES,
    CoverageTrack,
    DenseCoverage,
    EventCoverage,
    build_coverage,
)
from blast_intersections.counting.missing import MissingAccessionTracker
from blast_intersections.counting.table import GeneCountTable
from blast_intersections.counting.aggregate import GenomeSummary, aggregate_genome
from blast_intersections.counting.runner import count_gene_hits

__all__ = [
    "TRACK_TYPES",
    "CoverageTrack",
    "DenseCoverage",
    "EventCoverage",
    "build_coverage",
    "MissingAccessionTracker",
    "GeneCountTable",
    "GenomeSummary",
    "aggregate_genome",
    "count_gene_hits",
]
