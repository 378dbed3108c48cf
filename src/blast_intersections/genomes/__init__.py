"""Genome inputs: record models, BLAST/GFF parsers and directory discovery."""

from blast_intersections.genomes.models import (
    UNKNOWN_GENE_NAME,
    AlignmentRecord,
    AnnotationRecord,
    Gene,
    Genome,
)
from blast_intersections.genomes.blast import parse_blast, parse_blast_line
from blast_intersections.genomes.gff import parse_attributes, parse_gff, parse_gff_line
from blast_intersections.genomes.discover import find_genomes, find_genomes_from_config

__all__ = [
    "UNKNOWN_GENE_NAME",
    "AlignmentRecord",
    "AnnotationRecord",
    "Gene",
    "Genome",
    "parse_blast",
    "parse_blast_line",
    "parse_attributes",
    "parse_gff",
    "parse_gff_line",
    "find_genomes",
    "find_genomes_from_config",
]
