"""Data models for genomes and their alignment/annotation records."""

from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

# Rendered in place of a missing gene name
UNKNOWN_GENE_NAME = "Unknown"


class Gene(BaseModel):
    """Gene identity used as the cross-genome join key.

    Two genes are the same gene iff name and product are equal, regardless
    of which genome or accession they were annotated on.

    Attributes:
        name: Gene name (None if the annotation carries no name)
        product: Product description (always present)
    """

    model_config = ConfigDict(frozen=True)

    name: str | None = None
    product: str


class AlignmentRecord(BaseModel):
    """A BLAST hit on one accession, as half-open interval [start, end).

    start >= end is a degenerate (empty) range.
    """

    model_config = ConfigDict(frozen=True)

    accession: str
    start: int = Field(ge=0)
    end: int = Field(ge=0)


class AnnotationRecord(BaseModel):
    """One occurrence of a gene on an accession, as half-open interval [start, end)."""

    model_config = ConfigDict(frozen=True)

    accession: str
    gene: Gene
    start: int = Field(ge=0)
    end: int = Field(ge=0)


@dataclass
class Genome:
    """One biological sample and its two single-pass record streams.

    Attributes:
        name: Display name, used as the genome's column header
        alignments: BLAST hits for this genome
        annotations: Gene annotations for this genome
        blast_path: File the alignments are read from (None for in-memory genomes)
        gff_path: File the annotations are read from (None for in-memory genomes)
    """
    name: str
    alignments: Iterable[AlignmentRecord]
    annotations: Iterable[AnnotationRecord]
    blast_path: Path | None = None
    gff_path: Path | None = None
