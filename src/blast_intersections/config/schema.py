"""Pydantic models for pipeline configuration."""

import hashlib
import json
from pathlib import Path
from typing import Literal, TypeAlias

from pydantic import BaseModel, Field, field_validator

# How a gene's span of the coverage track is reduced to one count
CountPolicy: TypeAlias = Literal["breadth", "depth", "hits"]

# In-memory layout of a per-accession coverage track
CoverageRepresentation: TypeAlias = Literal["dense", "events"]

COUNT_POLICIES: tuple[str, ...] = ("breadth", "depth", "hits")
COVERAGE_REPRESENTATIONS: tuple[str, ...] = ("dense", "events")


class DiscoveryConfig(BaseModel):
    """Where genomes live and how their input files are recognized."""

    genomes_dir: Path = Field(
        default=Path("."),
        description="Directory whose subdirectories are genomes",
    )
    blast_pattern: str = Field(
        default="*.blast",
        min_length=1,
        description="Glob matching the BLAST tabular file inside a genome directory",
    )
    gff_pattern: str = Field(
        default="*.gff*",
        min_length=1,
        description="Glob matching the GFF3 file inside a genome directory",
    )


class BlastConfig(BaseModel):
    """BLAST tabular (outfmt 6) parsing options."""

    accession_field: Literal["sseqid", "qseqid"] = Field(
        default="sseqid",
        description="Column naming the accession the hit lies on",
    )


class GffConfig(BaseModel):
    """GFF3 parsing options."""

    feature_types: list[str] = Field(
        default_factory=lambda: ["CDS"],
        min_length=1,
        description="GFF feature types (column 3) treated as genes",
    )
    name_attributes: list[str] = Field(
        default_factory=lambda: ["gene", "Name"],
        description="Attributes searched in order for the gene name",
    )
    product_attribute: str = Field(
        default="product",
        min_length=1,
        description="Attribute holding the gene product description",
    )

    @field_validator("feature_types")
    @classmethod
    def strip_feature_types(cls, v: list[str]) -> list[str]:
        """Reject blank feature type names."""
        stripped = [t.strip() for t in v]
        if any(not t for t in stripped):
            raise ValueError("feature_types must not contain empty names")
        return stripped


class CountingConfig(BaseModel):
    """Coverage counting options."""

    policy: CountPolicy = Field(
        default="breadth",
        description="breadth = covered positions, depth = summed coverage, hits = overlapping alignments",
    )
    representation: CoverageRepresentation = Field(
        default="dense",
        description="dense per-position arrays or sparse sorted events",
    )
    sort_rows: bool = Field(
        default=True,
        description="Sort output rows by (name, product)",
    )


class PipelineConfig(BaseModel):
    """Main pipeline configuration."""

    discovery: DiscoveryConfig = Field(
        default_factory=DiscoveryConfig,
        description="Genome discovery settings",
    )
    blast: BlastConfig = Field(
        default_factory=BlastConfig,
        description="BLAST parsing settings",
    )
    gff: GffConfig = Field(
        default_factory=GffConfig,
        description="GFF parsing settings",
    )
    counting: CountingConfig = Field(
        default_factory=CountingConfig,
        description="Coverage counting settings",
    )

    def config_hash(self) -> str:
        """
        Compute SHA-256 hash of the configuration.

        Returns a deterministic hash based on all config values,
        useful for tracking which settings produced an output table.
        """
        config_dict = self.model_dump(mode="python")
        config_json = json.dumps(
            config_dict,
            sort_keys=True,
            default=str,
        )
        return hashlib.sha256(config_json.encode()).hexdigest()
