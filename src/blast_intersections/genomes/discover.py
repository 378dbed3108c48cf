"""Genome discovery on the filesystem.

Each immediate subdirectory of the genomes directory holding a BLAST file and
a GFF file is one genome, named after the directory. Directories are visited
in sorted name order; that order fixes genome indices and the column order of
the output table.
"""

from pathlib import Path

import structlog

from blast_intersections.config.schema import PipelineConfig
from blast_intersections.errors import DiscoveryError
from blast_intersections.genomes.blast import parse_blast
from blast_intersections.genomes.gff import parse_gff
from blast_intersections.genomes.models import Genome

logger = structlog.get_logger()


def _single_match(directory: Path, pattern: str, kind: str) -> Path:
    matches = sorted(p for p in directory.glob(pattern) if p.is_file())
    if not matches:
        raise DiscoveryError(f"No {kind} file matching '{pattern}' in {directory}")
    if len(matches) > 1:
        names = ", ".join(p.name for p in matches)
        raise DiscoveryError(f"Multiple {kind} files matching '{pattern}' in {directory}: {names}")
    return matches[0]


def find_genomes(
    root: Path | str,
    blast_pattern: str = "*.blast",
    gff_pattern: str = "*.gff*",
    accession_field: str = "sseqid",
    feature_types: tuple[str, ...] | list[str] = ("CDS",),
    name_attributes: tuple[str, ...] | list[str] = ("gene", "Name"),
    product_attribute: str = "product",
) -> list[Genome]:
    """Discover genomes under root.

    The full list is built eagerly so the genome count is known before any
    counting starts. Record streams stay lazy; files are only read when the
    genome is processed.

    Args:
        root: Directory whose subdirectories are genomes
        blast_pattern: Glob for the BLAST file in each genome directory
        gff_pattern: Glob for the GFF file in each genome directory
        accession_field: BLAST column naming the hit's accession
        feature_types: GFF feature types treated as genes
        name_attributes: GFF attributes tried in order for the gene name
        product_attribute: GFF attribute holding the product

    Returns:
        Genomes in sorted directory-name order

    Raises:
        FileNotFoundError: If root does not exist or is not a directory
        DiscoveryError: If a genome directory lacks, or has several of, either file
    """
    root = Path(root)
    if not root.is_dir():
        raise FileNotFoundError(f"Genomes directory not found: {root}")

    genomes = []
    for directory in sorted(p for p in root.iterdir() if p.is_dir()):
        has_blast = any(p.is_file() for p in directory.glob(blast_pattern))
        has_gff = any(p.is_file() for p in directory.glob(gff_pattern))
        if not has_blast and not has_gff:
            logger.debug("genome_dir_skipped", directory=str(directory))
            continue

        blast_path = _single_match(directory, blast_pattern, "BLAST")
        gff_path = _single_match(directory, gff_pattern, "GFF")

        genomes.append(Genome(
            name=directory.name,
            alignments=parse_blast(blast_path, accession_field=accession_field),
            annotations=parse_gff(
                gff_path,
                feature_types=feature_types,
                name_attributes=name_attributes,
                product_attribute=product_attribute,
            ),
            blast_path=blast_path,
            gff_path=gff_path,
        ))

    logger.info("genome_discovery_complete", root=str(root), genome_count=len(genomes))
    return genomes


def find_genomes_from_config(config: PipelineConfig, root: Path | str | None = None) -> list[Genome]:
    """Discover genomes using the discovery, BLAST and GFF settings of a config.

    Args:
        config: Pipeline configuration
        root: Overrides config.discovery.genomes_dir when given
    """
    return find_genomes(
        root if root is not None else config.discovery.genomes_dir,
        blast_pattern=config.discovery.blast_pattern,
        gff_pattern=config.discovery.gff_pattern,
        accession_field=config.blast.accession_field,
        feature_types=config.gff.feature_types,
        name_attributes=config.gff.name_attributes,
        product_attribute=config.gff.product_attribute,
    )
