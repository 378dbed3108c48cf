"""GFF3 parsing into gene annotation records.

Columns: seqid source type start end score strand phase attributes.
Coordinates are 1-based inclusive and converted to 0-based half-open ranges.
Annotation tools such as Prokka append the assembly after a ##FASTA
directive; parsing stops there.
"""

from collections.abc import Iterator, Sequence
from pathlib import Path
from urllib.parse import unquote

import structlog

from blast_intersections.errors import ParseError
from blast_intersections.genomes.models import AnnotationRecord, Gene

logger = structlog.get_logger()

GFF_KIND = "GFF"
GFF_COLUMNS = 9
FASTA_DIRECTIVE = "##FASTA"


def parse_attributes(text: str) -> dict[str, str]:
    """Parse a GFF3 attribute column ("ID=x;Name=y") into a dict.

    Values are percent-decoded. Entries without '=' are ignored.
    """
    attributes = {}
    if text.strip() in ("", "."):
        return attributes
    for entry in text.strip().split(";"):
        if "=" not in entry:
            continue
        key, value = entry.split("=", 1)
        attributes[unquote(key.strip())] = unquote(value.strip())
    return attributes


def parse_gff_line(
    line: str,
    path: Path,
    line_number: int,
    name_attributes: Sequence[str] = ("gene", "Name"),
    product_attribute: str = "product",
) -> AnnotationRecord:
    """Parse one GFF3 feature line into an AnnotationRecord.

    Raises:
        ParseError: On wrong column count, bad coordinates or missing product
    """
    fields = line.rstrip("\r\n").split("\t")
    if len(fields) != GFF_COLUMNS:
        raise ParseError(
            path, line_number, GFF_KIND,
            f"expected {GFF_COLUMNS} tab-separated columns, found {len(fields)}",
        )

    accession = fields[0].strip()
    if not accession:
        raise ParseError(path, line_number, GFF_KIND, "empty seqid")

    try:
        first = int(fields[3])
        last = int(fields[4])
    except ValueError:
        raise ParseError(
            path, line_number, GFF_KIND,
            f"non-integer coordinates {fields[3]!r}, {fields[4]!r}",
        ) from None

    if first < 1 or last < 1:
        raise ParseError(
            path, line_number, GFF_KIND,
            f"coordinates must be 1-based positive integers, got {first}, {last}",
        )

    attributes = parse_attributes(fields[8])
    product = attributes.get(product_attribute)
    if product is None:
        raise ParseError(
            path, line_number, GFF_KIND,
            f"feature has no '{product_attribute}' attribute",
        )

    name = next((attributes[key] for key in name_attributes if key in attributes), None)

    # end < start is kept as a degenerate range and counts nothing
    return AnnotationRecord(
        accession=accession,
        gene=Gene(name=name, product=product),
        start=first - 1,
        end=last,
    )


def parse_gff(
    path: Path | str,
    feature_types: Sequence[str] = ("CDS",),
    name_attributes: Sequence[str] = ("gene", "Name"),
    product_attribute: str = "product",
) -> Iterator[AnnotationRecord]:
    """Lazily yield AnnotationRecords for gene features in a GFF3 file.

    Args:
        path: GFF3 file
        feature_types: Feature types (column 3) that denote genes
        name_attributes: Attributes tried in order for the gene name
        product_attribute: Attribute holding the product description

    Raises:
        ParseError: On the first malformed feature line
    """
    path = Path(path)
    wanted = set(feature_types)
    record_count = 0
    skipped = 0

    with open(path, "r", encoding="utf-8", errors="replace") as f:
        for line_number, line in enumerate(f, 1):
            if line.startswith(FASTA_DIRECTIVE):
                break
            if not line.strip() or line.startswith("#"):
                continue

            fields = line.split("\t")
            if len(fields) >= 3 and fields[2] not in wanted:
                skipped += 1
                continue

            yield parse_gff_line(line, path, line_number, name_attributes, product_attribute)
            record_count += 1

    logger.debug(
        "gff_parse_complete",
        path=str(path),
        record_count=record_count,
        skipped_features=skipped,
    )
