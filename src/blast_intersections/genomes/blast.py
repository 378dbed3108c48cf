"""BLAST tabular (outfmt 6) parsing.

Expected columns:
    qseqid sseqid pident length mismatch gapopen qstart qend sstart send evalue bitscore

Coordinates are 1-based inclusive and may be reversed for minus-strand hits;
they are converted to 0-based half-open ranges.
"""

from collections.abc import Iterator
from pathlib import Path

import structlog

from blast_intersections.errors import ParseError
from blast_intersections.genomes.models import AlignmentRecord

logger = structlog.get_logger()

BLAST_KIND = "BLAST"
MIN_BLAST_COLUMNS = 12

# accession column -> (accession index, start index, end index)
ACCESSION_COLUMNS = {
    "sseqid": (1, 8, 9),
    "qseqid": (0, 6, 7),
}


def parse_blast_line(
    line: str,
    path: Path,
    line_number: int,
    accession_field: str = "sseqid",
) -> AlignmentRecord:
    """Parse one tabular BLAST line into an AlignmentRecord.

    Raises:
        ParseError: If the line has too few columns or bad coordinates
    """
    fields = line.rstrip("\r\n").split("\t")
    if len(fields) < MIN_BLAST_COLUMNS:
        raise ParseError(
            path, line_number, BLAST_KIND,
            f"expected {MIN_BLAST_COLUMNS} tab-separated columns, found {len(fields)}",
        )

    accession_idx, start_idx, end_idx = ACCESSION_COLUMNS[accession_field]
    accession = fields[accession_idx].strip()
    if not accession:
        raise ParseError(path, line_number, BLAST_KIND, f"empty {accession_field}")

    try:
        first = int(fields[start_idx])
        last = int(fields[end_idx])
    except ValueError:
        raise ParseError(
            path, line_number, BLAST_KIND,
            f"non-integer coordinates {fields[start_idx]!r}, {fields[end_idx]!r}",
        ) from None

    if first < 1 or last < 1:
        raise ParseError(
            path, line_number, BLAST_KIND,
            f"coordinates must be 1-based positive integers, got {first}, {last}",
        )

    # Minus-strand hits report start > end
    low, high = min(first, last), max(first, last)
    return AlignmentRecord(accession=accession, start=low - 1, end=high)


def parse_blast(path: Path | str, accession_field: str = "sseqid") -> Iterator[AlignmentRecord]:
    """Lazily yield AlignmentRecords from a BLAST tabular file.

    Blank lines and '#' comment lines are skipped. The file is opened on
    first iteration and read once.

    Args:
        path: BLAST outfmt 6 file
        accession_field: "sseqid" (hits on the subject) or "qseqid"

    Raises:
        ParseError: On the first malformed line
        ValueError: If accession_field is not recognized
    """
    if accession_field not in ACCESSION_COLUMNS:
        raise ValueError(f"Unknown accession field: {accession_field}")

    path = Path(path)
    record_count = 0
    with open(path, "r", encoding="utf-8", errors="replace") as f:
        for line_number, line in enumerate(f, 1):
            if not line.strip() or line.startswith("#"):
                continue
            yield parse_blast_line(line, path, line_number, accession_field)
            record_count += 1

    logger.debug("blast_parse_complete", path=str(path), record_count=record_count)
