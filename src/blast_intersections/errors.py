"""Exception types raised by blast-intersections."""

from pathlib import Path


class BlastIntersectionsError(Exception):
    """Base class for all pipeline errors."""


class DiscoveryError(BlastIntersectionsError):
    """Raised when a genome directory does not hold exactly one input of each kind."""


class ParseError(BlastIntersectionsError, ValueError):
    """Malformed line in a BLAST or GFF input file.

    Attributes:
        path: File being parsed
        line_number: 1-based line number of the offending line
        kind: Input stream kind ("BLAST" or "GFF")
        message: What was wrong with the line
    """

    def __init__(self, path: Path | str, line_number: int, kind: str, message: str):
        self.path = Path(path)
        self.line_number = line_number
        self.kind = kind
        self.message = message
        super().__init__(f"Failed to read {kind} file {self.path} (line {line_number}): {message}")
