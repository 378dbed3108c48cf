"""Once-per-accession diagnostics for annotations without alignment data."""

import structlog

logger = structlog.get_logger()


class MissingAccessionTracker:
    """Remembers which accessions of one genome were already reported missing.

    An accession is missing when a gene is annotated on it but no BLAST hit
    was ever recorded for it. This is a data-quality signal, not an error.
    Create one tracker per genome; an accession missing in one genome says
    nothing about another.
    """

    def __init__(self, genome_name: str):
        self.genome_name = genome_name
        self._reported: set[str] = set()

    def report(self, accession: str) -> bool:
        """Warn about a missing accession the first time it is seen.

        Returns:
            True if this call emitted the warning, False if already reported
        """
        if accession in self._reported:
            return False
        self._reported.add(accession)
        logger.warning(
            "missing_accession",
            genome=self.genome_name,
            accession=accession,
            detail="Encountered an accession with a gene but no BLAST hits",
        )
        return True

    @property
    def missing(self) -> frozenset[str]:
        return frozenset(self._reported)

    def __len__(self) -> int:
        return len(self._reported)
