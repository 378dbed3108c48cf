"""Cross-genome gene count table."""

from collections.abc import Iterator, Mapping, Sequence

import polars as pl

from blast_intersections.genomes.models import Gene

NAME_COLUMN = "name"
PRODUCT_COLUMN = "product"


def genome_column(index: int) -> str:
    """Frame column key for the genome at index."""
    return f"genome_{index}"


class GeneCountTable:
    """Maps each gene to one count per genome.

    Rows are created on first use with a zero for every genome, so a row
    always has exactly genome_count entries. Row order is first-encounter
    order. Genome names are display strings only; columns are addressed by
    genome index, so names may repeat or match any column label.

    Attributes:
        genome_names: Genome names in genome-index order (the column order)
    """

    def __init__(self, genome_names: Sequence[str]):
        self.genome_names = list(genome_names)
        self._rows: dict[Gene, list[int]] = {}

    @property
    def genome_count(self) -> int:
        return len(self.genome_names)

    def record(self, gene: Gene, genome_index: int, amount: int) -> None:
        """Add amount to gene's count for one genome, creating the row if needed.

        Raises:
            IndexError: If genome_index is outside 0..genome_count-1
            ValueError: If amount is negative
        """
        if not 0 <= genome_index < self.genome_count:
            raise IndexError(
                f"genome_index {genome_index} out of range for {self.genome_count} genomes"
            )
        if amount < 0:
            raise ValueError(f"Counts must be non-negative, got {amount}")

        row = self._rows.get(gene)
        if row is None:
            row = self._rows[gene] = [0] * self.genome_count
        row[genome_index] += amount

    def merge(self, genome_index: int, counts: Mapping[Gene, int]) -> None:
        """Add a whole genome's partial result (gene -> count) into the table."""
        for gene, amount in counts.items():
            self.record(gene, genome_index, amount)

    def get(self, gene: Gene) -> list[int] | None:
        """Copy of gene's row, or None if the gene was never recorded."""
        row = self._rows.get(gene)
        return list(row) if row is not None else None

    def genes(self) -> list[Gene]:
        return list(self._rows)

    def rows(self) -> Iterator[tuple[Gene, list[int]]]:
        for gene, row in self._rows.items():
            yield gene, list(row)

    def column_totals(self) -> list[int]:
        """Sum of counts per genome, in genome-index order."""
        totals = [0] * self.genome_count
        for row in self._rows.values():
            for i, value in enumerate(row):
                totals[i] += value
        return totals

    def has_distinct_genome_labels(self) -> bool:
        """True if genome names are unique and differ from the name/product columns."""
        labels = {NAME_COLUMN, PRODUCT_COLUMN, *self.genome_names}
        return len(labels) == self.genome_count + 2

    def __contains__(self, gene: object) -> bool:
        return gene in self._rows

    def __len__(self) -> int:
        return len(self._rows)

    def to_frame(self, sort_rows: bool = True, label_genomes: bool = False) -> pl.DataFrame:
        """Convert to a polars DataFrame.

        Columns are name (null when unnamed), product, then one Int64 column
        per genome in index order, keyed genome_0..genome_N-1.

        Args:
            sort_rows: Sort by (name, product) with unnamed genes last;
                otherwise keep first-encounter order
            label_genomes: Key genome columns by genome name instead, when
                has_distinct_genome_labels() allows it

        Returns:
            DataFrame with one row per gene
        """
        genes = list(self._rows)
        data = {
            NAME_COLUMN: [gene.name for gene in genes],
            PRODUCT_COLUMN: [gene.product for gene in genes],
        }
        schema = {NAME_COLUMN: pl.Utf8, PRODUCT_COLUMN: pl.Utf8}
        for index in range(self.genome_count):
            data[genome_column(index)] = [self._rows[gene][index] for gene in genes]
            schema[genome_column(index)] = pl.Int64

        df = pl.DataFrame(data, schema=schema)

        if sort_rows and df.height > 0:
            df = df.sort([NAME_COLUMN, PRODUCT_COLUMN], nulls_last=True)

        if label_genomes and self.has_distinct_genome_labels():
            df = df.rename({
                genome_column(index): name for index, name in enumerate(self.genome_names)
            })

        return df
