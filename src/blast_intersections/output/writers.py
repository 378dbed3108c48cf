"""TSV rendering of the gene count table, plus Parquet and summary sidecar files."""

import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import TextIO

import polars as pl
import yaml

from blast_intersections.counting.table import NAME_COLUMN, GeneCountTable
from blast_intersections.genomes.models import UNKNOWN_GENE_NAME

HEADER_PREFIX = ("Name", "Product")


def render_count_table(table: GeneCountTable, sort_rows: bool = True) -> str:
    """
    Render the count table as tab-separated text.

    Header: Name, Product, then one column per genome in genome-index order.
    Each row: gene name ("Unknown" if unnamed), product, per-genome counts.
    Names and products are written verbatim; embedded tabs or newlines are
    not escaped.

    Args:
        table: Completed GeneCountTable
        sort_rows: Sort rows by (name, product), unnamed genes last

    Returns:
        Table text, newline-terminated
    """
    header = "\t".join([*HEADER_PREFIX, *table.genome_names]) + "\n"

    df = table.to_frame(sort_rows=sort_rows, label_genomes=False)
    if df.height == 0:
        return header

    df = df.with_columns(pl.col(NAME_COLUMN).fill_null(UNKNOWN_GENE_NAME))
    body = df.write_csv(
        None,
        separator="\t",
        include_header=False,
        quote_style="never",
    )
    return header + body


def write_count_table(
    table: GeneCountTable,
    stream: TextIO | None = None,
    sort_rows: bool = True,
) -> None:
    """Write the rendered count table to a text stream (stdout by default)."""
    if stream is None:
        stream = sys.stdout
    stream.write(render_count_table(table, sort_rows=sort_rows))
    stream.flush()


def write_count_outputs(
    table: GeneCountTable,
    output_path: Path,
    parquet: bool = False,
    sort_rows: bool = True,
) -> dict:
    """
    Write the count table to a TSV file, optionally Parquet, with a YAML summary sidecar.

    Args:
        table: Completed GeneCountTable
        output_path: TSV file to write (parent directories are created)
        parquet: Also write {stem}.parquet with the same rows
        sort_rows: Sort rows by (name, product), unnamed genes last

    Returns:
        Dictionary with output file paths:
        {
            "tsv": Path to TSV file,
            "parquet": Path to Parquet file (only when parquet=True),
            "summary": Path to YAML summary sidecar
        }

    Notes:
        - The Parquet copy keeps unnamed genes as null names; its genome
          columns carry the genome names when they are distinct from each
          other and from name/product, otherwise genome_0..genome_N-1
        - column_totals in the summary is a list aligned with genome_names
        - Parquet uses snappy compression
        - Summary YAML includes generated_at, output_files, genome_names and
          statistics (gene/genome counts, unnamed genes, per-genome totals)
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    paths = {"tsv": output_path}

    with open(output_path, "w") as f:
        write_count_table(table, f, sort_rows=sort_rows)

    df = table.to_frame(sort_rows=sort_rows, label_genomes=True)

    if parquet:
        parquet_path = output_path.with_suffix(".parquet")
        df.write_parquet(parquet_path, compression="snappy", use_pyarrow=True)
        paths["parquet"] = parquet_path

    unnamed = df.filter(pl.col(NAME_COLUMN).is_null()).height

    summary = {
        "generated_at": datetime.now(timezone.utc).isoformat(),
        "output_files": [p.name for p in paths.values()],
        "genome_names": list(table.genome_names),
        "statistics": {
            "gene_count": len(table),
            "genome_count": table.genome_count,
            "unnamed_gene_count": unnamed,
            "column_totals": table.column_totals(),
        },
    }

    summary_path = output_path.with_suffix(".summary.yaml")
    with open(summary_path, "w") as f:
        yaml.dump(summary, f, default_flow_style=False, sort_keys=False)
    paths["summary"] = summary_path

    return paths
