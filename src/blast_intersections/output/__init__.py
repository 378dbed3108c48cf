"""Output generation: TSV count table, Parquet copy and summary sidecar."""

from blast_intersections.output.writers import (
    HEADER_PREFIX,
    render_count_table,
    write_count_outputs,
    write_count_table,
)

__all__ = [
    "HEADER_PREFIX",
    "render_count_table",
    "write_count_table",
    "write_count_outputs",
]
