"""Count command: per-gene BLAST coverage counts across all genomes.

Discovers genome directories, counts alignment coverage over every annotated
gene, and writes the gene x genome table as TSV to stdout or to a file.
"""

import logging
import sys
from pathlib import Path

import click

from blast_intersections.config.loader import load_config_with_overrides
from blast_intersections.config.schema import COUNT_POLICIES, COVERAGE_REPRESENTATIONS
from blast_intersections.counting import count_gene_hits
from blast_intersections.genomes import find_genomes_from_config
from blast_intersections.output import render_count_table, write_count_outputs
from blast_intersections.persistence import ProvenanceTracker

logger = logging.getLogger(__name__)


@click.command('count')
@click.argument(
    'genomes_dir',
    required=False,
    type=click.Path(exists=True, file_okay=False, path_type=Path),
)
@click.option(
    '--policy',
    type=click.Choice(COUNT_POLICIES),
    default=None,
    help='Per-gene count: breadth (covered positions), depth (summed coverage) '
         'or hits (overlapping alignments). Overrides config.'
)
@click.option(
    '--representation',
    type=click.Choice(COVERAGE_REPRESENTATIONS),
    default=None,
    help='Coverage layout: dense arrays or sparse events (for long sequences). Overrides config.'
)
@click.option(
    '--output', '-o',
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help='Write the table to this TSV file instead of stdout'
)
@click.option(
    '--parquet',
    is_flag=True,
    help='Also write a Parquet copy next to --output'
)
@click.option(
    '--unsorted',
    is_flag=True,
    help='Keep genes in first-encounter order instead of sorting by name and product'
)
@click.pass_context
def count(ctx, genomes_dir, policy, representation, output, parquet, unsorted):
    """Count BLAST hit coverage over annotated genes in every genome.

    GENOMES_DIR holds one subdirectory per genome, each with a BLAST tabular
    file and a GFF3 file (defaults to the configured genomes_dir).
    Genomes are processed in sorted directory order, which is also the
    column order of the output table.

    Examples:

        # Breadth counts for all genomes under ./genomes, table on stdout
        blast-intersections count genomes > counts.tsv

        # Summed coverage depth, written with Parquet copy and sidecars
        blast-intersections count genomes --policy depth -o out/counts.tsv --parquet
    """
    if parquet and output is None:
        raise click.UsageError("--parquet requires --output")

    config_path = ctx.obj['config_path']

    try:
        overrides = {
            'discovery.genomes_dir': genomes_dir,
            'counting.policy': policy,
            'counting.representation': representation,
        }
        if unsorted:
            overrides['counting.sort_rows'] = False
        config = load_config_with_overrides(config_path, overrides)
        counting = config.counting

        provenance = ProvenanceTracker.from_config(config)

        genomes = find_genomes_from_config(config)
        if not genomes:
            logger.warning(f"No genomes found in {config.discovery.genomes_dir}")
        provenance.record_step('discover_genomes', {
            'genomes_dir': str(config.discovery.genomes_dir),
            'genome_names': [genome.name for genome in genomes],
        })

        # The whole table is built before anything is written, so a
        # failing genome never leaves a partial table behind
        table = count_gene_hits(
            genomes,
            policy=counting.policy,
            representation=counting.representation,
            provenance=provenance,
        )

        if output is None:
            click.echo(render_count_table(table, sort_rows=counting.sort_rows), nl=False)
            return

        paths = write_count_outputs(
            table,
            output,
            parquet=parquet,
            sort_rows=counting.sort_rows,
        )
        provenance.record_step('write_outputs', {
            'gene_count': len(table),
            'files': [str(p) for p in paths.values()],
        })
        provenance_path = provenance.save_sidecar(output)

        click.echo(click.style("Count table written", fg='green'), err=True)
        click.echo(f"  Genomes: {table.genome_count}", err=True)
        click.echo(f"  Genes: {len(table)}", err=True)
        click.echo(f"  Policy: {counting.policy}", err=True)
        for kind, path in paths.items():
            click.echo(f"  {kind.upper()}: {path}", err=True)
        click.echo(f"  Provenance: {provenance_path}", err=True)

    except Exception as e:
        click.echo(click.style(f"Count command failed: {e}", fg='red'), err=True)
        logger.exception("Count command failed")
        sys.exit(1)
