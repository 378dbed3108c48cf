"""Main CLI entry point for blast-intersections.

Provides command group with global options and subcommands.
"""

import logging
import sys
from pathlib import Path

import click
import structlog

from blast_intersections import __version__
from blast_intersections.config.loader import load_config
from blast_intersections.cli.count_cmd import count


# Configure logging; stdout is reserved for the count table
logging.basicConfig(
    level=logging.INFO,
    stream=sys.stderr,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_log_level,
        structlog.processors.KeyValueRenderer(key_order=['event']),
    ],
    logger_factory=structlog.stdlib.LoggerFactory(),
    wrapper_class=structlog.stdlib.BoundLogger,
    cache_logger_on_first_use=False,
)


@click.group()
@click.version_option(__version__, prog_name='blast-intersections')
@click.option(
    '--config',
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help='Path to pipeline configuration YAML file (built-in defaults if omitted)'
)
@click.option(
    '--verbose',
    is_flag=True,
    help='Enable verbose logging (DEBUG level)'
)
@click.pass_context
def cli(ctx, config, verbose):
    """blast-intersections: count BLAST hit coverage over annotated genes across genomes.

    Builds per-position coverage from each genome's BLAST hits, reduces it
    over every GFF-annotated gene, and emits one gene x genome table.
    """
    ctx.ensure_object(dict)
    ctx.obj['config_path'] = config
    ctx.obj['verbose'] = verbose

    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)
        logging.debug("Verbose logging enabled")


@cli.command()
@click.pass_context
def info(ctx):
    """Display pipeline version and effective configuration."""
    config_path = ctx.obj['config_path']

    click.echo(f"blast-intersections v{__version__}")
    click.echo(f"Config: {config_path if config_path else '(built-in defaults)'}")
    click.echo()

    try:
        config = load_config(config_path)

        config_hash = config.config_hash()
        click.echo(f"Config Hash: {config_hash[:16]}...")
        click.echo()

        click.echo(click.style("Discovery:", bold=True))
        click.echo(f"  Genomes Directory: {config.discovery.genomes_dir}")
        click.echo(f"  BLAST Pattern:     {config.discovery.blast_pattern}")
        click.echo(f"  GFF Pattern:       {config.discovery.gff_pattern}")
        click.echo()

        click.echo(click.style("Parsing:", bold=True))
        click.echo(f"  BLAST Accession Field: {config.blast.accession_field}")
        click.echo(f"  GFF Feature Types:     {', '.join(config.gff.feature_types)}")
        click.echo(f"  GFF Name Attributes:   {', '.join(config.gff.name_attributes)}")
        click.echo(f"  GFF Product Attribute: {config.gff.product_attribute}")
        click.echo()

        click.echo(click.style("Counting:", bold=True))
        click.echo(f"  Policy:         {config.counting.policy}")
        click.echo(f"  Representation: {config.counting.representation}")
        click.echo(f"  Sort Rows:      {config.counting.sort_rows}")

    except Exception as e:
        click.echo(click.style(f"Error loading config: {e}", fg='red'), err=True)
        ctx.exit(1)


# Register commands
cli.add_command(count)


if __name__ == '__main__':
    cli()
