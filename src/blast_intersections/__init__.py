"""blast-intersections: per-gene BLAST hit coverage counts across genomes."""

__version__ = "0.1.0"
