"""Command-line interface for blast-intersections."""
