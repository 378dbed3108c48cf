"""Provenance tracking for counting runs."""

from blast_intersections.persistence.provenance import ProvenanceTracker

__all__ = ["ProvenanceTracker"]
